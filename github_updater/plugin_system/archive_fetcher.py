"""
Download of repository zip archives.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urljoin

import requests

from github_updater.config import UpdaterConfig
from github_updater.logging_config import get_logger
from github_updater.plugin_system.exceptions import (
    EmptyDownload,
    RedirectWithoutLocation,
    TempDirUnavailable,
    TooManyRedirects,
    UpstreamError,
    WriteFailure,
)
from github_updater.plugin_system.repository import RepositoryRef

REDIRECT_CODES = (301, 302, 303, 307, 308)
ARCHIVE_SUFFIX = '/zipball/master'
CHUNK_SIZE = 8192

_FILENAME_PATTERN = re.compile(r'filename\*?=([^;\r\n]+)', re.IGNORECASE)


@dataclass
class DownloadResult:
    """
    A downloaded archive in the temp directory.

    Use as a context manager; the file is removed on exit.
    """

    temp_file_path: Path
    file_name: str

    def cleanup(self) -> None:
        try:
            self.temp_file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            get_logger(__name__).warning(f"Could not remove temporary file {self.temp_file_path}: {e}")

    def __enter__(self) -> 'DownloadResult':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def filename_from_disposition(header: Optional[str]) -> Optional[str]:
    """Extract the file name from a Content-Disposition header value."""
    if not header:
        return None
    match = _FILENAME_PATTERN.search(header)
    if not match:
        return None
    value = match.group(1).strip()
    if value.lower().startswith("utf-8''"):
        value = value[7:]
    value = value.strip('"\'')
    # Never let the server pick a directory
    value = os.path.basename(value.replace('\\', '/'))
    if value in ('.', '..'):
        return None
    return value or None


class ArchiveFetcher:
    """
    Downloads the master zipball of a repository, following redirects by hand
    so the hop count stays bounded and every hop is logged.
    """

    def __init__(self, config: UpdaterConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = get_logger(__name__)

    def archive_url(self, ref: RepositoryRef) -> str:
        return f"{self.config.api_prefix}{ref.key}{ARCHIVE_SUFFIX}"

    def _headers(self) -> Dict[str, str]:
        headers = {'User-Agent': self.config.user_agent}
        if self.config.github_token:
            headers['Authorization'] = f'token {self.config.github_token}'
        return headers

    def _ensure_temp_dir(self) -> Path:
        temp_dir = Path(self.config.temp_dir)
        try:
            temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TempDirUnavailable(f"Unable to create temp directory {temp_dir}: {e}") from e
        if not temp_dir.is_dir():
            raise TempDirUnavailable(f"Temp directory {temp_dir} is not available")
        return temp_dir

    def _open(self, ref: RepositoryRef) -> requests.Response:
        url = self.archive_url(ref)
        headers = self._headers()
        for hop in range(self.config.max_redirects + 1):
            self.logger.debug(f"GET {url}")
            try:
                response = self.session.get(
                    url, headers=headers, stream=True, allow_redirects=False, timeout=self.config.timeout
                )
            except requests.RequestException as e:
                raise UpstreamError(f"Download request failed: {e}", ref.key) from e

            if response.status_code not in REDIRECT_CODES:
                return response

            location = response.headers.get('Location') or response.headers.get('URI')
            response.close()
            if not location or not location.strip():
                raise RedirectWithoutLocation(
                    "Fatal Error: Redirection code received, but no URL given.", ref.key
                )
            url = urljoin(url, location.strip())
            self.logger.debug(f"Redirect {hop + 1} ({response.status_code}) to {url}")

        raise TooManyRedirects(
            f"Gave up after {self.config.max_redirects} redirects while downloading the archive", ref.key
        )

    def fetch(self, ref: RepositoryRef) -> DownloadResult:
        """
        Download the archive into the temp directory.

        Returns:
            DownloadResult pointing at a non-empty file
        """
        temp_dir = self._ensure_temp_dir()
        response = self._open(ref)
        try:
            if response.status_code >= 400:
                raise UpstreamError(f"Archive download failed with HTTP {response.status_code}", ref.key)

            file_name = (
                filename_from_disposition(response.headers.get('Content-Disposition'))
                or f"{ref.owner}-{ref.name}.zip"
            )
            result = DownloadResult(temp_dir / file_name, file_name)
            self.logger.info(f"Downloading {ref.key} to {result.temp_file_path}")

            try:
                with open(result.temp_file_path, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            except OSError as e:
                result.cleanup()
                raise WriteFailure(f"Fatal Error: File could not be written: {e}", ref.key) from e
            except requests.RequestException as e:
                result.cleanup()
                raise UpstreamError(f"Download interrupted: {e}", ref.key) from e
        finally:
            response.close()

        path = result.temp_file_path
        if not path.is_file() or path.stat().st_size == 0:
            result.cleanup()
            raise EmptyDownload(f"Downloaded archive {file_name} is empty", ref.key)

        self.logger.debug(f"Saved {path.stat().st_size} bytes to {path}")
        return result
