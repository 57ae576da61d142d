"""
Latest-revision detection for tracked repositories.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests

from github_updater.config import UpdaterConfig
from github_updater.logging_config import get_logger
from github_updater.plugin_system.exceptions import RepositoryNotFound, UpstreamError
from github_updater.plugin_system.host import GITHUB_PLUGINS_OPTION, OptionStore
from github_updater.plugin_system.repository import RepositoryRef


@dataclass(frozen=True)
class UpdateCheck:
    has_update: bool
    revision: str
    is_new: bool = False


class VersionChecker:
    """
    Compares the newest commit of a repository with the stored install record.
    """

    def __init__(self, config: UpdaterConfig, options: OptionStore, session: Optional[requests.Session] = None):
        self.config = config
        self.options = options
        self.session = session or requests.Session()
        self.logger = get_logger(__name__)

    def commits_url(self, ref: RepositoryRef) -> str:
        return f"{self.config.api_prefix}{ref.key}/commits"

    def fetch_latest_revision(self, ref: RepositoryRef) -> str:
        """
        Return the sha of the newest commit on the default branch.

        Raises:
            RepositoryNotFound: GitHub reports the repository as missing
            UpstreamError: Any other error payload or transport failure
        """
        params = {}
        if self.config.github_token:
            params['access_token'] = self.config.github_token
        headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': self.config.user_agent,
        }
        url = self.commits_url(ref)

        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"GitHub Error: request failed: {e}", ref.key) from e

        try:
            commits = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"GitHub Error: unreadable commit list (HTTP {response.status_code})", ref.key
            ) from e

        if isinstance(commits, list):
            if not commits or not isinstance(commits[0], dict) or not commits[0].get('sha'):
                raise UpstreamError("GitHub Error: repository has no commits.", ref.key)
            revision = commits[0]['sha']
            self.logger.debug(f"Latest commit of {ref.key}: {revision}")
            return revision

        if isinstance(commits, dict) and commits.get('message'):
            message = str(commits['message'])
            if message.lower() == 'not found':
                raise RepositoryNotFound("GitHub Error: Repository not found.", ref.key)
            raise UpstreamError(f"GitHub Error: {message}.", ref.key)

        raise UpstreamError(f"GitHub Error: unexpected commit list payload (HTTP {response.status_code})", ref.key)

    def _folder_missing(self, record: Dict[str, Any], destination: Path) -> bool:
        folder = record.get('folder')
        if not folder or not isinstance(folder, str):
            return True
        return not (destination / folder.strip('/')).exists()

    def check_for_update(self, ref: RepositoryRef, destination: Union[str, Path]) -> UpdateCheck:
        """
        Decide whether the repository has to be (re)installed.

        A repository seen for the first time gets a placeholder record so
        that a later failing step does not make it look new forever. Records
        of known repositories are left untouched; they are only rewritten once
        an install completes.
        """
        revision = self.fetch_latest_revision(ref)
        records = dict(self.options.get(GITHUB_PLUGINS_OPTION, {}) or {})
        record = records.get(ref.key)

        if not isinstance(record, dict):
            self.logger.info(f"{ref.key} is not installed yet, revision {revision[:7]} available")
            records[ref.key] = {'hash': 0, 'folder': ''}
            self.options.set(GITHUB_PLUGINS_OPTION, records)
            return UpdateCheck(True, revision, is_new=True)

        if record.get('hash') != revision:
            self.logger.info(f"Update available for {ref.key}: {str(record.get('hash'))[:7]} -> {revision[:7]}")
            return UpdateCheck(True, revision)

        if self._folder_missing(record, Path(destination)):
            self.logger.info(f"Install folder of {ref.key} is missing, reinstalling revision {revision[:7]}")
            return UpdateCheck(True, revision)

        self.logger.info(f"{ref.key} is up to date at {revision[:7]}")
        return UpdateCheck(False, revision)
