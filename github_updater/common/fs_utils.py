"""
Filesystem helpers shared by the updater pipeline.
"""

import os
import re
import shutil
import stat
import zipfile
from pathlib import Path
from typing import List, Union

from github_updater.logging_config import get_logger

logger = get_logger(__name__)

# Characters WordPress strips from file names before they touch the disk
_SPECIAL_CHARS = set('?[]/\\=<>:;,\'"&$#*()|~`!{}%+’«»”“\x00')


def sanitize_file_name(name: str) -> str:
    """
    Turn an arbitrary plugin name into a filesystem-safe slug.

    Mirrors the host's own sanitizer: special characters are dropped,
    whitespace runs become a single hyphen, repeated hyphens collapse and
    leading/trailing dots, hyphens and underscores are trimmed.
    """
    cleaned = ''.join(ch for ch in name if ch not in _SPECIAL_CHARS)
    cleaned = cleaned.replace('%20', '-')
    cleaned = re.sub(r'[\r\n\t -]+', '-', cleaned)
    return cleaned.strip('.-_')


def normalize_repo_component(value: str) -> str:
    """Replace spaces, dots and underscores with hyphens, as archive folder names do."""
    return re.sub(r'[ ._]', '-', value)


def _make_writable(path: Path) -> None:
    for root, _dirs, files in os.walk(path):
        root_path = Path(root)
        try:
            os.chmod(root_path, stat.S_IRWXU)
        except OSError:
            pass
        for file in files:
            try:
                os.chmod(root_path / file, stat.S_IRWXU)
            except OSError:
                pass


def safe_remove_directory(path: Union[str, Path]) -> bool:
    """
    Remove a directory tree, retrying once after fixing permissions.

    Failures are logged and reported through the return value, never raised.

    Returns:
        True if the directory is gone afterwards
    """
    path = Path(path)
    if not path.exists():
        return True

    try:
        shutil.rmtree(path)
        return True
    except OSError:
        logger.warning(f"Permission error removing {path}, attempting chmod fix...")

    try:
        _make_writable(path)
        shutil.rmtree(path)
        logger.info(f"Removed {path} after fixing permissions")
        return True
    except OSError as e:
        logger.error(f"Could not remove {path}: {e}")

    return not path.exists()


def archive_top_level_names(archive: zipfile.ZipFile) -> List[str]:
    """Return the distinct first path components of the archive's members."""
    names = []
    for member in archive.namelist():
        top = member.split('/', 1)[0]
        if top and top not in names:
            names.append(top)
    return names


def safe_extract_zip(archive: zipfile.ZipFile, destination: Union[str, Path]) -> None:
    """
    Extract every member below destination.

    Raises:
        ValueError: If a member would resolve outside destination (zip-slip)
    """
    destination = Path(destination)
    destination_resolved = destination.resolve()
    for member in archive.namelist():
        member_dest = (destination / member).resolve()
        if member_dest != destination_resolved and destination_resolved not in member_dest.parents:
            raise ValueError(f"Zip-slip detected: member {member!r} resolves outside {destination}")
    archive.extractall(destination)
