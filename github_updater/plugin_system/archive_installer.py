"""
Unpacking downloaded archives into the plugins directory.
"""

import glob
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from github_updater.common.fs_utils import (
    archive_top_level_names,
    normalize_repo_component,
    safe_extract_zip,
    safe_remove_directory,
    sanitize_file_name,
)
from github_updater.config import UpdaterConfig
from github_updater.logging_config import get_logger
from github_updater.plugin_system.archive_fetcher import DownloadResult
from github_updater.plugin_system.exceptions import (
    DuplicateInstallation,
    ExtractionFailure,
    NoManifestFound,
    RenameFailure,
    WriteFailure,
)
from github_updater.plugin_system.host import (
    GITHUB_ACTIVE_OPTION,
    GITHUB_PLUGINS_OPTION,
    OptionStore,
    PluginHost,
)
from github_updater.plugin_system.manifest import ManifestInfo
from github_updater.plugin_system.repository import RepositoryRef

LINKER_TEMPLATE = """<?php
/**
 * {plugin_file} - Linker-File
 *
 * Plugin Name: {name}
 * Plugin URI:  {uri}
 * Description: {description}
 * Version:     {version}
 * Author:      {author}
 * Author URI:  {author_uri}
 */
include_once(WPMU_PLUGIN_DIR.'/{folder}/{plugin_file}');
"""


@dataclass(frozen=True)
class InstalledPlugin:
    folder: str
    path: Path
    plugin_file: str
    manifest: ManifestInfo
    shared_scope: bool = False
    linker_file: Optional[Path] = None

    @property
    def basename(self) -> str:
        """Plugin identifier as the host lists it: "folder/file"."""
        return f"{self.folder}/{self.plugin_file}"


class ArchiveInstaller:
    """
    Extracts an archive, renames the result after its declared plugin name
    and refuses plugins already active under the other scope.
    """

    def __init__(self, config: UpdaterConfig, options: OptionStore, host: PluginHost):
        self.config = config
        self.options = options
        self.host = host
        self.logger = get_logger(__name__)

    def _extract(self, download: DownloadResult, destination: Path, ref: RepositoryRef) -> Tuple[List[str], List[Path]]:
        """
        Returns:
            Tuple of (top-level names in the archive, paths the extraction created)
        """
        self.logger.info(f"Extracting {download.file_name} into {destination}")
        created: List[Path] = []
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(download.temp_file_path, 'r') as archive:
                top_level = archive_top_level_names(archive)
                if not top_level:
                    raise ExtractionFailure("Archive is empty", ref.key)
                created = [destination / name for name in top_level
                           if name not in ('.', '..') and not (destination / name).exists()]
                safe_extract_zip(archive, destination)
        except ExtractionFailure:
            raise
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            self._discard_all(created)
            raise ExtractionFailure(f"Fatal Error: File could not be unpacked: {e}", ref.key) from e
        return top_level, created

    def find_extracted_folder(self, ref: RepositoryRef, destination: Path,
                              top_level: Optional[List[str]] = None) -> Path:
        """
        Locate the folder the archive unpacked into.

        Archive folders are named "<owner>-<name>-<sha>" with spaces, dots and
        underscores turned into hyphens. If several folders match, the one
        listed in the archive wins.
        """
        prefix = f"{normalize_repo_component(ref.owner)}-{normalize_repo_component(ref.name)}"
        pattern = os.path.join(glob.escape(str(destination)), glob.escape(prefix) + '*')
        matches = sorted(Path(p) for p in glob.glob(pattern) if os.path.isdir(p))
        if not matches:
            raise ExtractionFailure(f"No extracted folder matching {prefix}* in {destination}", ref.key)

        for match in matches:
            if top_level and match.name in top_level:
                return match
        return matches[0]

    def find_manifest(self, folder: Path) -> Tuple[Optional[str], Optional[ManifestInfo]]:
        """Return (file name, manifest) of the first top-level entry file with a plugin header."""
        extension = self.config.entry_extension
        for candidate in sorted(folder.iterdir()):
            if not candidate.is_file() or not candidate.name.endswith(extension):
                continue
            manifest = self.host.parse_manifest(candidate)
            if manifest is not None and manifest.name:
                return candidate.name, manifest
        return None, None

    def _discard(self, folder: Path) -> None:
        if not safe_remove_directory(folder):
            self.logger.warning(f"Could not clean up extracted folder {folder}")

    def _discard_all(self, paths: List[Path]) -> None:
        for path in paths:
            if path.is_dir():
                self._discard(path)
            elif path.exists():
                try:
                    path.unlink()
                except OSError as e:
                    self.logger.warning(f"Could not clean up extracted file {path}: {e}")

    def _shared_scope_plugins(self) -> List[str]:
        """Plugins this updater installed into the shared scope, as "folder/file"."""
        active = self.options.get(GITHUB_ACTIVE_OPTION, {}) or {}
        records = self.options.get(GITHUB_PLUGINS_OPTION, {}) or {}
        plugins = []
        for repo_key, flag in active.items():
            record = records.get(repo_key)
            if not flag or not isinstance(record, dict) or not record.get('file'):
                continue
            plugins.append(f"{str(record.get('folder', '')).strip('/')}/{record['file']}")
        return plugins

    def check_duplicate(self, ref: RepositoryRef, plugin: str, shared_scope: bool) -> None:
        if shared_scope:
            if plugin in self.host.active_plugins():
                raise DuplicateInstallation(
                    "Fatal Error: This plugin already exists outside the mu-plugin folder.", ref.key, plugin
                )
        elif plugin in self._shared_scope_plugins():
            raise DuplicateInstallation(
                "Fatal Error: This plugin already exists in the mu-plugin folder.", ref.key, plugin
            )

    def _move_into_place(self, extracted: Path, target: Path, ref: RepositoryRef) -> None:
        if target.exists():
            self.logger.info(f"Replacing existing installation at {target}")
            if not safe_remove_directory(target):
                self._discard(extracted)
                raise RenameFailure(f"Fatal Error: Could not remove old folder {target}.", ref.key)
        try:
            extracted.rename(target)
        except OSError as e:
            self._discard(extracted)
            raise RenameFailure(f"Fatal Error: Folder could not be renamed: {e}", ref.key) from e

    def create_linker_file(self, destination: Path, folder: str, plugin_file: str, manifest: ManifestInfo) -> Path:
        """
        Write a top-level stub that includes the real entry file; the shared
        scope loader does not look into subdirectories.
        """
        linker_path = destination / f"{folder}{self.config.entry_extension}"
        content = LINKER_TEMPLATE.format(
            plugin_file=plugin_file,
            folder=folder,
            name=manifest.name,
            uri=manifest.uri,
            description=manifest.description,
            version=manifest.version,
            author=manifest.author,
            author_uri=manifest.author_uri,
        )
        try:
            linker_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise WriteFailure(f"Fatal Error: Linker file could not be written: {e}") from e
        self.logger.info(f"Created linker file {linker_path}")
        return linker_path

    def install(self, download: DownloadResult, ref: RepositoryRef,
                destination_root: Union[str, Path], shared_scope: bool) -> InstalledPlugin:
        """
        Place a downloaded archive as an installed plugin.

        Any failure after extraction removes the extracted folder before the
        error propagates.
        """
        destination = Path(destination_root)
        top_level, created = self._extract(download, destination, ref)
        try:
            extracted = self.find_extracted_folder(ref, destination, top_level)
        except ExtractionFailure:
            self._discard_all(created)
            raise

        plugin_file, manifest = self.find_manifest(extracted)
        if manifest is None:
            self._discard(extracted)
            raise NoManifestFound("This GitHub Project does not have a valid plugin header.", ref.key)

        folder = sanitize_file_name(manifest.name.lower())
        if not folder:
            self._discard(extracted)
            raise RenameFailure(f"Plugin name {manifest.name!r} does not yield a usable folder name", ref.key)

        try:
            self.check_duplicate(ref, f"{folder}/{plugin_file}", shared_scope)
        except DuplicateInstallation:
            self._discard(extracted)
            raise

        target = destination / folder
        if extracted.name != folder:
            self._move_into_place(extracted, target, ref)

        linker_file = None
        if shared_scope:
            try:
                linker_file = self.create_linker_file(destination, folder, plugin_file, manifest)
            except WriteFailure:
                self._discard(target)
                raise

        self.logger.info(f"Installed {manifest.name} {manifest.version} from {ref.key} into {target}")
        return InstalledPlugin(
            folder=folder,
            path=target,
            plugin_file=plugin_file,
            manifest=manifest,
            shared_scope=shared_scope,
            linker_file=linker_file,
        )
