"""
GitHub Updater

Downloads plugins straight from GitHub into a plugins directory. Standard
plugins are activated through the host; must-use plugins get a linker file
in the must-use directory instead. A plugin already present under the other
scope is refused so its code is never declared twice.

An update cycle mutates the destination directory and the option store
without locking. Run at most one cycle per repository at a time.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests

from github_updater.config import UpdaterConfig
from github_updater.logging_config import get_logger
from github_updater.plugin_system.archive_fetcher import ArchiveFetcher
from github_updater.plugin_system.archive_installer import ArchiveInstaller, InstalledPlugin
from github_updater.plugin_system.exceptions import UpdaterError, ValidationError
from github_updater.plugin_system.host import JsonOptionStore, LocalPluginHost, OptionStore, PluginHost
from github_updater.plugin_system.repository import RepositoryRef, require_string, split_owner
from github_updater.plugin_system.state_recorder import StateRecorder
from github_updater.plugin_system.version_checker import VersionChecker


@dataclass(frozen=True)
class UpdateResult:
    ref: RepositoryRef
    revision: str
    installed: InstalledPlugin


class GitHubUpdater:
    """
    Installs or updates one GitHub repository as a plugin.

    The owner and repository name can be passed separately or combined,
    e.g. ``GitHubUpdater(plugins_dir, "developer/my-repository")``.
    """

    def __init__(self, destination: Optional[str] = None, owner: Optional[str] = None,
                 repo: Optional[str] = None, autoload: bool = False, token: Optional[str] = None, *,
                 config: Optional[UpdaterConfig] = None, options: Optional[OptionStore] = None,
                 host: Optional[PluginHost] = None, session: Optional[requests.Session] = None):
        """
        Args:
            destination: Directory the plugin is installed into (defaults to
                         the configured plugins directory)
            owner: Repository owner, or "owner/name"
            repo: Repository name, unless combined into owner
            autoload: Run update_repository() right away
            token: GitHub token; raises the API rate limit
            config: Updater configuration
            options: Host option store
            host: Host plugin API
            session: requests session shared by all HTTP calls
        """
        self.logger = get_logger(__name__)
        self.destination_path: Optional[Path] = None
        self.repository_owner = ''
        self.repository_name = ''

        if token is not None:
            require_string(token, 'token')

        if config is None:
            if not destination:
                raise ValidationError("A destination or a configuration is required.")
            config = UpdaterConfig(plugins_dir=require_string(destination, 'destination'))
        if token:
            config = dataclasses.replace(config, github_token=token)
        self.config = config
        self.destination_path = Path(config.plugins_dir)

        self.options = options if options is not None else JsonOptionStore(config.options_file)
        self.host = host if host is not None else LocalPluginHost(self.options)
        self.session = session or requests.Session()

        self.checker = VersionChecker(config, self.options, self.session)
        self.fetcher = ArchiveFetcher(config, self.session)
        self.installer = ArchiveInstaller(config, self.options, self.host)
        self.recorder = StateRecorder(self.options, self.host)

        self.set_destination(destination)
        self.set_repository_owner(owner)
        self.set_repository_name(repo)

        if autoload:
            self.update_repository()

    def set_destination(self, destination: Any) -> bool:
        """Set the install directory. Returns False if destination is empty."""
        if not destination:
            return False
        self.destination_path = Path(require_string(destination, 'destination'))
        return True

    def set_repository_owner(self, owner: Any) -> bool:
        """
        Set the repository owner. An "owner/name" value also sets the
        repository name. Returns False if owner is empty.
        """
        if not owner:
            return False
        owner, name = split_owner(require_string(owner, 'owner'))
        self.repository_owner = owner
        if name:
            self.set_repository_name(name)
        return True

    def set_repository_name(self, repo: Any) -> bool:
        """Set the repository name. Returns False if repo is empty."""
        if not repo:
            return False
        self.repository_name = require_string(repo, 'repo')
        return True

    @property
    def repository(self) -> RepositoryRef:
        if not self.repository_owner or not self.repository_name:
            raise ValidationError("Repository owner and name must be set before updating.")
        return RepositoryRef.parse(self.repository_owner, self.repository_name)

    @property
    def shared_scope(self) -> bool:
        return self.config.is_shared_scope(self.destination_path)

    def update_repository(self) -> Optional[UpdateResult]:
        """
        Check for a new revision and install it.

        Returns:
            UpdateResult if something was installed, None if already up to date

        Raises:
            UpdaterError: Any failure of the cycle; nothing is retried
        """
        if not self.destination_path:
            raise ValidationError("Destination path must be set before updating.")
        ref = self.repository
        destination = self.destination_path

        try:
            check = self.checker.check_for_update(ref, destination)
            if not check.has_update:
                return None

            with self.fetcher.fetch(ref) as download:
                installed = self.installer.install(download, ref, destination, self.shared_scope)

            self.recorder.record_install(ref, check.revision, installed)
        except UpdaterError as e:
            self.logger.error(f"Update of {ref.key} failed [{e.code}]: {e}")
            raise

        self.logger.info(f"Updated {ref.key} to {check.revision[:7]}")
        return UpdateResult(ref, check.revision, installed)
