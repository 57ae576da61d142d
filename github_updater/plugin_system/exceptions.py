"""
Updater error taxonomy.

Every failure of an update cycle is raised synchronously to the caller of
GitHubUpdater.update_repository(). The numeric codes follow the original
updater's numbering so log output stays comparable across versions.
"""

from typing import Optional


class UpdaterError(Exception):
    """Base class for all updater failures."""

    code = 100

    def __init__(self, message: str, repository: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.repository = repository

    def __str__(self) -> str:
        if self.repository:
            return f"{self.message} ({self.repository})"
        return self.message


class ValidationError(UpdaterError, TypeError):
    """Invalid argument passed to a constructor or setter."""

    code = 101


class ConfigError(UpdaterError):
    """Configuration or option file failed to load or validate."""

    code = 102


class UpstreamError(UpdaterError):
    """GitHub answered with an error payload instead of data."""

    code = 203


class RepositoryNotFound(UpstreamError):
    code = 202


class DownloadError(UpdaterError):
    """Base class for archive download failures."""

    code = 300


class RedirectWithoutLocation(DownloadError):
    code = 201


class TooManyRedirects(DownloadError):
    code = 204


class TempDirUnavailable(DownloadError):
    code = 306


class WriteFailure(DownloadError):
    code = 301


class EmptyDownload(DownloadError):
    code = 307


class InstallError(UpdaterError):
    """Base class for failures while unpacking and placing the plugin."""

    code = 400


class ExtractionFailure(InstallError):
    code = 302


class RenameFailure(InstallError):
    code = 303


class DuplicateInstallation(InstallError):
    """The plugin is already installed under the other activation scope."""

    code = 304

    def __init__(self, message: str, repository: Optional[str] = None, plugin: Optional[str] = None):
        super().__init__(message, repository)
        self.plugin = plugin


class NoManifestFound(InstallError):
    code = 401
