"""
Plugin update pipeline: version check, archive download, install, state recording.
"""

from .exceptions import (
    ConfigError,
    DownloadError,
    DuplicateInstallation,
    EmptyDownload,
    ExtractionFailure,
    InstallError,
    NoManifestFound,
    RedirectWithoutLocation,
    RenameFailure,
    RepositoryNotFound,
    TempDirUnavailable,
    TooManyRedirects,
    UpdaterError,
    UpstreamError,
    ValidationError,
    WriteFailure,
)
from .repository import RepositoryRef

__all__ = [
    'ConfigError',
    'DownloadError',
    'DuplicateInstallation',
    'EmptyDownload',
    'ExtractionFailure',
    'InstallError',
    'NoManifestFound',
    'RedirectWithoutLocation',
    'RenameFailure',
    'RepositoryNotFound',
    'RepositoryRef',
    'TempDirUnavailable',
    'TooManyRedirects',
    'UpdaterError',
    'UpstreamError',
    'ValidationError',
    'WriteFailure',
]
