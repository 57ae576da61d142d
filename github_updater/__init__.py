"""
GitHub Updater

Installs and updates host plugins straight from GitHub repositories.
"""

from github_updater.config import UpdaterConfig
from github_updater.plugin_system.updater import GitHubUpdater, UpdateResult

__version__ = '1.0.0'

__all__ = ['GitHubUpdater', 'UpdateResult', 'UpdaterConfig', '__version__']
