"""
Persisting install state and handing the plugin over to the host.
"""

from github_updater.logging_config import get_logger
from github_updater.plugin_system.archive_installer import InstalledPlugin
from github_updater.plugin_system.host import (
    GITHUB_ACTIVE_OPTION,
    GITHUB_PLUGINS_OPTION,
    OptionStore,
    PluginHost,
)
from github_updater.plugin_system.repository import RepositoryRef


class StateRecorder:
    def __init__(self, options: OptionStore, host: PluginHost):
        self.options = options
        self.host = host
        self.logger = get_logger(__name__)

    def record_install(self, ref: RepositoryRef, revision: str, installed: InstalledPlugin) -> None:
        """
        Upsert the install record of ref and activate the plugin.

        Shared-scope plugins are only flagged; the linker file is enough for
        the host to load them.
        """
        if installed.shared_scope:
            active = dict(self.options.get(GITHUB_ACTIVE_OPTION, {}) or {})
            active[ref.key] = 1
            self.options.set(GITHUB_ACTIVE_OPTION, active)

        records = dict(self.options.get(GITHUB_PLUGINS_OPTION, {}) or {})
        records[ref.key] = {
            'hash': revision,
            'file': installed.plugin_file,
            'folder': installed.folder,
        }
        self.options.set(GITHUB_PLUGINS_OPTION, records)
        self.logger.debug(f"Recorded {ref.key} at {revision[:7]} in {installed.folder}")

        if not installed.shared_scope:
            self.host.activate_plugin(installed.basename)
