"""
Host platform collaborators.

The updater never reaches into global host state. It talks to an injected
OptionStore (persistent key/value options) and PluginHost (manifest parsing,
activation, list of active plugins). The file-backed implementations below
let the updater run outside the host, e.g. from a deploy script.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from github_updater.common.schema_utils import schema_errors
from github_updater.logging_config import get_logger
from github_updater.plugin_system.exceptions import ConfigError
from github_updater.plugin_system.manifest import ManifestInfo, read_plugin_header

GITHUB_PLUGINS_OPTION = 'github_plugins'
GITHUB_ACTIVE_OPTION = 'github_active_plugins'
ACTIVE_PLUGINS_OPTION = 'active_plugins'

# Option values that must match a schema before they are persisted
_OPTION_SCHEMAS = {
    GITHUB_PLUGINS_OPTION: 'install_records_schema.json',
}


class OptionStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def contains(self, key: str) -> bool: ...


class PluginHost(Protocol):
    def parse_manifest(self, path: Path) -> Optional[ManifestInfo]: ...

    def activate_plugin(self, plugin: str) -> None: ...

    def active_plugins(self) -> List[str]: ...


def validate_option(key: str, value: Any) -> None:
    """Raise ConfigError if value does not match the schema registered for key."""
    schema_name = _OPTION_SCHEMAS.get(key)
    if schema_name is None:
        return
    errors = schema_errors(value, schema_name)
    if errors:
        raise ConfigError(f"Invalid value for option {key!r}: {'; '.join(errors)}")


class JsonOptionStore:
    """Options persisted as a single JSON document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        self._options = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read option file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Option file {self.path} must contain a JSON object")
        for key, value in data.items():
            validate_option(key, value)
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self._options, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def set(self, key: str, value: Any) -> None:
        validate_option(key, value)
        self._options[key] = value
        self._save()
        self.logger.debug(f"Option {key!r} saved to {self.path}")

    def contains(self, key: str) -> bool:
        return key in self._options


class LocalPluginHost:
    """
    Stand-in for the host's plugin API.

    Activation only records the plugin in the ``active_plugins`` option; the
    host picks it up from there on its next request.
    """

    def __init__(self, options: OptionStore):
        self.options = options
        self.logger = get_logger(__name__)

    def parse_manifest(self, path: Path) -> Optional[ManifestInfo]:
        try:
            return read_plugin_header(path)
        except OSError as e:
            self.logger.debug(f"Could not read plugin header from {path}: {e}")
            return None

    def activate_plugin(self, plugin: str) -> None:
        active = list(self.options.get(ACTIVE_PLUGINS_OPTION, []))
        if plugin in active:
            return
        active.append(plugin)
        self.options.set(ACTIVE_PLUGINS_OPTION, sorted(active))
        self.logger.info(f"Activated plugin {plugin}")

    def active_plugins(self) -> List[str]:
        return list(self.options.get(ACTIVE_PLUGINS_OPTION, []))
