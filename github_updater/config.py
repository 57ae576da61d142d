"""
Updater configuration.

Settings come from a JSON file validated against schema/config_schema.json.
The GitHub token is kept out of that file: it is read from
config/config_secrets.json (``github.api_token``) or the GITHUB_TOKEN
environment variable.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from github_updater.common.schema_utils import schema_errors
from github_updater.logging_config import get_logger
from github_updater.plugin_system.exceptions import ConfigError

logger = get_logger(__name__)

DEFAULT_API_PREFIX = 'https://api.github.com/repos/'
DEFAULT_USER_AGENT = 'GitHub-Updater/1.0'
TOKEN_PLACEHOLDER = 'YOUR_GITHUB_PERSONAL_ACCESS_TOKEN'
TOKEN_ENV = 'GITHUB_TOKEN'


@dataclass
class UpdaterConfig:
    plugins_dir: Path
    mu_plugins_dir: Optional[Path] = None
    uploads_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None
    options_file: Optional[Path] = None
    api_prefix: str = DEFAULT_API_PREFIX
    entry_extension: str = '.php'
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 60
    max_redirects: int = 5
    github_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        self.plugins_dir = Path(self.plugins_dir)
        content_dir = self.plugins_dir.parent
        self.mu_plugins_dir = Path(self.mu_plugins_dir) if self.mu_plugins_dir else content_dir / 'mu-plugins'
        self.uploads_dir = Path(self.uploads_dir) if self.uploads_dir else content_dir / 'uploads'
        self.temp_dir = Path(self.temp_dir) if self.temp_dir else self.uploads_dir / 'temp'
        self.options_file = Path(self.options_file) if self.options_file else content_dir / 'github-updater-options.json'
        if not self.api_prefix.endswith('/'):
            self.api_prefix += '/'

    def is_shared_scope(self, destination: Union[str, Path]) -> bool:
        """True if destination is the must-use plugins directory."""
        return Path(destination).resolve() == Path(self.mu_plugins_dir).resolve()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UpdaterConfig':
        errors = schema_errors(data, 'config_schema.json')
        if errors:
            raise ConfigError(f"Invalid updater configuration: {'; '.join(errors)}")
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def load(cls, config_path: Union[str, Path], secrets_path: Optional[Union[str, Path]] = None) -> 'UpdaterConfig':
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the updater configuration file
            secrets_path: Optional secrets file; defaults to config_secrets.json
                          next to the configuration file

        Returns:
            Validated UpdaterConfig
        """
        config_path = Path(config_path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read configuration {config_path}: {e}") from e

        config = cls.from_dict(data)
        if not config.github_token:
            if secrets_path is None:
                secrets_path = config_path.parent / 'config_secrets.json'
            config.github_token = load_github_token(secrets_path)
        return config


def load_github_token(secrets_path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """
    Load the GitHub API token from the secrets file or the environment.

    Returns:
        GitHub token or None if not configured
    """
    if secrets_path:
        try:
            secrets_path = Path(secrets_path)
            if secrets_path.exists():
                with open(secrets_path, 'r', encoding='utf-8') as f:
                    secrets = json.load(f)
                token = secrets.get('github', {}).get('api_token', '').strip()
                if token and token != TOKEN_PLACEHOLDER:
                    return token
        except (OSError, ValueError, AttributeError) as e:
            logger.debug(f"Could not load GitHub token: {e}")

    token = os.environ.get(TOKEN_ENV, '').strip()
    return token or None
