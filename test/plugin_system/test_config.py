"""
Tests for configuration loading and logging setup.
"""

import logging

import pytest

from github_updater.config import UpdaterConfig, load_github_token
from github_updater.logging_config import configure_logging, get_logger
from github_updater.plugin_system.exceptions import ConfigError

from conftest import write_json


class TestUpdaterConfig:

    def test_derived_paths(self, tmp_path):
        config = UpdaterConfig(plugins_dir=tmp_path / 'wp-content' / 'plugins')
        assert config.mu_plugins_dir == tmp_path / 'wp-content' / 'mu-plugins'
        assert config.temp_dir == tmp_path / 'wp-content' / 'uploads' / 'temp'
        assert config.api_prefix == 'https://api.github.com/repos/'

    def test_api_prefix_gets_trailing_slash(self, tmp_path):
        config = UpdaterConfig(plugins_dir=tmp_path, api_prefix='https://github.example.com/api/v3/repos')
        assert config.api_prefix.endswith('/repos/')

    def test_load_with_secrets(self, tmp_path, monkeypatch):
        monkeypatch.delenv('GITHUB_TOKEN', raising=False)
        config_path = write_json(tmp_path / 'config' / 'updater.json', {
            'plugins_dir': str(tmp_path / 'plugins'),
            'timeout': 15,
        })
        write_json(tmp_path / 'config' / 'config_secrets.json', {'github': {'api_token': ' abc123 '}})

        config = UpdaterConfig.load(config_path)

        assert config.timeout == 15
        assert config.github_token == 'abc123'

    def test_placeholder_token_ignored(self, tmp_path, monkeypatch):
        monkeypatch.delenv('GITHUB_TOKEN', raising=False)
        secrets = write_json(tmp_path / 'secrets.json',
                             {'github': {'api_token': 'YOUR_GITHUB_PERSONAL_ACCESS_TOKEN'}})
        assert load_github_token(secrets) is None

    def test_token_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv('GITHUB_TOKEN', 'from-env')
        assert load_github_token(tmp_path / 'missing.json') == 'from-env'

    @pytest.mark.parametrize('data', [
        {},
        {'plugins_dir': ''},
        {'plugins_dir': '/srv/plugins', 'timeout': 0},
        {'plugins_dir': '/srv/plugins', 'api_prefix': 'ftp://example.com'},
        {'plugins_dir': '/srv/plugins', 'unknown_key': True},
    ])
    def test_invalid_configuration(self, data):
        with pytest.raises(ConfigError):
            UpdaterConfig.from_dict(data)

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(ConfigError):
            UpdaterConfig.load(tmp_path / 'nope.json')

    def test_shared_scope_detection(self, tmp_path):
        config = UpdaterConfig(plugins_dir=tmp_path / 'plugins')
        assert config.is_shared_scope(tmp_path / 'mu-plugins')
        assert not config.is_shared_scope(tmp_path / 'plugins')


class TestLogging:

    def test_logger_names(self):
        assert get_logger('cli').name == 'github_updater.cli'
        assert get_logger('github_updater.config').name == 'github_updater.config'

    def test_configure_is_idempotent(self, tmp_path):
        root = configure_logging('DEBUG')
        configure_logging('WARNING', tmp_path / 'logs' / 'updater.log')
        tagged = [h for h in root.handlers if getattr(h, '_github_updater_handler', False)]
        assert len(tagged) == 1
        assert isinstance(tagged[0], logging.FileHandler)
        assert root.level == logging.WARNING
        tagged[0].close()
        root.removeHandler(tagged[0])
