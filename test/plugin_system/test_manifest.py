"""
Tests for plugin header parsing and folder-name helpers.
"""

import pytest

from github_updater.common.fs_utils import normalize_repo_component, sanitize_file_name
from github_updater.plugin_system.manifest import parse_plugin_header, read_plugin_header

from conftest import PLUGIN_HEADER


class TestPluginHeader:

    def test_parses_all_fields(self):
        manifest = parse_plugin_header(PLUGIN_HEADER)
        assert manifest.name == 'Hello World'
        assert manifest.uri == 'https://example.com/hello'
        assert manifest.description == 'Says hello.'
        assert manifest.version == '1.2.0'
        assert manifest.author == 'Acme'
        assert manifest.author_uri == 'https://example.com'

    def test_missing_name_is_not_a_manifest(self):
        assert parse_plugin_header("<?php\n/**\n * Version: 1.0\n */\n") is None

    def test_single_line_comment_header(self):
        manifest = parse_plugin_header("<?php\n/* Plugin Name: Tiny */\n")
        assert manifest.name == 'Tiny'

    def test_hash_comment_header(self):
        manifest = parse_plugin_header("<?php\n# Plugin Name: Hashy\n# Author: Someone\n")
        assert manifest.name == 'Hashy'
        assert manifest.author == 'Someone'

    def test_read_from_file(self, tmp_path):
        entry = tmp_path / 'plugin.php'
        entry.write_text(PLUGIN_HEADER.replace('\n', '\r\n'), encoding='utf-8')
        assert read_plugin_header(entry).version == '1.2.0'


class TestFolderNames:

    @pytest.mark.parametrize('raw,expected', [
        ('hello world', 'hello-world'),
        ('my  plugin (beta)', 'my-plugin-beta'),
        ("acme's tools: pro!", 'acmes-tools-pro'),
        ('--dashed--', 'dashed'),
        ('version 2.0', 'version-2.0'),
    ])
    def test_sanitize_file_name(self, raw, expected):
        assert sanitize_file_name(raw) == expected

    def test_normalize_repo_component(self):
        assert normalize_repo_component('my_repo.name here') == 'my-repo-name-here'
