"""
Tests for filesystem helpers.
"""

import io
import zipfile

import pytest

from github_updater.common.fs_utils import archive_top_level_names, safe_extract_zip, safe_remove_directory

from conftest import build_zip


def open_zip(files):
    return zipfile.ZipFile(io.BytesIO(build_zip(files)))


def test_safe_remove_directory(tmp_path):
    target = tmp_path / 'plugin'
    (target / 'nested').mkdir(parents=True)
    (target / 'nested' / 'file.php').write_text('<?php')
    (target / 'nested' / 'file.php').chmod(0o400)

    assert safe_remove_directory(target) is True
    assert not target.exists()


def test_safe_remove_missing_directory(tmp_path):
    assert safe_remove_directory(tmp_path / 'never-existed') is True


def test_archive_top_level_names():
    archive = open_zip({'root-a/x.php': '', 'root-a/y/z.php': '', 'root-b/readme.txt': ''})
    assert archive_top_level_names(archive) == ['root-a', 'root-b']


def test_safe_extract_zip(tmp_path):
    safe_extract_zip(open_zip({'root/x.php': '<?php'}), tmp_path)
    assert (tmp_path / 'root' / 'x.php').read_text() == '<?php'


def test_safe_extract_rejects_traversal(tmp_path):
    destination = tmp_path / 'plugins'
    destination.mkdir()
    with pytest.raises(ValueError):
        safe_extract_zip(open_zip({'root/../../outside.php': '<?php'}), destination)
    assert not (tmp_path / 'outside.php').exists()
