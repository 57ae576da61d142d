"""
Pytest fixtures for the updater pipeline tests.
"""

import io
import json
import sys
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import MagicMock

import pytest
from requests.structures import CaseInsensitiveDict

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from github_updater.config import UpdaterConfig  # noqa: E402
from github_updater.plugin_system.repository import RepositoryRef  # noqa: E402
from github_updater.plugin_system.testing import MockOptionStore, MockPluginHost  # noqa: E402

OWNER = 'acme'
REPO = 'hello_world'
SHA = 'a1b2c3d4e5f60718293a4b5c6d7e8f9012345678'
NEW_SHA = 'ffeeddccbbaa99887766554433221100ffeeddcc'

PLUGIN_HEADER = """<?php
/**
 * Plugin Name: Hello World
 * Plugin URI:  https://example.com/hello
 * Description: Says hello.
 * Version:     1.2.0
 * Author:      Acme
 * Author URI:  https://example.com
 */
"""


class FakeResponse:
    """Just enough of requests.Response for the pipeline."""

    def __init__(self, status_code: int = 200, json_data: Any = None, body: bytes = b'',
                 headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._json = json_data
        self.body = body
        self.headers = CaseInsensitiveDict(headers or {})
        self.closed = False

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def iter_content(self, chunk_size: int = 1) -> Iterable[bytes]:
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


def make_session(routes: Dict[str, Any]) -> MagicMock:
    """
    Build a mock session whose get() answers from routes.

    A route value is a FakeResponse or a list of them (served in order).
    """
    queues = {url: (list(value) if isinstance(value, list) else [value]) for url, value in routes.items()}
    session = MagicMock()

    def fake_get(url, **kwargs):
        queue = queues.get(url)
        if not queue:
            raise AssertionError(f"Unexpected GET {url}")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    session.get.side_effect = fake_get
    return session


def build_zip(files: Dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def plugin_zip(root: str = f"acme-hello-world-{SHA[:7]}", header: str = PLUGIN_HEADER,
               entry: str = 'hello-world.php') -> bytes:
    return build_zip({
        f"{root}/": '',
        f"{root}/readme.txt": 'Hello World readme',
        f"{root}/{entry}": header + "\nadd_action('init', 'hello');\n",
        f"{root}/includes/helpers.php": "<?php\n// Plugin Name: Not the entry file\n",
    })


def commits_url(config: UpdaterConfig, owner: str = OWNER, repo: str = REPO) -> str:
    return f"{config.api_prefix}{owner}/{repo}/commits"


def archive_url(config: UpdaterConfig, owner: str = OWNER, repo: str = REPO) -> str:
    return f"{config.api_prefix}{owner}/{repo}/zipball/master"


def archive_response(body: bytes, file_name: str = f"acme-hello_world-{SHA[:7]}.zip") -> FakeResponse:
    return FakeResponse(200, body=body, headers={
        'Content-Type': 'application/zip',
        'Content-Disposition': f'attachment; filename={file_name}',
    })


@pytest.fixture
def wp_content(tmp_path) -> Path:
    """A host content directory with plugins and mu-plugins folders."""
    content = tmp_path / 'wp-content'
    (content / 'plugins').mkdir(parents=True)
    (content / 'mu-plugins').mkdir()
    return content


@pytest.fixture
def config(wp_content) -> UpdaterConfig:
    return UpdaterConfig(plugins_dir=wp_content / 'plugins')


@pytest.fixture
def options() -> MockOptionStore:
    return MockOptionStore()


@pytest.fixture
def host() -> MockPluginHost:
    return MockPluginHost()


@pytest.fixture
def ref() -> RepositoryRef:
    return RepositoryRef(OWNER, REPO)


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


def tree(root: Path) -> List[str]:
    """Sorted relative paths below root, for before/after comparisons."""
    return sorted(str(p.relative_to(root)) for p in root.rglob('*'))
