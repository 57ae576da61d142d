"""
Plugin header parsing.

A manifest-bearing file starts with a comment block such as::

    /**
     * Plugin Name: Hello World
     * Version:     1.2.0
     */

Only the first 8 KiB of a file are read, the same window the host scans.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

HEADER_READ_BYTES = 8192

HEADER_FIELDS: Dict[str, str] = {
    'name': 'Plugin Name',
    'uri': 'Plugin URI',
    'description': 'Description',
    'version': 'Version',
    'author': 'Author',
    'author_uri': 'Author URI',
}

_CLOSING_COMMENT = re.compile(r'\s*(?:\*/|\?>).*')


@dataclass(frozen=True)
class ManifestInfo:
    """Plugin metadata declared in the entry file header."""

    name: str
    uri: str = ''
    description: str = ''
    version: str = ''
    author: str = ''
    author_uri: str = ''


def _header_value(content: str, header: str) -> str:
    pattern = re.compile(r'^[ \t/*#@]*' + re.escape(header) + r':(.*)$', re.MULTILINE | re.IGNORECASE)
    match = pattern.search(content)
    if not match:
        return ''
    return _CLOSING_COMMENT.sub('', match.group(1)).strip()


def parse_plugin_header(content: str) -> Optional[ManifestInfo]:
    """Parse header text; returns None if no Plugin Name is declared."""
    values = {field: _header_value(content, header) for field, header in HEADER_FIELDS.items()}
    if not values['name']:
        return None
    return ManifestInfo(**values)


def read_plugin_header(path: Union[str, Path]) -> Optional[ManifestInfo]:
    """Read the head of a file and parse its plugin header."""
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        content = f.read(HEADER_READ_BYTES)
    return parse_plugin_header(content.replace('\r', '\n'))
