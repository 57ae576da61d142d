#!/usr/bin/env python3
"""
Plugin Updater

Checks a GitHub repository for a new commit and installs it as a plugin.

Usage:
    python scripts/update_plugin.py developer/my-plugin --plugins-dir /var/www/wp-content/plugins
    python scripts/update_plugin.py developer/my-plugin --config config/updater.json --mu
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from github_updater.cli import main  # noqa: E402


if __name__ == '__main__':
    sys.exit(main())
