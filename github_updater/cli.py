"""
Command-line entry point.

Usage:
    github-updater developer/my-plugin --plugins-dir /var/www/wp-content/plugins
    github-updater developer my-plugin --config config/updater.json --mu
"""

import argparse
import sys
from typing import List, Optional

from github_updater.config import UpdaterConfig, load_github_token
from github_updater.logging_config import configure_logging, get_logger
from github_updater.plugin_system.exceptions import UpdaterError
from github_updater.plugin_system.updater import GitHubUpdater

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Install or update a plugin from a GitHub repository')
    parser.add_argument('owner', help='Repository owner, or "owner/name"')
    parser.add_argument('repo', nargs='?', default=None, help='Repository name (unless combined with owner)')
    parser.add_argument('--config', '-c', default=None, help='Path to updater configuration JSON')
    parser.add_argument('--plugins-dir', '-d', default=None,
                        help='Plugins directory (required without --config)')
    parser.add_argument('--mu', action='store_true',
                        help='Install into the must-use plugins directory')
    parser.add_argument('--token', '-t', default=None, help='GitHub API token')
    parser.add_argument('--log-file', default=None, help='Write log output to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run one update cycle; returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging('DEBUG' if args.verbose else None, args.log_file)

    try:
        if args.config:
            config = UpdaterConfig.load(args.config)
        elif args.plugins_dir:
            config = UpdaterConfig(plugins_dir=args.plugins_dir, github_token=load_github_token())
        else:
            logger.error("Either --config or --plugins-dir is required")
            return 2

        destination = str(config.mu_plugins_dir if args.mu else config.plugins_dir)
        updater = GitHubUpdater(destination, args.owner, args.repo, token=args.token, config=config)
        result = updater.update_repository()
    except UpdaterError as e:
        logger.error(f"[{e.code}] {e}")
        return 1

    if result is None:
        print(f"{updater.repository.key} is up to date")
    else:
        print(f"Installed {result.installed.manifest.name} ({result.revision[:7]}) into {result.installed.path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
