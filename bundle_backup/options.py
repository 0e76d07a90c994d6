"""Command line parsing and working-directory detection."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .errors import InvalidInvocationError

ACTION_RUN = "run"
ACTION_ADD = "add"
ACTION_LIST = "list"
ACTION_REMOVE = "remove"


class RuntimeOptions:
    """What a single invocation was asked to do."""

    def __init__(
        self,
        action: str = ACTION_RUN,
        project: Optional[str] = None,
        config_path: Optional[str] = None,
        dry_run: bool = False,
        force: bool = False,
    ):
        self.action = action
        self.project = project
        self.config_path = config_path
        self.dry_run = dry_run
        self.force = force

    @property
    def interactive(self) -> bool:
        """True for every action except the plain scheduled run."""
        return self.action != ACTION_RUN or self.dry_run or self.force


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundle-backup",
        description="Back up registered git projects as git bundles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bundle-backup                    # Bundle every registered project (cron mode)
  bundle-backup --add              # Register the current directory
  bundle-backup --add myproj       # Register the current directory as 'myproj'
  bundle-backup --list             # Show registered projects
  bundle-backup --remove myproj    # Unregister 'myproj'
  bundle-backup --dry-run          # Show the git commands without running them
        """,
    )

    parser.add_argument(
        "--add",
        nargs="?",
        const="",
        default=None,
        metavar="NAME",
        help="Register the current git working tree, optionally under NAME",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List registered projects",
    )
    parser.add_argument(
        "--remove",
        metavar="NAME",
        help="Unregister the project called NAME",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to the YAML configuration file",
    )
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Show the bundle commands without running them",
    )
    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Run even if the configured schedule is not due today",
    )
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> RuntimeOptions:
    """Parse command line arguments."""
    args = build_parser().parse_args(argv)

    actions = []
    if args.add is not None:
        actions.append(ACTION_ADD)
    if args.list:
        actions.append(ACTION_LIST)
    if args.remove is not None:
        actions.append(ACTION_REMOVE)

    if len(actions) > 1:
        raise InvalidInvocationError(
            f"Only one of --add, --list and --remove may be given (got {', '.join(actions)})"
        )

    if args.dry_run and (ACTION_ADD in actions or ACTION_REMOVE in actions):
        raise InvalidInvocationError("--dry-run cannot be combined with --add or --remove")

    action = actions[0] if actions else ACTION_RUN
    project = None
    if action == ACTION_ADD:
        project = args.add
    elif action == ACTION_REMOVE:
        project = args.remove

    return RuntimeOptions(
        action=action,
        project=project,
        config_path=args.config,
        dry_run=args.dry_run,
        force=args.force,
    )


def guess_working_path(cwd: Optional[Path] = None) -> str:
    """Return the current directory if it is a git working tree."""
    current = Path(cwd) if cwd is not None else Path.cwd()
    if not (current / ".git").is_dir():
        raise InvalidInvocationError(
            f"{current} is not a git working tree (no .git directory)"
        )
    return str(current)
