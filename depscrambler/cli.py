"""
Command line interface for the dependency scrambler.

Usage:
    depscrambler scramble --path package.json --percentage 50 --aggression 8
    depscrambler restore --backup package.json.backup.1700000000000
    depscrambler restore --latest
    depscrambler backups
    depscrambler hint
"""

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from depscrambler import __version__
from depscrambler.config import find_profile, load_profile, resolve_options
from depscrambler.exceptions import ScramblerError
from depscrambler.manifest import find_latest_backup, list_backups, restore_from_backup
from depscrambler.report import render_result
from depscrambler.scrambler import scramble_package_json
from depscrambler.types import (
    DEFAULT_AGGRESSION_LEVEL,
    DEFAULT_SCRAMBLE_PERCENTAGE,
    DEFAULT_TARGET_PATH,
    ConflictMode,
    DependencyType,
)

PROG = "depscrambler"

console = Console()

HINTS = [
    "Look for inconsistent version ranges in package.json",
    "Check for peer dependency conflicts",
    "Try using npm ls to identify dependency issues",
    "Look for dependencies that might need exact versions",
    "Consider using npm-check-updates to analyze version problems",
]


def add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps a subcommand from resetting a top-level -v
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show debug logging",
    )


def create_scramble_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Create the scramble subcommand parser."""
    scramble_parser = subparsers.add_parser(
        "scramble",
        help="Scramble package.json dependencies to create conflicts",
        description="Randomly perturb version specifiers so that npm install fails "
                    "in realistic, debuggable ways.",
    )

    scramble_parser.add_argument(
        "--path", "-p",
        default=None,
        help=f"Target package.json path (default: {DEFAULT_TARGET_PATH})",
    )

    scramble_parser.add_argument(
        "--no-backup", "-n",
        action="store_false",
        dest="backup",
        default=None,
        help="Skip creating a backup of package.json",
    )

    scramble_parser.add_argument(
        "--types", "-t",
        default=None,
        help="Dependency types to scramble, comma separated "
             f"(default: {','.join(t.value for t in DependencyType)})",
    )

    scramble_parser.add_argument(
        "--percentage", "-s",
        type=float,
        default=None,
        help=f"Percentage of dependencies to scramble, 0-100 (default: {DEFAULT_SCRAMBLE_PERCENTAGE})",
    )

    scramble_parser.add_argument(
        "--aggression", "-a",
        type=int,
        default=None,
        help=f"How aggressive the scrambling should be, 1-10 (default: {DEFAULT_AGGRESSION_LEVEL})",
    )

    scramble_parser.add_argument(
        "--mode", "-m",
        choices=[mode.value for mode in ConflictMode],
        default=None,
        help="Type of conflicts to generate (default: realistic)",
    )

    scramble_parser.add_argument(
        "--constraint", "-c",
        action="append",
        default=None,
        metavar="NAME=SPEC",
        help="Keep a package or scope within the major version of SPEC (repeatable)",
    )

    scramble_parser.add_argument(
        "--allow-major",
        action="store_false",
        dest="respect_major",
        default=None,
        help="Allow major version changes",
    )

    scramble_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the random generator for a reproducible run",
    )

    scramble_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Show what would change without writing anything",
    )

    scramble_parser.add_argument(
        "--config",
        default=None,
        help="YAML profile with default options",
    )

    scramble_parser.add_argument(
        "--show-issues",
        action="store_true",
        help="List every change and injected conflict",
    )

    add_verbose_argument(scramble_parser)
    scramble_parser.set_defaults(func=handle_scramble)
    return scramble_parser


def create_restore_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Create the restore subcommand parser."""
    restore_parser = subparsers.add_parser(
        "restore",
        help="Restore package.json from a backup",
    )

    source = restore_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--backup", "-b", help="Backup file to restore from")
    source.add_argument(
        "--latest",
        action="store_true",
        help="Restore from the newest backup of the target",
    )

    restore_parser.add_argument(
        "--target", "-t",
        default=DEFAULT_TARGET_PATH,
        help=f"Target path to restore to (default: {DEFAULT_TARGET_PATH})",
    )

    add_verbose_argument(restore_parser)
    restore_parser.set_defaults(func=handle_restore)
    return restore_parser


def create_backups_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Create the backups subcommand parser."""
    backups_parser = subparsers.add_parser(
        "backups",
        help="List backups of package.json, newest first",
    )
    backups_parser.add_argument(
        "--path", "-p",
        default=DEFAULT_TARGET_PATH,
        help=f"Manifest whose backups to list (default: {DEFAULT_TARGET_PATH})",
    )
    add_verbose_argument(backups_parser)
    backups_parser.set_defaults(func=handle_backups)
    return backups_parser


def create_hint_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Create the hint subcommand parser."""
    hint_parser = subparsers.add_parser(
        "hint",
        help="Get hints for solving the dependency issues",
    )
    add_verbose_argument(hint_parser)
    hint_parser.set_defaults(func=handle_hint)
    return hint_parser


def handle_scramble(args: argparse.Namespace) -> int:
    """Handle the scramble command."""
    target = args.path or DEFAULT_TARGET_PATH

    profile_path = args.config or find_profile(target)
    profile = load_profile(profile_path) if profile_path else {}

    options = resolve_options(profile, {
        "path": args.path,
        "backup": args.backup,
        "types": args.types,
        "percentage": args.percentage,
        "aggression": args.aggression,
        "mode": args.mode,
        "respect_major": args.respect_major,
        "constraints": args.constraint,
        "dry_run": args.dry_run,
    })

    rng = random.Random(args.seed) if args.seed is not None else None

    console.print("Scrambling package.json dependencies...", style="yellow")
    result = scramble_package_json(options, rng=rng)

    if options.dry_run:
        console.print("Dry run - no files were written", style="blue")
    else:
        console.print("Dependencies successfully scrambled!", style="green")
    console.print()

    render_result(result, out=console, show_issues=args.show_issues)

    if not options.dry_run and result.total_scrambled:
        console.print()
        console.print("Warning: npm install will now likely fail due to dependency conflicts.", style="red")
        console.print("Fixing them is the exercise.", style="yellow")

    if result.backup_path:
        console.print()
        console.print("To restore the original package.json, run:", style="blue")
        console.print(
            f"  {PROG} restore --backup {result.backup_path} --target {options.target_path}",
            style="cyan",
        )

    return 0


def handle_restore(args: argparse.Namespace) -> int:
    """Handle the restore command."""
    backup = args.backup
    if args.latest:
        backup = find_latest_backup(args.target)
        if backup is None:
            console.print(f"No backups found for {args.target}", style="yellow")
            return 1

    console.print(f"Restoring package.json from {backup}...", style="yellow")
    target = restore_from_backup(backup, args.target)
    console.print(f"Restored {target}", style="green")
    return 0


def handle_backups(args: argparse.Namespace) -> int:
    """Handle the backups command."""
    backups = list_backups(args.path)
    if not backups:
        console.print(f"No backups found for {args.path}")
        return 0

    console.print(f"Backups of {args.path}:")
    for backup in backups:
        console.print(f"  - {Path(backup).name}")
    return 0


def handle_hint(args: argparse.Namespace) -> int:
    """Handle the hint command."""
    console.print("Hints for solving dependency issues", style="yellow")
    console.print()
    for i, hint in enumerate(HINTS, 1):
        console.print(f"{i}. {hint}", style="cyan")
    console.print()
    console.print(
        "Remember: the goal is to make npm install work without using --force or --legacy-peer-deps",
        style="yellow",
    )
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Scramble package.json versions to practice debugging dependency conflicts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command")
    create_scramble_parser(subparsers)
    create_restore_parser(subparsers)
    create_backups_parser(subparsers)
    create_hint_parser(subparsers)
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    try:
        return parsed_args.func(parsed_args)
    except ScramblerError as e:
        console.print(f"Error: {e}", style="red")
        return 1


if __name__ == "__main__":
    sys.exit(main())
