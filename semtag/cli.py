"""CLI entry point for semtag."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import version as pkg_version
from pathlib import Path

from .config import apply_cli_overrides, load_config
from .errors import GitOperationError, SemtagError
from .gitops import is_git_repository
from .models import ReleaseType, StrategyResult
from .shell import log
from .strategies import run_strategy, select_strategy
from .workspace import discover_workspace

__version__ = pkg_version("semtag")


def _split_list(values: list[str] | None) -> list[str]:
    """Flatten repeatable, comma-separated options: -t a,b -t c → [a, b, c]."""
    items: list[str] = []
    for value in values or []:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semtag",
        description="Compute the next semantic version and tag the release.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to the config file. (default: version.config.json)",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Compute and print everything without writing files or touching git.",
    )
    parser.add_argument(
        "-b",
        "--bump",
        default=None,
        metavar="TYPE",
        help="Force a release type: " + ", ".join(t.value for t in ReleaseType) + ".",
    )
    parser.add_argument(
        "-p",
        "--prerelease",
        nargs="?",
        const="",
        default=None,
        metavar="ID",
        help="Create a prerelease, optionally with an identifier. (default ID: rc)",
    )
    parser.add_argument(
        "-s",
        "--synced",
        action="store_true",
        help="Version every package together.",
    )
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Print a JSON report of the release on stdout.",
    )
    parser.add_argument(
        "-t",
        "--target",
        action="append",
        metavar="PACKAGES",
        help="Comma-separated package names or patterns to release (repeatable).",
    )
    parser.add_argument(
        "--skip",
        action="append",
        metavar="PACKAGES",
        help="Comma-separated package names to leave alone (repeatable).",
    )
    return parser


def run(args: argparse.Namespace, root: Path | None = None) -> StrategyResult:
    """Load configuration, discover the workspace and run a strategy."""
    root = root or Path.cwd()
    if not is_git_repository(root):
        raise GitOperationError(
            f"{root} is not a git repository",
            suggestions=["Run semtag from the root of a git repository"],
        )

    config = apply_cli_overrides(
        load_config(args.config, root=root),
        dry_run=args.dry_run,
        synced=args.synced,
        bump=args.bump,
        prerelease=args.prerelease,
        skip=_split_list(args.skip),
    )
    if config.dry_run:
        log("[DRY RUN] No files or git state will be changed")

    workspace = discover_workspace(root)
    targets = _split_list(args.target)
    kind = select_strategy(config, targets)
    log(f"Using {kind} strategy")
    return run_strategy(kind, config, workspace, targets)


def main(argv: list[str] | None = None) -> int:
    """Run semtag and return the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        result = run(args)
    except SemtagError as e:
        e.log_error()
        return 1

    if args.json:
        print(result.model_dump_json(indent=2))
    elif result.tags:
        log(f"Release complete: {', '.join(result.tags)}", "success")
    return 0


def cli() -> None:
    """Main CLI entry point."""
    sys.exit(main())
