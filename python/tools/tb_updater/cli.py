import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .logging_config import setup_logging
from .settings import UpdaterSettings
from .updater import EXIT_FAILURE, ThunderbirdUpdater


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tb-updater",
        description="Keep a user-local Thunderbird install up to date",
    )

    parser.add_argument(
        "-d",
        "--dest-dir",
        type=str,
        default=None,
        help="Directory the Thunderbird archive is expanded into "
        "(default: the stored one, or ~/Downloads on first run)",
    )

    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Only check for updates, don't download or install",
    )

    parser.add_argument(
        "--source",
        choices=["html", "json"],
        default="html",
        help="Where to look up the latest release (default: html)",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Don't draw the download progress bar",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write the log to this file",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase verbosity (can be used multiple times)",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    The main entry point for the command-line interface.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)

    level = {0: "WARNING", 1: "INFO"}.get(args.verbose, "DEBUG")
    setup_logging(level, args.log_file)

    try:
        settings = UpdaterSettings(release_source=args.source)
    except (RuntimeError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    updater = ThunderbirdUpdater(settings, show_progress=not args.no_progress)
    return asyncio.run(updater.run(args.dest_dir, check_only=args.check_only))
