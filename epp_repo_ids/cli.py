"""Command-line entry point: rebuild the EPP repository ID database."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from . import __version__
from .config import Settings
from .errors import FatalError
from .logging import configure_logging, get_logger
from .rules import TOOL_NAME
from .update import run_update

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Download the IANA EPP Repository Identifiers registry and "
        "regenerate the local epp-repo-ids.txt database.",
    )
    parser.add_argument("--url", help="registry CSV location (default: IANA)")
    parser.add_argument("--data-dir", type=Path, help="base data directory (default: $XDG_DATA_HOME)")
    parser.add_argument("--input", type=Path, help="use a local registry CSV instead of fetching")
    parser.add_argument("--timeout", type=float, help="fetch bound in seconds (default: 1200)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.url:
        overrides["source_url"] = args.url
    if args.data_dir:
        overrides["data_home"] = args.data_dir
    if args.timeout is not None:
        if args.timeout <= 0:
            build_parser().error("--timeout must be positive")
        overrides["fetch_timeout"] = args.timeout
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        configure_logging()
        logger.error("update_failed", error=str(exc), error_type="ValidationError")
        return 1

    configure_logging(settings.log_level)
    try:
        result = run_update(settings, source=args.input)
    except FatalError as exc:
        logger.error("update_failed", error=str(exc), error_type=type(exc).__name__)
        return 1

    summary = result.report.summary
    print(f"{result.path}: {summary.accepted} IDs, {summary.rejected} rejected")
    return 0


if __name__ == "__main__":
    sys.exit(main())
