"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from gode_engine import __version__
from gode_engine.config import load_config, parse_timeout
from gode_engine.errors import GodeCheckError
from gode_engine.pipeline import run_verification
from gode_engine.reference import parse_release_url

from .report import ConsoleReporter, color_enabled, write_report

logger = logging.getLogger(__name__)

USAGE = "Usage: gode-check <release link> [artifact commit]"


def _setup_logging(verbosity: int) -> None:
    if logging.getLogger().hasHandlers():
        return
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gode-check",
        description="Verify that a release's .geode asset matches the CI artifact built from the same commit.",
    )
    parser.add_argument(
        "release_url",
        nargs="?",
        help="Release page URL (https://github.com/<owner>/<repo>/releases/tag/<tag>).",
    )
    parser.add_argument("commit", nargs="?", help="Known commit sha; skips tag resolution when given.")
    parser.add_argument("--version", action="version", version=f"gode-check v{__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log HTTP and scratch activity (-vv for debug).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    parser.add_argument(
        "--all-pages",
        action="store_true",
        default=None,
        help="Walk every page of the artifacts listing (default: first page only).",
    )
    parser.add_argument(
        "--scratch-dir",
        help="Parent directory for the gode-check scratch tree (default: GODE_CHECK_SCRATCH_DIR or <tmp>).",
    )
    parser.add_argument("--timeout", help="HTTP timeout in seconds (default: GODE_CHECK_TIMEOUT or none).")
    parser.add_argument("--strict", action="store_true", help="Exit non-zero when any comparison mismatches.")
    parser.add_argument("--report-out", help="Write a JSON verification report to this path.")
    return parser


def _verify(args: argparse.Namespace, reporter: ConsoleReporter) -> int:
    ref = parse_release_url(args.release_url)
    config = load_config(
        os.environ,
        scratch_dir=args.scratch_dir,
        timeout_s=parse_timeout(args.timeout),
        all_pages=args.all_pages,
    )
    logger.info("Verifying %s at tag %s with %r", ref.slug, ref.tag, config)

    report = run_verification(ref, config=config, provided_commit=args.commit, observer=reporter)

    if args.report_out:
        write_report(report, Path(args.report_out))
        logger.info("Report written to %s", args.report_out)
    if args.strict and not report.all_matched:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if not args.release_url:
        print(f"gode-check v{__version__}\n{USAGE}")
        return 0

    reporter = ConsoleReporter(use_color=color_enabled(sys.stdout, no_color=args.no_color))
    try:
        return _verify(args, reporter)
    except GodeCheckError as exc:
        reporter.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
