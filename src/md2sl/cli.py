"""
Reformat Markdown so that every sentence sits on its own line.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_END_MARKERS, DEFAULT_LANG, DEFAULT_MAX_WIDTH, ResolvedConfig, build_config
from .conversion import (
    Mode,
    ReportStyle,
    decode_document,
    discover_files,
    exit_status,
    format_document,
    process_files,
    report_lines,
)
from .errors import ConfigError, EncodingError
from .models import Case, LinkActions
from .plugins import available_languages

logger = logging.getLogger(__name__)

LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def configure_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2sl",
        description="Reformat Markdown files so that every sentence starts on a new line.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Files or directories to format. Reads stdin and writes stdout when omitted.",
    )
    parser.add_argument(
        "-w",
        "--max-width",
        default=str(DEFAULT_MAX_WIDTH),
        help=f"Maximum line width, 0 disables wrapping (default: {DEFAULT_MAX_WIDTH}).",
    )
    parser.add_argument(
        "-e",
        "--end-markers",
        default=DEFAULT_END_MARKERS,
        help=f"Characters that end a sentence (default: {DEFAULT_END_MARKERS}).",
    )
    parser.add_argument(
        "-l",
        "--lang",
        default=DEFAULT_LANG,
        help=(
            "Space-separated languages whose suppression words are used "
            f"(available: {', '.join(available_languages())}; default: {DEFAULT_LANG})."
        ),
    )
    parser.add_argument("-s", "--suppressions", default="", help="Additional space-separated suppression words.")
    parser.add_argument("-i", "--ignores", default="", help="Space-separated words that never suppress a break.")
    parser.add_argument(
        "--case",
        default=Case.IGNORE.value,
        choices=[case.value for case in Case],
        help="How to compare words against the suppression list (default: ignore).",
    )
    parser.add_argument(
        "-a",
        "--link-actions",
        default=LinkActions.NONE.value,
        choices=[action.value for action in LinkActions],
        help="Rewrites applied to links (default: none).",
    )
    parser.add_argument(
        "-k",
        "--keep-whitespace",
        default="none",
        choices=["none", "in-links", "linebreaks", "both"],
        help="Whitespace that is left alone (default: none).",
    )
    parser.add_argument(
        "--format-block-quotes",
        action="store_true",
        help="Also format the text inside block quotes.",
    )
    parser.add_argument(
        "-f",
        "--features",
        default="",
        help=(
            "Comma-separated extra features: breaking-multiple-markers, breaking-start-marker, "
            "modify-nbsp, format-footnotes."
        ),
    )
    parser.add_argument(
        "-m",
        "--mode",
        default=Mode.FORMAT.value,
        choices=[mode.value for mode in Mode],
        help="format files in place, check whether they would change, or both (default: format).",
    )
    parser.add_argument(
        "-r",
        "--report",
        default=ReportStyle.NONE.value,
        choices=[style.value for style in ReportStyle],
        help="What to print for processed files (default: none).",
    )
    parser.add_argument("--extension", default=".md", help="Extension of files found in directories (default: .md).")
    parser.add_argument("-j", "--jobs", type=int, default=None, help="Number of files processed in parallel.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log output (may repeat).")
    return parser


def resolve_config(args: argparse.Namespace) -> ResolvedConfig:
    return build_config(
        max_width=args.max_width,
        end_markers=args.end_markers,
        lang=args.lang,
        suppressions=args.suppressions,
        ignores=args.ignores,
        case=args.case,
        link_actions=args.link_actions,
        keep_whitespace=args.keep_whitespace,
        format_block_quotes=args.format_block_quotes,
        features=args.features,
    )


def format_stdin(config: ResolvedConfig, mode: Mode) -> int:
    try:
        text = decode_document(sys.stdin.buffer.read())
    except EncodingError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    result = format_document(text, config)
    sys.stdout.write(result.output_text)
    return 1 if mode.checks and result.changed else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = resolve_config(args)
    except ConfigError as exc:
        sys.stderr.write(f"md2sl: {exc}\n")
        return 2
    mode = Mode(args.mode)
    if not args.paths:
        return format_stdin(config, mode)
    files = discover_files(args.paths, args.extension)
    outcomes = process_files(files, config, mode, jobs=args.jobs)
    for line in report_lines(outcomes, ReportStyle(args.report)):
        sys.stdout.write(f"{line}\n")
    return exit_status(outcomes, mode)


if __name__ == "__main__":
    raise SystemExit(main())
