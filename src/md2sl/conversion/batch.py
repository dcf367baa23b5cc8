from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..config import ResolvedConfig
from ..errors import Md2slError
from .core import format_document, read_document, write_document

logger = logging.getLogger(__name__)


class Mode(Enum):
    FORMAT = "format"
    CHECK = "check"
    BOTH = "both"

    @property
    def writes(self) -> bool:
        return self is not Mode.CHECK

    @property
    def checks(self) -> bool:
        return self is not Mode.FORMAT


class ReportStyle(Enum):
    NONE = "none"
    CHANGED = "changed"
    STATE = "state"


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    changed: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def discover_files(paths: Iterable[Path], extension: str = ".md") -> List[Path]:
    """Expand directories into the files below them carrying ``extension``.

    Files given explicitly are kept whatever their extension. Order follows the
    arguments, directory contents sorted, duplicates removed.
    """
    found: List[Path] = []
    seen = set()
    for path in paths:
        if path.is_dir():
            candidates = sorted(child for child in path.rglob(f"*{extension}") if child.is_file())
        else:
            candidates = [path]
        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                found.append(candidate)
    logger.debug("discovered %d files", len(found))
    return found


def process_file(path: Path, config: ResolvedConfig, mode: Mode) -> FileOutcome:
    logger.debug("processing %s", path)
    try:
        result = format_document(read_document(path), config)
        if result.changed and mode.writes:
            logger.debug("modifying %s in place", path)
            write_document(path, result.output_text)
    except (OSError, Md2slError) as exc:
        logger.error("failed to process %s: %s", path, exc)
        return FileOutcome(path, error=str(exc))
    return FileOutcome(path, changed=result.changed)


def process_files(
    paths: Sequence[Path],
    config: ResolvedConfig,
    mode: Mode,
    jobs: Optional[int] = None,
) -> List[FileOutcome]:
    """Process files on a bounded thread pool; outcomes keep the input order."""
    workers = max(1, jobs or os.cpu_count() or 1)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(lambda path: process_file(path, config, mode), paths))
    logger.info(
        "processed %d files: %d changed, %d failed",
        len(outcomes),
        sum(outcome.changed for outcome in outcomes),
        sum(outcome.failed for outcome in outcomes),
    )
    return outcomes


def report_lines(outcomes: Iterable[FileOutcome], style: ReportStyle) -> List[str]:
    lines: List[str] = []
    for outcome in outcomes:
        if outcome.failed or style is ReportStyle.NONE:
            continue
        if style is ReportStyle.CHANGED:
            if outcome.changed:
                lines.append(str(outcome.path))
        else:
            lines.append(f"{'C' if outcome.changed else 'U'}:{outcome.path}")
    return lines


def exit_status(outcomes: Iterable[FileOutcome], mode: Mode) -> int:
    outcomes = list(outcomes)
    if any(outcome.failed for outcome in outcomes):
        return 1
    if mode.checks and any(outcome.changed for outcome in outcomes):
        return 1
    return 0
