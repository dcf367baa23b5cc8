"""Formatting pipeline and batch helpers."""

from .batch import FileOutcome, Mode, ReportStyle, discover_files, exit_status, process_file, process_files, report_lines
from .core import (
    DocumentFormatter,
    TextPass,
    decode_document,
    format_document,
    read_document,
    run_pipeline,
    write_document,
)

__all__ = [
    "DocumentFormatter",
    "FileOutcome",
    "Mode",
    "ReportStyle",
    "TextPass",
    "decode_document",
    "discover_files",
    "exit_status",
    "format_document",
    "process_file",
    "process_files",
    "read_document",
    "report_lines",
    "run_pipeline",
    "write_document",
]
