from __future__ import annotations

from pathlib import Path
from typing import Optional


class Md2slError(Exception):
    """Base class for every error raised by md2sl."""


class ConfigError(Md2slError, ValueError):
    """The requested configuration cannot be used; nothing was formatted."""


class EncodingError(Md2slError):
    def __init__(self, path: Optional[Path], offset: int, reason: str) -> None:
        self.path = path
        self.offset = offset
        self.reason = reason
        where = str(path) if path is not None else "<stdin>"
        super().__init__(f"{where}: invalid UTF-8 at byte {offset}: {reason}")
