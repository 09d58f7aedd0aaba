from __future__ import annotations

from pathlib import Path
from typing import Optional


class RollingLogError(Exception):
    """Base error for the rolling file sink."""


class ConfigurationError(RollingLogError):
    """The writer cannot be configured (missing directory, bad limits)."""


class LogIOError(RollingLogError):
    """Opening or writing a log file failed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class DeletionError(RollingLogError):
    """A retention candidate could not be removed."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class FileInfoError(RollingLogError):
    """Path does not exist or is not a regular file."""
