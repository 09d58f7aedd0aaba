"""
Rolling file log sink.

Writes log records straight to disk, rolls to a new file once the active one
would grow past a size limit, and keeps only the newest N files.
"""
from __future__ import annotations

from .errors import (
    ConfigurationError,
    DeletionError,
    FileInfoError,
    LogIOError,
    RollingLogError,
)
from .file_info import FileInfo
from .handler import RollingFileHandler
from .logsetup import get_logger, init_logging, shutdown_logging
from .naming import FilenameGenerator, TimestampFilenameGenerator
from .policy import DailyRollPolicy, RollPolicy, SizeRollPolicy, WriterStatus
from .retention import RetentionEnforcer, enforce_retention
from .writer import RollingFileWriter

__all__ = [
    "ConfigurationError",
    "DailyRollPolicy",
    "DeletionError",
    "FileInfo",
    "FileInfoError",
    "FilenameGenerator",
    "LogIOError",
    "RetentionEnforcer",
    "RollPolicy",
    "RollingFileHandler",
    "RollingFileWriter",
    "RollingLogError",
    "SizeRollPolicy",
    "TimestampFilenameGenerator",
    "WriterStatus",
    "enforce_retention",
    "get_logger",
    "init_logging",
    "shutdown_logging",
]
