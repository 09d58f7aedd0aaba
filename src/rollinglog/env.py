from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# ------------------------------------------------------------
# Defaults
# ------------------------------------------------------------

DEFAULT_LOG_DIR = "logs"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_FILES = 10

_SIZE_RE = re.compile(r"^\s*(\d+)\s*([kmg]?)i?b?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3}


# ------------------------------------------------------------
# .env loading
# ------------------------------------------------------------


def load_env_file(path: Path | str) -> bool:
    """
    Load a .env file into os.environ.
    Existing variables always win; a missing file is not an error.
    """
    p = Path(path).expanduser()
    if not p.is_file():
        return False
    return load_dotenv(p, override=False)


# ------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except ValueError:
        return default


def parse_size(v: str | int, default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """
    Parse a byte size: ``1048576``, ``512K``, ``10M``, ``1GB``, ``4MiB``.
    Malformed input falls back to ``default``. ``0`` and negatives pass
    through (they disable size rolling).
    """
    if isinstance(v, int):
        return v

    s = str(v).strip()
    if s.startswith("-"):
        return _as_int(s, default)

    m = _SIZE_RE.match(s)
    if not m:
        return default
    return int(m.group(1)) * _SIZE_UNITS[m.group(2).lower()]


# ------------------------------------------------------------
# Logging environment
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_dir: Path
    create_dir: bool
    max_file_size: int
    max_files: int
    fsync: bool
    log_level: str
    verbose: bool
    quiet: bool

    def as_dict(self) -> dict:
        return {
            "log_dir": str(self.log_dir),
            "create_dir": self.create_dir,
            "max_file_size": self.max_file_size,
            "max_files": self.max_files,
            "fsync": self.fsync,
            "log_level": self.log_level,
            "verbose": self.verbose,
            "quiet": self.quiet,
        }


def get_logging_env(env_file: Optional[Path | str] = None) -> LoggingEnvironment:
    if env_file is not None:
        load_env_file(env_file)

    log_dir = (
        Path(os.environ.get("ROLLINGLOG_DIR", DEFAULT_LOG_DIR)).expanduser().absolute()
    )
    max_files = _as_int(
        os.environ.get("ROLLINGLOG_MAX_FILES", str(DEFAULT_MAX_FILES)),
        DEFAULT_MAX_FILES,
    )
    if max_files < 0:
        raise ConfigurationError(f"ROLLINGLOG_MAX_FILES must be >= 0, got {max_files}")

    return LoggingEnvironment(
        log_dir=log_dir,
        create_dir=_as_bool(os.environ.get("ROLLINGLOG_CREATE_DIR", "1")),
        max_file_size=parse_size(os.environ.get("ROLLINGLOG_MAX_FILE_SIZE", "10M")),
        max_files=max_files,
        fsync=_as_bool(os.environ.get("ROLLINGLOG_FSYNC", "0")),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        verbose=_as_bool(os.environ.get("ROLLINGLOG_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("ROLLINGLOG_QUIET", "0")),
    )
