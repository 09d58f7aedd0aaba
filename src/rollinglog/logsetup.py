from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .console import ConsoleGateFilter, build_console_handler
from .env import LoggingEnvironment, get_logging_env
from .handler import RollingFileHandler
from .writer import RollingFileWriter

# ---------------------------------------------------------------------
# State
# ---------------------------------------------------------------------

INITIALIZED: bool = False
LOG_DIR: Optional[Path] = None
FILE_HANDLER: Optional[RollingFileHandler] = None
CONSOLE_HANDLER: Optional[logging.Handler] = None


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _build_writer(env: LoggingEnvironment, log_dir: Path) -> RollingFileWriter:
    return RollingFileWriter(
        log_dir,
        env.create_dir,
        max_file_size=env.max_file_size,
        max_number_of_files=env.max_files,
        fsync=env.fsync,
    )


def repoint_file_handler(handler: RollingFileHandler, writer: RollingFileWriter) -> None:
    """Swap the writer behind an attached handler without detaching it."""
    handler.acquire()
    try:
        old = handler.writer
        handler.writer = writer
        old.close()
    finally:
        handler.release()


def _update_console_handler(handler: logging.Handler, level: int, quiet: bool) -> None:
    handler.setLevel(level)
    for f in handler.filters:
        if isinstance(f, ConsoleGateFilter):
            f.quiet = quiet


def init_logging(
    directory: Optional[Path | str] = None,
    *,
    env: Optional[LoggingEnvironment] = None,
    console: bool = True,
) -> RollingFileHandler:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Safe to call multiple times; the file handler is repointed, not stacked,
      and limits, fsync, console level and quiet mode follow the latest call.
    - ``directory`` overrides ROLLINGLOG_DIR.
    """
    global INITIALIZED, LOG_DIR, FILE_HANDLER, CONSOLE_HANDLER

    env = env or get_logging_env()
    log_dir = Path(directory).expanduser().absolute() if directory else env.log_dir

    root = logging.getLogger()
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)
    root.setLevel(root_level)

    if INITIALIZED and FILE_HANDLER is not None:
        if LOG_DIR == log_dir:
            writer = FILE_HANDLER.writer
            writer.max_file_size = env.max_file_size
            writer.max_number_of_files = env.max_files
            writer.fsync = env.fsync
        else:
            repoint_file_handler(FILE_HANDLER, _build_writer(env, log_dir))
            LOG_DIR = log_dir
        if CONSOLE_HANDLER is not None:
            _update_console_handler(CONSOLE_HANDLER, root_level, env.quiet)
        return FILE_HANDLER

    FILE_HANDLER = RollingFileHandler(
        log_dir, writer=_build_writer(env, log_dir), level=logging.NOTSET
    )
    root.addHandler(FILE_HANDLER)

    if console:
        CONSOLE_HANDLER = build_console_handler(root_level, quiet=env.quiet)
        root.addHandler(CONSOLE_HANDLER)

    INITIALIZED = True
    LOG_DIR = log_dir
    return FILE_HANDLER


def shutdown_logging() -> None:
    """Detach and close the handlers installed by init_logging()."""
    global INITIALIZED, LOG_DIR, FILE_HANDLER, CONSOLE_HANDLER

    root = logging.getLogger()
    for h in (FILE_HANDLER, CONSOLE_HANDLER):
        if h is None:
            continue
        root.removeHandler(h)
        h.close()

    INITIALIZED = False
    LOG_DIR = None
    FILE_HANDLER = None
    CONSOLE_HANDLER = None
