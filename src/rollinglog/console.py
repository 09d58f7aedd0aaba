from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

# stderr so log output never mixes with a program's own stdout
CONSOLE = Console(file=sys.stderr, soft_wrap=True)


class ConsoleGateFilter(logging.Filter):
    """
    Gate console output.

    Quiet mode drops everything below ERROR. Records explicitly marked with
    ``extra={"passthrough": True}`` are always shown.
    """

    def __init__(self, quiet: bool = False):
        super().__init__()
        self.quiet = quiet

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "passthrough", False):
            return True
        if self.quiet:
            return record.levelno >= logging.ERROR
        return True


def build_console_handler(
    level: int = logging.NOTSET, *, quiet: bool = False, console: Console | None = None
) -> logging.Handler:
    handler = RichHandler(
        console=console or CONSOLE,
        level=level,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )

    # RichHandler renders the level column itself; keep it out of the format.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter(quiet=quiet))
    return handler


def log_passthrough(level: int, msg: str) -> None:
    logging.getLogger().log(level, msg, extra={"passthrough": True})
