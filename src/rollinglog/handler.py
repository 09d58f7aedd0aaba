from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from .errors import LogIOError
from .writer import RollingFileWriter

DEFAULT_FORMAT = "%(asctime)s | [%(levelname)s] | %(name)s | %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class RollingFileHandler(logging.Handler):
    """
    logging.Handler that appends formatted records through a RollingFileWriter.

    Severity filtering and formatting stay with the logging framework; the
    writer only sees encoded bytes.
    """

    terminator = "\n"

    def __init__(
        self,
        directory_path: Path | str,
        create: bool = True,
        *,
        max_file_size: int = 0,
        max_number_of_files: int = 0,
        encoding: str = "utf-8",
        fsync: bool = False,
        level: int = logging.NOTSET,
        writer: Optional[RollingFileWriter] = None,
    ):
        super().__init__(level)
        self.encoding = encoding
        self.writer = writer or RollingFileWriter(
            directory_path,
            create,
            max_file_size=max_file_size,
            max_number_of_files=max_number_of_files,
            fsync=fsync,
        )
        self._local = threading.local()
        self.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))

    @classmethod
    def from_writer(
        cls, writer: RollingFileWriter, encoding: str = "utf-8"
    ) -> "RollingFileHandler":
        return cls(writer.directory_path, writer=writer, encoding=encoding)

    @property
    def directory_path(self) -> Path:
        return self.writer.directory_path

    @property
    def current_file_path(self) -> Optional[Path]:
        return self.writer.current_file_path

    def emit(self, record: logging.LogRecord) -> None:
        # The writer logs its own failures; if those records route back here
        # while an append is in progress, drop them instead of recursing.
        if getattr(self._local, "busy", False):
            return

        self._local.busy = True
        try:
            msg = self.format(record) + self.terminator
            ok = self.writer.append(msg.encode(self.encoding, errors="replace"))
        except Exception:
            self.handleError(record)
            return
        finally:
            self._local.busy = False

        if not ok:
            # handleError reports the exception currently being handled.
            try:
                raise self.writer.last_error or LogIOError("append failed")
            except LogIOError:
                self.handleError(record)

    def close(self) -> None:
        self.acquire()
        try:
            self.writer.close()
        finally:
            self.release()
        super().close()
