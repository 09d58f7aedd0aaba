from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import ConfigurationError, FileInfoError, LogIOError
from .file_info import FileInfo
from .naming import FilenameGenerator, TimestampFilenameGenerator
from .policy import RollPolicy, SizeRollPolicy, WriterStatus
from .retention import RetentionEnforcer

log = logging.getLogger(__name__)


class RollingFileWriter:
    """
    Append-only log sink that rolls to a new file and prunes old ones.

    - Every append is written and flushed before it returns (no buffering).
    - The roll decision is taken before the write, so a record always lands
      whole in exactly one file.
    - A new file is always started at construction; files left by a previous
      process are never appended to.
    - Retention runs synchronously after every roll, inside the same lock.
    - Diagnostics are logged only after the lock is released, so handlers
      attached to this package never run while it is held.

    Naming and roll decisions are pluggable (``naming`` / ``policy``).
    """

    def __init__(
        self,
        directory_path: Path | str,
        create: bool = False,
        *,
        max_file_size: int = 0,
        max_number_of_files: int = 0,
        naming: Optional[FilenameGenerator] = None,
        policy: Optional[RollPolicy] = None,
        enforcer: Optional[RetentionEnforcer] = None,
        fsync: bool = False,
    ):
        directory = Path(directory_path).expanduser().absolute()

        if not directory.exists():
            if not create:
                raise ConfigurationError(f"Log directory does not exist: {directory}")
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ConfigurationError(
                    f"Cannot create log directory {directory}: {exc}"
                ) from exc
        elif not directory.is_dir():
            raise ConfigurationError(f"Log path is not a directory: {directory}")

        if max_number_of_files < 0:
            raise ConfigurationError(
                f"max_number_of_files must be >= 0, got {max_number_of_files}"
            )

        self._directory = directory
        self._max_file_size = int(max_file_size)
        self._max_number_of_files = int(max_number_of_files)

        self.naming: FilenameGenerator = naming or TimestampFilenameGenerator()
        self.policy: RollPolicy = policy or SizeRollPolicy()
        self.enforcer = enforcer or RetentionEnforcer(self.naming)
        self.fsync = fsync

        self._lock = threading.RLock()
        self._file: Optional[BinaryIO] = None
        self._current_path: Optional[Path] = None
        self._current_size = 0
        self._opened_at = 0.0
        self._closed = False

        self.last_error: Optional[LogIOError] = None
        self._notes: list[tuple[int, str, tuple]] = []

        with self._lock:
            opened = self._roll()
        self._flush_notes()

        if not opened:
            raise ConfigurationError(
                f"Cannot open initial log file in {directory}: {self.last_error}"
            ) from self.last_error

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def directory_path(self) -> Path:
        return self._directory

    @property
    def max_file_size(self) -> int:
        return self._max_file_size

    @max_file_size.setter
    def max_file_size(self, value: int) -> None:
        with self._lock:
            self._max_file_size = int(value)

    @property
    def max_number_of_files(self) -> int:
        return self._max_number_of_files

    @max_number_of_files.setter
    def max_number_of_files(self, value: int) -> None:
        if value < 0:
            raise ConfigurationError(f"max_number_of_files must be >= 0, got {value}")
        with self._lock:
            self._max_number_of_files = int(value)

    @property
    def current_file_path(self) -> Optional[Path]:
        return self._current_path

    @property
    def current_file_size(self) -> int:
        return self._current_size

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Strategy passthrough
    # ------------------------------------------------------------------

    def status(self) -> WriterStatus:
        return WriterStatus(
            path=self._current_path,
            size=self._current_size,
            max_file_size=self._max_file_size,
            opened_at=self._opened_at,
        )

    def should_roll(self, incoming: int = 0) -> bool:
        with self._lock:
            return self.policy.should_roll(self.status(), incoming)

    def generate_next_log_filename(self) -> str:
        return self.naming.next_filename()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def append(self, record: bytes) -> bool:
        """
        Write one record. Returns False when the file could not be opened or
        written; the error is kept on ``last_error`` and the writer stays
        usable for later calls.
        """
        if isinstance(record, str):
            raise TypeError("append() takes bytes, not str")
        data = bytes(record)

        with self._lock:
            must_roll = self.policy.should_roll(self.status(), len(data))
            if must_roll or self._file is None:
                ok = self._roll() and self._write(data)
            else:
                ok = self._write(data)
        self._flush_notes()
        return ok

    def roll(self) -> bool:
        """Close the active file and start a new one now."""
        with self._lock:
            ok = self._roll()
        self._flush_notes()
        return ok

    def _write(self, data: bytes) -> bool:
        f = self._file
        if f is None:
            self._fail(f"No open log file in {self._directory}", None)
            return False

        try:
            f.write(data)
            f.flush()
            if self.fsync:
                os.fsync(f.fileno())
        except OSError as exc:
            self._fail(f"Write to {self._current_path} failed: {exc}", exc)
            # The handle may hold a partial write; resync the counter and
            # force the next append onto a fresh file.
            self._resync_size()
            self._close_file()
            return False

        self._current_size += len(data)
        self.last_error = None
        return True

    def _roll(self) -> bool:
        self._close_file()

        try:
            name = self.naming.next_filename()
            path = self._resolve(name)
            f = open(path, "xb")
        except (OSError, ValueError) as exc:
            self._fail(f"Cannot open new log file in {self._directory}: {exc}", exc)
            return False

        self._file = f
        self._current_path = path
        self._current_size = 0
        self._opened_at = time.time()
        self._closed = False
        self._note(logging.DEBUG, "Rolled to %s", path)

        if self._max_number_of_files > 0:
            self._enforce(path)
        return True

    def _enforce(self, active: Path) -> None:
        enforcer = self.enforcer
        deleted = enforcer.enforce(
            self._directory, self._max_number_of_files, active=active, report=False
        )
        if deleted:
            self._note(logging.DEBUG, "Retention: deleted %d file(s)", deleted)
        if enforcer.scan_error is not None:
            self._note(
                logging.WARNING,
                "Retention: cannot list %s: %s",
                self._directory,
                enforcer.scan_error,
            )
        for err in enforcer.errors:
            self._note(logging.WARNING, "Retention: %s", err)

    def _resolve(self, name: str) -> Path:
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ValueError(f"Invalid log filename: {name!r}")
        return self._directory / name

    def _resync_size(self) -> None:
        if self._current_path is None:
            return
        try:
            self._current_size = FileInfo.from_path(self._current_path).size
        except FileInfoError:
            self._current_size = 0

    def _fail(self, message: str, exc: Optional[Exception]) -> None:
        err = LogIOError(message, self._current_path)
        err.__cause__ = exc
        self.last_error = err
        self._note(logging.ERROR, "%s", message)

    def _note(self, level: int, msg: str, *args) -> None:
        self._notes.append((level, msg, args))

    def _flush_notes(self) -> None:
        with self._lock:
            notes, self._notes = self._notes, []
        for level, msg, args in notes:
            log.log(level, msg, *args)

    def _close_file(self) -> None:
        f = self._file
        self._file = None
        if f is None:
            return
        try:
            f.close()
        except OSError as exc:
            self._note(
                logging.WARNING, "Closing %s failed: %s", self._current_path, exc
            )

    # ------------------------------------------------------------------
    # Teardown / inspection
    # ------------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._close_file()
            self._closed = True
        self._flush_notes()

    def __enter__(self) -> "RollingFileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def log_files(self) -> list[FileInfo]:
        """Recognised log files in the directory, oldest first."""
        with self._lock:
            return self.enforcer.scan(self._directory)

    def __repr__(self) -> str:
        return (
            f"RollingFileWriter(directory_path={str(self._directory)!r}, "
            f"max_file_size={self._max_file_size}, "
            f"max_number_of_files={self._max_number_of_files})"
        )
