from __future__ import annotations

import re
import threading
import time
from typing import Protocol


class FilenameGenerator(Protocol):
    """
    Naming strategy shared by the writer and the retention pass.

    - next_filename() returns a bare file name (no directory part)
    - is_log_filename() recognises names this strategy produces, which is
      what makes a file a retention candidate
    """

    def next_filename(self) -> str: ...

    def is_log_filename(self, name: str) -> bool: ...


class TimestampFilenameGenerator:
    """
    Default naming: seconds since the epoch with microsecond precision.

        1760734932.004512.log

    Every generated name is strictly greater than the previous one from the
    same generator, so two rolls inside one clock tick still get distinct,
    correctly ordered names.
    """

    def __init__(self, extension: str = ".log"):
        if not extension.startswith("."):
            extension = "." + extension
        if "/" in extension or "\\" in extension:
            raise ValueError(f"Invalid log extension: {extension!r}")

        self.extension = extension
        self._pattern = re.compile(r"^\d+(\.\d{1,6})?" + re.escape(extension) + r"$")
        self._last_us = 0
        self._lock = threading.Lock()

    def _now_us(self) -> int:
        return time.time_ns() // 1000

    def next_filename(self) -> str:
        with self._lock:
            us = max(self._now_us(), self._last_us + 1)
            self._last_us = us

        secs, frac = divmod(us, 1_000_000)
        return f"{secs}.{frac:06d}{self.extension}"

    def is_log_filename(self, name: str) -> bool:
        return bool(self._pattern.match(name))
