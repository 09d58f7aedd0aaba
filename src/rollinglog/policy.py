from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol


@dataclass(frozen=True)
class WriterStatus:
    """Read-only view of the writer handed to roll policies."""

    path: Optional[Path]
    size: int
    max_file_size: int
    opened_at: float


class RollPolicy(Protocol):
    """
    Decides whether to roll before the next record is written.

    Called exactly once per append, inside the writer lock. Implementations
    must be pure and must not touch the filesystem.
    """

    def should_roll(self, status: WriterStatus, incoming: int) -> bool: ...


class SizeRollPolicy:
    """
    Roll when the pending record would push a non-empty file past the limit.

    An empty file always accepts the record, so a single oversized record
    lands whole in one file and the following append rolls.
    """

    def should_roll(self, status: WriterStatus, incoming: int) -> bool:
        if status.max_file_size <= 0 or status.size <= 0:
            return False
        if status.size >= status.max_file_size:
            return True
        return status.size + incoming > status.max_file_size


class DailyRollPolicy:
    """Roll at local midnight, and on size when a size policy is wrapped."""

    def __init__(self, size_policy: Optional[RollPolicy] = None):
        self.size_policy = size_policy

    def _today(self):
        return datetime.now().date()

    def should_roll(self, status: WriterStatus, incoming: int) -> bool:
        if status.path is not None and status.size > 0:
            if datetime.fromtimestamp(status.opened_at).date() != self._today():
                return True
        if self.size_policy is not None:
            return self.size_policy.should_roll(status, incoming)
        return False
