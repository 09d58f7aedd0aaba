from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import DeletionError, FileInfoError
from .file_info import FileInfo
from .naming import FilenameGenerator, TimestampFilenameGenerator

log = logging.getLogger(__name__)


class RetentionEnforcer:
    """
    Deletes the oldest log files once a directory holds more than the limit.

    Only names recognised by ``naming`` are considered. The deletion set is
    fixed up front as the oldest ``count - limit`` files:

    - the active file is skipped if it falls in that set, which leaves the
      directory one file over the limit until a later pass
    - a file that cannot be removed is recorded in ``errors`` and skipped

    Newer files are never deleted to make up for a skipped one.
    """

    def __init__(self, naming: Optional[FilenameGenerator] = None):
        self.naming = naming or TimestampFilenameGenerator()
        self.errors: list[DeletionError] = []
        self.scan_error: Optional[OSError] = None

    def scan(self, directory: Path) -> list[FileInfo]:
        """Recognised log files in ``directory``, oldest first."""
        infos: list[FileInfo] = []
        for p in Path(directory).iterdir():
            if not self.naming.is_log_filename(p.name):
                continue
            try:
                infos.append(FileInfo.from_path(p))
            except FileInfoError:
                # Removed between listing and stat, or not a regular file.
                continue

        infos.sort(key=lambda fi: (fi.creation_date, fi.name))
        return infos

    def enforce(
        self,
        directory: Path,
        max_number_of_files: int,
        active: Optional[Path] = None,
        *,
        report: bool = True,
    ) -> int:
        """
        Returns the number of files deleted. With ``report=False`` nothing is
        logged; callers read ``errors`` / ``scan_error`` themselves.
        """
        self.errors = []
        self.scan_error = None

        if max_number_of_files <= 0:
            return 0

        try:
            infos = self.scan(directory)
        except OSError as exc:
            self.scan_error = exc
            if report:
                log.warning("Retention: cannot list %s: %s", directory, exc)
            return 0

        excess = len(infos) - max_number_of_files
        if excess <= 0:
            return 0

        active_path = Path(active).absolute() if active is not None else None
        deleted = 0

        for info in infos[:excess]:
            if info.path == active_path:
                continue
            try:
                info.path.unlink()
            except FileNotFoundError:
                # Removed concurrently; gone either way.
                continue
            except OSError as exc:
                err = DeletionError(f"Could not delete {info.path}: {exc}", info.path)
                err.__cause__ = exc
                self.errors.append(err)
                if report:
                    log.warning("Retention: %s", err)
                continue

            deleted += 1
            if report:
                log.debug("Retention: deleted %s (%d bytes)", info.path, info.size)

        if self.errors and report:
            log.warning(
                "Retention: %d file(s) could not be deleted in %s",
                len(self.errors),
                directory,
            )
        return deleted


def enforce_retention(
    log_dir: Path,
    keep: int,
    *,
    naming: Optional[FilenameGenerator] = None,
    active: Optional[Path] = None,
) -> int:
    return RetentionEnforcer(naming).enforce(Path(log_dir), keep, active=active)
