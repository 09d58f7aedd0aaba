from __future__ import annotations

import stat
from dataclasses import dataclass, field
from pathlib import Path

from .errors import FileInfoError


@dataclass(frozen=True)
class FileInfo:
    """
    Snapshot of one log file taken from a single stat() call.

    Used for ordering during retention without touching the filesystem
    again. Two snapshots of the same path compare equal.
    """

    path: Path
    creation_date: float = field(compare=False)
    size: int = field(compare=False)

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path: Path | str) -> "FileInfo":
        p = Path(path).absolute()
        try:
            st = p.stat()
        except FileNotFoundError as exc:
            raise FileInfoError(f"No such file: {p}") from exc
        except OSError as exc:
            raise FileInfoError(f"Cannot stat {p}: {exc}") from exc

        if not stat.S_ISREG(st.st_mode):
            raise FileInfoError(f"Not a regular file: {p}")

        # Linux does not expose birth time through os.stat; mtime is the
        # closest stable stand-in for files that are only ever appended to.
        created = getattr(st, "st_birthtime", None)
        if created is None:
            created = st.st_mtime

        return cls(path=p, creation_date=float(created), size=int(st.st_size))
