import os
from pathlib import Path

from rollinglog import DeletionError, RetentionEnforcer, enforce_retention


def _make_logs(directory, count, start=1_000_000):
    paths = []
    for i in range(count):
        p = directory / f"{start + i}.log"
        p.write_text("x")
        os.utime(p, (start + i, start + i))
        paths.append(p)
    return paths


def _names(directory):
    return sorted(p.name for p in directory.iterdir())


def test_retention_prunes_old_logs(tmp_path):
    _make_logs(tmp_path, 5)

    deleted = enforce_retention(tmp_path, keep=2)

    assert deleted == 3
    assert _names(tmp_path) == ["1000003.log", "1000004.log"]


def test_retention_zero_keeps_everything(tmp_path):
    _make_logs(tmp_path, 5)

    assert enforce_retention(tmp_path, keep=0) == 0
    assert len(_names(tmp_path)) == 5


def test_retention_under_limit_is_noop(tmp_path):
    _make_logs(tmp_path, 3)

    assert enforce_retention(tmp_path, keep=3) == 0
    assert enforce_retention(tmp_path, keep=10) == 0
    assert len(_names(tmp_path)) == 3


def test_retention_is_idempotent(tmp_path):
    _make_logs(tmp_path, 6)
    enforcer = RetentionEnforcer()

    assert enforcer.enforce(tmp_path, 4) == 2
    assert enforcer.enforce(tmp_path, 4) == 0


def test_retention_orders_by_creation_time_not_name(tmp_path):
    a, b, c = _make_logs(tmp_path, 3)
    # Make the lexically last file the oldest.
    os.utime(c, (10, 10))

    enforce_retention(tmp_path, keep=2)

    assert not c.exists()
    assert a.exists() and b.exists()


def test_retention_breaks_time_ties_by_name(tmp_path):
    paths = _make_logs(tmp_path, 4)
    for p in paths:
        os.utime(p, (5_000, 5_000))

    enforce_retention(tmp_path, keep=1)

    assert _names(tmp_path) == [paths[-1].name]


def test_retention_ignores_unrelated_files(tmp_path):
    _make_logs(tmp_path, 3)
    (tmp_path / "notes.txt").write_text("keep me")
    (tmp_path / "app.log").write_text("not ours")
    (tmp_path / "1.log.gz").write_text("not ours")
    (tmp_path / "42.log").mkdir()
    for name in ("notes.txt", "app.log", "1.log.gz"):
        os.utime(tmp_path / name, (1, 1))

    enforce_retention(tmp_path, keep=1)

    names = _names(tmp_path)
    assert "notes.txt" in names
    assert "app.log" in names
    assert "1.log.gz" in names
    assert "42.log" in names
    assert "1000002.log" in names
    assert "1000000.log" not in names


def test_retention_never_deletes_active_file(tmp_path):
    paths = _make_logs(tmp_path, 4)
    active = paths[0]

    deleted = enforce_retention(tmp_path, keep=2, active=active)

    # The active file is spared without a newer file going in its place, so
    # the directory stays one over the limit.
    assert deleted == 1
    assert active.exists()
    assert _names(tmp_path) == [active.name, paths[2].name, paths[3].name]


def test_active_file_outside_deletion_set_changes_nothing(tmp_path):
    paths = _make_logs(tmp_path, 4)

    deleted = enforce_retention(tmp_path, keep=2, active=paths[-1])

    assert deleted == 2
    assert _names(tmp_path) == [paths[2].name, paths[3].name]


def test_survivors_are_newest(tmp_path):
    paths = _make_logs(tmp_path, 7)

    enforce_retention(tmp_path, keep=3)

    assert _names(tmp_path) == sorted(p.name for p in paths[-3:])


def test_deletion_failure_does_not_abort(tmp_path, monkeypatch):
    paths = _make_logs(tmp_path, 5)
    stuck = paths[0]

    real_unlink = Path.unlink

    def fake_unlink(self, missing_ok=False):
        if self == stuck:
            raise PermissionError("denied")
        return real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", fake_unlink)

    enforcer = RetentionEnforcer()
    deleted = enforcer.enforce(tmp_path, 2)

    assert deleted == 2
    assert stuck.exists()
    assert len(enforcer.errors) == 1
    assert isinstance(enforcer.errors[0], DeletionError)
    assert enforcer.errors[0].path == stuck
    # Retention could not be fully honoured; that is reported, not raised,
    # and the newest files are kept regardless.
    assert _names(tmp_path) == [stuck.name, paths[3].name, paths[4].name]


def test_undeletable_file_does_not_eat_newer_history(tmp_path, monkeypatch):
    paths = _make_logs(tmp_path, 3)
    stuck = paths[0]
    real_unlink = Path.unlink

    def fake_unlink(self, missing_ok=False):
        if self == stuck:
            raise PermissionError("denied")
        return real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", fake_unlink)
    enforcer = RetentionEnforcer()

    for _ in range(3):
        assert enforcer.enforce(tmp_path, 2) == 0
        assert len(enforcer.errors) == 1

    assert _names(tmp_path) == [p.name for p in paths]


def test_listing_failure_is_reported_not_raised(tmp_path, monkeypatch, caplog):
    _make_logs(tmp_path, 4)

    def fake_iterdir(self):
        raise PermissionError("listing denied")

    monkeypatch.setattr(Path, "iterdir", fake_iterdir)
    enforcer = RetentionEnforcer()

    with caplog.at_level("WARNING", logger="rollinglog.retention"):
        deleted = enforcer.enforce(tmp_path, 1)

    assert deleted == 0
    assert isinstance(enforcer.scan_error, PermissionError)
    assert "cannot list" in caplog.text


def test_deletion_failure_is_logged(tmp_path, monkeypatch, caplog):
    paths = _make_logs(tmp_path, 3)

    def fake_unlink(self, missing_ok=False):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "unlink", fake_unlink)

    with caplog.at_level("WARNING", logger="rollinglog.retention"):
        deleted = enforce_retention(tmp_path, keep=1)

    assert deleted == 0
    assert all(p.exists() for p in paths)
    assert "could not be deleted" in caplog.text


def test_scan_lists_oldest_first(tmp_path):
    paths = _make_logs(tmp_path, 3)
    os.utime(paths[1], (1, 1))

    infos = RetentionEnforcer().scan(tmp_path)

    assert [fi.path for fi in infos] == [paths[1], paths[0], paths[2]]
