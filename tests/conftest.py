import logging

import pytest


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch):
    """
    Ensure tests don't leak env or logger state.
    """

    keys = [
        "ROLLINGLOG_DIR",
        "ROLLINGLOG_CREATE_DIR",
        "ROLLINGLOG_MAX_FILE_SIZE",
        "ROLLINGLOG_MAX_FILES",
        "ROLLINGLOG_FSYNC",
        "ROLLINGLOG_VERBOSE",
        "ROLLINGLOG_QUIET",
        "LOG_LEVEL",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    yield

    from rollinglog import logsetup

    logsetup.shutdown_logging()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.WARNING)
