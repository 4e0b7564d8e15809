import os
import time

import pytest

from content_ingest.tools.lock import RunLock, RunLockHeld


def test_lock_is_released(tmp_path) -> None:
    path = tmp_path / "run" / "ingest.lock"

    with RunLock(path):
        assert path.read_text() == str(os.getpid())

    assert not path.exists()


def test_second_run_is_refused(tmp_path) -> None:
    path = tmp_path / "ingest.lock"

    with RunLock(path):
        with pytest.raises(RunLockHeld, match="already running"):
            with RunLock(path):
                pass


def test_stale_lock_is_replaced(tmp_path) -> None:
    path = tmp_path / "ingest.lock"
    path.write_text("12345")
    old = time.time() - 7200
    os.utime(path, (old, old))

    with RunLock(path, timeout_seconds=3600):
        assert path.read_text() == str(os.getpid())
