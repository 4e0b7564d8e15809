from __future__ import annotations

import os
import time
from pathlib import Path


class RunLockHeld(RuntimeError):
    pass


class RunLock:
    """
    File lock that keeps two ingest runs (e.g. overlapping cron jobs) apart.
    A lock older than ``timeout_seconds`` is treated as left behind by a
    crashed run and replaced.
    """

    def __init__(self, path: str | Path, timeout_seconds: int = 60 * 60):
        self.path = Path(path)
        self.timeout_seconds = timeout_seconds

    def _holder(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8").strip() or "?"
        except OSError:
            return "?"

    def __enter__(self) -> "RunLock":
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if self.path.exists():
            age = time.time() - self.path.stat().st_mtime
            if age < self.timeout_seconds:
                raise RunLockHeld(
                    f"ingest already running (pid {self._holder()}, lock {self.path}, age {int(age)}s)"
                )
            self.path.unlink(missing_ok=True)

        self.path.write_text(str(os.getpid()), encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.path.unlink(missing_ok=True)
