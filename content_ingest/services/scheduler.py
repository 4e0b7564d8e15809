from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

from content_ingest.config.settings import Settings

MIN_WINDOW = timedelta(hours=1)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class PublishScheduler:
    """Spreads a batch evenly across today's publish window."""

    def __init__(
        self,
        start_hour: int = 9,
        end_hour: int = 23,
        now: Callable[[], datetime] = _local_now,
    ) -> None:
        self.start_hour = start_hour
        self.end_hour = end_hour
        self._now = now

    @classmethod
    def from_settings(cls, settings: Settings, now: Callable[[], datetime] = _local_now) -> "PublishScheduler":
        return cls(settings.publish_window_start, settings.publish_window_end, now=now)

    def window(self) -> tuple[datetime, datetime]:
        midnight = self._now().replace(hour=0, minute=0, second=0, microsecond=0)
        start = midnight + timedelta(hours=self.start_hour)
        end = midnight + timedelta(hours=self.end_hour)
        return start, start + max(end - start, MIN_WINDOW)

    def schedule(self, index: int, total: int) -> datetime:
        start, end = self.window()
        step = (end - start) / max(total, 1)
        return start + step * index
