from __future__ import annotations

import io
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from content_ingest.config.settings import Settings
from content_ingest.db.database import init_db
from content_ingest.db.repository import ArticleRepository
from content_ingest.models.schemas import Article, ArticleType
from content_ingest.services.scheduler import PublishScheduler

JST = timezone(timedelta(hours=9))
FIXED_NOW = datetime(2026, 10, 19, 7, 30, tzinfo=JST)


class FakeRaw:
    def __init__(self, content: bytes):
        self._stream = io.BytesIO(content)

    def read1(self, amt: int = -1, decode_content: bool | None = None) -> bytes:
        return self._stream.read1(amt)


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, content: bytes = b"", reason: str = "OK"):
        self.status_code = status_code
        self._json = json_data
        self._content = content
        self.reason = reason
        self.closed = False

    @property
    def raw(self) -> FakeRaw:
        # a fresh reader per access, so one queued response can serve repeated calls
        return FakeRaw(self._content)

    @property
    def content(self) -> bytes:
        return self._content

    @property
    def text(self) -> str:
        return self._content.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            raise ValueError("no json body")
        return self._json

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; queued items are returned or raised in order."""

    def __init__(self, *queue):
        self.queue = list(queue)
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.queue.pop(0) if len(self.queue) > 1 else self.queue[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        fetch_backoff_ms=0,
        catalog_api_id="api-id",
        catalog_affiliate_id="aff-id",
        topic_seed="2026-10-19",
        ranking_seed="2026-10-19",
        summary_weekly_key="2026-10-19",
        summary_monthly_key="2026-10",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine) -> ArticleRepository:
    return ArticleRepository(engine)


@pytest.fixture
def scheduler() -> PublishScheduler:
    return PublishScheduler(9, 23, now=lambda: FIXED_NOW)


def make_work(
    slug: str,
    title: str = "A title",
    body: str = "",
    entities: list[str] | None = None,
    published_at: datetime | None = None,
    summary: str = "",
) -> Article:
    now = published_at or datetime(2026, 10, 1, tzinfo=timezone.utc)
    return Article(
        id=str(uuid.uuid4()),
        type=ArticleType.WORK,
        slug=slug,
        title=title,
        summary=summary or title,
        body=body,
        source_url=f"https://catalog.example.com/{slug}",
        related_entities=entities or [],
        published_at=now,
        fetched_at=now,
    )


def make_topic(slug: str, title: str = "Topic", source_url: str = "internal:topic:x", published_at: datetime | None = None) -> Article:
    now = published_at or datetime(2026, 10, 1, tzinfo=timezone.utc)
    return Article(
        id=str(uuid.uuid4()),
        type=ArticleType.TOPIC,
        slug=slug,
        title=title,
        summary=title,
        body="",
        source_url=source_url,
        published_at=now,
        fetched_at=now,
    )
