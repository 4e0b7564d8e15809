from __future__ import annotations

from datetime import datetime, timezone

from content_ingest.db.repository import ArticleRepository
from content_ingest.models.schemas import Article, ArticleType, RawSummary

RANKING_SOURCE_PREFIX = "internal:ranking:"


def build_summary_body(works: list[Article], topics: list[Article]) -> str:
    work_lines = [f"{i}. {w.title} ({w.slug})" for i, w in enumerate(works[:10], start=1)]
    picked = [t for t in topics if not t.source_url.startswith(RANKING_SOURCE_PREFIX)][:10]
    topic_lines = [f"{i}. {t.title}" for i, t in enumerate(picked, start=1)]
    return "\n".join(["Title picks:", *work_lines, "", "Topics to watch:", *topic_lines])


def fetch_summaries(
    repo: ArticleRepository,
    weekly_key: str,
    monthly_key: str,
    now: datetime | None = None,
) -> list[RawSummary]:
    """Exactly two records: the weekly and the monthly roundup."""
    fetched_at = now or datetime.now(timezone.utc)

    works = repo.get_latest_by_type(ArticleType.WORK, 20)
    topics = repo.get_latest_by_type(ArticleType.TOPIC, 20)
    recent = repo.get_latest_articles(60)

    body = build_summary_body(works, topics)

    return [
        RawSummary(
            summary_id=f"{weekly_key}-weekly",
            title=f"Weekly roundup {weekly_key}",
            summary=f"Highlights and topics picked from the latest {len(recent)} articles.",
            body=body,
            source_url=f"internal:summary:weekly:{weekly_key}",
            fetched_at=fetched_at,
        ),
        RawSummary(
            summary_id=f"{monthly_key}-monthly",
            title=f"Monthly roundup {monthly_key}",
            summary="A short overview of this month's main topics and titles.",
            body=body,
            source_url=f"internal:summary:monthly:{monthly_key}",
            fetched_at=fetched_at,
        ),
    ]
