"""
The five source branches.

Each branch is fetch -> (per record: schedule -> normalize -> link -> upsert)
and returns a small stats dict. Records are processed strictly in emission
order so every link lookup sees what the previous record persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Sequence

import requests
from dateutil import parser as dateparser

from content_ingest.config.settings import Settings
from content_ingest.db.repository import ArticleRepository
from content_ingest.models.schemas import Article, RawFeedItem
from content_ingest.services.catalog_fetch import fetch_catalog_works
from content_ingest.services.feed_fetch import fetch_feed_topics
from content_ingest.services.linking import link_topic, link_work
from content_ingest.services.normalize import (
    normalize_feed_topic,
    normalize_ranking,
    normalize_summary,
    normalize_topic,
    normalize_work,
)
from content_ingest.services.ranking_generator import fetch_rankings
from content_ingest.services.scheduler import PublishScheduler
from content_ingest.services.summary_generator import fetch_summaries
from content_ingest.services.topic_generator import fetch_daily_topics


@dataclass
class IngestContext:
    settings: Settings
    repo: ArticleRepository
    scheduler: PublishScheduler
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("content_ingest.run"))
    http: requests.Session | None = None


@dataclass(frozen=True)
class Branch:
    name: str
    run: Callable[[], dict]


def _ingest_topical(
    ctx: IngestContext,
    label: str,
    raws: Sequence,
    normalize: Callable[..., Article],
    published_at_for: Callable[[int, object], datetime] | None = None,
) -> dict:
    total = len(raws)
    upserted = 0
    for index, raw in enumerate(raws):
        published_at = (
            published_at_for(index, raw) if published_at_for else ctx.scheduler.schedule(index, total)
        )
        article = normalize(raw, published_at, ctx.settings.summary_max_length)
        link_topic(article, ctx.repo)
        result = ctx.repo.upsert_article(article)
        ctx.logger.info("%s %s: %s", label, article.slug, result.status)
        upserted += 1
    return {"upserted": upserted, "fetched": total}


def ingest_works(ctx: IngestContext) -> dict:
    raws = fetch_catalog_works(ctx.settings, session=ctx.http)
    total = len(raws)

    upserted = 0
    skipped = 0
    for index, raw in enumerate(raws):
        article = normalize_work(raw, ctx.scheduler.schedule(index, total), ctx.settings.summary_max_length)
        if article is None:
            skipped += 1
            continue
        link_work(article, ctx.repo)
        result = ctx.repo.upsert_article(article)
        ctx.logger.info("Catalog work %s: %s", article.slug, result.status)
        upserted += 1

    return {"upserted": upserted, "skipped": skipped, "fetched": total}


def ingest_daily_topics(ctx: IngestContext) -> dict:
    s = ctx.settings
    raws = fetch_daily_topics(s.topic_daily_count, s.resolved_topic_seed())
    return _ingest_topical(ctx, "Topic", raws, normalize_topic)


def ingest_rankings(ctx: IngestContext) -> dict:
    raws = fetch_rankings(ctx.repo, ctx.settings.resolved_ranking_seed())
    return _ingest_topical(ctx, "Ranking", raws, normalize_ranking)


def ingest_summaries(ctx: IngestContext) -> dict:
    weekly_key, monthly_key = ctx.settings.resolved_summary_keys()
    raws = fetch_summaries(ctx.repo, weekly_key, monthly_key)
    return _ingest_topical(ctx, "Summary", raws, normalize_summary)


def feed_published_at(raw: RawFeedItem) -> datetime | None:
    """The entry's own timestamp, when it has a readable one."""
    if not raw.published_at:
        return None
    try:
        parsed = dateparser.parse(raw.published_at)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def ingest_feed_topics(ctx: IngestContext) -> dict:
    raws = fetch_feed_topics(ctx.settings, session=ctx.http)
    total = len(raws)

    def published_at_for(index: int, raw: RawFeedItem) -> datetime:
        return feed_published_at(raw) or ctx.scheduler.schedule(index, total)

    return _ingest_topical(ctx, "RSS", raws, normalize_feed_topic, published_at_for)


def build_branches(ctx: IngestContext) -> list[Branch]:
    return [
        Branch("summaries", lambda: ingest_summaries(ctx)),
        Branch("topics", lambda: ingest_daily_topics(ctx)),
        Branch("rankings", lambda: ingest_rankings(ctx)),
        Branch("rss", lambda: ingest_feed_topics(ctx)),
        Branch("catalog", lambda: ingest_works(ctx)),
    ]
