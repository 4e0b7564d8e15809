"""
Raw record -> canonical Article, one function per source.

All normalizers are pure apart from the fresh uuid. Slugs depend only on the
source identity so that re-ingesting the same record updates it in place.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from content_ingest.errors import MalformedSourceRecord
from content_ingest.models.schemas import (
    Article,
    ArticleType,
    ImageRef,
    RawFeedItem,
    RawRanking,
    RawSummary,
    RawTopic,
    RawWork,
)
from content_ingest.services.text import join_slug, limit_text, slugify

logger = logging.getLogger(__name__)

SUMMARY_MAX_LENGTH = 140
WORK_TITLE_SLUG_LENGTH = 60
MAX_WORK_ENTITIES = 6
MAX_SAMPLE_IMAGES = 10


def _date_prefix(source_id: str) -> str:
    # "2026-10-19-ranking" -> "2026-10-19"
    return "-".join(source_id.split("-")[:3])


def _topic_article(raw, slug: str, published_at: datetime, max_len: int) -> Article:
    return Article(
        id=str(uuid.uuid4()),
        type=ArticleType.TOPIC,
        slug=slug,
        title=raw.title,
        summary=limit_text(raw.summary, max_len),
        body=raw.body,
        source_url=raw.source_url,
        published_at=published_at,
        fetched_at=raw.fetched_at,
    )


def normalize_topic(raw: RawTopic, published_at: datetime, max_len: int = SUMMARY_MAX_LENGTH) -> Article:
    # topic_id already carries the date and the position in the day's batch
    slug = join_slug(slugify(raw.topic_id), slugify(raw.title))
    return _topic_article(raw, slug, published_at, max_len)


def normalize_ranking(raw: RawRanking, published_at: datetime, max_len: int = SUMMARY_MAX_LENGTH) -> Article:
    slug = join_slug(_date_prefix(raw.ranking_id), slugify(raw.title))
    return _topic_article(raw, slug, published_at, max_len)


def normalize_summary(raw: RawSummary, published_at: datetime, max_len: int = SUMMARY_MAX_LENGTH) -> Article:
    return _topic_article(raw, slugify(raw.title), published_at, max_len)


def normalize_feed_topic(raw: RawFeedItem, published_at: datetime, max_len: int = SUMMARY_MAX_LENGTH) -> Article:
    summary = limit_text(raw.summary or raw.title, max_len)
    return Article(
        id=str(uuid.uuid4()),
        type=ArticleType.TOPIC,
        slug=join_slug(published_at.astimezone(timezone.utc).date().isoformat(), slugify(raw.title)),
        title=raw.title,
        summary=summary,
        body=f"From an external feed:\n{summary}\n\nSource: {raw.link}",
        source_url=raw.link,
        published_at=published_at,
        fetched_at=raw.fetched_at,
    )


def entity_slug(name: str, ref_id: Any = None) -> str:
    return slugify(name) or (f"entity-{ref_id}" if ref_id is not None else "")


def _work_body(work: RawWork) -> str:
    info = work.item_info
    lines: list[str] = []
    if work.description:
        lines += [work.description.strip(), ""]
    if work.release_date:
        lines.append(f"Release date: {work.release_date}")
    if info.maker:
        lines.append("Maker: " + ", ".join(m.name for m in info.maker))
    if info.genre:
        lines.append("Genre: " + ", ".join(g.name for g in info.genre))
    if info.performer:
        lines.append("Performers: " + ", ".join(p.name for p in info.performer))
    return "\n".join(lines).strip()


def parse_raw_work(raw: dict[str, Any]) -> RawWork:
    try:
        return RawWork.model_validate(raw)
    except ValidationError as exc:
        raise MalformedSourceRecord(f"catalog item {raw.get('content_id')!r}: {exc.error_count()} error(s)") from exc


def normalize_work(raw: dict[str, Any], published_at: datetime, max_len: int = SUMMARY_MAX_LENGTH) -> Article | None:
    """
    Catalog items come from an uncontrolled feed: a malformed one is logged
    and returns None instead of raising.
    """
    try:
        work = parse_raw_work(raw)
    except MalformedSourceRecord as exc:
        logger.warning("skipping malformed catalog item: %s", exc)
        return None

    title_slug = slugify(work.title)[:WORK_TITLE_SLUG_LENGTH].rstrip("-")
    slug = join_slug(slugify(work.content_id), title_slug)
    if not slug:
        logger.warning("skipping catalog item with empty slug: %r", work.content_id)
        return None

    images: list[ImageRef] = []
    cover = work.image_urls.large or work.image_urls.small
    if cover:
        images.append(ImageRef(url=cover, alt=work.title))
    images += [
        ImageRef(url=url, alt=f"{work.title} sample {i}")
        for i, url in enumerate(work.sample_images[:MAX_SAMPLE_IMAGES], start=1)
    ]

    entities = [entity_slug(p.name, p.id) for p in work.item_info.performer]
    entities = [e for e in dict.fromkeys(entities) if e][:MAX_WORK_ENTITIES]

    return Article(
        id=str(uuid.uuid4()),
        type=ArticleType.WORK,
        slug=slug,
        title=work.title,
        summary=limit_text((work.description or work.title).strip(), max_len),
        body=_work_body(work),
        images=images,
        source_url=work.url,
        affiliate_url=work.affiliate_url,
        related_entities=entities,
        published_at=published_at,
        fetched_at=work.fetched_at,
    )
