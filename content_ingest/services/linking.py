"""
Cross-reference enrichment.

Both procedures read already-persisted records, so they must run right
before the record's own upsert, one record at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from content_ingest.db.repository import ArticleRepository
from content_ingest.models.schemas import Article, ArticleType
from content_ingest.services.tagging import (
    extract_meta_tags_from_body,
    extract_tags,
    pick_related_works,
    tag_label,
    tag_summary,
)

TOPIC_POOL_SIZE = 20
TOPIC_RELATED_LIMIT = 6
ENTITY_LIMIT = 6
TAG_NOTE_LIMIT = 2

WORKS_PER_ENTITY = 4
WORK_RELATED_LIMIT = 8
META_POOL_SIZE = 80
META_MATCH_LIMIT = 4


@dataclass
class TopicLinks:
    related_works: list[str] = field(default_factory=list)
    related_entities: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def _unique(values, exclude: str | None = None) -> list[str]:
    return [v for v in dict.fromkeys(values) if v != exclude]


def build_topic_links(repo: ArticleRepository, text: str, exclude: str | None = None) -> TopicLinks:
    works = repo.get_latest_by_type(ArticleType.WORK, TOPIC_POOL_SIZE)
    tags = extract_tags(text)
    related = pick_related_works(works, tags, TOPIC_RELATED_LIMIT, exclude=exclude)

    by_slug = {w.slug: w for w in works}
    entities = _unique(e for slug in related for e in by_slug[slug].related_entities)

    return TopicLinks(
        related_works=related,
        related_entities=entities[:ENTITY_LIMIT],
        tags=tags,
    )


def append_tag_summary(body: str, tags: list[str]) -> str:
    if not tags:
        return body
    lines = [f"- #{tag_label(t)}: {tag_summary(t)}" for t in tags[:TAG_NOTE_LIMIT]]
    return body + "\n\nTag notes:\n" + "\n".join(lines)


def link_topic(article: Article, repo: ArticleRepository) -> Article:
    links = build_topic_links(repo, f"{article.title} {article.summary}", exclude=article.slug)
    article.related_works = links.related_works
    article.related_entities = links.related_entities
    article.body = append_tag_summary(article.body, links.tags)
    return article


def link_work(article: Article, repo: ArticleRepository) -> Article:
    """
    Two signals, applied in order:
    1. other works sharing one of this work's entities (up to 4 per entity),
    2. recent works sharing a maker/genre line, up to 4 more.
    The combined list is deduplicated and never exceeds 8 entries.
    """
    related: list[str] = []

    for entity in article.related_entities:
        for work in repo.find_works_by_entity_slug(entity, WORKS_PER_ENTITY):
            related.append(work.slug)
    related = _unique(related, exclude=article.slug)[:WORK_RELATED_LIMIT]

    meta = extract_meta_tags_from_body(article.body)
    if meta and len(related) < WORK_RELATED_LIMIT:
        pool = repo.get_latest_by_type(ArticleType.WORK, META_POOL_SIZE)
        scored: list[tuple[int, int, str]] = []
        for pos, work in enumerate(pool):
            if work.slug == article.slug or work.slug in related:
                continue
            shared = len(meta & extract_meta_tags_from_body(work.body))
            if shared:
                scored.append((-shared, pos, work.slug))
        scored.sort()
        related = _unique(related + [slug for _, _, slug in scored[:META_MATCH_LIMIT]], exclude=article.slug)

    article.related_works = related[:WORK_RELATED_LIMIT]
    return article
