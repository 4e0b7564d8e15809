from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, selectinload

from content_ingest.db.models import ArticleEntity, ArticleRow
from content_ingest.models.schemas import Article, ArticleType, ImageRef, UpsertResult


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_article(row: ArticleRow) -> Article:
    return Article(
        id=row.id,
        type=ArticleType(row.type),
        slug=row.slug,
        title=row.title,
        summary=row.summary,
        body=row.body,
        images=[ImageRef.model_validate(i) for i in (row.images or [])],
        source_url=row.source_url,
        affiliate_url=row.affiliate_url,
        related_works=list(row.related_works or []),
        related_entities=[e.entity_slug for e in row.entities],
        published_at=_as_utc(row.published_at),
        fetched_at=_as_utc(row.fetched_at),
    )


class ArticleRepository:
    """
    Persistence gateway for content records.

    Every call opens its own session, so one repository can be shared by
    branches running on different threads.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def upsert_article(self, article: Article) -> UpsertResult:
        with Session(self.engine) as session:
            row = session.scalars(
                select(ArticleRow)
                .options(selectinload(ArticleRow.entities))
                .filter_by(type=article.type.value, slug=article.slug)
            ).first()

            if row is None:
                row = ArticleRow(
                    id=article.id,
                    type=article.type.value,
                    slug=article.slug,
                    fetched_at=_as_utc(article.fetched_at),
                )
                session.add(row)
                status = "inserted"
            else:
                # id and fetched_at belong to the first ingestion
                status = "updated"

            row.title = article.title
            row.summary = article.summary
            row.body = article.body
            row.images = [i.model_dump() for i in article.images]
            row.source_url = article.source_url
            row.affiliate_url = article.affiliate_url
            row.related_works = list(article.related_works)
            row.published_at = _as_utc(article.published_at)

            wanted = list(dict.fromkeys(article.related_entities))
            if [e.entity_slug for e in row.entities] != wanted:
                row.entities.clear()
                session.flush()
                row.entities.extend(
                    ArticleEntity(entity_slug=slug, position=pos) for pos, slug in enumerate(wanted)
                )

            session.commit()
            return UpsertResult(status=status, id=row.id)

    def get_latest_by_type(self, article_type: ArticleType, limit: int) -> list[Article]:
        with Session(self.engine) as session:
            rows = session.scalars(
                select(ArticleRow)
                .options(selectinload(ArticleRow.entities))
                .filter(ArticleRow.type == article_type.value)
                .order_by(ArticleRow.published_at.desc(), ArticleRow.created_at.desc())
                .limit(limit)
            ).all()
            return [_to_article(r) for r in rows]

    def get_latest_articles(self, limit: int) -> list[Article]:
        with Session(self.engine) as session:
            rows = session.scalars(
                select(ArticleRow)
                .options(selectinload(ArticleRow.entities))
                .order_by(ArticleRow.published_at.desc(), ArticleRow.created_at.desc())
                .limit(limit)
            ).all()
            return [_to_article(r) for r in rows]

    def find_works_by_entity_slug(self, entity_slug: str, limit: int) -> list[Article]:
        with Session(self.engine) as session:
            rows = session.scalars(
                select(ArticleRow)
                .join(ArticleEntity, ArticleEntity.article_id == ArticleRow.id)
                .options(selectinload(ArticleRow.entities))
                .filter(ArticleRow.type == ArticleType.WORK.value)
                .filter(ArticleEntity.entity_slug == entity_slug)
                .order_by(ArticleRow.published_at.desc())
                .limit(limit)
            ).all()
            return [_to_article(r) for r in rows]
