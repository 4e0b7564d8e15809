from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import (
    String, Integer, DateTime, Text, JSON, UniqueConstraint, ForeignKey
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ArticleRow(Base):
    __tablename__ = "articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    type: Mapped[str] = mapped_column(String(20), nullable=False)  # work / topic
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # [{"url": ..., "alt": ...}]
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    affiliate_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    related_works: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    entities: Mapped[list["ArticleEntity"]] = relationship(
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleEntity.position",
    )

    __table_args__ = (UniqueConstraint("type", "slug", name="uq_articles_type_slug"),)


class ArticleEntity(Base):
    """Related-entity reference (e.g. a performer) of one article."""

    __tablename__ = "article_entities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[str] = mapped_column(ForeignKey("articles.id"), nullable=False)

    entity_slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    article: Mapped["ArticleRow"] = relationship(back_populates="entities")

    __table_args__ = (
        UniqueConstraint("article_id", "entity_slug", name="uq_article_entities_pair"),
    )
