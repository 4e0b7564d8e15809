from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ArticleType(str, Enum):
    WORK = "work"      # catalog item
    TOPIC = "topic"    # topical article


class ImageRef(BaseModel):
    url: str
    alt: str = ""


class Article(BaseModel):
    """Canonical content record; the unit that gets upserted."""

    id: str
    type: ArticleType
    slug: str
    title: str
    summary: str
    body: str
    images: list[ImageRef] = Field(default_factory=list)
    source_url: str
    affiliate_url: str | None = None
    related_works: list[str] = Field(default_factory=list)
    related_entities: list[str] = Field(default_factory=list)
    published_at: datetime
    fetched_at: datetime


class UpsertResult(BaseModel):
    status: Literal["inserted", "updated"]
    id: str


# ---------------------------
# Raw per-source records
# ---------------------------

class NamedRef(BaseModel):
    id: str | int | None = None
    name: str


class WorkItemInfo(BaseModel):
    genre: list[NamedRef] = Field(default_factory=list)
    maker: list[NamedRef] = Field(default_factory=list)
    performer: list[NamedRef] = Field(default_factory=list)


class WorkImages(BaseModel):
    large: str | None = None
    small: str | None = None


class RawWork(BaseModel):
    """One item of the catalog API response. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    content_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    affiliate_url: str | None = None
    description: str | None = None
    release_date: str | None = None
    image_urls: WorkImages = Field(default_factory=WorkImages)
    sample_images: list[str] = Field(default_factory=list)
    item_info: WorkItemInfo = Field(default_factory=WorkItemInfo)
    fetched_at: datetime


class RawTopic(BaseModel):
    topic_id: str
    title: str
    summary: str
    body: str
    source_url: str
    fetched_at: datetime


class RawRanking(BaseModel):
    ranking_id: str
    title: str
    summary: str
    body: str
    source_url: str
    fetched_at: datetime


class RawSummary(BaseModel):
    summary_id: str
    title: str
    summary: str
    body: str
    source_url: str
    fetched_at: datetime


class RawFeedItem(BaseModel):
    title: str
    link: str
    summary: str
    published_at: str | None = None
    fetched_at: datetime
    source: str


class FeedEntry(BaseModel):
    """Common shape both feed dialects are parsed into."""

    title: str = ""
    link: str = ""
    summary: str = ""
    published_at: str = ""

