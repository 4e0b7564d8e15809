"""Syndication feed (RSS / Atom) ingestion."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import requests
from bs4 import BeautifulSoup, Tag

from content_ingest.config.settings import Settings
from content_ingest.errors import FeedParseError, SourceResponseError
from content_ingest.models.schemas import FeedEntry, RawFeedItem
from content_ingest.services.http import fetch_with_retry

logger = logging.getLogger(__name__)


def _text(node: Tag | None) -> str:
    return node.get_text(strip=True) if node is not None else ""


def _child(parent: Tag, name: str) -> Tag | None:
    # direct children only, so an item's <title> never resolves to the channel's
    return parent.find(name, recursive=False)


def parse_rss_items(soup: BeautifulSoup) -> list[FeedEntry]:
    channel = soup.find("channel")
    if channel is None:
        return []
    return [
        FeedEntry(
            title=_text(_child(item, "title")),
            link=_text(_child(item, "link")),
            summary=_text(_child(item, "description")),
            published_at=_text(_child(item, "pubDate")) or _text(_child(item, "date")),
        )
        # RSS 1.0 keeps items beside the channel, 2.0 inside it
        for item in soup.find_all("item")
    ]


def _atom_link(entry: Tag) -> str:
    links = entry.find_all("link", recursive=False)
    if not links:
        return ""
    chosen = next((l for l in links if "alternate" in (l.get("rel") or "").split()), links[0])
    return chosen.get("href") or _text(chosen)


def parse_atom_entries(soup: BeautifulSoup) -> list[FeedEntry]:
    feed = soup.find("feed")
    if feed is None:
        return []
    return [
        FeedEntry(
            title=_text(_child(entry, "title")),
            link=_atom_link(entry),
            summary=_text(_child(entry, "summary")) or _text(_child(entry, "content")),
            published_at=_text(_child(entry, "updated")) or _text(_child(entry, "published")),
        )
        for entry in feed.find_all("entry")
    ]


def parse_feed(xml: str | bytes) -> list[FeedEntry]:
    """Entries of either dialect that carry both a title and a link."""
    soup = BeautifulSoup(xml, "xml")
    if soup.find("channel") is None and soup.find("feed") is None:
        raise FeedParseError("document is neither an RSS channel nor an Atom feed")
    entries = parse_rss_items(soup) + parse_atom_entries(soup)
    return [e for e in entries if e.title and e.link]


def fetch_feed_topics(settings: Settings, session: requests.Session | None = None) -> list[RawFeedItem]:
    if not settings.rss_feeds:
        return []

    fetched_at = datetime.now(timezone.utc)
    results: list[RawFeedItem] = []

    for feed_url in settings.rss_feeds:
        response = fetch_with_retry(
            feed_url,
            policy=settings.retry_policy(),
            session=session,
            headers={"User-Agent": settings.user_agent},
        )
        if not response.ok:
            raise SourceResponseError(feed_url, response.status_code, response.reason or "")

        entries = parse_feed(response.content)[: settings.rss_max_items_per_feed]
        logger.info("feed fetch: url=%s kept=%s", feed_url, len(entries))

        results.extend(
            RawFeedItem(
                title=e.title,
                link=e.link,
                summary=e.summary or e.title,
                published_at=e.published_at or None,
                fetched_at=fetched_at,
                source=feed_url,
            )
            for e in entries
        )

    return results
