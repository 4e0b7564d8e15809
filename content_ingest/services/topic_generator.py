from __future__ import annotations

from datetime import datetime, timezone

from content_ingest.models.schemas import RawTopic

TOPIC_TEMPLATES = [
    {
        "title": "Keyword of the day: {keyword}",
        "summary": "Search interest around {keyword} and what to watch for.",
        "body": "Why {keyword} is getting attention today, with the related tags that moved.",
    },
    {
        "title": "Today's trend: {keyword}",
        "summary": "More titles tagged {keyword} are showing up. A look at the new arrivals.",
        "body": "The tag mix of recent additions explains the uptick in {keyword}.",
    },
    {
        "title": "Popular tag report: {keyword}",
        "summary": "Which categories give {keyword} the most exposure.",
        "body": "Exposure by category, with refreshed links to related titles.",
    },
    {
        "title": "Talking point: {keyword}",
        "summary": "A small shift around {keyword} worth noting.",
        "body": "A short note on a small change in search behaviour and what to keep an eye on.",
    },
]

KEYWORDS = [
    "new release",
    "exclusive",
    "4K",
    "high definition",
    "ranking",
    "trending",
    "featured performer",
    "limited time",
    "bonus",
    "sale",
    "out today",
    "early access",
]


def seed_offset(seed: str) -> int:
    return sum(ord(ch) for ch in seed)


def fetch_daily_topics(count: int, seed: str, now: datetime | None = None) -> list[RawTopic]:
    """
    Generate ``count`` synthetic topics. Same (count, seed) -> same topics.
    Templates cycle with the index; the keyword is picked from (index, seed).
    """
    fetched_at = now or datetime.now(timezone.utc)
    offset = seed_offset(seed)

    topics: list[RawTopic] = []
    for i in range(count):
        template = TOPIC_TEMPLATES[i % len(TOPIC_TEMPLATES)]
        keyword = KEYWORDS[(i + offset) % len(KEYWORDS)]
        topic_id = f"{seed}-{i + 1:02d}"

        topics.append(
            RawTopic(
                topic_id=topic_id,
                title=template["title"].format(keyword=keyword),
                summary=template["summary"].format(keyword=keyword),
                body=template["body"].format(keyword=keyword),
                source_url=f"internal:topic:{topic_id}",
                fetched_at=fetched_at,
            )
        )

    return topics
