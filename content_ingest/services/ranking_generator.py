"""
Simulated ranking report.

Rankings are synthetic: two reproducible shuffles of the latest catalog
items stand in for "today" and "yesterday", and the report lists how each
of today's top 10 moved.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence, TypeVar

from content_ingest.db.repository import ArticleRepository
from content_ingest.models.schemas import ArticleType, RawRanking

T = TypeVar("T")

POOL_SIZE = 30
TOP_N = 10


class LinearCongruentialGenerator:
    """Small reproducible PRNG. Not for anything security related."""

    MULTIPLIER = 9301
    INCREMENT = 49297
    MODULUS = 233280

    def __init__(self, seed: int) -> None:
        self.state = seed % self.MODULUS

    def random(self) -> float:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Fisher-Yates driven by a seeded LCG; same seed, same order."""
    rng = LinearCongruentialGenerator(seed)
    arr = list(items)
    current = len(arr)
    while current:
        index = int(rng.random() * current)
        current -= 1
        arr[current], arr[index] = arr[index], arr[current]
    return arr


def seed_from_string(seed: str) -> int:
    """'2026-10-19' -> 2026 + 10 + 19. Non-numeric parts count by character code."""
    total = 0
    for part in seed.split("-"):
        total += int(part) if part.isdigit() else sum(ord(ch) for ch in part)
    return total


def movement_label(today_index: int, yesterday_index: int | None) -> str:
    if yesterday_index is None:
        return "new"
    diff = yesterday_index - today_index
    if diff > 0:
        return f"↑{diff}"
    if diff < 0:
        return f"↓{abs(diff)}"
    return "→0"


def rank_changes(slugs: Sequence[str], seed: int, top_n: int = TOP_N) -> list[tuple[str, str]]:
    """[(slug, label)] for today's top ``top_n``, compared with seed - 1."""
    today = seeded_shuffle(slugs, seed)[:top_n]
    yesterday = seeded_shuffle(slugs, seed - 1)[:top_n]
    previous = {slug: idx for idx, slug in enumerate(yesterday)}
    return [(slug, movement_label(idx, previous.get(slug))) for idx, slug in enumerate(today)]


def fetch_rankings(repo: ArticleRepository, seed: str, now: datetime | None = None) -> list[RawRanking]:
    fetched_at = now or datetime.now(timezone.utc)
    works = repo.get_latest_by_type(ArticleType.WORK, POOL_SIZE)
    if not works:
        return []

    titles = {w.slug: w.title for w in works}
    changes = rank_changes([w.slug for w in works], seed_from_string(seed))
    lines = [
        f"{idx}. {titles[slug]} ({slug}) {label}"
        for idx, (slug, label) in enumerate(changes, start=1)
    ]
    body = "\n".join(["Simulated ranking movement for today:", *lines])

    date = fetched_at.astimezone(timezone.utc).date().isoformat()
    return [
        RawRanking(
            ranking_id=f"{date}-ranking",
            title=f"Ranking movement report {date}",
            summary="Simulated exposure ranking of the latest titles, with today's movement.",
            body=body,
            source_url=f"internal:ranking:{date}",
            fetched_at=fetched_at,
        )
    ]
