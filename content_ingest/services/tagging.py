from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from content_ingest.models.schemas import Article


@dataclass(frozen=True)
class TagDef:
    label: str
    summary: str
    needles: tuple[str, ...]


# tag key -> definition. Needles are matched case-insensitively as substrings.
TAGS: dict[str, TagDef] = {
    "new-release": TagDef(
        "New release",
        "Titles added to the catalog within the last few days.",
        ("new release", "newcomer", "debut", "new arrival"),
    ),
    "exclusive": TagDef(
        "Exclusive",
        "Available from a single distributor only.",
        ("exclusive",),
    ),
    "4k": TagDef(
        "4K",
        "Delivered in 4K resolution.",
        ("4k", "uhd", "ultra hd"),
    ),
    "high-definition": TagDef(
        "High definition",
        "HD or better picture quality.",
        ("high definition", "hd ", "1080p", "high quality"),
    ),
    "ranking": TagDef(
        "Ranking",
        "Position changes in the catalog charts.",
        ("ranking", "chart", "top 10"),
    ),
    "trending": TagDef(
        "Trending",
        "Titles drawing more attention than usual.",
        ("trending", "trend", "hot ", "buzz"),
    ),
    "featured-performer": TagDef(
        "Featured performer",
        "Performers currently appearing in many new titles.",
        ("featured performer", "performer", "cast"),
    ),
    "limited-time": TagDef(
        "Limited time",
        "Offers or releases available for a short period.",
        ("limited time", "limited-time", "for a short time"),
    ),
    "bonus": TagDef(
        "Bonus",
        "Releases bundled with extra material.",
        ("bonus", "extra footage", "special feature"),
    ),
    "sale": TagDef(
        "Sale",
        "Discounted titles.",
        ("sale", "discount", "% off"),
    ),
    "out-today": TagDef(
        "Out today",
        "Titles released today.",
        ("out today", "released today", "today's release"),
    ),
    "early-access": TagDef(
        "Early access",
        "Titles available before their general release.",
        ("early access", "pre-release", "advance release"),
    ),
}

META_LABELS = ("Maker", "Genre")
_META_LINE_RE = re.compile(r"^(%s):\s*(.+)$" % "|".join(META_LABELS))


def extract_tags(text: str) -> list[str]:
    """Tag keys found in ``text``, in vocabulary order, without duplicates."""
    hay = f" {(text or '').lower()} "
    return [key for key, tag in TAGS.items() if any(n in hay for n in tag.needles)]


def tag_label(tag: str) -> str:
    t = TAGS.get(tag)
    return t.label if t else tag


def tag_summary(tag: str) -> str:
    t = TAGS.get(tag)
    return t.summary if t else ""


def _work_signal(work: Article) -> set[str]:
    return set(extract_tags(f"{work.title} {work.summary} {work.body}"))


def pick_related_works(
    pool: Iterable[Article],
    tags: Iterable[str],
    limit: int,
    exclude: str | None = None,
) -> list[str]:
    """
    Slugs of pool items sharing at least one tag, best overlap first.
    Ties keep pool order (most recent first).
    """
    wanted = set(tags)
    if not wanted or limit <= 0:
        return []

    scored: list[tuple[int, int, str]] = []
    seen: set[str] = set()
    for pos, work in enumerate(pool):
        if work.slug == exclude or work.slug in seen:
            continue
        overlap = len(wanted & _work_signal(work))
        if overlap:
            seen.add(work.slug)
            scored.append((-overlap, pos, work.slug))

    scored.sort()
    return [slug for _, _, slug in scored[:limit]]


def extract_meta_tags_from_body(body: str) -> set[str]:
    """
    "Maker: Foo" / "Genre: Drama, Action" lines -> {"maker:foo", "genre:drama", "genre:action"}.
    """
    found: set[str] = set()
    for line in (body or "").splitlines():
        m = _META_LINE_RE.match(line.strip())
        if not m:
            continue
        label = m.group(1).lower()
        for value in m.group(2).split(","):
            value = value.strip().lower()
            if value:
                found.add(f"{label}:{value}")
    return found
