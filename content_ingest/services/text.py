from __future__ import annotations

import re
import unicodedata

ELLIPSIS = "…"

_NON_SLUG_RE = re.compile(r"[^\w\s-]", re.UNICODE)
_SPACES_RE = re.compile(r"[\s_]+")
_HYPHENS_RE = re.compile(r"-+")


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return unicodedata.normalize(
        "NFC", "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    )


def slugify(value: str) -> str:
    """Lowercase, diacritic-free, whitespace to hyphen. Letters of any script survive."""
    s = strip_diacritics((value or "").strip().lower())
    s = _NON_SLUG_RE.sub("", s)
    s = _SPACES_RE.sub("-", s)
    s = _HYPHENS_RE.sub("-", s)
    return s.strip("-")


def limit_text(text: str, max_len: int = 140) -> str:
    if len(text) <= max_len:
        return text
    return text[: max(0, max_len - 1)] + ELLIPSIS


def join_slug(*parts: str) -> str:
    return "-".join(p for p in parts if p)
