"""Turn identifier fragments and metadata titles into clean search strings."""

from __future__ import annotations

import re
from typing import Optional

_ID_TOKEN = re.compile(r"\b(?:tt\d{5,}|kitsu:\d+)\b", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[^\w\s.\-]")
_SEPARATORS = re.compile(r"[._\-]+")
_TRAILING_YEAR = re.compile(r"\s*\b\d{4}$")
_YEAR = re.compile(r"\b((?:19|20)\d{2})\b")


def normalize(raw: str, *, strip_year: bool = False) -> str:
    """Return a clean search string, or "" when nothing usable is left."""
    if not raw:
        return ""
    text = _ID_TOKEN.sub(" ", raw)
    text = _PUNCTUATION.sub("", text)
    text = _SEPARATORS.sub(" ", text)
    text = " ".join(text.split())
    if strip_year:
        text = _TRAILING_YEAR.sub("", text).strip()
    return text


def extract_year(text: str) -> Optional[int]:
    match = _YEAR.search(text or "")
    return int(match.group(1)) if match else None


def split_title_year(text: str) -> tuple[str, Optional[int]]:
    """Split "Title 2014" into ("Title", 2014); titles without a trailing year keep year None."""
    cleaned = normalize(text)
    match = re.search(r"\b(\d{4})$", cleaned)
    if not match:
        return cleaned, None
    return normalize(cleaned, strip_year=True), int(match.group(1))


def coerce_year(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = re.match(r"\s*(\d{4})", value)
        if match:
            return int(match.group(1))
    return None


def dotted(title: str) -> str:
    return re.sub(r"\s+", ".", title.strip())


def episode_token(season: Optional[int], episode: Optional[int]) -> str:
    if season is None:
        return ""
    if episode is None:
        return f"S{season:02d}"
    return f"S{season:02d}E{episode:02d}"
