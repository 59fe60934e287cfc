from __future__ import annotations

import re
from typing import Iterable, Optional

from leetstream.search.types import RankedCandidate, StreamRecord

DEFAULT_SOURCE_NAME = "1337x"
DEFAULT_BINGE_GROUP = "1337x-magnet-addon"

_BRACKETED = re.compile(r"\[.*?\]|\(.*?\)")
_GLUED_SIZE = re.compile(r"(\d+(?:\.\d+)?\s*(?:GB|MB|KB|TB))\d+$", re.IGNORECASE)
_FOUR_K = re.compile(r"\b4k\b", re.IGNORECASE)
_HDR = re.compile(r"\bhdr|\bdolby[\s.]vision\b|\bdv\b", re.IGNORECASE)
_ATMOS = re.compile(r"atmos", re.IGNORECASE)
_REMUX = re.compile(r"remux", re.IGNORECASE)


def clean_title(title: str) -> str:
    cleaned = " ".join(_BRACKETED.sub("", title or "").split())
    return cleaned or " ".join((title or "").split())


def clean_size(size_text: str) -> str:
    return _GLUED_SIZE.sub(r"\1", (size_text or "").strip()).strip()


def quality_badge(title: str, quality: str) -> str:
    tags: list[str] = []
    if quality == "2160p" or _FOUR_K.search(title):
        tags.append("4K")
    if _HDR.search(title):
        tags.append("HDR")
    if _ATMOS.search(title):
        tags.append("ATMOS")
    if _REMUX.search(title):
        tags.append("REMUX")
    return " ".join(tags) if tags else quality


def format_stream(
    ranked: RankedCandidate,
    *,
    source_name: str = DEFAULT_SOURCE_NAME,
    binge_group: str = DEFAULT_BINGE_GROUP,
) -> Optional[StreamRecord]:
    """Two-line label and display title; None when there is nothing to play."""
    candidate = ranked.candidate
    if not candidate.playable_link:
        return None
    badge = quality_badge(candidate.title, candidate.quality)
    return StreamRecord(
        label=f"{source_name}\n{badge}",
        display_title=f"{clean_title(candidate.title)}\n💾 {clean_size(candidate.size_text)} 🌱 {candidate.seeders}",
        playable_link=candidate.playable_link,
        binge_group=binge_group,
    )


def format_streams(
    ranked: Iterable[RankedCandidate],
    *,
    source_name: str = DEFAULT_SOURCE_NAME,
    binge_group: str = DEFAULT_BINGE_GROUP,
) -> list[StreamRecord]:
    records: list[StreamRecord] = []
    for item in ranked:
        record = format_stream(item, source_name=source_name, binge_group=binge_group)
        if record is not None:
            records.append(record)
    return records
