"""Candidate ranking and per-resolution balancing."""

from __future__ import annotations

import re
from typing import Iterable

from leetstream import logger
from leetstream.search.errors import MalformedCandidate
from leetstream.search.types import Candidate, RankedCandidate, validate_candidate

RESOLUTION_LABELS = {
    6: "4K/2160p",
    5: "1440p",
    4: "1080p",
    3: "720p",
    2: "480p",
    1: "SD/Other",
}

_FOUR_K = re.compile(r"\b4k\b")
_SIZE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]i?B)?", re.IGNORECASE)
_UNIT_FACTORS = {"KB": 1 / 1024, "MB": 1.0, "GB": 1024.0, "TB": 1024.0 * 1024.0}


def resolution_score(title: str, quality: str) -> int:
    """Map title/quality tokens to a tier: 6 (2160p) down to 1 (unknown)."""
    title = (title or "").lower()
    quality = (quality or "").lower()
    if _FOUR_K.search(title) or "2160p" in title or "2160p" in quality:
        return 6
    if "1440p" in title or "1440p" in quality:
        return 5
    if "1080p" in title or "1080p" in quality or "fhd" in quality:
        return 4
    if "720p" in title or "720p" in quality or "hd" in quality:
        return 3
    if "480p" in title or "480p" in quality:
        return 2
    return 1


def resolution_label(score: int) -> str:
    return RESOLUTION_LABELS.get(score, RESOLUTION_LABELS[1])


def tier_summary(ranked: Iterable[RankedCandidate]) -> str:
    """'4K/2160p: 2, 1080p: 3' in encounter order."""
    counts: dict[int, int] = {}
    for item in ranked:
        counts[item.resolution_score] = counts.get(item.resolution_score, 0) + 1
    return ", ".join(f"{resolution_label(score)}: {count}" for score, count in counts.items()) or "none"


def parse_size_mb(size_text: str) -> float:
    """'1.2 GB' -> 1228.8; unitless numbers are megabytes; unreadable text is 0."""
    match = _SIZE.search((size_text or "").replace(",", ""))
    if not match:
        return 0.0
    value = float(match.group(1))
    unit = (match.group(2) or "MB").upper().replace("IB", "B")
    return value * _UNIT_FACTORS.get(unit, 1.0)


def rank_candidate(candidate: Candidate) -> RankedCandidate:
    return RankedCandidate(
        candidate=candidate,
        resolution_score=resolution_score(candidate.title, candidate.quality),
        size_mb=parse_size_mb(candidate.size_text),
    )


def rank_candidates(candidates: Iterable[Candidate]) -> list[RankedCandidate]:
    """Best first: resolution tier, then seeders, then size. Malformed rows are dropped."""
    ranked: list[RankedCandidate] = []
    for candidate in candidates:
        try:
            ranked.append(rank_candidate(validate_candidate(candidate)))
        except MalformedCandidate as exc:
            logger.get_logger().debug(f"Dropping candidate: {exc}")
    ranked.sort(key=lambda item: (-item.resolution_score, -item.candidate.seeders, -item.size_mb))
    return ranked


def balance_by_resolution(
    ranked: Iterable[RankedCandidate],
    max_per_resolution: int = 3,
) -> list[RankedCandidate]:
    """Keep at most ``max_per_resolution`` per tier, highest tier first."""
    if max_per_resolution < 1:
        raise ValueError("max_per_resolution must be at least 1")
    buckets: dict[int, list[RankedCandidate]] = {}
    for item in ranked:
        bucket = buckets.setdefault(item.resolution_score, [])
        if len(bucket) < max_per_resolution:
            bucket.append(item)
    balanced: list[RankedCandidate] = []
    for score in sorted(buckets, reverse=True):
        balanced.extend(buckets[score])
    return balanced
