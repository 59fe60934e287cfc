"""Shared data structures for the resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional

from leetstream.search.errors import MalformedCandidate, UnresolvableIdentifier

ContentKind = Literal["movie", "episodic", "sports_event"]
QualityTag = Literal["2160p", "1080p", "720p", "480p", "unknown", "cam"]
QUALITY_TAGS: tuple[QualityTag, ...] = ("2160p", "1080p", "720p", "480p", "unknown", "cam")


def unique_variations(variations: Iterable[str]) -> tuple[str, ...]:
    """Trim, drop blanks and duplicates, keep first occurrence order."""
    seen: set[str] = set()
    output: list[str] = []
    for variation in variations:
        cleaned = " ".join((variation or "").split())
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        output.append(cleaned)
    return tuple(output)


@dataclass(frozen=True)
class SearchDescriptor:
    """Resolved query plan for one identifier."""

    primary_query: str
    variations: tuple[str, ...]
    content_kind: ContentKind = "movie"
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None

    def __post_init__(self) -> None:
        if self.primary_query and not self.variations:
            raise ValueError("variations must not be empty when primary_query is set")
        if self.variations and self.primary_query != self.variations[0]:
            raise ValueError("primary_query must equal the first variation")

    @classmethod
    def from_variations(
        cls,
        variations: Iterable[str],
        content_kind: ContentKind = "movie",
        year: Optional[int] = None,
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> "SearchDescriptor":
        unique = unique_variations(variations)
        return cls(
            primary_query=unique[0] if unique else "",
            variations=unique,
            content_kind=content_kind,
            year=year,
            season=season,
            episode=episode,
        )

    @classmethod
    def unresolvable(cls, content_kind: ContentKind = "movie") -> "SearchDescriptor":
        return cls(primary_query="", variations=(), content_kind=content_kind)

    @property
    def is_resolvable(self) -> bool:
        return bool(self.primary_query)

    def require_query(self) -> str:
        if not self.primary_query:
            raise UnresolvableIdentifier("no usable search query")
        return self.primary_query

    def describe(self) -> str:
        items: list[str] = [f"kind={self.content_kind}"]
        if self.year:
            items.append(f"year={self.year}")
        if self.season is not None:
            items.append(f"season={self.season}")
        if self.episode is not None:
            items.append(f"episode={self.episode}")
        items.append(f"variations={len(self.variations)}")
        return ", ".join(items)


@dataclass(frozen=True)
class MetadataRecord:
    """Title enrichment returned by the metadata service."""

    title: str
    year: Optional[int]
    kind: str
    imdb_rating: Optional[float] = None

    @property
    def is_series(self) -> bool:
        return self.kind in {"series", "episode"}

    def describe(self) -> str:
        details = [str(self.year) if self.year else "year unknown", self.kind]
        if self.imdb_rating is not None:
            details.append(f"IMDb {self.imdb_rating:.1f}")
        return f"{self.title} ({', '.join(details)})"


@dataclass(frozen=True)
class Candidate:
    """One raw torrent index result."""

    title: str
    size_text: str
    seeders: int
    leechers: int
    quality: QualityTag
    source_link: str
    uploader: str = ""
    playable_link: Optional[str] = None


@dataclass(frozen=True)
class RankedCandidate:
    """Candidate plus the fields derived for ranking."""

    candidate: Candidate
    resolution_score: int
    size_mb: float


@dataclass(frozen=True)
class StreamRecord:
    """Final output unit handed to the host."""

    label: str
    display_title: str
    playable_link: str
    binge_group: str = ""

    def to_dict(self) -> dict:
        payload: dict = {"name": self.label, "title": self.display_title, "url": self.playable_link}
        if self.binge_group:
            payload["behaviorHints"] = {"bingeGroup": self.binge_group}
        return payload


def validate_candidate(candidate: object) -> Candidate:
    """Return the candidate unchanged, or raise MalformedCandidate."""
    if not isinstance(candidate, Candidate):
        raise MalformedCandidate(f"unexpected candidate type '{type(candidate).__name__}'")
    if not isinstance(candidate.title, str) or not candidate.title.strip():
        raise MalformedCandidate("candidate has no title")
    if not isinstance(candidate.size_text, str):
        raise MalformedCandidate(f"candidate '{candidate.title}' has no size text")
    for field_name in ("seeders", "leechers"):
        value = getattr(candidate, field_name)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise MalformedCandidate(f"candidate '{candidate.title}' has invalid {field_name}: {value!r}")
    if candidate.quality not in QUALITY_TAGS:
        raise MalformedCandidate(f"candidate '{candidate.title}' has unknown quality '{candidate.quality}'")
    return candidate
