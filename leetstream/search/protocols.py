"""Protocol definitions for the metadata and torrent index collaborators."""

from __future__ import annotations

from typing import Awaitable, Optional, Protocol, Sequence

from leetstream.search.types import Candidate, ContentKind, MetadataRecord


class MetadataClient(Protocol):
    """Title/year/kind enrichment by external identifier."""

    async def lookup_by_external_id(self, external_id: str) -> Optional[MetadataRecord]:
        ...


class SearchCollaborator(Protocol):
    """Minimal torrent index API used by the fallback search driver."""

    async def search(
        self,
        query: str,
        kind: ContentKind,
        year: int | None = None,
        season: int | None = None,
        episode: int | None = None,
    ) -> Sequence[Candidate]:
        ...

    async def resolve_playable_link(self, candidate: Candidate) -> Optional[str]:
        ...


class SearchFn(Protocol):
    """One search attempt for a single query variation."""

    def __call__(
        self,
        query: str,
        kind: ContentKind,
        year: int | None,
        season: int | None,
        episode: int | None,
    ) -> Awaitable[Sequence[Candidate]]:
        ...
