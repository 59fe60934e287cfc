"""Ordered fallback search across query variations."""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Optional, Sequence

import aiohttp

from leetstream import logger
from leetstream.search.errors import CollaboratorError
from leetstream.search.protocols import SearchCollaborator, SearchFn
from leetstream.search.types import Candidate, ContentKind, SearchDescriptor

QUALITY_BONUS = {"2160p": 1000, "1080p": 500, "720p": 200, "480p": 100, "cam": -500}
DEFAULT_LINK_LIMIT = 10

_SEARCH_FAILURES = (CollaboratorError, asyncio.TimeoutError, aiohttp.ClientError)


def preselect_score(candidate: Candidate) -> int:
    """Popularity heuristic deciding which detail pages are worth fetching."""
    return candidate.seeders * 2 + candidate.leechers + QUALITY_BONUS.get(candidate.quality, 0)


async def resolve_candidates(
    descriptor: SearchDescriptor,
    search_fn: SearchFn,
    *,
    timeout: Optional[float] = None,
) -> list[Candidate]:
    """Return the results of the first variation that yields any, or []."""
    log = logger.get_logger()
    for index, query in enumerate(descriptor.variations, start=1):
        if not query or not query.strip():
            continue
        attempt = search_fn(query, descriptor.content_kind, descriptor.year, descriptor.season, descriptor.episode)
        try:
            if timeout is not None:
                results = await asyncio.wait_for(attempt, timeout=timeout)
            else:
                results = await attempt
        except _SEARCH_FAILURES as exc:
            log.warning(f'Search for "{query}" failed: {exc.__class__.__name__}: {exc}')
            continue
        if results:
            log.debug(f'Variation {index}/{len(descriptor.variations)} "{query}" returned {len(results)} candidates')
            return list(results)
        log.debug(f'Variation {index}/{len(descriptor.variations)} "{query}" returned nothing')
    return []


async def _resolve_link(client: SearchCollaborator, candidate: Candidate, timeout: float) -> Optional[Candidate]:
    try:
        link = await asyncio.wait_for(client.resolve_playable_link(candidate), timeout=timeout)
    except _SEARCH_FAILURES as exc:
        logger.get_logger().debug(f"Link lookup failed for {candidate.source_link}: {exc.__class__.__name__}")
        return None
    if not link:
        return None
    return dataclasses.replace(candidate, playable_link=link)


async def search_with_links(
    client: SearchCollaborator,
    query: str,
    kind: ContentKind,
    year: Optional[int],
    season: Optional[int],
    episode: Optional[int],
    *,
    link_limit: int = DEFAULT_LINK_LIMIT,
    timeout: float = 10.0,
) -> list[Candidate]:
    """Search once, then resolve playable links for the best ``link_limit`` rows.

    The search and each link lookup are bounded by ``timeout``.
    """
    results: Sequence[Candidate] = await asyncio.wait_for(
        client.search(query, kind, year, season, episode), timeout=timeout
    )
    if not results:
        return []
    preselected = sorted(results, key=preselect_score, reverse=True)[: max(0, link_limit)]
    resolved = await asyncio.gather(*(_resolve_link(client, candidate, timeout) for candidate in preselected))
    return [candidate for candidate in resolved if candidate is not None]
