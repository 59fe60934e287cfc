"""Identifier -> ranked, balanced stream list."""

from __future__ import annotations

import functools
from typing import Optional

from leetstream import logger
from leetstream.cache import NullCache, ResultCache, TTLCache
from leetstream.config import LeetstreamConfig
from leetstream.search.errors import UnresolvableIdentifier
from leetstream.search.fallback_search import resolve_candidates, search_with_links
from leetstream.search.formatters import format_streams
from leetstream.search.identifier_resolver import resolve_identifier
from leetstream.search.index_client import LeetxIndexClient
from leetstream.search.omdb_client import OmdbClient
from leetstream.search.protocols import MetadataClient, SearchCollaborator
from leetstream.search.ranking import balance_by_resolution, rank_candidates, tier_summary
from leetstream.search.types import SearchDescriptor, StreamRecord


class StreamPipeline:
    """Resolve, search, rank, balance and format streams for one identifier at a time."""

    def __init__(
        self,
        metadata_client: MetadataClient,
        index_client: SearchCollaborator,
        *,
        config: Optional[LeetstreamConfig] = None,
        cache: Optional[ResultCache[list[StreamRecord]]] = None,
    ):
        self.config = config or LeetstreamConfig()
        self.metadata_client = metadata_client
        self.index_client = index_client
        self.cache = cache if cache is not None else NullCache()

    async def plan(self, identifier: str, content_type: Optional[str] = None) -> SearchDescriptor:
        search = self.config.search
        return await resolve_identifier(
            identifier,
            self.metadata_client,
            content_type=content_type,
            timeout=search.request_timeout,
            quality_suffix_min_year=search.quality_suffix_min_year,
        )

    async def resolve(self, identifier: str, content_type: Optional[str] = None) -> list[StreamRecord]:
        """Ordered streams for ``identifier``; empty on any failure."""
        key = (content_type or "", identifier)
        cached = self.cache.get(key)
        if cached is not None:
            logger.get_logger().debug(f"Returning cached streams for {identifier}")
            return list(cached)

        try:
            streams = await self._resolve(identifier, content_type)
        except UnresolvableIdentifier:
            logger.get_logger().info(f"No search query could be built for {identifier}")
            return []
        except Exception as exc:
            logger.get_logger().error(f"Resolving {identifier} failed: {exc.__class__.__name__}: {exc}")
            return []

        if streams:
            self.cache.set(key, streams)
        return streams

    async def _resolve(self, identifier: str, content_type: Optional[str]) -> list[StreamRecord]:
        log = logger.get_logger()
        search = self.config.search
        descriptor = await self.plan(identifier, content_type)
        query = descriptor.require_query()
        log.info(f'Searching for "{query}" ({descriptor.describe()})')

        search_fn = functools.partial(
            search_with_links,
            self.index_client,
            link_limit=search.link_lookup_limit,
            timeout=search.request_timeout,
        )
        # One search plus one concurrent round of link lookups per variation.
        candidates = await resolve_candidates(descriptor, search_fn, timeout=search.request_timeout * 2)
        if not candidates:
            log.info(f"No candidates found for {identifier}")
            return []

        ranked = rank_candidates(candidates)
        balanced = balance_by_resolution(ranked, search.max_per_resolution)
        streams = format_streams(
            balanced,
            source_name=self.config.index.name,
            binge_group=f"{self.config.index.name}-magnet-addon",
        )
        log.info(f"{len(streams)} streams from {len(candidates)} candidates ({tier_summary(balanced)})")
        return streams

    async def close(self) -> None:
        for client in (self.metadata_client, self.index_client):
            close = getattr(client, "close", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> "StreamPipeline":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()


def build_pipeline(config: LeetstreamConfig) -> StreamPipeline:
    """Pipeline wired to the OMDb and index clients described by ``config``."""
    search = config.search
    cache: ResultCache[list[StreamRecord]]
    if search.cache_ttl_seconds > 0:
        cache = TTLCache(search.cache_ttl_seconds)
    else:
        cache = NullCache()
    return StreamPipeline(
        OmdbClient(config.omdb, timeout=search.request_timeout, max_attempts=search.max_attempts),
        LeetxIndexClient(config.index, timeout=search.request_timeout, max_attempts=search.max_attempts),
        config=config,
        cache=cache,
    )
