"""Turn a content identifier into a SearchDescriptor.

Three identifier shapes are understood:

- ``tt1234567``: catalog id, enriched through the metadata client;
- ``tt1234567:1:2``: catalog id of a series plus season and episode;
- anything else: ``prefix:title[:2014][:s1][:e2]`` or a bare title.

Resolution never raises. When nothing usable is left the descriptor comes
back with an empty ``primary_query``.
"""

from __future__ import annotations

import asyncio
import re
from typing import Optional

import aiohttp

from leetstream import logger
from leetstream.search.errors import CollaboratorError
from leetstream.search.fallback_titles import lookup_fallback_title
from leetstream.search.normalizer import coerce_year, episode_token, normalize, split_title_year
from leetstream.search.patterns import (
    has_sports_keyword,
    is_weekly_program,
    looks_like_sports_title,
    match_sports_event,
    strip_qualifiers,
)
from leetstream.search.protocols import MetadataClient
from leetstream.search.types import ContentKind, MetadataRecord, SearchDescriptor
from leetstream.search.variations import QUALITY_SUFFIX_MIN_YEAR, generate_variations

_SIMPLE_ID = re.compile(r"^tt\d+$", re.IGNORECASE)
_SERIES_ID = re.compile(r"^(tt\d+):(.*)$", re.IGNORECASE)
_KITSU_ID = re.compile(r"^kitsu:", re.IGNORECASE)
_DIGITS = re.compile(r"\d+")
_YEAR_TOKEN = re.compile(r"^\d{4}$")
_SEASON_TOKEN = re.compile(r"^s(\d+)$", re.IGNORECASE)
_EPISODE_TOKEN = re.compile(r"^e(\d+)$", re.IGNORECASE)

_LOOKUP_FAILURES = (CollaboratorError, asyncio.TimeoutError, aiohttp.ClientError, ValueError)


async def resolve_identifier(
    identifier: str,
    metadata_client: MetadataClient,
    *,
    content_type: Optional[str] = None,
    timeout: float = 10.0,
    quality_suffix_min_year: int = QUALITY_SUFFIX_MIN_YEAR,
) -> SearchDescriptor:
    identifier = (identifier or "").strip()
    if not identifier or _KITSU_ID.match(identifier):
        return SearchDescriptor.unresolvable()

    if _SIMPLE_ID.match(identifier):
        return await _resolve_simple_id(identifier, metadata_client, content_type, timeout)

    series_match = _SERIES_ID.match(identifier)
    if series_match:
        return await _resolve_series_id(
            series_match.group(1),
            series_match.group(2),
            metadata_client,
            timeout,
            quality_suffix_min_year,
        )

    return _resolve_freeform(identifier, content_type, quality_suffix_min_year)


async def _lookup(metadata_client: MetadataClient, imdb_id: str, timeout: float) -> Optional[MetadataRecord]:
    try:
        record = await asyncio.wait_for(metadata_client.lookup_by_external_id(imdb_id), timeout=timeout)
    except _LOOKUP_FAILURES as exc:
        logger.get_logger().warning(f"Metadata lookup for {imdb_id} failed: {exc.__class__.__name__}: {exc}")
        return None
    if record is not None:
        logger.get_logger().debug(f"{imdb_id} -> {record.describe()}")
    return record


def _kind_from_hint(content_type: Optional[str]) -> ContentKind:
    return "episodic" if (content_type or "").lower() == "series" else "movie"


def _descriptor(
    title: str,
    kind: ContentKind,
    year: Optional[int] = None,
    season: Optional[int] = None,
    episode: Optional[int] = None,
    quality_suffix_min_year: int = QUALITY_SUFFIX_MIN_YEAR,
) -> SearchDescriptor:
    variations = generate_variations(
        title,
        kind,
        year,
        season,
        episode,
        quality_suffix_min_year=quality_suffix_min_year,
    )
    return SearchDescriptor.from_variations(variations, kind, year, season, episode)


async def _resolve_simple_id(
    imdb_id: str,
    metadata_client: MetadataClient,
    content_type: Optional[str],
    timeout: float,
) -> SearchDescriptor:
    record = await _lookup(metadata_client, imdb_id, timeout)
    if record is not None:
        title = normalize(record.title)
        year = coerce_year(record.year)
        logger.get_logger().debug(f'Metadata for {imdb_id}: "{title}" ({year}, {record.kind})')
        if looks_like_sports_title(title):
            return _descriptor(strip_qualifiers(title), "sports_event", year)
        if record.is_series:
            return _descriptor(title, "episodic", year)
        if title:
            return _descriptor(title, "movie", year)

    fallback = lookup_fallback_title(imdb_id)
    if not fallback:
        logger.get_logger().info(f"No title found for {imdb_id}")
        return SearchDescriptor.unresolvable()
    title, year = split_title_year(fallback)
    logger.get_logger().debug(f'Using fallback title for {imdb_id}: "{fallback}"')
    return _descriptor(title, _kind_from_hint(content_type), year)


def _salvage_int(fragment: str) -> Optional[int]:
    match = _DIGITS.search(fragment or "")
    return int(match.group(0)) if match else None


def _token_only(season: Optional[int], episode: Optional[int]) -> SearchDescriptor:
    token = episode_token(season, episode)
    if not token:
        return SearchDescriptor.unresolvable("episodic")
    return SearchDescriptor.from_variations([token], "episodic", None, season, episode)


async def _resolve_series_id(
    imdb_id: str,
    remainder: str,
    metadata_client: MetadataClient,
    timeout: float,
    quality_suffix_min_year: int,
) -> SearchDescriptor:
    parts = remainder.split(":")
    season_text = parts[0] if parts else ""
    episode_text = parts[1] if len(parts) > 1 else ""
    try:
        season = int(season_text, 10)
        episode = int(episode_text, 10)
    except ValueError:
        season = _salvage_int(season_text)
        episode = _salvage_int(episode_text) if season is not None else None
        logger.get_logger().warning(f"Malformed series identifier '{imdb_id}:{remainder}'")
        return _token_only(season, episode)

    record = await _lookup(metadata_client, imdb_id, timeout)
    if record is not None and normalize(record.title):
        title = normalize(record.title)
        return _descriptor(
            title,
            "episodic",
            coerce_year(record.year),
            season,
            episode,
            quality_suffix_min_year,
        )

    fallback = lookup_fallback_title(imdb_id)
    if fallback:
        title, year = split_title_year(fallback)
        return _descriptor(title, "episodic", year, season, episode, quality_suffix_min_year)
    return _token_only(season, episode)


def _resolve_freeform(
    identifier: str,
    content_type: Optional[str],
    quality_suffix_min_year: int,
) -> SearchDescriptor:
    parts = identifier.split(":")
    if len(parts) >= 2:
        raw_title, tokens = parts[1], parts[2:]
    else:
        raw_title, tokens = identifier, []

    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    for token in tokens:
        token = token.strip()
        if _YEAR_TOKEN.match(token):
            year = int(token)
        elif _SEASON_TOKEN.match(token):
            season = int(_SEASON_TOKEN.match(token).group(1))
        elif _EPISODE_TOKEN.match(token):
            episode = int(_EPISODE_TOKEN.match(token).group(1))

    title = normalize(raw_title)
    if not title:
        return SearchDescriptor.unresolvable(_kind_from_hint(content_type))

    rule = match_sports_event(title)
    if rule is not None or has_sports_keyword(title):
        if season is not None and is_weekly_program(title):
            return _descriptor(title, "episodic", year, season, episode, quality_suffix_min_year)
        return _descriptor(title, "sports_event", year)

    if season is not None or _kind_from_hint(content_type) == "episodic":
        return _descriptor(title, "episodic", year, season, episode, quality_suffix_min_year)
    return _descriptor(title, "movie", year)
