"""OMDb metadata client: IMDb id -> title, year and kind."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from leetstream import logger
from leetstream.config import OmdbConfig
from leetstream.search.errors import CollaboratorError, CollaboratorTimeout
from leetstream.search.normalizer import coerce_year
from leetstream.search.protocols import MetadataClient
from leetstream.search.resilience import expect_dict, optional_str, run_with_retries
from leetstream.search.types import MetadataRecord

_NOT_FOUND_HINTS = ("not found", "incorrect imdb id")


def parse_metadata(payload: object) -> Optional[MetadataRecord]:
    """Map an OMDb ``?i=`` payload to a MetadataRecord; None for a not-found answer."""
    root = expect_dict(payload, "OMDb payload")
    if str(root.get("Response", "True")).strip().lower() == "false":
        error_text = optional_str(root, "Error") or "unknown error"
        if any(hint in error_text.lower() for hint in _NOT_FOUND_HINTS):
            return None
        raise CollaboratorError(f"OMDb error: {error_text}")

    title = optional_str(root, "Title")
    if not title:
        raise CollaboratorError("OMDb payload has no Title")

    rating_text = optional_str(root, "imdbRating")
    try:
        rating = float(rating_text) if rating_text else None
    except ValueError:
        rating = None

    return MetadataRecord(
        title=title,
        year=coerce_year(optional_str(root, "Year")),
        kind=(optional_str(root, "Type") or "movie").lower(),
        imdb_rating=rating,
    )


class OmdbClient(MetadataClient):
    """Minimal OMDb client with a per-instance lookup cache."""

    def __init__(self, config: OmdbConfig, timeout: float = 10.0, max_attempts: int = 3):
        self.config = config
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.base_url = config.base_url.rstrip("/")
        self._cache: dict[str, MetadataRecord] = {}
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def lookup_by_external_id(self, external_id: str) -> Optional[MetadataRecord]:
        imdb_id = (external_id or "").strip()
        if not imdb_id:
            return None
        cached = self._cache.get(imdb_id)
        if cached is not None:
            logger.get_logger().debug(f"OMDb cache hit for {imdb_id}")
            return cached

        if not self.config.api_key:
            raise CollaboratorError("OMDb API key is not configured")

        payload = await self._request({"i": imdb_id})
        try:
            record = parse_metadata(payload)
        except ValueError as exc:
            raise CollaboratorError(str(exc)) from exc
        if record is not None:
            self._cache[imdb_id] = record
        return record

    async def _request(self, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/"
        query = {"apikey": self.config.api_key, **params}
        log = logger.get_logger()
        log.api_request("GET", url, query)
        request_start = time.time()

        async def _attempt() -> tuple[int, Any, int]:
            session = await self._ensure_session()
            async with session.get(url, params=query) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text,
                        headers=response.headers,
                    )
                body = await response.read()
                data = await response.json(content_type=None)
                return response.status, data, len(body)

        def _on_retry(attempt: int, max_attempts: int, delay: int, exc: Exception) -> None:
            log.api_retry("OMDB", attempt, max_attempts, delay)

        try:
            status, data, size = await run_with_retries(
                _attempt, max_attempts=self.max_attempts, on_retry=_on_retry
            )
        except asyncio.TimeoutError as exc:
            log.api_failed("OMDB", self.max_attempts)
            raise CollaboratorTimeout(f"OMDb lookup timed out after {self.timeout}s") from exc
        except aiohttp.ClientError as exc:
            raise CollaboratorError(f"OMDb request failed: {exc}") from exc
        except ValueError as exc:
            raise CollaboratorError(f"OMDb returned a non-JSON body: {exc}") from exc

        log.api_response(status, size, (time.time() - request_start) * 1000)
        return data

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
