"""1337x-style torrent index client: HTML search pages and detail-page magnet links."""

from __future__ import annotations

import asyncio
import re
import time
from typing import Dict, Optional
from urllib.parse import quote, urljoin

import aiohttp
from bs4 import BeautifulSoup, Tag

from leetstream import logger
from leetstream.config import IndexConfig
from leetstream.rate_limits import INDEX_WAIT_LOG_THRESHOLD_SECONDS, enforce_min_interval
from leetstream.search.errors import CollaboratorError, CollaboratorTimeout
from leetstream.search.protocols import SearchCollaborator
from leetstream.search.resilience import run_with_retries
from leetstream.search.types import Candidate, ContentKind, QualityTag

CATEGORY_BY_KIND: dict[str, str] = {"movie": "Movies", "episodic": "TV"}
ALTERNATE_MAGNET_SELECTORS = (".magnet-download a", ".btn-magnet")

_QUERY_JUNK = re.compile(r"[^\w\s-]")
_LEADING_INT = re.compile(r"\d+")
_QUALITY_RULES: tuple[tuple[re.Pattern[str], QualityTag], ...] = (
    (re.compile(r"\b(?:2160p|4k)\b", re.IGNORECASE), "2160p"),
    (re.compile(r"\b1080p\b", re.IGNORECASE), "1080p"),
    (re.compile(r"\b720p\b", re.IGNORECASE), "720p"),
    (re.compile(r"\b480p\b", re.IGNORECASE), "480p"),
    (re.compile(r"\b(?:hdtv|hd)\b", re.IGNORECASE), "720p"),
    (re.compile(r"\b(?:hd)?(?:cam|ts|tc)(?:rip)?\b|\btelesync\b", re.IGNORECASE), "cam"),
)


def extract_quality(title: str) -> QualityTag:
    for pattern, tag in _QUALITY_RULES:
        if pattern.search(title or ""):
            return tag
    return "unknown"


def clean_query(query: str) -> str:
    return " ".join(_QUERY_JUNK.sub("", query or "").split())


def build_search_url(base_url: str, query: str, kind: ContentKind) -> str:
    base = base_url.rstrip("/")
    encoded = quote(clean_query(query), safe="")
    category = CATEGORY_BY_KIND.get(kind)
    if category:
        return f"{base}/category-search/{encoded}/{category}/1/"
    return f"{base}/search/{encoded}/1/"


def _cell_int(cell: Optional[Tag]) -> int:
    if cell is None:
        return 0
    match = _LEADING_INT.search(cell.get_text(strip=True).replace(",", ""))
    return int(match.group(0)) if match else 0


def _size_text(cell: Optional[Tag]) -> str:
    if cell is None:
        return ""
    # The size cell also nests a hidden seeders span.
    own_text = "".join(str(node) for node in cell.find_all(string=True, recursive=False)).strip()
    return own_text or cell.get_text(" ", strip=True)


def parse_search_results(html: str, base_url: str, limit: int) -> list[Candidate]:
    """Parse up to ``limit`` result rows from a search page."""
    soup = BeautifulSoup(html or "", "html.parser")
    candidates: list[Candidate] = []
    for row in soup.select(".table-list tbody tr"):
        if len(candidates) >= limit:
            break
        name_cell = row.select_one(".coll-1")
        if name_cell is None:
            continue
        links = name_cell.find_all("a")
        # First anchor is the category icon.
        name_link = links[1] if len(links) > 1 else (links[0] if links else None)
        if name_link is None:
            continue
        title = name_link.get_text(strip=True)
        href = name_link.get("href")
        if not title or not href:
            continue
        uploader_cell = row.select_one(".coll-5")
        uploader_link = uploader_cell.find("a") if uploader_cell is not None else None
        candidates.append(
            Candidate(
                title=title,
                size_text=_size_text(row.select_one(".coll-4")),
                seeders=_cell_int(row.select_one(".coll-2")),
                leechers=_cell_int(row.select_one(".coll-3")),
                quality=extract_quality(title),
                source_link=urljoin(base_url.rstrip("/") + "/", href),
                uploader=uploader_link.get_text(strip=True) if uploader_link is not None else "",
            )
        )
    return candidates


def extract_magnet_link(html: str) -> Optional[str]:
    soup = BeautifulSoup(html or "", "html.parser")
    anchor = soup.select_one('a[href^="magnet:"]')
    if anchor is not None:
        return anchor["href"]
    for selector in ALTERNATE_MAGNET_SELECTORS:
        for element in soup.select(selector):
            href = element.get("href") or ""
            if href.startswith("magnet:"):
                return href
    return None


class LeetxIndexClient(SearchCollaborator):
    """Scraping client for a 1337x mirror."""

    def __init__(
        self,
        config: IndexConfig,
        timeout: float = 10.0,
        max_attempts: int = 3,
        max_concurrency: int = 3,
    ):
        self.config = config
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.base_url = config.base_url.rstrip("/")
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def search(
        self,
        query: str,
        kind: ContentKind,
        year: int | None = None,
        season: int | None = None,
        episode: int | None = None,
    ) -> list[Candidate]:
        """Fetch the first result page for ``query``.

        The query is sent as given: year and episode tokens are already part
        of the resolved variation.
        """
        if not clean_query(query):
            return []
        url = build_search_url(self.base_url, query, kind)
        html = await self._fetch_text(url)
        candidates = parse_search_results(html, self.base_url, self.config.max_results)
        logger.get_logger().debug(f'{self.config.name} returned {len(candidates)} rows for "{query}"')
        return candidates

    async def resolve_playable_link(self, candidate: Candidate) -> Optional[str]:
        if candidate.playable_link:
            return candidate.playable_link
        html = await self._fetch_text(candidate.source_link)
        link = extract_magnet_link(html)
        if link is None:
            logger.get_logger().debug(f"No magnet link on {candidate.source_link}")
        return link

    async def _fetch_text(self, url: str) -> str:
        log = logger.get_logger()
        service = self.config.name.upper()
        log.api_request("GET", url)
        request_start = time.time()

        async def _attempt() -> tuple[int, str]:
            await self._enforce_interval()
            session = await self._ensure_session()
            async with session.get(url) as response:
                text = await response.text(errors="replace")
                if response.status >= 400:
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text[:200],
                        headers=response.headers,
                    )
                return response.status, text

        def _on_retry(attempt: int, max_attempts: int, delay: int, exc: Exception) -> None:
            log.api_retry(service, attempt, max_attempts, delay)

        async with self._semaphore:
            try:
                status, text = await run_with_retries(
                    _attempt, max_attempts=self.max_attempts, on_retry=_on_retry
                )
            except asyncio.TimeoutError as exc:
                log.api_failed(service, self.max_attempts)
                raise CollaboratorTimeout(f"{service} request timed out: {url}") from exc
            except aiohttp.ClientError as exc:
                raise CollaboratorError(f"{service} request failed: {exc}") from exc

        log.api_response(status, len(text), (time.time() - request_start) * 1000)
        return text

    async def _enforce_interval(self) -> None:
        wait = await enforce_min_interval(
            self.base_url,
            min_interval_seconds=self.config.min_interval_seconds,
        )
        log = logger.get_logger()
        log.api_wait_debug(self.config.name.upper(), wait)
        if wait > INDEX_WAIT_LOG_THRESHOLD_SECONDS:
            log.api_wait(self.config.name.upper(), wait)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(
                    headers=self._get_headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Referer": f"{self.base_url}/",
        }

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
