"""Ordered search query variations for a resolved title.

Variation order is search priority: the fallback driver stops at the first
variation that returns results.
"""

from __future__ import annotations

from typing import Optional

from leetstream.search.normalizer import dotted, episode_token, extract_year, normalize
from leetstream.search.patterns import (
    alternate_numeral,
    find_edition,
    franchise_start_year,
    has_sports_keyword,
    is_likely_anime,
    is_weekly_program,
    match_sports_event,
    strip_promotion,
    strip_qualifiers,
)
from leetstream.search.types import ContentKind, unique_variations

QUALITY_SUFFIXES = ("1080p", "720p")
QUALITY_SUFFIX_MIN_YEAR = 2010


def _join(*parts: object) -> str:
    return " ".join(str(part) for part in parts if part not in (None, ""))


def generate_variations(
    title: str,
    kind: ContentKind,
    year: Optional[int] = None,
    season: Optional[int] = None,
    episode: Optional[int] = None,
    *,
    quality_suffix_min_year: int = QUALITY_SUFFIX_MIN_YEAR,
) -> list[str]:
    """Return unique query variations, best first; empty only when the title is unusable."""
    cleaned = normalize(title)
    if not cleaned:
        return []

    if kind == "sports_event":
        variations = sports_event_variations(cleaned, year)
        if variations:
            return variations
    elif kind == "episodic":
        if is_weekly_program(cleaned):
            return weekly_program_variations(cleaned, year, season, episode)
        return episodic_variations(
            cleaned,
            year,
            season,
            episode,
            anime=is_likely_anime(title, year),
            quality_suffix_min_year=quality_suffix_min_year,
        )
    return movie_variations(cleaned, year)


def movie_variations(title: str, year: Optional[int]) -> list[str]:
    if year and not title.endswith(str(year)):
        return [_join(title, year)]
    return [title]


def sports_event_variations(title: str, year: Optional[int]) -> list[str]:
    """Event naming quirks: canonical names, edition numerals and short names."""
    detected_year = extract_year(title) or year
    rule = match_sports_event(title)
    if rule is None:
        if not has_sports_keyword(title):
            return []
        base = title
        if detected_year:
            base = " ".join(token for token in title.split() if token != str(detected_year))
        return list(unique_variations([_join(base, detected_year)]))

    without_year = " ".join(token for token in title.split() if token != str(detected_year))
    edition = find_edition(without_year)
    alternate = alternate_numeral(edition) if edition else None
    canonical = rule.canonical
    short = strip_promotion(canonical)

    variations = [
        _join(canonical, edition, detected_year),
        _join(canonical, edition),
    ]
    if alternate:
        variations += [_join(canonical, alternate, detected_year), _join(canonical, alternate)]
    variations += [_join(canonical, detected_year), canonical]
    if short and short != canonical:
        variations.append(_join(short, edition))
        if alternate:
            variations.append(_join(short, alternate))
    variations.append(strip_qualifiers(title))
    if "clash" in canonical.lower():
        variations += ["WWE Clash", short]
    return list(unique_variations(variations))


def weekly_program_variations(
    title: str,
    year: Optional[int],
    season: Optional[int],
    episode: Optional[int],
) -> list[str]:
    """Weekly shows index seasons by month since the franchise start."""
    short = strip_promotion(title) or title
    if season is None:
        return list(unique_variations([title, short]))

    base_year = year or franchise_start_year(title)
    derived_year = base_year + season // 12
    month = season % 12 + 1
    token = episode_token(season, episode)
    return list(
        unique_variations(
            [
                _join(title, derived_year),
                _join(short, derived_year),
                _join(title, derived_year, f"{month:02d}"),
                _join(title, token),
                _join(short, token),
            ]
        )
    )


def episodic_variations(
    title: str,
    year: Optional[int],
    season: Optional[int],
    episode: Optional[int],
    *,
    anime: bool = False,
    quality_suffix_min_year: int = QUALITY_SUFFIX_MIN_YEAR,
) -> list[str]:
    token = episode_token(season, episode)
    if not token:
        return [title]

    if anime:
        variations = [_join(title, token)]
        if episode is not None:
            season_prefix = f"Season {season}" if season and season > 1 else ""
            variations += [
                _join(title, "Episode", episode),
                _join(title, f"{episode:02d}"),
                _join(title, season_prefix, "Episode", episode),
            ]
        variations.append(title)
        return list(unique_variations(variations))

    variations = [
        _join(title, token),
        _join(title, year, token) if year else "",
        _join(dotted(title), token),
        title,
    ]
    if year and year >= quality_suffix_min_year:
        variations += [_join(title, token, suffix) for suffix in QUALITY_SUFFIXES]
    return list(unique_variations(variations))
