from __future__ import annotations

import pytest

from leetstream.search.patterns import (
    alternate_numeral,
    find_edition,
    franchise_start_year,
    int_to_roman,
    is_likely_anime,
    is_weekly_program,
    looks_like_sports_title,
    match_sports_event,
    roman_to_int,
    strip_qualifiers,
)


@pytest.mark.parametrize(
    ("title", "canonical"),
    [
        ("WWE Clash at the Castle Scotland", "WWE Clash at the Castle"),
        ("WrestleMania XL", "WWE WrestleMania"),
        ("wwe summer slam 2023", "WWE SummerSlam"),
        ("UFC Fight Night 240", "UFC Fight Night"),
        ("UFC 300", "UFC"),
        ("AEW Dynamite", "AEW Dynamite"),
        ("Tyson Fury Boxing", "Boxing"),
    ],
)
def test_match_sports_event(title: str, canonical: str) -> None:
    rule = match_sports_event(title)

    assert rule is not None
    assert rule.canonical == canonical


def test_match_sports_event_uses_whole_words() -> None:
    assert match_sports_event("WWE Drawn Together") is None
    assert match_sports_event("The Wrestler") is None


def test_looks_like_sports_title() -> None:
    assert looks_like_sports_title("WWE WrestleMania XL")
    assert looks_like_sports_title("Royal Rumble 2024")
    assert not looks_like_sports_title("Clash of the Titans")
    assert not looks_like_sports_title("")


def test_weekly_programs() -> None:
    assert is_weekly_program("WWE Raw")
    assert is_weekly_program("WWE SmackDown")
    assert not is_weekly_program("Game of Thrones")
    assert franchise_start_year("WWE NXT") == 2010
    assert franchise_start_year("Some Wrestling Show") == 1993


def test_is_likely_anime() -> None:
    assert is_likely_anime("Hunter x Hunter", 2011)
    assert is_likely_anime("鬼滅の刃", 2019)
    assert not is_likely_anime("鬼滅の刃", None)
    assert not is_likely_anime("Breaking Bad", 2008)


def test_strip_qualifiers() -> None:
    assert strip_qualifiers("WWE WrestleMania XL Kickoff") == "WWE WrestleMania XL"
    assert strip_qualifiers("WWE Backlash Press Conference") == "WWE Backlash"


def test_roman_numerals() -> None:
    assert roman_to_int("XL") == 40
    assert roman_to_int("XLII") == 42
    assert roman_to_int("WWE") is None
    assert roman_to_int("") is None
    assert int_to_roman(40) == "XL"
    assert int_to_roman(0) is None


def test_find_edition() -> None:
    assert find_edition("WWE WrestleMania 40") == "40"
    assert find_edition("WWE WrestleMania XL") == "XL"
    assert find_edition("WWE WrestleMania V") == "V"
    assert find_edition("X Pac WrestleMania 12") == "12"
    assert find_edition("CM Punk DC Special") is None
    assert find_edition("WWE Backlash") is None


def test_alternate_numeral() -> None:
    assert alternate_numeral("40") == "XL"
    assert alternate_numeral("XL") == "40"
    assert alternate_numeral("300") is None
