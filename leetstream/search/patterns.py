"""Rule tables used to recognise sports events, weekly shows and anime titles.

Tables are ordered: the first matching rule wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SportsEventRule:
    pattern: re.Pattern[str]
    canonical: str
    weekly: bool = False
    start_year: Optional[int] = None

    def matches(self, title: str) -> bool:
        return bool(self.pattern.search(title))


def _rule(pattern: str, canonical: str, *, weekly: bool = False, start_year: Optional[int] = None) -> SportsEventRule:
    return SportsEventRule(re.compile(pattern, re.IGNORECASE), canonical, weekly, start_year)


SPORTS_EVENT_RULES: tuple[SportsEventRule, ...] = (
    # Premium live events
    _rule(r"\bwwe\b.*\bclash\b.*\bcastle\b", "WWE Clash at the Castle"),
    _rule(r"\bwwe\b.*\bclash\b.*\bparis\b", "WWE Clash in Paris"),
    _rule(r"\bwrestle\s*mania\b", "WWE WrestleMania"),
    _rule(r"\broyal\s*rumble\b", "WWE Royal Rumble"),
    _rule(r"\bsummer\s*slam\b", "WWE SummerSlam"),
    _rule(r"\bsurvivor\s*series\b", "WWE Survivor Series"),
    _rule(r"\bmoney\b.*\bbank\b", "WWE Money in the Bank"),
    _rule(r"\belimination\s*chamber\b", "WWE Elimination Chamber"),
    _rule(r"\bwwe\b.*\bnight\b.*\bchampions\b", "WWE Night of Champions"),
    _rule(r"\bwwe\b.*\bbattleground\b", "WWE Battleground"),
    _rule(r"\bwwe\b.*\bbacklash\b", "WWE Backlash"),
    _rule(r"\bwwe\b.*\bfastlane\b", "WWE Fastlane"),
    _rule(r"\bwwe\b.*\bcrown\b.*\bjewel\b", "WWE Crown Jewel"),
    _rule(r"\bwwe\b.*\bextreme\b.*\brules\b", "WWE Extreme Rules"),
    _rule(r"\bwwe\b.*\bhell\b.*\bcell\b", "WWE Hell in a Cell"),
    _rule(r"\bwwe\b.*\bjudge?ment\b.*\bday\b", "WWE Judgment Day"),
    _rule(r"\bwwe\b.*\bking\b.*\bring\b", "WWE King of the Ring"),
    _rule(r"\bwwe\b.*\bbad\b.*\bblood\b", "WWE Bad Blood"),
    # Weekly shows
    _rule(r"\bwwe\b.*\braw\b|\bmonday\s+night\s+raw\b", "WWE Monday Night Raw", weekly=True, start_year=1993),
    _rule(r"\bsmack\s*down\b", "WWE SmackDown", weekly=True, start_year=1999),
    _rule(r"\bwwe\b.*\bnxt\b", "WWE NXT", weekly=True, start_year=2010),
    # Legacy pay-per-views
    _rule(r"\bwwe\b.*\bunforgiven\b", "WWE Unforgiven"),
    _rule(r"\bwwe\b.*\bvengeance\b", "WWE Vengeance"),
    _rule(r"\bwwe\b.*\barmageddon\b", "WWE Armageddon"),
    _rule(r"\bwwe\b.*\bno\b.*\bmercy\b", "WWE No Mercy"),
    _rule(r"\bwwe\b.*\binsurrextion\b", "WWE Insurrextion"),
    # Other promotions
    _rule(r"\baew\b.*\brevolution\b", "AEW Revolution"),
    _rule(r"\baew\b.*\bdouble\b.*\bnothing\b", "AEW Double or Nothing"),
    _rule(r"\baew\b.*\ball\b.*\bout\b", "AEW All Out"),
    _rule(r"\baew\b.*\bfull\b.*\bgear\b", "AEW Full Gear"),
    _rule(r"\baew\b.*\bdynamite\b", "AEW Dynamite", weekly=True, start_year=2019),
    _rule(r"\baew\b.*\brampage\b", "AEW Rampage", weekly=True, start_year=2021),
    # UFC: fight nights before numbered events
    _rule(r"\bufc\b.*\bfight\b.*\bnight\b", "UFC Fight Night"),
    _rule(r"\bufc\b.*\d+", "UFC"),
    # Boxing
    _rule(r"\bboxing\b", "Boxing"),
    _rule(r"\bheavyweight\b.*\bchampionship\b", "Heavyweight Championship"),
)

SPORTS_KEYWORDS = re.compile(r"\b(?:wwe|aew|ufc|boxing|wrestling)\b", re.IGNORECASE)
SPORTS_TITLE_MARKERS = re.compile(
    r"\b(?:wwe|aew|ufc|wrestle\s*mania|royal\s*rumble|summer\s*slam|clash)\b", re.IGNORECASE
)
WEEKLY_PROGRAM_MARKERS = re.compile(r"\b(?:wwe|aew|raw|smack\s*down|wrestl\w*)\b", re.IGNORECASE)
PROMOTION_PREFIX = re.compile(r"^(?:wwe|aew)\s+", re.IGNORECASE)
QUALIFIER_WORDS = re.compile(r"\b(?:kickoff|kick off|pre show|preshow|press|conference|event)\b", re.IGNORECASE)

# Title fragments of franchises released with dense absolute episode numbering.
ANIME_MARKERS: tuple[str, ...] = (
    "Naruto",
    "One Piece",
    "Attack on Titan",
    "Dragon Ball",
    "Death Note",
    "Bleach",
    "Hunter x Hunter",
    "Jujutsu Kaisen",
    "Demon Slayer",
    "My Hero Academia",
    "Fullmetal Alchemist",
)
ANIME_NON_ASCII_MIN_YEAR = 1990
DEFAULT_FRANCHISE_START_YEAR = 1993
MAX_ROMAN_EDITION = 100

_ROMAN = re.compile(r"^M{0,3}(?:CM|CD|D?C{0,3})(?:XC|XL|L?X{0,3})(?:IX|IV|V?I{0,3})$")
_ROMAN_VALUES = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def match_sports_event(title: str) -> Optional[SportsEventRule]:
    for rule in SPORTS_EVENT_RULES:
        if rule.matches(title):
            return rule
    return None


def has_sports_keyword(title: str) -> bool:
    return bool(SPORTS_KEYWORDS.search(title or ""))


def looks_like_sports_title(title: str) -> bool:
    """Metadata titles that should be searched as sports events."""
    if not title:
        return False
    return bool(SPORTS_TITLE_MARKERS.search(title)) and (
        match_sports_event(title) is not None or has_sports_keyword(title)
    )


def is_weekly_program(title: str) -> bool:
    """Weekly wrestling shows, whose season/episode indices encode air dates."""
    rule = match_sports_event(title or "")
    if rule is not None and rule.weekly:
        return True
    return bool(WEEKLY_PROGRAM_MARKERS.search(title or ""))


def franchise_start_year(title: str) -> int:
    rule = match_sports_event(title or "")
    if rule is not None and rule.start_year:
        return rule.start_year
    return DEFAULT_FRANCHISE_START_YEAR


def is_likely_anime(title: str, year: Optional[int]) -> bool:
    if not title:
        return False
    lowered = title.lower()
    if any(marker.lower() in lowered for marker in ANIME_MARKERS):
        return True
    return year is not None and year >= ANIME_NON_ASCII_MIN_YEAR and not title.isascii()


def strip_promotion(name: str) -> str:
    return PROMOTION_PREFIX.sub("", name).strip()


def strip_qualifiers(title: str) -> str:
    return " ".join(QUALIFIER_WORDS.sub(" ", title).split())


def roman_to_int(token: str) -> Optional[int]:
    if not token or not _ROMAN.match(token):
        return None
    total = 0
    index = 0
    for value, numeral in _ROMAN_VALUES:
        while token.startswith(numeral, index):
            total += value
            index += len(numeral)
    return total or None


def int_to_roman(value: int) -> Optional[str]:
    if value < 1 or value > 3999:
        return None
    parts: list[str] = []
    for amount, numeral in _ROMAN_VALUES:
        count, value = divmod(value, amount)
        parts.append(numeral * count)
    return "".join(parts)


def find_edition(title: str) -> Optional[str]:
    """First edition numeral in a title: 1-3 arabic digits or an uppercase roman numeral.

    Single-letter numerals (V, X) only count as the last token.
    """
    tokens = title.split()
    for position, token in enumerate(tokens):
        if token.isdigit() and len(token) <= 3 and int(token) > 0:
            return token
        if token.isupper() and (len(token) >= 2 or position == len(tokens) - 1):
            value = roman_to_int(token)
            if value is not None and value <= MAX_ROMAN_EDITION:
                return token
    return None


def alternate_numeral(token: str) -> Optional[str]:
    """40 <-> XL."""
    if token.isdigit():
        value = int(token)
        return int_to_roman(value) if value <= MAX_ROMAN_EDITION else None
    value = roman_to_int(token)
    return str(value) if value is not None else None
