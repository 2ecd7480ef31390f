from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from roleplay_coach.config.schema import MatchingConfig
from roleplay_coach.matching.variants import VariantTable

YEAR_KEYWORD_RE = re.compile(r"^\d{4}$")
YEAR_TOKEN_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")
_WHITESPACE_RE = re.compile(r"\s+")
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'"})


def normalize(text: str) -> str:
    """Lowercase, trim, unify apostrophes and collapse runs of whitespace."""
    return _WHITESPACE_RE.sub(" ", text.translate(_APOSTROPHES).lower()).strip()


def is_year_keyword(keyword: str) -> bool:
    return bool(YEAR_KEYWORD_RE.match(keyword.strip()))


@dataclass(frozen=True)
class NumericMatch:
    """Outcome of comparing year tokens in a text against a year-like keyword."""

    keyword: str
    guess: int
    exact: bool

    @property
    def target(self) -> int:
        return int(self.keyword)

    @property
    def direction(self) -> Optional[str]:
        """`earlier` when the guess is too late, `later` when it is too early."""
        if self.exact:
            return None
        return "earlier" if self.guess > self.target else "later"

    @property
    def hint(self) -> Optional[str]:
        if self.exact:
            return None
        return f"Almost! A little bit {self.direction}"


@dataclass
class RequiredCoverage:
    """Which required keywords a text covers exactly, attempts closely, or misses."""

    covered: List[str] = field(default_factory=list)
    attempted: Dict[str, NumericMatch] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)

    def is_covered(self, keyword: str) -> bool:
        return keyword in self.covered

    def is_addressed(self, keyword: str) -> bool:
        """True when the keyword is matched exactly or attempted with a close year."""
        return keyword in self.covered or keyword in self.attempted


class KeywordMatcher:
    """
    Decide whether free text covers rubric keywords.

    Matching is lexical: substring containment after normalisation, widened by the variant
    table and, for multi-word keywords, a proximity rule that accepts reordered or
    interrupted phrases as long as neighbouring words stay within `proximity_window`
    characters of each other. Year-like keywords additionally support a tolerance window.
    """

    def __init__(
        self,
        variants: VariantTable | None = None,
        proximity_window: int = 15,
        year_tolerance: int = 2,
    ):
        self.variants = variants or VariantTable.default()
        self.proximity_window = proximity_window
        self.year_tolerance = year_tolerance

    @classmethod
    def from_settings(cls, config: MatchingConfig, variants: VariantTable | None = None) -> "KeywordMatcher":
        return cls(
            variants=variants,
            proximity_window=config.proximity_window,
            year_tolerance=config.year_tolerance,
        )

    def matches(self, text: str, keyword: str) -> bool:
        return self._matches_normalized(normalize(text), normalize(keyword))

    def find(self, text: str, keywords: Iterable[str]) -> List[str]:
        """Return the keywords covered by `text`, preserving the caller's order."""
        normalized = normalize(text)
        return [kw for kw in keywords if self._matches_normalized(normalized, normalize(kw))]

    def _matches_normalized(self, text: str, keyword: str) -> bool:
        if not keyword:
            return False
        for candidate in [keyword, *self.variants.variants(keyword)]:
            if candidate in text:
                return True
            if " " in candidate and self._phrase_nearby(text, candidate):
                return True
        return False

    # phrase proximity -------------------------------------------------

    @staticmethod
    def _word_pattern(word: str) -> re.Pattern[str]:
        # Long words match by stem so inflected forms count; short words must match whole.
        if len(word) > 4:
            stem = word[: max(4, len(word) - 2)]
            return re.compile(r"(?<!\w)" + re.escape(stem))
        return re.compile(r"(?<!\w)" + re.escape(word) + r"(?!\w)")

    def _phrase_nearby(self, text: str, phrase: str) -> bool:
        spans: List[List[Tuple[int, int]]] = []
        for word in phrase.split(" "):
            found = [match.span() for match in self._word_pattern(word).finditer(text)]
            if not found:
                return False
            spans.append(found)
        return self._chain(spans, 1, spans[0])

    def _chain(
        self,
        spans: Sequence[Sequence[Tuple[int, int]]],
        index: int,
        previous: Sequence[Tuple[int, int]],
    ) -> bool:
        if index == len(spans):
            return bool(previous)
        for prev_start, prev_end in previous:
            reachable = [
                (start, end)
                for start, end in spans[index]
                if self._gap((prev_start, prev_end), (start, end)) is not None
            ]
            if reachable and self._chain(spans, index + 1, reachable):
                return True
        return False

    def _gap(self, first: Tuple[int, int], second: Tuple[int, int]) -> Optional[int]:
        """Characters between two non-overlapping spans in either order, if within the window."""
        if second[0] >= first[1]:
            gap = second[0] - first[1]
        elif first[0] >= second[1]:
            gap = first[0] - second[1]
        else:
            return None
        return gap if gap <= self.proximity_window else None

    # numeric closeness ------------------------------------------------

    def year_tokens(self, text: str) -> List[int]:
        return [int(token) for token in YEAR_TOKEN_RE.findall(text)]

    def closeness(self, text: str, keyword: str) -> Optional[NumericMatch]:
        """
        Compare year tokens in `text` with a four-digit keyword.

        Returns an exact match when the keyword's year is present, otherwise the first token
        within `year_tolerance` as a close match, otherwise None. Non-year keywords always
        return None.
        """
        if not is_year_keyword(keyword):
            return None
        target = int(keyword)
        tokens = self.year_tokens(text)
        if target in tokens:
            return NumericMatch(keyword=keyword, guess=target, exact=True)
        for token in tokens:
            if abs(token - target) <= self.year_tolerance:
                return NumericMatch(keyword=keyword, guess=token, exact=False)
        return None

    def is_near_year(self, token: str, year_keywords: Sequence[str]) -> bool:
        """True when `token` is a year within tolerance of, but not equal to, a year keyword."""
        if not is_year_keyword(token):
            return False
        value = int(token)
        return any(
            0 < abs(value - int(keyword)) <= self.year_tolerance for keyword in year_keywords
        )

    # required coverage ------------------------------------------------

    def coverage(self, text: str, required: Sequence[str]) -> RequiredCoverage:
        """Split required keywords into covered, closely attempted years, and missing."""
        result = RequiredCoverage()
        covered = set(self.find(text, required))
        for keyword in required:
            if keyword in covered:
                result.covered.append(keyword)
                continue
            near = self.closeness(text, keyword)
            if near is not None and not near.exact:
                result.attempted[keyword] = near
            else:
                result.missing.append(keyword)
        return result
