"""Keyword variant rules: transliteration, misspellings, inflections and synonyms.

The table is deliberately small and explicit. Each rule answers one question: which other
literal strings should count as the same keyword? Nothing here tries to understand meaning.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

# Letters NFKD leaves intact.
_EXTRA_FOLDS = {
    "ø": "o",
    "æ": "ae",
    "œ": "oe",
    "ß": "ss",
    "đ": "d",
    "ł": "l",
    "þ": "th",
}

DEFAULT_MISSPELLINGS: Dict[str, Tuple[str, ...]] = {
    "jakob": ("jacob",),
    "gothenburg": ("gothenberg", "goteborg"),
    "compliance": ("complience",),
}

DEFAULT_INFLECTIONS: Dict[str, Tuple[str, ...]] = {
    "policy": ("policies",),
    "regulations": ("regulation", "regulatory"),
    "compliance": ("compliant",),
    "ethical": ("ethics",),
}

DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "not allowed": ("against", "prohibited", "forbidden", "not permitted"),
    "cannot": ("can't", "can not", "unable"),
}


def ascii_fold(text: str) -> str:
    """Replace accented and special Latin letters by their nearest plain-ASCII spelling."""
    folded = "".join(_EXTRA_FOLDS.get(char, char) for char in text)
    decomposed = unicodedata.normalize("NFKD", folded)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def inflections(keyword: str) -> List[str]:
    """Generic suffix variants for single long words (-y/-ies, plural -s, -ing stem)."""
    if " " in keyword or not keyword.isalpha() or len(keyword) < 6:
        return []
    if keyword.endswith("y"):
        return [keyword[:-1] + "ies"]
    if keyword.endswith("s"):
        return [keyword[:-1]]
    if keyword.endswith("ing") and len(keyword) >= 7:
        return [keyword[:-3]]
    return []


class VariantTable:
    """
    Lookup of alternate spellings for normalised keywords.

    Explicit entries (misspellings, inflections, synonyms) are merged with rules derived
    from the keyword itself: an ASCII transliteration for keywords with non-ASCII letters
    and generic suffix variants for long single words.
    """

    def __init__(self, *tables: Mapping[str, Sequence[str]]):
        self._explicit: Dict[str, List[str]] = {}
        for table in tables:
            for keyword, alternates in table.items():
                bucket = self._explicit.setdefault(keyword.lower(), [])
                for alternate in alternates:
                    if alternate.lower() not in bucket:
                        bucket.append(alternate.lower())

    @classmethod
    def default(cls) -> "VariantTable":
        return cls(DEFAULT_MISSPELLINGS, DEFAULT_INFLECTIONS, DEFAULT_SYNONYMS)

    def add(self, keyword: str, alternates: Iterable[str]) -> None:
        bucket = self._explicit.setdefault(keyword.lower(), [])
        bucket.extend(alt.lower() for alt in alternates if alt.lower() not in bucket)

    def variants(self, keyword: str) -> List[str]:
        """Return every alternate spelling of an already-normalised keyword, excluding itself."""
        found: List[str] = list(self._explicit.get(keyword, []))
        folded = ascii_fold(keyword)
        if folded != keyword:
            found.append(folded)
            found.extend(self._explicit.get(folded, []))
        found.extend(inflections(keyword))
        unique: List[str] = []
        for variant in found:
            if variant and variant != keyword and variant not in unique:
                unique.append(variant)
        return unique
