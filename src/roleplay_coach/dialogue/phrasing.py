from __future__ import annotations

import random
from typing import Callable, Optional, Sequence

NEAR_MISS_PREFIXES = ("Nice try :)", "Almost there :)", "So close :)")


class PhraseSelector:
    """Pick one of several equivalent phrasings; seed it, or pass `choose`, to pin the output."""

    def __init__(
        self,
        seed: Optional[int] = None,
        choose: Optional[Callable[[Sequence[str]], str]] = None,
    ):
        self._random = random.Random(seed)
        self._choose = choose

    @classmethod
    def first(cls) -> "PhraseSelector":
        return cls(choose=lambda options: options[0])

    def __call__(self, options: Sequence[str]) -> str:
        if not options:
            raise ValueError("options must not be empty")
        if self._choose is not None:
            return self._choose(options)
        return self._random.choice(list(options))

    def prefixed(self, text: str, prefixes: Sequence[str] = NEAR_MISS_PREFIXES) -> str:
        return f"{self(prefixes)} {text}"
