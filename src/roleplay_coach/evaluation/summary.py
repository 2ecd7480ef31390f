from __future__ import annotations

from typing import List, Optional, Sequence


def join_concepts(items: Sequence[str]) -> str:
    """'a', 'a and b', 'a, b and c'."""
    items = list(items)
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


def build_summary(
    covered: Sequence[str],
    close: Sequence[str],
    missed: Sequence[str],
    bonus: Sequence[str],
) -> Optional[str]:
    """Sentence naming which rubric concepts were satisfied and which were missed."""
    parts: List[str] = []
    hits = list(covered) + [f"{concept} (nearly)" for concept in close]
    if hits and missed:
        parts.append(f"You covered {join_concepts(hits)}, but missed {join_concepts(missed)}.")
    elif hits:
        parts.append(f"You covered {join_concepts(hits)}.")
    elif missed:
        parts.append(f"Try to mention {join_concepts(missed)}.")
    if bonus:
        parts.append(f"Bonus points for mentioning {join_concepts(bonus)}.")
    return " ".join(parts) or None
