# src/validation/matching.py — v1
"""Label matching strategies used to tie framework items to inputs and output.

Matching is approximate by nature. Validators receive a LabelMatcher so a
stricter algorithm can be swapped in without touching validation control flow.
"""

from __future__ import annotations

import re
from typing import Protocol


class LabelMatcher(Protocol):
    """Decide whether `needle` is expressed inside `haystack`."""

    def matches(self, haystack: str, needle: str) -> bool: ...


class SubstringMatcher:
    """Case-insensitive substring containment (the default)."""

    def matches(self, haystack: str, needle: str) -> bool:
        needle = needle.strip().lower()
        if not needle:
            return False
        return needle in haystack.lower()


class WholeWordMatcher:
    """Case-insensitive match that requires word boundaries around the needle."""

    def matches(self, haystack: str, needle: str) -> bool:
        needle = needle.strip()
        if not needle:
            return False
        pattern = r"(?<!\w)" + re.escape(needle) + r"(?!\w)"
        return re.search(pattern, haystack, re.IGNORECASE) is not None


DEFAULT_MATCHER: LabelMatcher = SubstringMatcher()


def tail_segment(label: str) -> str:
    """Return the part of a label after its last colon ("LEVER 1: PRICE" -> "PRICE")."""
    if ":" not in label:
        return label.strip()
    return label.rsplit(":", 1)[1].strip()
