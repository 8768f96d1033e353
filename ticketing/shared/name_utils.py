"""Name normalization and nickname equivalence for duplicate detection."""

from __future__ import annotations

import re

from .nickname_groups import find_nickname_variations


def normalize_name(name: str) -> str:
    """Normalize a name for exact comparison.

    1. Strip leading/trailing whitespace
    2. Convert to lowercase
    3. Collapse internal whitespace into single spaces
    """
    return " ".join(name.strip().lower().split())


def loose_name(name: str) -> str:
    """Normalize a name and drop punctuation: . , ' " ( ) -

    "Ma. Cristina" -> "ma cristina", "O'Neil" -> "oneil"
    """
    name = normalize_name(name)
    name = re.sub(r"[.,'\"()]", "", name)
    name = name.replace("-", " ")
    return " ".join(name.split())


def first_names_equivalent(first: str, other: str) -> bool:
    """Check if two first names plausibly refer to the same person.

    True when the names match after punctuation is dropped, when either
    name's leading word is a known nickname of the other's, or when one is
    the other's leading word ("Juan" vs "Juan Carlos").
    """
    a, b = loose_name(first), loose_name(other)
    if not a or not b:
        return False
    if a == b:
        return True

    a_head, b_head = a.split()[0], b.split()[0]
    if a_head == b or b_head == a:
        return True

    return b_head in find_nickname_variations(a_head)
