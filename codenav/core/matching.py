"""Fuzzy symbol-name matching and ranking."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if a == b:
        return 0
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (0 if ca == cb else 1),
                )
            )
        previous = current
    return previous[-1]


def matches_camel_case(name: str, query: str) -> bool:
    """Whether ``query`` is a case-insensitive ordered subsequence of ``name``.

    >>> matches_camel_case("UserService", "USvc")
    True
    """
    q = query.lower()
    i = 0
    for ch in name.lower():
        if i >= len(q):
            break
        if ch == q[i]:
            i += 1
    return i >= len(q)


def matches_query(name: str, query: str) -> bool:
    """Substring match, else camel-case subsequence match."""
    if query.lower() in name.lower():
        return True
    return matches_camel_case(name, query)


def rank_key(name: str, query: str) -> tuple[bool, int]:
    """Sort key: exact (case-insensitive) hits first, then edit distance."""
    lowered_name = name.lower()
    lowered_query = query.lower()
    return (lowered_name != lowered_query, levenshtein(lowered_query, lowered_name))


def rank_matches(items: Iterable[T], query: str, name_of: Callable[[T], str]) -> list[T]:
    """Stable sort of ``items`` by relevance to ``query``."""
    return sorted(items, key=lambda item: rank_key(name_of(item), query))
