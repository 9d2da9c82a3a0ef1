"""Filtering and ranking of remembered directories.

A pattern is split on whitespace; an entry matches when its path contains
every word, ignoring case. Matches are then ordered by one of three keys.
Equal keys fall back to ascending path so results are deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum

from zjump.core.entry import Entry


class MatchMode(str, Enum):
    FRECENCY = "frecency"
    RANK = "rank"
    TIME = "time"


def query_words(pattern: str) -> list[str]:
    return pattern.split()


def is_match(entry: Entry, words: Sequence[str], restrict_to: str | None = None) -> bool:
    """Case-insensitive all-words substring test, optionally under a prefix."""
    path = entry.path.lower()
    if restrict_to is not None and not path.startswith(restrict_to.lower()):
        return False
    return all(word.lower() in path for word in words)


def find_matches(
    entries: Iterable[Entry],
    pattern: str,
    *,
    mode: MatchMode = MatchMode.FRECENCY,
    restrict_to: str | None = None,
    now: int,
) -> list[Entry]:
    """Return matching entries, most relevant first."""
    words = query_words(pattern)
    candidates = [entry for entry in entries if is_match(entry, words, restrict_to)]

    if mode is MatchMode.RANK:
        keyed = [(entry.rank, entry) for entry in candidates]
    elif mode is MatchMode.TIME:
        keyed = [(entry.last_access, entry) for entry in candidates]
    else:
        # Scored once per entry against a single "now".
        keyed = [(entry.frecency(now), entry) for entry in candidates]

    keyed.sort(key=lambda pair: (-pair[0], pair[1].path))
    return [entry for _score, entry in keyed]


__all__ = ["MatchMode", "find_matches", "is_match", "query_words"]
