"""Remembered directories and their data-file representation.

Each line of the data file describes one entry::

    <path>|<rank>|<last_access>

``rank`` is a decimal number and ``last_access`` a non-negative Unix
timestamp in seconds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from zjump.core.result import EntryParseError, Err, Ok, Result

FIELD_SEPARATOR = "|"


@dataclass(slots=True)
class Entry:
    path: str
    rank: float
    last_access: int

    def frecency(self, now: int) -> int:
        """Blend rank with time since last access into a single score.

        A ``last_access`` later than ``now`` counts as zero elapsed time.
        """
        elapsed = max(0, now - self.last_access)
        return math.floor(10000 * self.rank * (3.75 / ((0.0001 * elapsed + 1) + 0.25)))

    def to_line(self) -> str:
        return f"{self.path}{FIELD_SEPARATOR}{self.rank!r}{FIELD_SEPARATOR}{self.last_access}"


def parse_line(line: str) -> Result[Entry, EntryParseError]:
    """Parse one data-file line into an Entry.

    Never raises; every malformed line comes back as ``Err``.
    """
    text = line.rstrip("\r\n")
    parts = text.split(FIELD_SEPARATOR, 2)
    if len(parts) != 3 or not parts[0]:
        return Err(EntryParseError("Expected path|rank|time", context={"line": text}))

    path, raw_rank, raw_time = parts

    try:
        rank = float(raw_rank)
    except ValueError:
        return Err(EntryParseError("Rank is not a number", context={"rank": raw_rank}))
    if not math.isfinite(rank):
        return Err(EntryParseError("Rank is not finite", context={"rank": raw_rank}))

    if not raw_time.isascii() or not raw_time.isdigit():
        return Err(
            EntryParseError("Access time is not a non-negative integer", context={"time": raw_time})
        )

    return Ok(Entry(path=path, rank=rank, last_access=int(raw_time)))


__all__ = ["Entry", "FIELD_SEPARATOR", "parse_line"]
