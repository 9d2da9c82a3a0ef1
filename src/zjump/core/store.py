"""Persistent store of remembered directories.

The store is a read-modify-write cache: one invocation loads the data file,
applies a handful of mutations and rewrites the file in full after each one.
I/O failures never propagate as exceptions. They come back as ``Err`` values
so callers can ignore them deliberately (the shell hook does) or report them.

Concurrent invocations are not coordinated; the last writer wins.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

from zjump.core.clock import Clock, system_clock
from zjump.core.console import get_logger
from zjump.core.entry import Entry, parse_line
from zjump.core.result import Err, Ok, Result, StoreError, try_result

logger = get_logger(__name__)

DEFAULT_DATA_FILE = Path.home() / ".z"
MAX_SCORE = 9000.0
AGING_FACTOR = 0.99
MIN_RANK = 1.0

# Undecodable bytes in paths survive a load/save cycle unchanged.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _write_lines(path: Path, lines: list[str]) -> None:
    """Atomically rewrite ``path`` with ``lines``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with temp_path.open("w", encoding=_ENCODING, errors=_ERRORS) as fh:
            for line in lines:
                fh.write(line + "\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class Store:
    """Mapping of path to Entry backed by a flat text file."""

    def __init__(
        self,
        data_file: Path,
        *,
        clock: Clock = system_clock,
        max_score: float = MAX_SCORE,
    ) -> None:
        self._data_file = data_file
        self._clock = clock
        self._max_score = max_score
        self._entries: dict[str, Entry] = {}

    @classmethod
    def open(
        cls,
        data_file: Path,
        *,
        clock: Clock = system_clock,
        max_score: float = MAX_SCORE,
    ) -> Store:
        """Construct a store and load its data file."""
        store = cls(data_file, clock=clock, max_score=max_score)
        store.load()
        return store

    @property
    def data_file(self) -> Path:
        return self._data_file

    def now(self) -> int:
        return self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def get(self, path: str) -> Entry | None:
        return self._entries.get(path)

    def entries(self) -> Iterator[Entry]:
        return iter(list(self._entries.values()))

    def total_rank(self) -> float:
        return sum(entry.rank for entry in self._entries.values())

    def load(self) -> Result[int, StoreError]:
        """Replace the in-memory entries with the contents of the data file.

        A missing file is an empty store. Malformed lines are skipped. An
        unreadable file leaves the store empty and is reported as ``Err``.
        """
        self._entries = {}
        read = try_result(
            lambda: self._data_file.read_text(encoding=_ENCODING, errors=_ERRORS), OSError
        )
        match read:
            case Err(FileNotFoundError()):
                logger.debug("No data file at %s; starting empty", self._data_file)
                return Ok(0)
            case Err(exc):
                logger.debug("Could not read %s: %s", self._data_file, exc)
                return Err(
                    StoreError(
                        "Failed to read data file",
                        context={"path": str(self._data_file), "error": str(exc)},
                    )
                )
            case Ok(text):
                pass

        # str.splitlines() would also break on form feeds and Unicode separators.
        for line in text.split("\n"):
            if not line.strip():
                continue
            match parse_line(line):
                case Ok(entry):
                    self._entries[entry.path] = entry
                case Err(err):
                    logger.debug("Skipping malformed line in %s: %s", self._data_file, err)

        return Ok(len(self._entries))

    def save(self) -> Result[Path, StoreError]:
        """Rewrite the data file from the in-memory entries."""
        lines = [entry.to_line() for entry in self._entries.values()]
        try:
            _write_lines(self._data_file, lines)
        except OSError as exc:
            logger.debug("Could not write %s: %s", self._data_file, exc)
            return Err(
                StoreError(
                    "Failed to write data file",
                    context={"path": str(self._data_file), "error": str(exc)},
                )
            )
        return Ok(self._data_file)

    def add(self, path: str) -> Result[Path, StoreError]:
        """Record a visit to ``path`` and persist.

        Visiting bumps rank by one and refreshes the access time. When the
        summed rank then exceeds the ceiling, every rank decays by 1% and
        entries that fall below rank 1.0 are dropped.

        Paths containing a line break cannot be stored and are refused.
        """
        if "\n" in path or "\r" in path:
            logger.debug("Refusing to record path with a line break: %r", path)
            return Err(StoreError("Path contains a line break", context={"path": path}))

        now = self._clock()
        entry = self._entries.get(path)
        if entry is None:
            self._entries[path] = Entry(path=path, rank=1.0, last_access=now)
        else:
            entry.rank += 1.0
            entry.last_access = now

        if self.total_rank() > self._max_score:
            self._age()

        return self.save()

    def _age(self) -> None:
        before = len(self._entries)
        for entry in self._entries.values():
            entry.rank *= AGING_FACTOR
        self._entries = {
            path: entry for path, entry in self._entries.items() if entry.rank >= MIN_RANK
        }
        logger.debug("Aged store: %d -> %d entries", before, len(self._entries))

    def remove(self, path: str) -> Result[Path, StoreError]:
        """Forget ``path`` (no-op if unknown) and persist."""
        self._entries.pop(path, None)
        return self.save()

    def prune(self, exists: Callable[[str], bool] = os.path.isdir) -> Result[int, StoreError]:
        """Drop entries whose directory no longer exists.

        Returns the number of entries removed. The file is only rewritten when
        something was removed.
        """
        stale = [path for path in self._entries if not exists(path)]
        if not stale:
            return Ok(0)

        for path in stale:
            logger.debug("Pruning stale entry: %s", path)
            del self._entries[path]

        match self.save():
            case Err(err):
                return Err(err)
            case Ok(_):
                return Ok(len(stale))


__all__ = ["AGING_FACTOR", "DEFAULT_DATA_FILE", "MAX_SCORE", "MIN_RANK", "Store"]
