"""Turn a pattern into a directory to jump to."""

from __future__ import annotations

import os
from collections.abc import Callable

from zjump.core.console import get_logger
from zjump.core.entry import Entry
from zjump.core.matcher import MatchMode, find_matches
from zjump.core.result import Err, NoMatchError, Ok, Result, StaleEntryError
from zjump.core.store import Store

logger = get_logger(__name__)


def best_match(
    store: Store,
    pattern: str,
    *,
    mode: MatchMode = MatchMode.FRECENCY,
    restrict_to: str | None = None,
) -> Result[Entry, NoMatchError]:
    """Highest ranked entry for ``pattern``, without touching the filesystem."""
    matches = find_matches(
        store.entries(), pattern, mode=mode, restrict_to=restrict_to, now=store.now()
    )
    if not matches:
        return Err(NoMatchError("No matches found", context={"pattern": pattern}))
    return Ok(matches[0])


def resolve(
    store: Store,
    pattern: str,
    *,
    mode: MatchMode = MatchMode.FRECENCY,
    restrict_to: str | None = None,
    exists: Callable[[str], bool] = os.path.isdir,
) -> Result[Entry, NoMatchError | StaleEntryError]:
    """Pick the best match and record the jump.

    A best match whose directory has disappeared is evicted from the store
    and reported as ``StaleEntryError``; lower ranked matches are not tried.
    """
    match best_match(store, pattern, mode=mode, restrict_to=restrict_to):
        case Err(err):
            return Err(err)
        case Ok(entry):
            pass

    if not exists(entry.path):
        logger.debug("Evicting stale entry %s", entry.path)
        store.remove(entry.path)
        return Err(StaleEntryError("Directory no longer exists", context={"path": entry.path}))

    store.add(entry.path)
    return Ok(entry)


__all__ = ["best_match", "resolve"]
