"""Time sources for the store.

The store never samples the wall clock directly; it is handed a ``Clock`` so
tests can pin "now" to a fixed instant.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


__all__ = ["Clock", "system_clock"]
