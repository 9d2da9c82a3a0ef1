"""Core engine and shared infrastructure for zjump.

This package contains:
    - entry: remembered directories and frecency scoring
    - store: the persistent data file
    - matcher: pattern filtering and ranking
    - resolver: best-match selection and stale-entry eviction
    - config: application configuration management
    - console: Rich console output and logging
    - result: error handling patterns
"""

from __future__ import annotations

from . import config, console

__all__ = ["config", "console"]
