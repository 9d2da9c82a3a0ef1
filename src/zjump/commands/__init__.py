"""CLI command modules for zjump.

    - jump: record, list, and jump to remembered directories
"""

from __future__ import annotations

from . import jump

__all__ = ["jump"]
