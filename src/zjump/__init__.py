"""zjump - jump to frecently used directories from the command line.

This package provides the core functionality for the `zjump` command-line
tool: a persistent store of visited directories, frecency scoring, pattern
matching, and shell integration.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
