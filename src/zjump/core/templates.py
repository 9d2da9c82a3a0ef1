"""Jinja2 template utilities for shell integration scripts.

This module provides:
- resolve_template_root: Find the templates directory
- get_template_environment: Cached template environment factory
- render_template: Render a template by name
- render_shell_init: Render the integration script for a shell
"""

from __future__ import annotations

import shlex
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

SUPPORTED_SHELLS = ("bash", "zsh", "fish")


def resolve_template_root() -> Path:
    """Resolve the package templates directory (zjump/templates).

    Raises:
        FileNotFoundError: If the templates directory is missing.
    """
    package_templates = Path(__file__).parent.parent / "templates"
    if package_templates.is_dir():
        return package_templates.resolve()

    raise FileNotFoundError("No templates directory found")


@lru_cache(maxsize=4)
def get_template_environment(template_root: Path) -> Environment:
    """Create or retrieve a cached Jinja2 Environment.

    Shell scripts are not HTML, so autoescaping stays off; the ``shquote``
    filter quotes values for POSIX shells.
    """
    env = Environment(
        loader=FileSystemLoader(str(template_root)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["shquote"] = shlex.quote
    return env


def render_template(name: str, context: dict[str, object]) -> str:
    """Render a template by name with the given context.

    Raises:
        FileNotFoundError: If template or templates directory not found.
    """
    root = resolve_template_root()
    env = get_template_environment(root)
    try:
        template = env.get_template(name)
    except TemplateNotFound as exc:
        raise FileNotFoundError(f"Template {name} not found in {root}") from exc
    return template.render(**context)


def render_shell_init(shell: str, *, cmd: str, executable: str) -> str:
    """Integration script defining ``cmd`` and a prompt hook for ``shell``."""
    if shell not in SUPPORTED_SHELLS:
        expected = ", ".join(SUPPORTED_SHELLS)
        raise ValueError(f"Unsupported shell {shell!r}; expected one of {expected}")
    return render_template(f"init.{shell}.j2", {"cmd": cmd, "executable": executable})


__all__ = [
    "SUPPORTED_SHELLS",
    "get_template_environment",
    "render_shell_init",
    "render_template",
    "resolve_template_root",
]
