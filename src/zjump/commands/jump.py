"""The ``zjump`` command: record, list and jump to directories.

Stdout only ever carries a path (or a listing) so shell integration can
``cd "$(zjump pattern)"``; every diagnostic goes to stderr.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel

from zjump import __version__
from zjump.core.config import AppConfig, load_config
from zjump.core.console import console, setup_logging, stderr_console
from zjump.core.matcher import MatchMode, find_matches
from zjump.core.resolver import best_match, resolve
from zjump.core.result import Err, NoMatchError, Ok, StaleEntryError
from zjump.core.store import Store
from zjump.core.templates import SUPPORTED_SHELLS, render_shell_init

PROG_NAME = "zjump"


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__, highlight=False)
        raise typer.Exit()


def _current_dir() -> str | None:
    try:
        return str(Path.cwd())
    except OSError:
        return None


def _is_excluded(path: str, exclude_dirs: Sequence[str]) -> bool:
    return any(
        path == excluded or path.startswith(excluded.rstrip("/") + "/")
        for excluded in exclude_dirs
    )


def _match_mode(rank: bool, time_: bool) -> MatchMode:
    if rank:
        return MatchMode.RANK
    if time_:
        return MatchMode.TIME
    return MatchMode.FRECENCY


def _error(message: str) -> None:
    stderr_console.print(f"[red]z: {escape(message)}[/red]", soft_wrap=True, highlight=False)


def _open_store(config: AppConfig) -> Store:
    return Store.open(config.data, max_score=config.max_score)


def _load_settings(config_path: Path | None, verbose: bool) -> AppConfig:
    config, meta = load_config(config_path=config_path)
    logger = setup_logging(level=config.log_level, verbose=verbose)

    if meta.error:
        stderr_console.print(
            Panel(
                f"[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
                f"Failed to load {escape(str(meta.path))}:\n{escape(meta.error)}\n\n"
                f"[yellow]Using default settings.[/yellow]",
                border_style="red",
            )
        )
    else:
        logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )
    return config


def jump(
    pattern: list[str] | None = typer.Argument(
        None, help="Directory pattern to match; words are joined with spaces.", show_default=False
    ),
    list_: bool = typer.Option(False, "-l", "--list", help="List matching directories."),
    rank: bool = typer.Option(False, "-r", "--rank", help="Match by rank only."),
    time_: bool = typer.Option(False, "-t", "--time", help="Match by recent access only."),
    current: bool = typer.Option(
        False,
        "-c",
        "--current",
        help="Restrict matches to subdirectories of the current directory.",
    ),
    echo: bool = typer.Option(False, "-e", "--echo", help="Echo the best match, don't cd to it."),
    exclude: bool = typer.Option(
        False, "-x", "--exclude", help="Remove the current directory from the datafile."
    ),
    add: bool = typer.Option(False, "--add", help="Add the current directory to the datafile."),
    clean: bool = typer.Option(
        False, "--clean", help="Remove entries whose directories no longer exist."
    ),
    init_shell: str | None = typer.Option(
        None,
        "--init",
        metavar="SHELL",
        help=f"Print shell integration for one of: {', '.join(SUPPORTED_SHELLS)}.",
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to a zjump config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the zjump version.",
    ),
) -> None:
    """Jump around faster: cd to the most frecent directory matching PATTERN."""
    _ = version
    config = _load_settings(config_path, verbose)

    if init_shell is not None:
        if init_shell not in SUPPORTED_SHELLS:
            raise typer.BadParameter(
                f"expected one of {', '.join(SUPPORTED_SHELLS)}", param_hint="--init"
            )
        typer.echo(render_shell_init(init_shell, cmd=config.cmd, executable=PROG_NAME), nl=False)
        return

    store = _open_store(config)

    if add:
        cwd = _current_dir()
        if cwd is not None and not _is_excluded(cwd, config.exclude_dirs):
            store.add(cwd)
        return

    if exclude:
        cwd = _current_dir()
        if cwd is not None:
            store.remove(cwd)
        return

    if clean:
        match store.prune():
            case Ok(removed):
                stderr_console.print(
                    f"Removed {removed} stale entries", soft_wrap=True, highlight=False
                )
            case Err(err):
                _error(err.message)
                raise typer.Exit(code=1)
        return

    query = " ".join(pattern or [])
    if not query and not list_:
        _error("a pattern is required unless listing with -l")
        raise typer.Exit(code=2)

    mode = _match_mode(rank, time_)
    restrict_to = _current_dir() if current else None

    if list_:
        now = store.now()
        matches = find_matches(
            store.entries(), query, mode=mode, restrict_to=restrict_to, now=now
        )
        for entry in matches:
            typer.echo(f"{entry.frecency(now):<10} {entry.rank:<10g} {entry.path}")
        return

    if echo:
        outcome = best_match(store, query, mode=mode, restrict_to=restrict_to)
    else:
        outcome = resolve(store, query, mode=mode, restrict_to=restrict_to)

    match outcome:
        case Ok(entry):
            typer.echo(entry.path)
        case Err(NoMatchError() as err):
            _error(f"no matches found for: {err.context['pattern']}")
            raise typer.Exit(code=1)
        case Err(StaleEntryError() as err):
            _error(f"directory no longer exists: {err.context['path']}")
            raise typer.Exit(code=1)


__all__ = ["PROG_NAME", "jump"]
