from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from zjump.core.entry import Entry  # noqa: E402

NOW = 1_700_000_000

_ENV_KEYS = ("_Z_MAX_SCORE", "_Z_EXCLUDE_DIRS", "_Z_CMD", "_Z_LOG_LEVEL")


class MutableClock:
    """Clock whose current time tests can move."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config and data file at temp paths so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("ZJUMP_CONFIG", str(cfg_path))
    monkeypatch.setenv("_Z_DATA", str(tmp_path / "z-data"))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return cfg_path


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "z-data"


@pytest.fixture
def write_store(data_file: Path) -> Callable[[list[Entry]], Path]:
    """Seed the data file with entries."""

    def _write(entries: list[Entry]) -> Path:
        data_file.write_text("".join(entry.to_line() + "\n" for entry in entries), encoding="utf-8")
        return data_file

    return _write


@pytest.fixture
def read_store(data_file: Path) -> Callable[[], dict[str, tuple[float, int]]]:
    """Parse the data file into path -> (rank, last_access)."""

    def _read() -> dict[str, tuple[float, int]]:
        result: dict[str, tuple[float, int]] = {}
        for line in data_file.read_text(encoding="utf-8").splitlines():
            entry_path, rank, last_access = line.split("|")
            result[entry_path] = (float(rank), int(last_access))
        return result

    return _read
