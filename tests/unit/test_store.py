"""Unit tests for the persistent store."""

from __future__ import annotations

from pathlib import Path

import pytest

from zjump.core.entry import Entry
from zjump.core.result import Err, Ok, StoreError
from zjump.core.store import MAX_SCORE, Store


class TestLoad:
    """Tests for reading the data file."""

    def test_missing_file_is_empty_store(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        assert store.load() == Ok(0)
        assert len(store) == 0
        assert not data_file.exists()

    def test_loads_valid_lines(self, write_store, data_file: Path, clock) -> None:
        write_store(
            [
                Entry("/home/user/projects", 5.0, clock.now - 100),
                Entry("/home/user/documents", 3.0, clock.now - 200),
            ]
        )
        store = Store(data_file, clock=clock)

        assert store.load() == Ok(2)
        expected = Entry("/home/user/projects", 5.0, clock.now - 100)
        assert store.get("/home/user/projects") == expected
        assert "/home/user/documents" in store

    def test_skips_malformed_lines(self, data_file: Path, clock) -> None:
        data_file.write_text(
            "/good|2.0|100\n"
            "not a record\n"
            "\n"
            "/bad-rank|high|100\n"
            "/bad-time|1.0|yesterday\n"
            "/also-good|1|200\n",
            encoding="utf-8",
        )
        store = Store(data_file, clock=clock)

        assert store.load() == Ok(2)
        assert sorted(entry.path for entry in store.entries()) == ["/also-good", "/good"]

    def test_later_duplicate_wins(self, data_file: Path, clock) -> None:
        data_file.write_text("/dup|1.0|100\n/dup|7.0|300\n", encoding="utf-8")
        store = Store.open(data_file, clock=clock)

        assert len(store) == 1
        assert store.get("/dup") == Entry("/dup", 7.0, 300)

    def test_unreadable_file_is_reported_not_raised(self, tmp_path: Path, clock) -> None:
        directory = tmp_path / "a-directory"
        directory.mkdir()
        store = Store(directory, clock=clock)

        result = store.load()

        assert isinstance(result, Err)
        assert isinstance(result.error, StoreError)
        assert len(store) == 0

    def test_load_replaces_in_memory_entries(self, write_store, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        store.add("/transient")
        write_store([Entry("/persisted", 2.0, 10)])

        store.load()

        assert "/transient" not in store
        assert "/persisted" in store

    def test_undecodable_bytes_survive_round_trip(self, data_file: Path, clock) -> None:
        raw = b"/tmp/caf\xe9|1.0|5\n"
        data_file.write_bytes(raw)
        store = Store.open(data_file, clock=clock)

        assert len(store) == 1
        assert store.save().is_ok()
        assert data_file.read_bytes() == raw


class TestSave:
    """Tests for rewriting the data file."""

    def test_round_trip_preserves_entries(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        store.add("/test/path1")
        clock.advance(30)
        store.add("/test/path2")
        store.add("/test/path1")

        reloaded = Store.open(data_file, clock=clock)

        assert len(reloaded) == 2
        assert reloaded.get("/test/path1") == Entry("/test/path1", 2.0, clock.now)
        assert reloaded.get("/test/path2") == Entry("/test/path2", 1.0, clock.now)

    def test_round_trip_preserves_aged_ranks(self, write_store, data_file: Path, clock) -> None:
        aged = [Entry(f"/dir/{i}", 123.456 * 0.99**i, clock.now - i) for i in range(5)]
        write_store(aged)

        store = Store.open(data_file, clock=clock)
        assert store.save().is_ok()
        reloaded = Store.open(data_file, clock=clock)

        assert sorted(reloaded.entries(), key=lambda e: e.path) == aged

    def test_save_returns_data_file(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        assert store.save() == Ok(data_file)
        assert data_file.read_text(encoding="utf-8") == ""

    def test_save_creates_parent_directory(self, tmp_path: Path, clock) -> None:
        target = tmp_path / "nested" / "dir" / "z"
        store = Store(target, clock=clock)

        assert store.add("/home").is_ok()
        assert target.exists()

    def test_save_failure_is_absorbed(self, tmp_path: Path, clock) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = Store(blocker / "z", clock=clock)

        result = store.add("/home/user")

        assert isinstance(result, Err)
        assert isinstance(result.error, StoreError)
        assert result.error.context["path"] == str(blocker / "z")
        # The in-memory mutation stands even though persisting failed.
        assert store.get("/home/user") == Entry("/home/user", 1.0, clock.now)

    def test_no_temp_file_left_behind(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        store.add("/a")
        names = [p.name for p in data_file.parent.iterdir() if p.name.startswith("z-data")]
        assert names == ["z-data"]

    def test_failed_replace_removes_temp_file(self, tmp_path: Path, clock) -> None:
        home = tmp_path / "home"
        (home / "zdata").mkdir(parents=True)
        store = Store(home / "zdata", clock=clock)

        result = store.add("/home/user")

        assert isinstance(result, Err)
        assert sorted(p.name for p in home.iterdir()) == ["zdata"]


class TestAdd:
    """Tests for recording visits."""

    def test_add_new_directory(self, data_file: Path, clock, read_store) -> None:
        store = Store(data_file, clock=clock)

        assert store.add("/new/directory").is_ok()

        assert store.get("/new/directory") == Entry("/new/directory", 1.0, clock.now)
        assert read_store() == {"/new/directory": (1.0, clock.now)}

    def test_path_with_line_break_is_refused(
        self, write_store, data_file: Path, clock, read_store
    ) -> None:
        write_store([Entry("/home/user", 2.0, clock.now)])
        store = Store.open(data_file, clock=clock)

        result = store.add("/tmp/evil\n/etc")

        assert isinstance(result, Err)
        assert result.error.context["path"] == "/tmp/evil\n/etc"
        assert len(store) == 1
        assert read_store() == {"/home/user": (2.0, clock.now)}

    def test_add_existing_directory(self, write_store, data_file: Path, clock) -> None:
        write_store([Entry("/home/user/projects", 5.0, clock.now - 500)])
        store = Store.open(data_file, clock=clock)

        store.add("/home/user/projects")

        assert store.get("/home/user/projects") == Entry("/home/user/projects", 6.0, clock.now)

    def test_add_refreshes_last_access(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)
        store.add("/a")
        clock.advance(1000)
        store.add("/a")

        entry = store.get("/a")
        assert entry is not None
        assert entry.last_access == clock.now
        assert entry.rank == 2.0


class TestAging:
    """Tests for the aging policy triggered by add."""

    def test_aging_when_rank_exceeds_limit(self, write_store, data_file: Path, clock) -> None:
        seeded = [Entry(f"/busy/{i}", 900.0, clock.now - i) for i in range(10)]
        seeded.append(Entry("/rare", 1.0, clock.now - 10_000))
        write_store(seeded)
        store = Store.open(data_file, clock=clock)
        initial_count = len(store)
        assert store.total_rank() > MAX_SCORE - 1

        store.add("/new")

        assert len(store) <= initial_count + 1
        assert all(entry.rank >= 1.0 for entry in store.entries())
        assert store.get("/busy/0").rank == pytest.approx(891.0)
        # Rank 1.0 decays to 0.99 and is evicted, including the fresh visit.
        assert "/rare" not in store
        assert "/new" not in store

    def test_aged_ranks_are_persisted(
        self, write_store, data_file: Path, clock, read_store
    ) -> None:
        write_store([Entry("/big", 9000.0, clock.now)])
        store = Store.open(data_file, clock=clock)

        store.add("/big")

        rank, last_access = read_store()["/big"]
        assert rank == pytest.approx(9001.0 * 0.99)
        assert last_access == clock.now

    def test_no_aging_at_exactly_the_ceiling(self, write_store, data_file: Path, clock) -> None:
        seeded = [Entry(f"/d/{i}", 999.0, clock.now) for i in range(9)]
        seeded.append(Entry("/small", 8.0, clock.now))
        write_store(seeded)
        store = Store.open(data_file, clock=clock)

        store.add("/new")

        assert store.total_rank() == MAX_SCORE
        assert store.get("/small").rank == 8.0
        assert store.get("/new").rank == 1.0

    def test_ages_once_per_add(self, write_store, data_file: Path, clock) -> None:
        write_store([Entry("/huge", 20_000.0, clock.now)])
        store = Store.open(data_file, clock=clock)

        store.add("/huge")

        # Still far above the ceiling, but only one 1% decay is applied.
        assert store.get("/huge").rank == pytest.approx(20_001.0 * 0.99)

    def test_custom_ceiling(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock, max_score=3.0)
        for _ in range(3):
            store.add("/a")
        assert store.get("/a").rank == 3.0

        store.add("/a")

        assert store.get("/a").rank == pytest.approx(4.0 * 0.99)


class TestRemove:
    """Tests for forgetting directories."""

    def test_remove_existing(self, write_store, data_file: Path, clock, read_store) -> None:
        write_store([Entry("/keep", 1.0, 1), Entry("/drop", 2.0, 2)])
        store = Store.open(data_file, clock=clock)

        assert store.remove("/drop").is_ok()

        assert "/drop" not in store
        assert read_store() == {"/keep": (1.0, 1)}

    def test_remove_missing_is_noop(self, write_store, data_file: Path, clock) -> None:
        write_store([Entry("/keep", 1.0, 1)])
        store = Store.open(data_file, clock=clock)

        assert store.remove("/never/visited").is_ok()

        assert len(store) == 1


class TestPrune:
    """Tests for dropping directories that no longer exist."""

    def test_prune_removes_only_missing(
        self, tmp_path: Path, data_file: Path, clock, read_store
    ) -> None:
        alive = tmp_path / "alive"
        alive.mkdir()
        store = Store(data_file, clock=clock)
        store.add(str(alive))
        store.add(str(tmp_path / "gone"))

        assert store.prune() == Ok(1)

        assert list(read_store()) == [str(alive)]

    def test_prune_without_stale_entries_does_not_write(self, data_file: Path, clock) -> None:
        store = Store(data_file, clock=clock)

        assert store.prune(exists=lambda _path: True) == Ok(0)
        assert not data_file.exists()


def test_concurrent_writers_last_one_wins(data_file: Path, clock, read_store) -> None:
    """Known limitation: separate invocations are not coordinated."""
    first = Store.open(data_file, clock=clock)
    second = Store.open(data_file, clock=clock)

    first.add("/from/first")
    second.add("/from/second")

    assert list(read_store()) == ["/from/second"]
