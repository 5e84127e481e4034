"""Tests for the on-disk pane cache."""

import pytest

from tmux_sessionizer.pane_cache import (
    PaneCache,
    PaneKey,
    SplitMode,
    atomic_write_file,
    format_entry,
    parse_entry,
)

VSPLIT_3 = PaneKey(3, SplitMode.VERTICAL)


@pytest.fixture
def cache(tmp_path):
    return PaneCache(tmp_path / "cache" / "panes.cache")


class TestLookup:
    def test_missing_file_is_empty_and_initialized(self, cache):
        assert cache.lookup(VSPLIT_3) is None
        assert cache.path.exists()
        assert cache.path.read_text() == ""

    def test_reads_existing_record(self, cache):
        cache.path.parent.mkdir(parents=True)
        cache.path.write_text("3:vsplit:%5\n")

        assert cache.lookup(VSPLIT_3) == "%5"
        assert cache.lookup(PaneKey(3, SplitMode.HORIZONTAL)) is None

    def test_malformed_lines_are_skipped(self, cache):
        cache.path.parent.mkdir(parents=True)
        cache.path.write_text("garbage\nx:vsplit:%1\n1:diagonal:%2\n3:vsplit:%5\n\n")

        assert cache.entries() == {VSPLIT_3: "%5"}


class TestStore:
    def test_store_then_lookup(self, cache):
        cache.store(VSPLIT_3, "%5")

        assert cache.lookup(VSPLIT_3) == "%5"
        assert cache.path.read_text() == "3:vsplit:%5\n"

    def test_new_value_supersedes_old(self, cache):
        cache.store(VSPLIT_3, "%5")
        cache.store(PaneKey(1, SplitMode.HORIZONTAL), "%7")
        cache.store(VSPLIT_3, "%9")

        assert cache.lookup(VSPLIT_3) == "%9"
        lines = cache.path.read_text().splitlines()
        assert sorted(lines) == ["1:hsplit:%7", "3:vsplit:%9"]

    def test_duplicate_keys_on_disk_collapse(self, cache):
        cache.path.parent.mkdir(parents=True)
        cache.path.write_text("3:vsplit:%1\n3:vsplit:%2\n")
        cache.store(PaneKey(0, SplitMode.VERTICAL), "%3")

        assert cache.path.read_text().count("3:vsplit:") == 1

    def test_rejects_separator_in_pane_id(self, cache):
        with pytest.raises(ValueError):
            cache.store(VSPLIT_3, "%5:bad")

    def test_no_temp_files_left_behind(self, cache):
        cache.store(VSPLIT_3, "%5")

        leftovers = [p.name for p in cache.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []


class TestGarbageCollect:
    def test_purges_dead_panes(self, cache):
        cache.path.parent.mkdir(parents=True)
        cache.path.write_text("3:vsplit:%5\n")

        assert cache.garbage_collect({"%5", "%9"}) == 0
        assert cache.lookup(VSPLIT_3) == "%5"

        assert cache.garbage_collect({"%9"}) == 1
        assert cache.lookup(VSPLIT_3) is None

    def test_removes_exactly_the_dead_entries(self, cache):
        cache.store(PaneKey(0, SplitMode.VERTICAL), "%1")
        cache.store(PaneKey(1, SplitMode.VERTICAL), "%2")
        cache.store(PaneKey(1, SplitMode.HORIZONTAL), "%3")

        removed = cache.garbage_collect(["%1", "%3", "%42"])

        assert removed == 1
        assert cache.entries() == {
            PaneKey(0, SplitMode.VERTICAL): "%1",
            PaneKey(1, SplitMode.HORIZONTAL): "%3",
        }


class TestRecordFormat:
    def test_parse(self):
        assert parse_entry("12:hsplit:%40") == (PaneKey(12, SplitMode.HORIZONTAL), "%40")

    def test_format(self):
        assert format_entry(PaneKey(2, SplitMode.VERTICAL), "%1") == "2:vsplit:%1"

    @pytest.mark.parametrize("line", ["", "1:vsplit", "-1:vsplit:%1", "1:vsplit:", "1:vsplit:%1:x"])
    def test_parse_rejects(self, line):
        with pytest.raises(ValueError):
            parse_entry(line)


def test_atomic_write_creates_parents(tmp_path):
    target = tmp_path / "a" / "b" / "file.txt"

    atomic_write_file(target, "hello\n")

    assert target.read_text() == "hello\n"
