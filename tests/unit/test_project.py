"""Unit tests for Fontgarden persistence."""

import os
from pathlib import Path

import pytest

from fontgardener.domain import GlyphData, GlyphEntry, GlyphRecord, fingerprint
from fontgardener.exceptions import (
    ContentNotFoundError,
    InvalidNameError,
    NotAFontgardenError,
    StoreCorruptionError,
    StoreIOError,
    UnknownSetError,
)
from fontgardener.store import Fontgarden, ProjectState, validate_set_name
from fontgardener.store.project import content_path


def populate(garden: Fontgarden) -> tuple[str, str]:
    """Fill a garden with two sets, two sources and shared content."""
    state = garden.state.copy()
    state.sources["Regular"] = "public.default"
    state.sources["Bold"] = "foreground"
    shared = state.content.intern(GlyphData(width=500))
    bold_b = state.content.intern(GlyphData(width=620))
    state.sets.assign("A", "Latin")
    state.sets.assign("B", "Latin")
    state.sets.assign("alpha", "Greek")
    state.sets.records["B"] = GlyphRecord(postscript_name="uni0042", export=False)
    state.index.put("A", "Regular", "", GlyphEntry(shared, "1,0,0,1"))
    state.index.put("A", "Bold", "", GlyphEntry(shared))
    state.index.put("B", "Regular", "", GlyphEntry(shared))
    state.index.put("B", "Bold", "", GlyphEntry(bold_b))
    state.index.put("alpha", "Regular", "background", GlyphEntry(bold_b))
    garden.commit(state)
    return shared, bold_b


def move_a_to_greek(garden: Fontgarden) -> ProjectState:
    """Stage a move of A into Greek that rewrites both sets and drops a payload."""
    state = garden.state.copy()
    state.sets.assign("A", "Greek")
    state.index.remove_source("A", "Regular")
    state.index.put("A", "Regular", "", GlyphEntry(state.content.intern(GlyphData(width=777))))
    state.index.remove_source("B", "Bold")
    state.index.remove_glyph("alpha")
    state.collect_garbage()
    return state


def fail_on_call(function, call_number: int):
    """Wrap a function so that only its n-th call raises OSError."""
    calls = 0

    def wrapper(*args, **kwargs):
        nonlocal calls
        calls += 1
        if calls == call_number:
            raise OSError("disk full")
        return function(*args, **kwargs)

    return wrapper


def snapshot(path: Path) -> dict[str, bytes]:
    return {
        p.relative_to(path).as_posix(): p.read_bytes() for p in path.rglob("*") if p.is_file()
    }


@pytest.fixture
def garden(tmp_path: Path) -> Fontgarden:
    """A populated fontgarden on disk."""
    project = Fontgarden.new(tmp_path / "Family.fontgarden")
    populate(project)
    return project


class TestNew:
    """Tests for creating fontgardens."""

    def test_new_writes_source_table(self, tmp_path: Path) -> None:
        """Test a new fontgarden holds only the empty source table."""
        path = tmp_path / "New.fontgarden"
        Fontgarden.new(path)
        assert sorted(p.name for p in path.iterdir()) == ["fontgarden.tsv"]
        assert (path / "fontgarden.tsv").read_text() == "source\tdefault_layer\n"

    def test_new_refuses_non_empty_directory(self, tmp_path: Path) -> None:
        """Test that existing content is never overwritten."""
        path = tmp_path / "Busy"
        path.mkdir()
        (path / "file.txt").write_text("x")
        with pytest.raises(StoreIOError):
            Fontgarden.new(path)

    def test_new_accepts_empty_directory(self, tmp_path: Path) -> None:
        """Test an existing empty directory can become a fontgarden."""
        path = tmp_path / "Empty"
        path.mkdir()
        garden = Fontgarden.new(path)
        assert garden.sources == []


class TestLayout:
    """Tests for the on-disk table layout."""

    def test_files(self, garden: Fontgarden) -> None:
        """Test every set gets its own directory and payloads are sharded."""
        root = garden.path
        files = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
        fps = garden.content.fingerprints()
        assert files == sorted(
            [
                "fontgarden.tsv",
                "set.Greek/glyphs.tsv",
                "set.Greek/index.tsv",
                "set.Latin/glyphs.tsv",
                "set.Latin/index.tsv",
                *(content_path(fp) for fp in fps),
            ]
        )

    def test_source_table_keeps_order(self, garden: Fontgarden) -> None:
        """Test sources are stored in insertion order with their default layer."""
        text = (garden.path / "fontgarden.tsv").read_text()
        assert text == "source\tdefault_layer\nRegular\tpublic.default\nBold\tforeground\n"

    def test_glyph_table(self, garden: Fontgarden) -> None:
        """Test set members are listed sorted with their records."""
        text = (garden.path / "set.Latin" / "glyphs.tsv").read_text()
        assert text == (
            "name\tpostscript_name\topentype_category\texport\n"
            "A\t\t\ttrue\n"
            "B\tuni0042\t\tfalse\n"
        )

    def test_index_table_sorted(self, garden: Fontgarden) -> None:
        """Test index rows are sorted by glyph, source and layer."""
        rows = (garden.path / "set.Latin" / "index.tsv").read_text().splitlines()
        keys = [tuple(row.split("\t")[:2]) for row in rows[1:]]
        assert keys == [("A", "Bold"), ("A", "Regular"), ("B", "Bold"), ("B", "Regular")]

    def test_payload_is_canonical(self, garden: Fontgarden) -> None:
        """Test payload files hold the canonical rows."""
        fp = fingerprint(GlyphData(width=500))
        assert (garden.path / content_path(fp)).read_bytes() == b"glyph\t500\t0\n"

    def test_no_staging_left_behind(self, garden: Fontgarden) -> None:
        """Test saving cleans up its staging directory."""
        assert not [p for p in garden.path.iterdir() if p.name.startswith(".staging-")]


class TestLoad:
    """Tests for loading fontgardens."""

    def test_round_trip(self, garden: Fontgarden) -> None:
        """Test loading gives back the saved state."""
        loaded = Fontgarden.load(garden.path)
        assert loaded.state.sources == garden.state.sources
        assert loaded.sets == garden.sets
        assert loaded.index == garden.index
        assert loaded.content.fingerprints() == garden.content.fingerprints()
        assert loaded.default_layer_name("Bold") == "foreground"

    def test_not_a_fontgarden(self, tmp_path: Path) -> None:
        """Test a directory without source table is rejected."""
        with pytest.raises(NotAFontgardenError):
            Fontgarden.load(tmp_path)

    def test_glyph_in_two_sets(self, garden: Fontgarden) -> None:
        """Test a glyph listed in two sets is reported as corruption."""
        glyphs = garden.path / "set.Greek" / "glyphs.tsv"
        glyphs.write_text(glyphs.read_text() + "A\t\t\ttrue\n")
        with pytest.raises(StoreCorruptionError, match="also in set"):
            Fontgarden.load(garden.path)

    def test_index_row_outside_set(self, garden: Fontgarden) -> None:
        """Test index rows must belong to the set's members."""
        fp = garden.content.fingerprints()[0]
        index = garden.path / "set.Greek" / "index.tsv"
        index.write_text(index.read_text() + f"A\tRegular\t\t{fp}\n")
        with pytest.raises(StoreCorruptionError, match="not a member"):
            Fontgarden.load(garden.path)

    def test_unknown_source(self, garden: Fontgarden) -> None:
        """Test index rows must reference known sources."""
        fp = garden.content.fingerprints()[0]
        index = garden.path / "set.Greek" / "index.tsv"
        index.write_text(index.read_text() + f"alpha\tBlack\t\t{fp}\n")
        with pytest.raises(StoreCorruptionError, match="unknown source"):
            Fontgarden.load(garden.path)

    def test_missing_payload(self, garden: Fontgarden) -> None:
        """Test a dangling fingerprint is surfaced, not repaired."""
        fp = fingerprint(GlyphData(width=620))
        (garden.path / content_path(fp)).unlink()
        with pytest.raises(ContentNotFoundError) as excinfo:
            Fontgarden.load(garden.path)
        assert excinfo.value.fingerprint == fp

    def test_tampered_payload(self, garden: Fontgarden) -> None:
        """Test payloads must match their fingerprint."""
        fp = fingerprint(GlyphData(width=620))
        (garden.path / content_path(fp)).write_bytes(b"glyph\t621\t0\n")
        with pytest.raises(StoreCorruptionError, match="does not match"):
            Fontgarden.load(garden.path)

    def test_bad_header(self, garden: Fontgarden) -> None:
        """Test tables must start with their header row."""
        (garden.path / "set.Latin" / "glyphs.tsv").write_text("A\t\t\ttrue\n")
        with pytest.raises(StoreCorruptionError, match="header"):
            Fontgarden.load(garden.path)


class TestSave:
    """Tests for transactional saving."""

    def test_stale_files_removed(self, garden: Fontgarden) -> None:
        """Test files of removed sets and payloads disappear."""
        bold_b = fingerprint(GlyphData(width=620))
        state = garden.state.copy()
        state.sets.remove("Greek")
        state.index.remove_glyph("alpha")
        state.index.remove_source("B", "Bold")
        state.collect_garbage()
        garden.commit(state)

        assert not (garden.path / "set.Greek").exists()
        assert not (garden.path / content_path(bold_b)).exists()

    def test_unchanged_files_untouched(self, garden: Fontgarden) -> None:
        """Test saving without changes rewrites nothing."""
        glyphs = garden.path / "set.Latin" / "glyphs.tsv"
        before = glyphs.stat().st_mtime_ns
        os.utime(glyphs, ns=(before - 10**9, before - 10**9))
        garden.save()
        assert glyphs.stat().st_mtime_ns == before - 10**9

    def test_failed_save_keeps_previous_state(
        self, garden: Fontgarden, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a failing save leaves files and memory as they were."""
        before = {p: p.read_bytes() for p in garden.path.rglob("*") if p.is_file()}
        previous_state = garden.state

        def fail(*_args, **_kwargs):
            raise OSError("disk full")

        state = garden.state.copy()
        state.sets.assign("C", "Latin")
        state.index.put("C", "Regular", "", GlyphEntry(state.content.intern(GlyphData(width=9))))
        monkeypatch.setattr(os, "replace", fail)

        with pytest.raises(StoreIOError, match="disk full"):
            garden.commit(state)

        monkeypatch.undo()
        after = {p: p.read_bytes() for p in garden.path.rglob("*") if p.is_file()}
        assert after == before
        assert garden.state is previous_state

    @pytest.mark.parametrize("failing_call", [1, 2, 3, 4, 5])
    def test_interrupted_save_is_rolled_back(
        self, garden: Fontgarden, monkeypatch: pytest.MonkeyPatch, failing_call: int
    ) -> None:
        """Test a save failing midway restores every file it already replaced."""
        before = snapshot(garden.path)
        previous_state = garden.state
        monkeypatch.setattr(os, "replace", fail_on_call(os.replace, failing_call))

        with pytest.raises(StoreIOError):
            garden.commit(move_a_to_greek(garden))

        monkeypatch.undo()
        assert snapshot(garden.path) == before
        assert garden.state is previous_state
        loaded = Fontgarden.load(garden.path)
        assert loaded.sets.set_of("A") == "Latin"
        assert loaded.index == previous_state.index

    def test_failed_stale_removal_is_rolled_back(
        self, garden: Fontgarden, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a failure while deleting stale files undoes the whole save."""
        before = snapshot(garden.path)
        monkeypatch.setattr(Path, "unlink", fail_on_call(Path.unlink, 1))

        with pytest.raises(StoreIOError):
            garden.commit(move_a_to_greek(garden))

        monkeypatch.undo()
        assert snapshot(garden.path) == before
        assert Fontgarden.load(garden.path).sets.set_of("A") == "Latin"

    def test_case_colliding_set_names(self, tmp_path: Path) -> None:
        """Test set names differing only by case are refused."""
        garden = Fontgarden.new(tmp_path / "Case.fontgarden")
        state = garden.state.copy()
        state.sets.create("latin")
        state.sets.create("Latin")
        with pytest.raises(InvalidNameError, match="case-insensitive"):
            garden.commit(state)

    def test_in_memory_garden(self) -> None:
        """Test a garden without path commits in memory only."""
        garden = Fontgarden()
        state = ProjectState()
        state.sets.create("Latin")
        garden.commit(state)
        assert garden.sets.set_names() == ["Latin"]


class TestRemoveSet:
    """Tests for set removal."""

    def test_remove_set(self, garden: Fontgarden) -> None:
        """Test removing a set drops its glyphs, entries and unused payloads."""
        bold_b = fingerprint(GlyphData(width=620))
        assert garden.remove_set("Latin") == ["A", "B"]

        loaded = Fontgarden.load(garden.path)
        assert loaded.sets.set_names() == ["Greek"]
        assert loaded.index.glyph_names() == ["alpha"]
        assert loaded.content.fingerprints() == [bold_b]

    def test_remove_unknown_set(self, garden: Fontgarden) -> None:
        """Test removing an unknown set fails."""
        with pytest.raises(UnknownSetError):
            garden.remove_set("Cyrillic")


class TestNames:
    """Tests for set name validation."""

    @pytest.mark.parametrize("name", ["", ".hidden", "a/b", "a\\b", "tab\there"])
    def test_invalid(self, name: str) -> None:
        """Test names that cannot be directory names are refused."""
        with pytest.raises(InvalidNameError):
            validate_set_name(name)

    @pytest.mark.parametrize("name", ["Latin", "Latin-Extended", "CJK Unified", "Ελληνικά"])
    def test_valid(self, name: str) -> None:
        """Test ordinary names are accepted."""
        validate_set_name(name)
