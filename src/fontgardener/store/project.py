"""The Fontgarden project: state, loading and transactional saving.

On-disk layout::

    <project>/
      fontgarden.tsv              source table (name, default layer name)
      set.<SetName>/glyphs.tsv    set members and glyph records, sorted
      set.<SetName>/index.tsv     (glyph, source, layer) -> fingerprint
      content/<fp[:2]>/<fp>.tsv   canonical glyph data payloads

Saving writes changed files into a staging directory first and moves them
into place only once every file was written, so a failed save leaves the
previous files untouched.
"""

import os
import shutil
import tempfile
import threading
import unicodedata
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from fontgardener.domain.canonical import canon, fingerprint, from_canon
from fontgardener.domain.source import GlyphEntry, GlyphRecord
from fontgardener.exceptions import (
    ContentNotFoundError,
    InvalidNameError,
    NotAFontgardenError,
    StoreCorruptionError,
    StoreIOError,
    UnknownSetError,
)
from fontgardener.store.content import ContentStore
from fontgardener.store.index import GlyphIndex
from fontgardener.store.sets import SetRegistry
from fontgardener.utils.logging import get_logger
from fontgardener.utils.tables import decode_rows, encode_rows, optional, or_none

SOURCES_FILE = "fontgarden.tsv"
SET_PREFIX = "set."
SET_GLYPHS_FILE = "glyphs.tsv"
SET_INDEX_FILE = "index.tsv"
CONTENT_DIR = "content"
CONTENT_SUFFIX = ".tsv"
STAGING_PREFIX = ".staging-"

SOURCES_HEADER = ["source", "default_layer"]
GLYPHS_HEADER = ["name", "postscript_name", "opentype_category", "export"]
INDEX_HEADER = ["glyph", "source", "layer", "fingerprint", "color_mark"]

logger = get_logger("store")

_locks: dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


@contextmanager
def project_lock(path: Path | None) -> Iterator[None]:
    """Hold the process-wide exclusive lock of a project directory."""
    key = str(path.resolve()) if path is not None else "<memory>"
    with _locks_guard:
        lock = _locks.setdefault(key, threading.RLock())
    with lock:
        yield


def _validate_file_name(kind: str, name: str) -> None:
    if not name:
        raise InvalidNameError(kind, name, "name is empty")
    if name.startswith("."):
        raise InvalidNameError(kind, name, "name starts with a dot")
    for char in name:
        if char in "/\\" or unicodedata.category(char).startswith("C"):
            raise InvalidNameError(kind, name, f"contains forbidden character {char!r}")


def validate_set_name(name: str) -> None:
    """Check that a set name can be used as a directory name.

    Raises:
        InvalidNameError: If the name is empty, starts with a dot, or
            contains path separators or control characters
    """
    _validate_file_name("set", name)


def validate_source_name(name: str) -> None:
    """Check that a source name can be used as an exported UFO file name.

    Raises:
        InvalidNameError: Under the same rules as set names
    """
    _validate_file_name("source", name)


def content_path(fp: str) -> str:
    """Path of a payload file relative to the project root."""
    return f"{CONTENT_DIR}/{fp[:2]}/{fp}{CONTENT_SUFFIX}"


@dataclass
class ProjectState:
    """Everything a Fontgarden stores.

    Attributes:
        sources: Source name to default layer name, in insertion order
        content: Payload store
        sets: Set registry with glyph records
        index: Glyph entries
    """

    sources: dict[str, str] = field(default_factory=dict)
    content: ContentStore = field(default_factory=ContentStore)
    sets: SetRegistry = field(default_factory=SetRegistry)
    index: GlyphIndex = field(default_factory=GlyphIndex)

    def copy(self) -> "ProjectState":
        """Copy for staging a transaction; payloads stay shared."""
        return ProjectState(
            sources=dict(self.sources),
            content=self.content.copy(),
            sets=self.sets.copy(),
            index=self.index.copy(),
        )

    def collect_garbage(self) -> list[str]:
        """Drop payloads no entry references any more."""
        return self.content.garbage_collect(self.index.live_fingerprints())

    def render(self) -> dict[str, bytes]:
        """Render every table file, keyed by path relative to the project."""
        files: dict[str, bytes] = {}

        files[SOURCES_FILE] = _encode_table(
            SOURCES_HEADER, ([name, layer] for name, layer in self.sources.items())
        )

        for set_name in self.sets.set_names():
            members = self.sets.members(set_name)
            glyph_rows = []
            for glyph_name in members:
                record = self.sets.records.get(glyph_name, GlyphRecord())
                glyph_rows.append(
                    [
                        glyph_name,
                        optional(record.postscript_name),
                        optional(record.opentype_category),
                        "true" if record.export else "false",
                    ]
                )
            index_rows = [
                [glyph, source, layer, entry.fingerprint, optional(entry.color_mark)]
                for (glyph, source, layer), entry in self.index.items(members)
            ]
            set_dir = f"{SET_PREFIX}{set_name}"
            files[f"{set_dir}/{SET_GLYPHS_FILE}"] = _encode_table(GLYPHS_HEADER, glyph_rows)
            files[f"{set_dir}/{SET_INDEX_FILE}"] = _encode_table(INDEX_HEADER, index_rows)

        for fp in self.content.fingerprints():
            files[content_path(fp)] = canon(self.content.get(fp))

        return files


def _encode_table(header: list[str], rows) -> bytes:
    return encode_rows([header, *rows]).encode("utf-8")


class Fontgarden:
    """A fontgarden project, optionally bound to a directory.

    Example:
        garden = Fontgarden.new(Path("MyFamily.fontgarden"))
        garden = Fontgarden.load(Path("MyFamily.fontgarden"))
    """

    def __init__(self, path: Path | None = None, state: ProjectState | None = None) -> None:
        self.path = path
        self.state = state if state is not None else ProjectState()

    @property
    def sources(self) -> list[str]:
        """Known source names, in insertion order."""
        return list(self.state.sources)

    @property
    def content(self) -> ContentStore:
        return self.state.content

    @property
    def sets(self) -> SetRegistry:
        return self.state.sets

    @property
    def index(self) -> GlyphIndex:
        return self.state.index

    def default_layer_name(self, source_name: str) -> str:
        return self.state.sources[source_name]

    @contextmanager
    def locked(self) -> Iterator[None]:
        with project_lock(self.path):
            yield

    @classmethod
    def new(cls, path: Path) -> "Fontgarden":
        """Create an empty fontgarden directory.

        Raises:
            StoreIOError: If the path exists and is not an empty directory
        """
        if path.exists() and (not path.is_dir() or any(path.iterdir())):
            raise StoreIOError(str(path), "target exists and is not an empty directory")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(str(path), str(e)) from e
        garden = cls(path)
        garden.save()
        logger.info("Fontgarden created", path=str(path))
        return garden

    @classmethod
    def load(cls, path: Path) -> "Fontgarden":
        """Load a fontgarden directory.

        Raises:
            NotAFontgardenError: If the directory has no source table
            StoreCorruptionError: If a table is malformed or inconsistent
            ContentNotFoundError: If an entry references a missing payload
        """
        if not path.is_dir() or not (path / SOURCES_FILE).is_file():
            raise NotAFontgardenError(str(path))
        with project_lock(path):
            state = _read_state(path)
        logger.debug(
            "Fontgarden loaded",
            path=str(path),
            sets=len(state.sets.set_names()),
            entries=len(state.index),
            payloads=len(state.content),
        )
        return cls(path, state)

    def commit(self, state: ProjectState) -> None:
        """Persist a staged state and make it current.

        The in-memory state is only replaced once the files were written.
        """
        with self.locked():
            if self.path is not None:
                _write_state(self.path, state)
            self.state = state

    def save(self) -> None:
        self.commit(self.state)

    def remove_set(self, set_name: str) -> list[str]:
        """Remove a set with all its glyph entries and unused payloads.

        Returns:
            Names of the glyphs that were removed

        Raises:
            UnknownSetError: If the set does not exist
        """
        with self.locked():
            if set_name not in self.sets:
                raise UnknownSetError([set_name])
            state = self.state.copy()
            removed = state.sets.remove(set_name)
            for glyph_name in removed:
                state.index.remove_glyph(glyph_name)
            collected = state.collect_garbage()
            self.commit(state)
        logger.info(
            "Set removed", set=set_name, glyphs=len(removed), payloads_removed=len(collected)
        )
        return removed


def _read_table(path: Path, header: list[str]) -> list[list[str]]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoreIOError(str(path), str(e)) from e
    try:
        rows = decode_rows(text, width=len(header))
    except ValueError as e:
        raise StoreCorruptionError(str(path), str(e)) from e
    if not rows or rows[0][: len(header)] != header:
        raise StoreCorruptionError(str(path), "missing or unexpected header row")
    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) != len(header):
            raise StoreCorruptionError(str(path), f"row {line_number} has {len(row)} fields")
    return rows[1:]


def _read_state(path: Path) -> ProjectState:
    state = ProjectState()

    for name, default_layer in _read_table(path / SOURCES_FILE, SOURCES_HEADER):
        state.sources[name] = default_layer

    index_rows: list[tuple[Path, list[str]]] = []
    for set_dir in sorted(path.iterdir()):
        if not set_dir.is_dir() or not set_dir.name.startswith(SET_PREFIX):
            continue
        set_name = set_dir.name[len(SET_PREFIX) :]
        state.sets.create(set_name)

        glyphs_file = set_dir / SET_GLYPHS_FILE
        for name, postscript_name, category, export in _read_table(glyphs_file, GLYPHS_HEADER):
            owner = state.sets.set_of(name)
            if owner is not None:
                raise StoreCorruptionError(
                    str(glyphs_file), f"glyph '{name}' is also in set '{owner}'"
                )
            if export not in ("true", "false"):
                raise StoreCorruptionError(str(glyphs_file), f"bad export flag '{export}'")
            state.sets.assign(name, set_name)
            state.sets.records[name] = GlyphRecord(
                postscript_name=or_none(postscript_name),
                opentype_category=or_none(category),
                export=export == "true",
            )

        index_file = set_dir / SET_INDEX_FILE
        for row in _read_table(index_file, INDEX_HEADER):
            glyph_name, source_name = row[0], row[1]
            if state.sets.set_of(glyph_name) != set_name:
                raise StoreCorruptionError(
                    str(index_file), f"glyph '{glyph_name}' is not a member of set '{set_name}'"
                )
            if source_name not in state.sources:
                raise StoreCorruptionError(str(index_file), f"unknown source '{source_name}'")
            index_rows.append((index_file, row))

    content_dir = path / CONTENT_DIR
    if content_dir.is_dir():
        payloads = {}
        for payload_file in sorted(content_dir.glob(f"*/*{CONTENT_SUFFIX}")):
            fp = payload_file.name[: -len(CONTENT_SUFFIX)]
            try:
                data = from_canon(payload_file.read_bytes())
            except OSError as e:
                raise StoreIOError(str(payload_file), str(e)) from e
            except ValueError as e:
                raise StoreCorruptionError(str(payload_file), str(e)) from e
            if fingerprint(data) != fp:
                raise StoreCorruptionError(str(payload_file), "content does not match fingerprint")
            payloads[fp] = data
        state.content = ContentStore(payloads)

    for _, (glyph_name, source_name, layer_name, fp, color_mark) in index_rows:
        if fp not in state.content:
            raise ContentNotFoundError(fp)
        state.index.put(glyph_name, source_name, layer_name, GlyphEntry(fp, or_none(color_mark)))

    return state


def _managed_files(root: Path) -> set[str]:
    """Relative paths of every table file currently in the project."""
    found: set[str] = set()
    if (root / SOURCES_FILE).is_file():
        found.add(SOURCES_FILE)
    for child in root.iterdir():
        if child.is_dir() and child.name.startswith(SET_PREFIX):
            for name in (SET_GLYPHS_FILE, SET_INDEX_FILE):
                if (child / name).is_file():
                    found.add(f"{child.name}/{name}")
    content_dir = root / CONTENT_DIR
    if content_dir.is_dir():
        for payload_file in content_dir.glob(f"*/*{CONTENT_SUFFIX}"):
            found.add(payload_file.relative_to(root).as_posix())
    return found


def _is_unchanged(target: Path, relpath: str, data: bytes) -> bool:
    if not target.is_file():
        return False
    if relpath.startswith(f"{CONTENT_DIR}/"):
        # Payload files are named by their content.
        return True
    return target.read_bytes() == data


def _write_state(root: Path, state: ProjectState) -> None:
    for set_name in state.sets.set_names():
        validate_set_name(set_name)
    folded: dict[str, str] = {}
    for set_name in state.sets.set_names():
        other = folded.setdefault(set_name.casefold(), set_name)
        if other != set_name:
            raise InvalidNameError(
                "set", set_name, f"collides with set '{other}' on case-insensitive file systems"
            )

    files = state.render()
    try:
        existing = _managed_files(root)
        changed = {
            relpath: data
            for relpath, data in files.items()
            if not _is_unchanged(root / relpath, relpath, data)
        }
        stale = sorted(existing - set(files))
    except OSError as e:
        raise StoreIOError(str(root), str(e)) from e

    if not changed and not stale:
        return

    staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=root))
    # Content of every file touched so far, None for files that did not exist.
    originals: dict[str, bytes | None] = {}
    try:
        for relpath, data in changed.items():
            staged = staging / relpath
            staged.parent.mkdir(parents=True, exist_ok=True)
            staged.write_bytes(data)

        for relpath in sorted(changed):
            target = root / relpath
            originals[relpath] = target.read_bytes() if target.is_file() else None
            target.parent.mkdir(parents=True, exist_ok=True)
            os.replace(staging / relpath, target)

        for relpath in stale:
            target = root / relpath
            originals[relpath] = target.read_bytes()
            target.unlink()
        _remove_empty_dirs(root, stale)
    except OSError as e:
        _roll_back(root, originals)
        raise StoreIOError(str(root), str(e)) from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.debug("Fontgarden saved", path=str(root), written=len(changed), removed=len(stale))


def _roll_back(root: Path, originals: dict[str, bytes | None]) -> None:
    """Put every touched file back to its content before the save."""
    created = []
    for relpath, data in originals.items():
        target = root / relpath
        try:
            if data is None:
                target.unlink(missing_ok=True)
                created.append(relpath)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
        except OSError as e:
            logger.error("Could not restore file", path=str(target), error=str(e))
    _remove_empty_dirs(root, created)
    logger.warning("Save rolled back", path=str(root), files=len(originals))


def _remove_empty_dirs(root: Path, removed: list[str]) -> None:
    parents = {
        root / parent for relpath in removed for parent in list(Path(relpath).parents)[:-1]
    }
    for directory in sorted(parents, key=lambda p: len(p.parts), reverse=True):
        if directory != root and directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()


def new_project(path: Path) -> Fontgarden:
    """Create a new, empty fontgarden at ``path``."""
    return Fontgarden.new(path)


def open_project(path: Path) -> Fontgarden:
    """Load the fontgarden at ``path``."""
    return Fontgarden.load(path)
