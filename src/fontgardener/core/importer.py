"""Import engine: pull named glyphs from font sources into a set.

An import is one transaction. It is staged on a copy of the project state
and committed only after every glyph was converted and interned, so any
failure leaves the fontgarden as it was.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from fontgardener.config import ImportConfig, SetConflictPolicy
from fontgardener.core.closure import follow_components
from fontgardener.domain import GlyphEntry, GlyphRecord, SourceGlyphSet
from fontgardener.exceptions import InvalidNameError, MissingGlyphError, SetConflictError
from fontgardener.io import parse_source
from fontgardener.store import (
    ContentStore,
    Fontgarden,
    validate_set_name,
    validate_source_name,
)
from fontgardener.utils import OperationStats, get_logger

logger = get_logger("import")


@dataclass
class ImportReport:
    """Outcome of an import.

    Attributes:
        set_name: Target set
        glyphs: Imported glyph names, in request order (closure glyphs last)
        sources: Source names, in the order they were provided
        moved: Glyph name to the set it was moved out of
        sparse: Glyph name to the provided sources that do not define it
        stats: Counters and timing
    """

    set_name: str
    glyphs: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    moved: dict[str, str] = field(default_factory=dict)
    sparse: dict[str, list[str]] = field(default_factory=dict)
    stats: OperationStats = field(default_factory=OperationStats)

    @property
    def payloads_added(self) -> int:
        return self.stats.payloads_added

    @property
    def payloads_removed(self) -> int:
        return self.stats.payloads_removed


def _intern_glyph(
    content: ContentStore, source: SourceGlyphSet, glyph_name: str
) -> list[tuple[str, GlyphEntry]]:
    """Intern every layer of one glyph in one source.

    Returns:
        (layer name, entry) pairs, default layer reported as ``""``
    """
    entries = []
    for layer_name, layer in source.iter_glyph_layers(glyph_name):
        fp = content.intern(layer.glyphs[glyph_name])
        entries.append((layer_name, GlyphEntry(fp, layer.color_marks.get(glyph_name))))
    return entries


class GlyphImporter:
    """Imports glyphs from parsed sources into a Fontgarden.

    Example:
        importer = GlyphImporter(ImportConfig(conflict_policy="reject"))
        report = importer.run(garden, "Latin", ["A", "B"], [regular, italic])
    """

    def __init__(self, config: ImportConfig | None = None) -> None:
        self.config = config or ImportConfig()

    def run(
        self,
        garden: Fontgarden,
        set_name: str,
        glyph_names: Sequence[str],
        sources: Sequence[SourceGlyphSet],
    ) -> ImportReport:
        """Import glyphs into a set.

        For every provided source, the glyph's previous entries in that
        source are replaced by the source's layers. A glyph a provided
        source does not define loses its entries for that source and is
        reported as sparse. Sources not provided are left alone.

        Args:
            garden: Project to import into
            set_name: Target set, created if needed
            glyph_names: Glyphs to import; anything else in the sources is
                ignored
            sources: Parsed sources, each with a name

        Returns:
            Import report

        Raises:
            InvalidNameError: If a set or source name cannot be stored, or
                two sources share a name, or a layer would be stored under
                the source's default layer name
            MissingGlyphError: If a requested glyph is in no source
            SetConflictError: If a glyph belongs to another set and the
                conflict policy is ``reject``
            StoreIOError: If the project cannot be written
        """
        stats = OperationStats()
        stats.start()

        validate_set_name(set_name)
        source_names = self._check_sources(sources)
        requested = list(dict.fromkeys(glyph_names))

        for glyph_name in requested:
            if not any(source.has_glyph(glyph_name) for source in sources):
                raise MissingGlyphError(glyph_name, source_names)

        selected = requested
        if self.config.follow_components:
            selected = self._with_components(requested, sources)

        logger.info(
            "Import started",
            set=set_name,
            glyphs=len(selected),
            sources=source_names,
        )

        report = ImportReport(set_name=set_name, glyphs=selected, sources=source_names)

        with garden.locked():
            self._check_default_layers(garden, selected, sources)

            conflicts = {
                glyph_name: current
                for glyph_name in selected
                if (current := garden.sets.set_of(glyph_name)) not in (None, set_name)
            }
            if conflicts and self.config.conflict_policy == SetConflictPolicy.REJECT:
                raise SetConflictError(conflicts, set_name)

            state = garden.state.copy()
            payloads_before = set(state.content.fingerprints())

            converted = self._convert(state.content, selected, sources)

            state.sets.create(set_name)
            for glyph_name in selected:
                lacking = []
                for source in sources:
                    state.index.remove_source(glyph_name, source.name)
                    entries = converted.get((glyph_name, source.name))
                    if entries is None:
                        lacking.append(source.name)
                        continue
                    for layer_name, entry in entries:
                        state.index.put(glyph_name, source.name, layer_name, entry)
                        stats.entry_count += 1
                if lacking:
                    report.sparse[glyph_name] = lacking

                previous = state.sets.assign(glyph_name, set_name)
                if previous is not None:
                    report.moved[glyph_name] = previous
                state.sets.records[glyph_name] = self._record_for(glyph_name, sources)

            for source in sources:
                state.sources.setdefault(source.name, source.default_layer_name)

            state.collect_garbage()
            payloads_after = set(state.content.fingerprints())
            garden.commit(state)

        for glyph_name, previous in sorted(report.moved.items()):
            logger.info("Glyph moved", glyph=glyph_name, from_set=previous, to_set=set_name)
        for glyph_name, lacking in sorted(report.sparse.items()):
            logger.debug("Glyph not defined in sources", glyph=glyph_name, sources=lacking)

        stats.glyph_count = len(selected)
        stats.sources = source_names
        stats.payloads_added = len(payloads_after - payloads_before)
        stats.payloads_removed = len(payloads_before - payloads_after)
        stats.finish()
        report.stats = stats

        logger.info(
            "Import finished",
            set=set_name,
            glyphs=stats.glyph_count,
            entries=stats.entry_count,
            moved=len(report.moved),
            payloads_added=stats.payloads_added,
            payloads_removed=stats.payloads_removed,
            duration_seconds=round(stats.duration_seconds, 3),
        )
        return report

    def _check_sources(self, sources: Sequence[SourceGlyphSet]) -> list[str]:
        names: list[str] = []
        for source in sources:
            if source.name is None:
                raise InvalidNameError("source", "", "source has no name")
            validate_source_name(source.name)
            if source.name in names:
                raise InvalidNameError("source", source.name, "given more than once")
            names.append(source.name)
        return names

    def _check_default_layers(
        self, garden: Fontgarden, glyph_names: list[str], sources: Sequence[SourceGlyphSet]
    ) -> None:
        """Refuse layers that would be stored under a source's default layer name.

        A source keeps the default layer name of its first import. A later
        UFO of that source with another default layer may still have a
        layer carrying the stored name, which export could not tell apart
        from the default layer.

        Raises:
            InvalidNameError: If such a layer holds an imported glyph
        """
        for source in sources:
            stored = garden.state.sources.get(source.name)
            if stored is None or stored == source.default_layer_name:
                continue
            layer = source.layers.get(stored)
            if layer is not None and any(name in layer.glyphs for name in glyph_names):
                raise InvalidNameError(
                    "layer",
                    stored,
                    f"is the default layer of source '{source.name}' in the fontgarden "
                    f"but a non-default layer in the imported UFO",
                )

    def _with_components(
        self, requested: list[str], sources: Sequence[SourceGlyphSet]
    ) -> list[str]:
        """Append component glyphs of the requested ones, in sorted order."""

        def components_of(glyph_name: str) -> set[str]:
            names: set[str] = set()
            for source in sources:
                for _, layer in source.iter_glyph_layers(glyph_name):
                    names.update(layer.glyphs[glyph_name].component_names())
            return names

        closure = follow_components(requested, components_of)
        extra = []
        for glyph_name in sorted(closure - set(requested)):
            if any(source.has_glyph(glyph_name) for source in sources):
                extra.append(glyph_name)
            else:
                logger.warning("Component glyph not found in any source", glyph=glyph_name)
        return requested + extra

    def _convert(
        self,
        content: ContentStore,
        glyph_names: list[str],
        sources: Sequence[SourceGlyphSet],
    ) -> dict[tuple[str, str], list[tuple[str, GlyphEntry]]]:
        """Intern all (glyph, source) pairs on a thread pool."""
        results: dict[tuple[str, str], list[tuple[str, GlyphEntry]]] = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {
                executor.submit(_intern_glyph, content, source, glyph_name): (
                    glyph_name,
                    source.name,
                )
                for glyph_name in glyph_names
                for source in sources
                if source.has_glyph(glyph_name)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        return results

    @staticmethod
    def _record_for(glyph_name: str, sources: Sequence[SourceGlyphSet]) -> GlyphRecord:
        for source in sources:
            if source.has_glyph(glyph_name):
                return source.records.get(glyph_name, GlyphRecord())
        return GlyphRecord()


def import_glyphs(
    garden: Fontgarden,
    set_name: str,
    glyph_names: Sequence[str],
    source_paths: Sequence[Path],
    source_names: Sequence[str | None] | None = None,
    config: ImportConfig | None = None,
) -> ImportReport:
    """Parse UFO sources and import glyphs from them.

    Args:
        garden: Project to import into
        set_name: Target set
        glyph_names: Glyphs to import
        source_paths: UFO paths
        source_names: Explicit source name per path; None entries (or no
            list) use the UFO's style name
        config: Import configuration

    Returns:
        Import report

    Raises:
        CodecError: If a source cannot be parsed
        ValueError: If ``source_names`` does not match ``source_paths``
    """
    if source_names is None:
        source_names = [None] * len(source_paths)
    if len(source_names) != len(source_paths):
        raise ValueError("source_names must have one entry per source path")

    sources = [
        parse_source(Path(path), name) for path, name in zip(source_paths, source_names)
    ]
    return GlyphImporter(config).run(garden, set_name, glyph_names, sources)
