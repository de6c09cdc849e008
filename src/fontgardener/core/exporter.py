"""Export engine: write selected glyphs of a Fontgarden back to UFO sources.

Exporting only reads the project. Output for an unchanged project and the
same selection is byte-identical between runs.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fontgardener.config import ExportConfig
from fontgardener.core.closure import follow_components
from fontgardener.domain import DEFAULT_LAYER, GlyphRecord, SourceGlyphSet, SourceLayer
from fontgardener.exceptions import UnknownGlyphError, UnknownSourceError
from fontgardener.io import write_source
from fontgardener.store import Fontgarden
from fontgardener.utils import OperationStats, get_logger

logger = get_logger("export")

UFO_SUFFIX = ".ufo"


@dataclass
class ExportReport:
    """Outcome of an export.

    Attributes:
        paths: Source name to written UFO path
        glyph_counts: Source name to number of exported glyphs
        stats: Counters and timing
    """

    paths: dict[str, Path] = field(default_factory=dict)
    glyph_counts: dict[str, int] = field(default_factory=dict)
    stats: OperationStats = field(default_factory=OperationStats)


class GlyphExporter:
    """Builds and writes source glyph sets from a Fontgarden.

    Example:
        exporter = GlyphExporter()
        report = exporter.run(garden, Path("out"), set_names=["Latin"])
    """

    def __init__(self, config: ExportConfig | None = None) -> None:
        self.config = config or ExportConfig()

    def select(
        self,
        garden: Fontgarden,
        set_names: Iterable[str] | None = None,
        glyph_names: Iterable[str] | None = None,
    ) -> list[str]:
        """Resolve the glyphs to export.

        Named sets and explicit glyphs are combined. Without either, every
        glyph of every set is selected.

        Returns:
            Selected glyph names, sorted

        Raises:
            UnknownSetError: If a set does not exist
            UnknownGlyphError: If a glyph is not in any set
        """
        if set_names is None and glyph_names is None:
            return garden.sets.glyph_names()

        selected: set[str] = set()
        if set_names is not None:
            selected.update(garden.sets.resolve(set_names))
        if glyph_names is not None:
            glyph_names = list(glyph_names)
            unknown = [name for name in glyph_names if name not in garden.sets.records]
            if unknown:
                raise UnknownGlyphError(unknown)
            selected.update(glyph_names)
        return sorted(selected)

    def build(
        self,
        garden: Fontgarden,
        glyph_names: Sequence[str],
        source_names: Sequence[str] | None = None,
    ) -> dict[str, SourceGlyphSet]:
        """Assemble one source glyph set per source.

        A glyph without entries in a source is left out of that source.

        Args:
            garden: Project to read
            glyph_names: Glyphs to export
            source_names: Sources to export, all known sources if None

        Returns:
            Source name to glyph set, in project source order

        Raises:
            UnknownSourceError: If a source is not in the project
            ContentNotFoundError: If an entry points at a missing payload
        """
        sources = self._resolve_sources(garden, source_names)
        return {name: self._build_source(garden, name, glyph_names) for name in sources}

    def run(
        self,
        garden: Fontgarden,
        output_dir: Path,
        set_names: Iterable[str] | None = None,
        glyph_names: Iterable[str] | None = None,
        source_names: Sequence[str] | None = None,
    ) -> ExportReport:
        """Export a selection to ``<output_dir>/<source>.ufo`` files.

        Raises:
            UnknownSetError: If a set does not exist
            UnknownGlyphError: If a glyph is not in the project
            UnknownSourceError: If a source is not in the project
            ContentNotFoundError: If an entry points at a missing payload
            CodecError: If a UFO cannot be written
        """
        stats = OperationStats()
        stats.start()
        report = ExportReport(stats=stats)

        with garden.locked():
            selected = self.select(garden, set_names, glyph_names)
            glyph_sets = self.build(garden, selected, source_names)
            logger.info("Export started", glyphs=len(selected), sources=list(glyph_sets))

            for source_name, glyph_set in glyph_sets.items():
                path = output_dir / f"{source_name}{UFO_SUFFIX}"
                write_source(path, glyph_set, overwrite=self.config.overwrite)
                count = len(glyph_set.glyph_names())
                report.paths[source_name] = path
                report.glyph_counts[source_name] = count
                stats.entry_count += sum(len(layer.glyphs) for layer in glyph_set.layers.values())
                logger.info("Source exported", source=source_name, path=str(path), glyphs=count)

        stats.glyph_count = len(selected)
        stats.sources = list(report.paths)
        stats.finish()
        logger.info(
            "Export finished",
            glyphs=stats.glyph_count,
            sources=len(stats.sources),
            duration_seconds=round(stats.duration_seconds, 3),
        )
        return report

    def _resolve_sources(
        self, garden: Fontgarden, source_names: Sequence[str] | None
    ) -> list[str]:
        if source_names is None:
            return garden.sources
        unknown = [name for name in source_names if name not in garden.state.sources]
        if unknown:
            raise UnknownSourceError(unknown)
        wanted = set(source_names)
        return [name for name in garden.sources if name in wanted]

    def _build_source(
        self, garden: Fontgarden, source_name: str, glyph_names: Sequence[str]
    ) -> SourceGlyphSet:
        default_layer_name = garden.default_layer_name(source_name)
        glyph_set = SourceGlyphSet(name=source_name, default_layer_name=default_layer_name)
        glyph_set.layers[default_layer_name] = SourceLayer(default_layer_name)

        names = set(glyph_names)
        if self.config.follow_components:

            def components_of(glyph_name: str) -> set[str]:
                used: set[str] = set()
                for entry in garden.index.layers(glyph_name, source_name).values():
                    used.update(garden.content.get(entry.fingerprint).component_names())
                return used

            names = follow_components(names, components_of)

        layers: dict[str, SourceLayer] = {}
        for glyph_name in sorted(names):
            entries = garden.index.layers(glyph_name, source_name)
            if not entries:
                continue
            for layer_name, entry in entries.items():
                if layer_name == DEFAULT_LAYER:
                    layer = glyph_set.layers[default_layer_name]
                else:
                    layer = layers.setdefault(layer_name, SourceLayer(layer_name))
                layer.glyphs[glyph_name] = garden.content.get(entry.fingerprint)
                if entry.color_mark is not None:
                    layer.color_marks[glyph_name] = entry.color_mark
            glyph_set.records[glyph_name] = garden.sets.records.get(glyph_name, GlyphRecord())

        # Stored layer named like the default layer: the default entries win.
        clashing = layers.pop(default_layer_name, None)
        if clashing is not None:
            default_layer = glyph_set.layers[default_layer_name]
            merged = sorted(set(clashing.glyphs) - set(default_layer.glyphs))
            for glyph_name in merged:
                default_layer.glyphs[glyph_name] = clashing.glyphs[glyph_name]
                if glyph_name in clashing.color_marks:
                    default_layer.color_marks[glyph_name] = clashing.color_marks[glyph_name]
            logger.warning(
                "Layer merged into default layer",
                source=source_name,
                layer=default_layer_name,
                glyphs=merged,
            )

        for layer_name in sorted(layers):
            glyph_set.layers[layer_name] = layers[layer_name]
        return glyph_set


def export_glyphs(
    garden: Fontgarden,
    output_dir: Path,
    set_names: Iterable[str] | None = None,
    glyph_names: Iterable[str] | None = None,
    source_names: Sequence[str] | None = None,
    config: ExportConfig | None = None,
) -> ExportReport:
    """Export sets and/or glyphs of a fontgarden as UFOs.

    See ``GlyphExporter.run``.
    """
    return GlyphExporter(config).run(garden, Path(output_dir), set_names, glyph_names, source_names)
