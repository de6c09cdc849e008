"""Glyph index: (glyph, source, layer) -> glyph entry."""

from collections.abc import Iterator

from fontgardener.domain.source import GlyphEntry

EntryKey = tuple[str, str, str]


class GlyphIndex:
    """Indirection records from glyph/source/layer triples to payloads.

    Entries are grouped per glyph so all entries of one glyph can be replaced
    or dropped at once.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[tuple[str, str], GlyphEntry]] = {}

    def put(self, glyph_name: str, source_name: str, layer_name: str, entry: GlyphEntry) -> None:
        self._entries.setdefault(glyph_name, {})[(source_name, layer_name)] = entry

    def get(self, glyph_name: str, source_name: str, layer_name: str) -> GlyphEntry | None:
        return self._entries.get(glyph_name, {}).get((source_name, layer_name))

    def layers(self, glyph_name: str, source_name: str) -> dict[str, GlyphEntry]:
        """Entries of a glyph in one source, keyed by layer name."""
        return {
            layer: entry
            for (source, layer), entry in self._entries.get(glyph_name, {}).items()
            if source == source_name
        }

    def sources(self, glyph_name: str) -> set[str]:
        return {source for source, _ in self._entries.get(glyph_name, {})}

    def remove_source(self, glyph_name: str, source_name: str) -> int:
        """Drop every entry of a glyph in a source.

        Returns:
            Number of entries removed
        """
        entries = self._entries.get(glyph_name)
        if not entries:
            return 0
        keys = [key for key in entries if key[0] == source_name]
        for key in keys:
            del entries[key]
        if not entries:
            del self._entries[glyph_name]
        return len(keys)

    def remove_glyph(self, glyph_name: str) -> None:
        self._entries.pop(glyph_name, None)

    def glyph_names(self) -> list[str]:
        return sorted(self._entries)

    def items(self, glyph_names: list[str] | None = None) -> Iterator[tuple[EntryKey, GlyphEntry]]:
        """Iterate entries sorted by glyph, source and layer name."""
        names = self.glyph_names() if glyph_names is None else sorted(glyph_names)
        for glyph_name in names:
            entries = self._entries.get(glyph_name, {})
            for source_name, layer_name in sorted(entries):
                yield (glyph_name, source_name, layer_name), entries[(source_name, layer_name)]

    def live_fingerprints(self) -> set[str]:
        return {
            entry.fingerprint
            for entries in self._entries.values()
            for entry in entries.values()
        }

    def copy(self) -> "GlyphIndex":
        other = GlyphIndex()
        other._entries = {name: dict(entries) for name, entries in self._entries.items()}
        return other

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlyphIndex):
            return NotImplemented
        return self._entries == other._entries
