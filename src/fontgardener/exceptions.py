"""Exception hierarchy for fontgardener."""

from collections.abc import Iterable


def _names(names: Iterable[str]) -> str:
    return ", ".join(f"'{name}'" for name in sorted(names))


class FontgardenerError(Exception):
    """Base exception for all fontgardener errors."""

    pass


class CodecError(FontgardenerError):
    """A font source could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot process source '{path}': {reason}")


class InvalidNameError(FontgardenerError):
    """A set, source or glyph name cannot be stored."""

    def __init__(self, kind: str, name: str, reason: str) -> None:
        self.kind = kind
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid {kind} name '{name}': {reason}")


class NameResolutionError(FontgardenerError):
    """User input references a name that cannot be resolved."""

    pass


class MissingGlyphError(NameResolutionError):
    """A glyph requested for import exists in none of the provided sources."""

    def __init__(self, glyph_name: str, sources: Iterable[str]) -> None:
        self.glyph_name = glyph_name
        self.sources = list(sources)
        super().__init__(
            f"Glyph '{glyph_name}' not found in any provided source "
            f"({_names(self.sources)})"
        )


class UnknownGlyphError(NameResolutionError):
    """Glyphs requested for export are not in the fontgarden."""

    def __init__(self, glyph_names: Iterable[str]) -> None:
        self.glyph_names = sorted(glyph_names)
        super().__init__(f"Unknown glyphs: {_names(self.glyph_names)}")


class UnknownSetError(NameResolutionError):
    """Sets requested for export are not in the fontgarden."""

    def __init__(self, set_names: Iterable[str]) -> None:
        self.set_names = sorted(set_names)
        super().__init__(f"Unknown sets: {_names(self.set_names)}")


class UnknownSourceError(NameResolutionError):
    """Sources requested for export are not in the fontgarden."""

    def __init__(self, source_names: Iterable[str]) -> None:
        self.source_names = sorted(source_names)
        super().__init__(f"Unknown sources: {_names(self.source_names)}")


class SetConflictError(FontgardenerError):
    """Glyphs are already assigned to another set and moving is disabled."""

    def __init__(self, conflicts: dict[str, str], target_set: str) -> None:
        self.conflicts = dict(conflicts)
        self.target_set = target_set
        details = ", ".join(
            f"'{glyph}' in '{current}'" for glyph, current in sorted(self.conflicts.items())
        )
        super().__init__(
            f"Cannot import into set '{target_set}', glyphs belong to other sets: {details}"
        )


class StoreError(FontgardenerError):
    """Errors related to the on-disk fontgarden."""

    pass


class NotAFontgardenError(StoreError):
    """The path does not hold a fontgarden."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"'{path}' is not a fontgarden directory")


class ContentNotFoundError(StoreError):
    """A glyph entry points at a fingerprint with no stored payload.

    This is an internal consistency violation and is never repaired
    automatically.
    """

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"No glyph data stored for fingerprint {fingerprint}")


class StoreCorruptionError(StoreError):
    """A table file in the fontgarden is malformed or inconsistent."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt fontgarden file '{path}': {reason}")


class StoreIOError(StoreError):
    """Reading or writing the fontgarden failed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"I/O error on '{path}': {reason}")
