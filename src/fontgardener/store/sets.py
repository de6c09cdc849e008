"""Set registry: exclusive partition of glyph names into named sets."""

from collections.abc import Iterable

from fontgardener.domain.source import GlyphRecord
from fontgardener.exceptions import UnknownSetError


class SetRegistry:
    """Maps set names to member glyphs; every glyph is in at most one set.

    Membership is kept as a single glyph -> set reverse index. The member
    lists are derived from it, so exclusivity cannot be violated.

    Attributes:
        records: Glyph name to glyph record, for every assigned glyph
    """

    def __init__(self) -> None:
        self._set_of: dict[str, str] = {}
        self._members: dict[str, set[str]] = {}
        self.records: dict[str, GlyphRecord] = {}

    def create(self, set_name: str) -> None:
        """Create an empty set if it does not exist yet."""
        self._members.setdefault(set_name, set())

    def assign(self, glyph_name: str, set_name: str) -> str | None:
        """Put a glyph into a set, removing it from its previous set.

        The target set is created on first use.

        Returns:
            The set the glyph was moved out of, or None
        """
        previous = self._set_of.get(glyph_name)
        if previous == set_name:
            return None
        if previous is not None:
            self._members[previous].discard(glyph_name)
        self._set_of[glyph_name] = set_name
        self._members.setdefault(set_name, set()).add(glyph_name)
        self.records.setdefault(glyph_name, GlyphRecord())
        return previous

    def remove(self, set_name: str) -> list[str]:
        """Remove a set and forget its glyphs.

        Returns:
            The removed set's members, sorted

        Raises:
            UnknownSetError: If the set does not exist
        """
        if set_name not in self._members:
            raise UnknownSetError([set_name])
        members = sorted(self._members.pop(set_name))
        for glyph_name in members:
            del self._set_of[glyph_name]
            self.records.pop(glyph_name, None)
        return members

    def members(self, set_name: str) -> list[str]:
        """Members of a set, sorted by name.

        Raises:
            UnknownSetError: If the set does not exist
        """
        if set_name not in self._members:
            raise UnknownSetError([set_name])
        return sorted(self._members[set_name])

    def set_of(self, glyph_name: str) -> str | None:
        return self._set_of.get(glyph_name)

    def set_names(self) -> list[str]:
        return sorted(self._members)

    def glyph_names(self) -> list[str]:
        return sorted(self._set_of)

    def resolve(self, set_names: Iterable[str]) -> list[str]:
        """Union of the members of several sets, sorted.

        Raises:
            UnknownSetError: If any set does not exist
        """
        set_names = list(set_names)
        unknown = [name for name in set_names if name not in self._members]
        if unknown:
            raise UnknownSetError(unknown)
        glyphs: set[str] = set()
        for set_name in set_names:
            glyphs.update(self._members[set_name])
        return sorted(glyphs)

    def copy(self) -> "SetRegistry":
        other = SetRegistry()
        other._set_of = dict(self._set_of)
        other._members = {name: set(members) for name, members in self._members.items()}
        other.records = dict(self.records)
        return other

    def __contains__(self, set_name: object) -> bool:
        return set_name in self._members

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SetRegistry):
            return NotImplemented
        return self._members == other._members and self.records == other.records
