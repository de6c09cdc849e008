"""Content-addressed store of glyph data payloads.

Payloads are keyed by the fingerprint of their canonical form, so any number
of (glyph, source, layer) entries referencing the same content share one
stored payload.
"""

import threading
from collections.abc import Iterable, Iterator

from fontgardener.domain.canonical import fingerprint
from fontgardener.domain.glyph import GlyphData
from fontgardener.exceptions import ContentNotFoundError


class ContentStore:
    """Deduplicating fingerprint -> GlyphData table.

    ``intern`` is safe to call from several threads at once.

    Example:
        store = ContentStore()
        fp = store.intern(glyph_data)
        assert store.get(fp) == glyph_data
    """

    def __init__(self, payloads: dict[str, GlyphData] | None = None) -> None:
        self._payloads: dict[str, GlyphData] = dict(payloads or {})
        self._lock = threading.Lock()

    def intern(self, data: GlyphData) -> str:
        """Store glyph data unless an equal payload is already present.

        Args:
            data: Glyph data to store

        Returns:
            The payload's fingerprint
        """
        fp = fingerprint(data)
        with self._lock:
            if fp not in self._payloads:
                self._payloads[fp] = data
        return fp

    def get(self, fp: str) -> GlyphData:
        """Get the payload stored under a fingerprint.

        Raises:
            ContentNotFoundError: If no payload has this fingerprint
        """
        try:
            return self._payloads[fp]
        except KeyError:
            raise ContentNotFoundError(fp) from None

    def garbage_collect(self, live_fingerprints: Iterable[str]) -> list[str]:
        """Remove payloads no live entry references.

        Args:
            live_fingerprints: Fingerprints referenced by current glyph entries

        Returns:
            Sorted fingerprints of the removed payloads
        """
        live = set(live_fingerprints)
        with self._lock:
            dead = sorted(fp for fp in self._payloads if fp not in live)
            for fp in dead:
                del self._payloads[fp]
        return dead

    def copy(self) -> "ContentStore":
        """Shallow copy; payloads are immutable and shared."""
        with self._lock:
            return ContentStore(self._payloads)

    def fingerprints(self) -> list[str]:
        return sorted(self._payloads)

    def __contains__(self, fp: object) -> bool:
        return fp in self._payloads

    def __len__(self) -> int:
        return len(self._payloads)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fingerprints())
