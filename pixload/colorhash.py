"""Hash table mapping XPM pixel strings to colours."""

from __future__ import annotations

from pixload.surface import ImageError

STARTING_HASH_SIZE = 256


def _codes(key: str | bytes) -> list[int]:
    return list(key) if isinstance(key, (bytes, bytearray)) else [ord(ch) for ch in key]


def hash_key(key: str | bytes, size: int) -> int:
    """Hash a pixel string into a bucket of a power-of-two sized table."""
    value = 0
    for code in _codes(key):
        value = value * 33 + code
    return value & (size - 1)


class ColorHash:
    """Fixed-capacity table of pixel strings to colours.

    Lookups of unknown keys give 0; a key added twice resolves to its latest colour.
    """

    def __init__(self, maxnum: int) -> None:
        size = STARTING_HASH_SIZE
        while size < maxnum:
            size <<= 1
        self.size = size
        self.maxnum = maxnum
        self._buckets: list[list[tuple[bytes, int]]] = [[] for _ in range(size)]
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: str | bytes) -> bool:
        wanted = bytes(_codes(key)) if isinstance(key, str) and all(ord(c) < 256 for c in key) else key
        bucket = self._buckets[hash_key(key, self.size)]
        return any(stored == self._normalise(wanted) for stored, _ in bucket)

    @staticmethod
    def _normalise(key: str | bytes) -> bytes:
        if isinstance(key, (bytes, bytearray)):
            return bytes(key)
        return key.encode("utf-8", "surrogatepass") if any(ord(c) > 255 for c in key) else key.encode("latin-1")

    def add(self, key: str | bytes, color: int) -> None:
        """Store a colour for a pixel string."""
        if self._count >= self.maxnum:
            raise ImageError("colour table is full")
        bucket = self._buckets[hash_key(key, self.size)]
        bucket.insert(0, (self._normalise(key), color))
        self._count += 1

    def get(self, key: str | bytes) -> int:
        """Return the colour for a pixel string, or 0 when it is unknown."""
        wanted = self._normalise(key)
        for stored, color in self._buckets[hash_key(key, self.size)]:
            if stored == wanted:
                return color
        return 0