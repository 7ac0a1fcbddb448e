"""In-memory pixel surfaces produced by the image loaders."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class ImageError(Exception):
    """Raised when an image cannot be created, detected or decoded."""


class PixelFormat(enum.Enum):
    """Pixel layouts a surface can hold."""

    INDEX8 = ("index8", 1)
    RGB332 = ("rgb332", 1)
    ARGB8888 = ("argb8888", 4)

    def __init__(self, label: str, bytes_per_pixel: int) -> None:
        self.label = label
        self.size = bytes_per_pixel

    @property
    def is_indexed(self) -> bool:
        return self is PixelFormat.INDEX8


@dataclass(frozen=True)
class Color:
    """An 8-bit-per-channel colour with alpha."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b, self.a):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")

    @classmethod
    def from_argb(cls, argb: int) -> "Color":
        return cls(
            (argb >> 16) & 0xFF,
            (argb >> 8) & 0xFF,
            argb & 0xFF,
            (argb >> 24) & 0xFF,
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)


def _expand(value: int, bits: int) -> int:
    """Scale a value of `bits` bits to the full 0..255 range by bit replication."""
    result = 0
    shift = 8 - bits
    while shift > -bits:
        result |= value << shift if shift >= 0 else value >> -shift
        shift -= bits
    return result & 0xFF


@dataclass(eq=False)
class Surface:
    """A rectangular block of pixels with rows padded to a 4-byte pitch."""

    width: int
    height: int
    format: PixelFormat
    pitch: int
    pixels: bytearray
    palette: list[Color] = field(default_factory=list)
    color_key: int | None = None

    def bytes_per_pixel(self) -> int:
        return self.format.size

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} surface")
        return y * self.pitch + x * self.format.size

    def row(self, y: int) -> memoryview:
        """Writable view of the pixel bytes of row `y`, without pitch padding."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside surface of height {self.height}")
        start = y * self.pitch
        return memoryview(self.pixels)[start:start + self.width * self.format.size]

    def get_pixel(self, x: int, y: int) -> int:
        offset = self._offset(x, y)
        size = self.format.size
        return int.from_bytes(self.pixels[offset:offset + size], "little")

    def set_pixel(self, x: int, y: int, value: int) -> None:
        offset = self._offset(x, y)
        size = self.format.size
        if not 0 <= value < (1 << (8 * size)):
            raise ValueError(f"pixel value {value:#x} does not fit {self.format.label}")
        self.pixels[offset:offset + size] = value.to_bytes(size, "little")

    def get_rgba(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) colour of a pixel."""
        value = self.get_pixel(x, y)
        if self.format is PixelFormat.INDEX8:
            if value < len(self.palette):
                return self.palette[value].as_tuple()
            return (0, 0, 0, 255)
        if self.format is PixelFormat.RGB332:
            return (
                _expand((value >> 5) & 0x7, 3),
                _expand((value >> 2) & 0x7, 3),
                _expand(value & 0x3, 2),
                255,
            )
        return Color.from_argb(value).as_tuple()

    def set_color_key(self, key: int | None) -> None:
        """Mark a pixel value as transparent, or clear the key with None."""
        if key is not None and not 0 <= key < (1 << (8 * self.format.size)):
            raise ValueError(f"colour key {key:#x} does not fit {self.format.label}")
        self.color_key = key


def create_surface(width: int, height: int, fmt: PixelFormat) -> Surface:
    """Create a zero-filled surface; indexed surfaces get a 256-entry white palette."""
    if width < 0 or height < 0:
        raise ImageError(f"invalid surface size {width}x{height}")
    pitch = (width * fmt.size + 3) & ~3
    palette = [Color(255, 255, 255, 255) for _ in range(256)] if fmt.is_indexed else []
    return Surface(
        width=width,
        height=height,
        format=fmt,
        pitch=pitch,
        pixels=bytearray(pitch * height),
        palette=palette,
    )