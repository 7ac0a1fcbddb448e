"""Loader for XPM (X PixMap, version 3) images."""

from __future__ import annotations

import re
import struct
from typing import BinaryIO, Callable, Iterable, Iterator

from pixload.colorhash import ColorHash
from pixload.surface import Color, ImageError, PixelFormat, Surface, create_surface
from pixload.xpm_colors import color_to_argb

MAGIC = b"/* XPM */"

_NUMBER = rb"([+-]?\d+)(?!\d)"
_HEADER_PATTERN = re.compile(
    rb"\s*" + rb"\s*".join([_NUMBER] * 4)
)

LineReader = Callable[[int], bytes]


def is_xpm(stream: BinaryIO | None) -> bool:
    """Tell whether the stream starts with the XPM magic; the position is left unchanged."""
    if stream is None:
        return False
    start = stream.tell()
    try:
        return stream.read(len(MAGIC)) == MAGIC
    finally:
        stream.seek(start)


def _as_bytes(line: str | bytes) -> bytes:
    if isinstance(line, (bytes, bytearray)):
        return bytes(line)
    return line.encode("utf-8")


def _array_reader(lines: Iterable[str | bytes]) -> LineReader:
    iterator: Iterator[str | bytes] = iter(lines)

    def next_line(length: int) -> bytes:
        line = next(iterator, None)
        if line is None:
            raise ImageError("Premature end of data")
        return _as_bytes(line)

    return next_line


def _stream_reader(stream: BinaryIO) -> LineReader:
    def read_exact(count: int) -> bytes:
        data = stream.read(count)
        if len(data) != count:
            raise ImageError("Premature end of data")
        return data

    def next_line(length: int) -> bytes:
        while read_exact(1) != b'"':
            pass
        if length:
            # The closing quote, comma and newline are read along with the row.
            return read_exact(length + 3)[: length + 2]
        line = bytearray()
        while (char := read_exact(1)) != b'"':
            line += char
        return bytes(line)

    return next_line


def _parse_header(line: bytes) -> tuple[int, int, int, int]:
    match = _HEADER_PATTERN.match(line)
    if match is None:
        raise ImageError("Invalid format description")
    width, height, ncolors, cpp = (int(group) for group in match.groups())
    if width <= 0 or height <= 0 or ncolors <= 0 or cpp <= 0:
        raise ImageError("Invalid format description")
    return width, height, ncolors, cpp


def _parse_color(line: bytes, cpp: int) -> int:
    """Return the ARGB colour of a colour-table line, skipping symbolic names."""
    tokens = iter(line[cpp + 1:].split())
    for type_token in tokens:
        name = next(tokens, b"")
        if type_token[:1] == b"s":
            continue
        argb = color_to_argb(name.decode("latin-1"))
        if argb is not None:
            return argb
    raise ImageError("colour parse error")


def _decode(next_line: LineReader, force_32bit: bool) -> Surface:
    width, height, ncolors, cpp = _parse_header(next_line(0))

    indexed = ncolors <= 256 and not force_32bit
    if indexed:
        image = create_surface(width, height, PixelFormat.INDEX8)
        image.palette = image.palette[:ncolors]
    else:
        image = create_surface(width, height, PixelFormat.ARGB8888)

    colors = ColorHash(ncolors)
    for index in range(ncolors):
        line = next_line(0)
        argb = _parse_color(line, cpp)
        if indexed:
            image.palette[index] = Color.from_argb(argb)
            pixel = index
            if argb == 0x00000000:
                image.set_color_key(pixel)
        else:
            pixel = argb
        colors.add(line[:cpp], pixel)

    row_length = width * cpp
    for y in range(height):
        line = next_line(row_length)
        values = [colors.get(line[x * cpp:(x + 1) * cpp]) for x in range(width)]
        if indexed:
            image.row(y)[:] = bytes(value & 0xFF for value in values)
        else:
            image.row(y)[:] = struct.pack(f"<{width}I", *values)
    return image


def load_xpm(stream: BinaryIO) -> Surface:
    """Load an XPM image from a binary stream.

    The result is an 8-bit indexed surface when there are at most 256 colours,
    otherwise ARGB8888. On failure the stream is moved back to where it started
    and ImageError is raised.
    """
    start = stream.tell()
    try:
        return _decode(_stream_reader(stream), force_32bit=False)
    except ImageError:
        stream.seek(start)
        raise


def read_xpm_from_array(lines: Iterable[str | bytes] | None) -> Surface:
    """Decode an XPM given as its list of strings (without the quotes)."""
    if lines is None:
        raise ImageError("array is None")
    return _decode(_array_reader(lines), force_32bit=False)


def read_xpm_from_array_to_rgb888(lines: Iterable[str | bytes] | None) -> Surface:
    """Decode an XPM given as its list of strings, always as an ARGB8888 surface."""
    if lines is None:
        raise ImageError("array is None")
    return _decode(_array_reader(lines), force_32bit=True)