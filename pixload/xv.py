"""Loader for XV thumbnail images (the "P7 332" format)."""

from __future__ import annotations

import re
from typing import BinaryIO

from pixload.surface import ImageError, PixelFormat, Surface, create_surface

MAGIC = b"P7 332"
LINE_BUFFER_SIZE = 1024

_SIZE_PATTERN = re.compile(rb"\s*([+-]?\d+)(?:\s*([+-]?\d+))?")


def _read_line(stream: BinaryIO) -> bytes | None:
    """Read one line, dropping carriage returns; None on end of data or overflow."""
    line = bytearray()
    room = LINE_BUFFER_SIZE
    while room > 0:
        char = stream.read(1)
        if len(char) != 1:
            return None
        if char == b"\r":
            continue
        if char == b"\n":
            return bytes(line)
        line += char
        room -= 1
    return None


def _parse_size(line: bytes) -> tuple[int, int]:
    """Read up to two leading integers; missing values count as 0."""
    match = _SIZE_PATTERN.match(line)
    if match is None:
        return 0, 0
    width = int(match.group(1))
    height = int(match.group(2)) if match.group(2) is not None else 0
    return width, height


def read_header(stream: BinaryIO) -> tuple[int, int]:
    """Read an XV header and return (width, height) of the image data that follows."""
    line = _read_line(stream)
    if line is None or not line.startswith(MAGIC):
        raise ImageError("Unsupported image format")

    while (line := _read_line(stream)) is not None:
        if line.startswith(b"#BUILTIN:"):
            break
        if line.startswith(b"#END_OF_COMMENTS"):
            size_line = _read_line(stream)
            if size_line is not None:
                width, height = _parse_size(size_line)
                if width >= 0 and height >= 0:
                    return width, height
            break
    raise ImageError("Unsupported image format")


def is_xv(stream: BinaryIO | None) -> bool:
    """Tell whether the stream holds an XV thumbnail; the position is left unchanged."""
    if stream is None:
        return False
    start = stream.tell()
    try:
        read_header(stream)
    except ImageError:
        return False
    finally:
        stream.seek(start)
    return True


def load_xv(stream: BinaryIO) -> Surface:
    """Load an XV thumbnail as an RGB332 surface.

    On failure the stream is moved back to where it started and ImageError is raised.
    """
    start = stream.tell()
    try:
        width, height = read_header(stream)
        surface = create_surface(width, height, PixelFormat.RGB332)
        for y in range(height):
            data = stream.read(width)
            if len(data) != width:
                raise ImageError("Couldn't read image data")
            surface.row(y)[:] = data
    except ImageError:
        stream.seek(start)
        raise
    return surface