"""Encoder and decoder for the QOI ("Quite OK Image") format."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Iterator

from pixload.surface import ImageError

MAGIC = b"qoif"
HEADER_SIZE = 14
PADDING = b"\x00\x00\x00\x00\x00\x00\x00\x01"
PIXELS_MAX = 400_000_000

OP_INDEX = 0x00
OP_DIFF = 0x40
OP_LUMA = 0x80
OP_RUN = 0xC0
OP_RGB = 0xFE
OP_RGBA = 0xFF
MASK_2 = 0xC0

_Pixel = tuple[int, int, int, int]
_START: _Pixel = (0, 0, 0, 255)
_EMPTY: _Pixel = (0, 0, 0, 0)


class QoiError(ImageError):
    """Raised for invalid QOI parameters or undecodable QOI data."""


class Colorspace(enum.IntEnum):
    """Informative colourspace stored in the QOI header."""

    SRGB = 0
    LINEAR = 1


@dataclass(frozen=True)
class QoiDesc:
    """Image description: size, channel count (3 or 4) and colourspace."""

    width: int
    height: int
    channels: int
    colorspace: int = Colorspace.SRGB


def _check_desc(width: int, height: int, channels: int, colorspace: int) -> None:
    if width <= 0 or height <= 0:
        raise QoiError(f"invalid image size {width}x{height}")
    if channels not in (3, 4):
        raise QoiError(f"invalid channel count {channels}")
    if colorspace not in (0, 1):
        raise QoiError(f"invalid colorspace {colorspace}")
    if height >= PIXELS_MAX // width:
        raise QoiError("image has too many pixels")


def _hash(px: _Pixel) -> int:
    r, g, b, a = px
    return (r * 3 + g * 5 + b * 7 + a * 11) % 64


def _s8(value: int) -> int:
    """Wrap an integer to a signed 8-bit value."""
    return ((value + 128) & 0xFF) - 128


def _pixels(data: bytes, channels: int, count: int) -> Iterator[_Pixel]:
    view = memoryview(data)
    for start in range(0, count * channels, channels):
        chunk = view[start:start + channels]
        if channels == 4:
            yield (chunk[0], chunk[1], chunk[2], chunk[3])
        else:
            yield (chunk[0], chunk[1], chunk[2], 255)


def encode(data: bytes, desc: QoiDesc) -> bytes:
    """Encode raw RGB or RGBA pixels described by `desc` into QOI bytes."""
    _check_desc(desc.width, desc.height, desc.channels, int(desc.colorspace))
    count = desc.width * desc.height
    if len(data) < count * desc.channels:
        raise QoiError("pixel data is shorter than the described image")

    out = bytearray(MAGIC)
    out += desc.width.to_bytes(4, "big")
    out += desc.height.to_bytes(4, "big")
    out += bytes((desc.channels, int(desc.colorspace)))

    index: list[_Pixel] = [_EMPTY] * 64
    prev = _START
    run = 0
    last = count - 1

    for position, px in enumerate(_pixels(data, desc.channels, count)):
        if px == prev:
            run += 1
            if run == 62 or position == last:
                out.append(OP_RUN | (run - 1))
                run = 0
        else:
            if run > 0:
                out.append(OP_RUN | (run - 1))
                run = 0
            index_pos = _hash(px)
            if index[index_pos] == px:
                out.append(OP_INDEX | index_pos)
            else:
                index[index_pos] = px
                r, g, b, a = px
                if a == prev[3]:
                    vr = _s8(r - prev[0])
                    vg = _s8(g - prev[1])
                    vb = _s8(b - prev[2])
                    vg_r = _s8(vr - vg)
                    vg_b = _s8(vb - vg)
                    if -3 < vr < 2 and -3 < vg < 2 and -3 < vb < 2:
                        out.append(OP_DIFF | (vr + 2) << 4 | (vg + 2) << 2 | (vb + 2))
                    elif -9 < vg_r < 8 and -33 < vg < 32 and -9 < vg_b < 8:
                        out.append(OP_LUMA | (vg + 32))
                        out.append((vg_r + 8) << 4 | (vg_b + 8))
                    else:
                        out += bytes((OP_RGB, r, g, b))
                else:
                    out += bytes((OP_RGBA, r, g, b, a))
        prev = px

    out += PADDING
    return bytes(out)


def decode(data: bytes, channels: int = 0) -> tuple[QoiDesc, bytes]:
    """Decode QOI bytes into (description, pixels).

    With `channels` 0 the header's channel count is used; 3 or 4 forces the
    output layout.
    """
    if channels not in (0, 3, 4):
        raise QoiError(f"invalid requested channel count {channels}")
    if len(data) < HEADER_SIZE + len(PADDING):
        raise QoiError("data too short for a QOI image")

    data = bytes(data)
    magic = data[0:4]
    width = int.from_bytes(data[4:8], "big")
    height = int.from_bytes(data[8:12], "big")
    file_channels = data[12]
    colorspace = data[13]

    if magic != MAGIC:
        raise QoiError("not a QOI image")
    _check_desc(width, height, file_channels, colorspace)
    desc = QoiDesc(width, height, file_channels, Colorspace(colorspace))

    out_channels = channels or file_channels
    index: list[_Pixel] = [_EMPTY] * 64
    px = _START
    run = 0
    p = HEADER_SIZE
    chunks_len = len(data) - len(PADDING)
    pixels = bytearray()

    try:
        for _ in range(width * height):
            if run > 0:
                run -= 1
            elif p < chunks_len:
                b1 = data[p]
                p += 1
                r, g, b, a = px
                if b1 == OP_RGB:
                    r, g, b = data[p], data[p + 1], data[p + 2]
                    p += 3
                    px = (r, g, b, a)
                elif b1 == OP_RGBA:
                    px = (data[p], data[p + 1], data[p + 2], data[p + 3])
                    p += 4
                elif b1 & MASK_2 == OP_INDEX:
                    px = index[b1]
                elif b1 & MASK_2 == OP_DIFF:
                    px = (
                        (r + ((b1 >> 4) & 0x03) - 2) & 0xFF,
                        (g + ((b1 >> 2) & 0x03) - 2) & 0xFF,
                        (b + (b1 & 0x03) - 2) & 0xFF,
                        a,
                    )
                elif b1 & MASK_2 == OP_LUMA:
                    b2 = data[p]
                    p += 1
                    vg = (b1 & 0x3F) - 32
                    px = (
                        (r + vg - 8 + ((b2 >> 4) & 0x0F)) & 0xFF,
                        (g + vg) & 0xFF,
                        (b + vg - 8 + (b2 & 0x0F)) & 0xFF,
                        a,
                    )
                else:
                    run = b1 & 0x3F
                index[_hash(px)] = px
            pixels += bytes(px[:out_channels])
    except IndexError as exc:
        raise QoiError("truncated QOI data") from exc

    return desc, bytes(pixels)


def write(path: str | os.PathLike[str], data: bytes, desc: QoiDesc) -> int:
    """Encode pixels and write them to `path`; return the number of bytes written."""
    encoded = encode(data, desc)
    with open(path, "wb") as handle:
        handle.write(encoded)
    return len(encoded)


def read(path: str | os.PathLike[str], channels: int = 0) -> tuple[QoiDesc, bytes]:
    """Read and decode a QOI file."""
    with open(path, "rb") as handle:
        data = handle.read()
    if not data:
        raise QoiError(f"empty file: {path}")
    return decode(data, channels)