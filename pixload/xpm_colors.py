"""Colour specifications as they appear in XPM colour tables."""

from __future__ import annotations

import re

# A deliberately small table of named colours, in lookup order.
KNOWN_COLORS: tuple[tuple[str, int], ...] = (
    ("none", 0x00000000),
    ("black", 0xFF000000),
    ("white", 0xFFFFFFFF),
    ("red", 0xFFFF0000),
    ("green", 0xFF00FF00),
    ("blue", 0xFF0000FF),
)

_HEX_PREFIX = re.compile(r"(?:0[xX])?([0-9a-fA-F]*)")


def _parse_hex(digits: str) -> int:
    """Parse the leading hexadecimal digits of `digits`, 0 when there are none."""
    match = _HEX_PREFIX.match(digits)
    hex_digits = match.group(1) if match else ""
    if not hex_digits and match and match.group(0):
        # A bare "0x" with no digits after it reads as the single digit 0.
        return 0
    return int(hex_digits, 16) if hex_digits else 0


def color_to_argb(spec: str) -> int | None:
    """Convert an XPM colour spec to 0xAARRGGBB, or None if it is not recognised.

    "#rgb", "#rrggbb" and "#rrrrggggbbbb" forms are accepted. A name matches
    the first known colour that starts with it, ignoring case.
    """
    if spec.startswith("#"):
        if len(spec) == 4:
            digits = "".join(ch * 2 for ch in spec[1:4])
        elif len(spec) == 7:
            digits = spec[1:7]
        elif len(spec) == 13:
            digits = spec[1:3] + spec[5:7] + spec[9:11]
        else:
            return None
        return 0xFF000000 | _parse_hex(digits)

    wanted = spec.lower()
    for name, argb in KNOWN_COLORS:
        if name.startswith(wanted):
            return argb
    return None