# pixload

Small, dependency-free image codecs written in plain Python.

- **QOI** ("Quite OK Image"): lossless encode and decode, in memory or to and
  from files.
- **XPM** (X PixMap, version 3): load from a binary stream or from a list of
  strings. The result is an 8-bit indexed surface when the image has 256
  colours or fewer, and a 32-bit ARGB surface otherwise.
- **XV thumbnails** (`P7 332`): detect and load as 3-3-2 RGB surfaces.

## Installation

```
pip install pixload
```

To run the tests:

```
pip install "pixload[test]"
pytest
```

## Surfaces

The XPM and XV loaders return a `pixload.surface.Surface`. It holds `width`,
`height`, `format` (a `PixelFormat`: `INDEX8`, `RGB332` or `ARGB8888`),
`pitch` (bytes per row, padded to a multiple of 4), the raw `pixels`, a
`palette` of `Color` values for indexed surfaces and an optional `color_key`.

- `get_pixel(x, y)` / `set_pixel(x, y, value)` read and write raw pixel values.
- `get_rgba(x, y)` gives the pixel's `(r, g, b, a)` colour, looking it up in
  the palette or expanding the 3-3-2 bits as the format requires.
- `row(y)` is a writable `memoryview` of one row without its padding.
- `set_color_key(key)` marks a pixel value as transparent; `None` clears it.
- `bytes_per_pixel()` gives the size of one pixel.

`create_surface(width, height, fmt)` makes a zero-filled surface; indexed
surfaces start with a 256-entry white palette. When an image cannot be
created or decoded, `pixload.surface.ImageError` is raised.

## QOI

```python
from pixload import qoi

desc = qoi.QoiDesc(width=2, height=1, channels=4, colorspace=qoi.Colorspace.SRGB)
pixels = bytes([255, 0, 0, 255, 0, 0, 255, 255])

encoded = qoi.encode(pixels, desc)
decoded_desc, decoded = qoi.decode(encoded, 0)   # 0 keeps the channel count from the file
assert decoded == pixels

qoi.write("image.qoi", pixels, desc)             # returns the number of bytes written
desc, pixels = qoi.read("image.qoi", 3)          # force RGB output
```

`decode` and `read` return a `(QoiDesc, bytes)` pair. Images must have a
positive size, 3 or 4 channels, a colourspace of 0 or 1 and fewer than 400
million pixels. Invalid parameters, bad magic and truncated data raise
`qoi.QoiError`, a subclass of `ImageError`.

## XPM

```python
from pixload import xpm

image = xpm.read_xpm_from_array([
    "2 2 2 1",
    ". c #ff0000",
    "# c None",
    ".#",
    "#.",
])
print(image.get_rgba(0, 0))        # (255, 0, 0, 255)
print(image.color_key)             # 1, the palette index of "None"

with open("icon.xpm", "rb") as stream:
    if xpm.is_xpm(stream):
        image = xpm.load_xpm(stream)
```

`read_xpm_from_array_to_rgb888` always gives an `ARGB8888` surface. Colours
can be given as `#rgb`, `#rrggbb` or `#rrrrggggbbbb`, or as one of the basic
names `none`, `black`, `white`, `red`, `green` and `blue`
(`pixload.xpm_colors.color_to_argb` does the conversion). Hotspots and
symbolic (`s`) colour names are ignored. `is_xpm` leaves the stream where it
was, and a failed `load_xpm` moves it back to where it started.

## XV thumbnails

```python
from pixload import xv

with open("thumb.xv", "rb") as stream:
    if xv.is_xv(stream):
        image = xv.load_xv(stream)
```

`xv.read_header(stream)` returns the `(width, height)` of the image data.
`is_xv` and failed loads leave the stream where it was.

## What it does not do

pixload only reads XPM and XV images; it cannot write them. QOI is the only
format it can encode. There is no JPEG, PNG or other format support, and no
command-line tool.