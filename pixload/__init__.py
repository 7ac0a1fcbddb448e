"""Pure-Python QOI encoding and decoding, and XPM and XV thumbnail image loading."""

__version__ = "0.1.0"
__all__ = ["surface", "xpm_colors", "qoi", "xv", "colorhash", "xpm"]