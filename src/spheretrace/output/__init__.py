"""Output module for turning linear renders into image files.

Components:
    encode: Gamma-2 encoding and 8-bit quantization
    export: Plain-text PPM writer and Pillow-based PNG export

Example:
    >>> from src.spheretrace.output import to_uint8, save_image
    >>> pixels = to_uint8(linear_image)
    >>> save_image("render.png", pixels)
"""

from .encode import linear_to_gamma, quantize, to_uint8
from .export import save_image, save_png, write_ppm

__all__ = [
    "linear_to_gamma",
    "quantize",
    "to_uint8",
    "write_ppm",
    "save_png",
    "save_image",
]
