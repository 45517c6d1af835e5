"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, written to any text stream)
    - PNG (8-bit via Pillow)

Example:
    >>> import sys
    >>> from src.spheretrace.output.export import write_ppm, save_image
    >>> write_ppm(sys.stdout, pixels)
    >>> save_image("render.png", pixels)
"""

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

SUPPORTED_SUFFIXES = (".png", ".ppm")


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) RGB array, got shape {pixels.shape}")


def write_ppm(stream: TextIO, pixels: npt.NDArray[np.uint8]) -> None:
    """Write 8-bit RGB pixels as a plain-text PPM image.

    The header is ``P3``, the dimensions and the maximum value 255, followed
    by one ``r g b`` line per pixel, top-to-bottom and left-to-right.

    Args:
        stream: Text stream to write to.
        pixels: Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If pixels is not an RGB image array.
    """
    _check_pixels(pixels)
    height, width = pixels.shape[:2]

    stream.write(f"P3\n{width} {height}\n255\n")
    rows = pixels.reshape(-1, 3).tolist()
    stream.write("".join(f"{r} {g} {b}\n" for r, g, b in rows))


def save_png(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Save 8-bit RGB pixels as a PNG file using Pillow."""
    _check_pixels(pixels)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    pil_image.save(filepath, format="PNG")


def save_image(filepath: str | Path, pixels: npt.NDArray[np.uint8]) -> None:
    """Save pixels to a file, choosing the format from the extension.

    Args:
        filepath: Output path ending in .png or .ppm.
        pixels: Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the extension is not supported.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()

    if suffix == ".png":
        save_png(path, pixels)
    elif suffix == ".ppm":
        with path.open("w", encoding="ascii", newline="\n") as stream:
            write_ppm(stream, pixels)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}' (expected one of {SUPPORTED_SUFFIXES})"
        )
