"""Gamma encoding and 8-bit quantization of linear images.

Renders are accumulated in linear space. Before display they are encoded
with a gamma of 2 (a square root) and mapped to integers in [0, 255].
"""

import numpy as np
import numpy.typing as npt

# Largest encoded value before quantization, so 256 * x stays below 256
MAX_ENCODED_VALUE = 0.999


def linear_to_gamma(image: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
    """Apply gamma-2 encoding: sqrt of positive components, 0 otherwise."""
    positive = np.where(image > 0.0, image, 0.0)
    return np.sqrt(positive)


def quantize(encoded: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Clamp encoded components to [0, 0.999] and scale to 8-bit integers."""
    clamped = np.clip(encoded, 0.0, MAX_ENCODED_VALUE)
    return (256.0 * clamped).astype(np.uint8)


def to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear image to 8-bit RGB.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    return quantize(linear_to_gamma(np.asarray(image, dtype=np.float64)))
