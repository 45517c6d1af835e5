"""Render orchestration: worker bands, seeding and image finalization.

The Renderer ties the camera, the render target and the band kernel
together. It resolves how many workers to use, splits the image rows into
one band per worker, runs the kernel to completion and hands back the
linear image, ready to be gamma-encoded and written out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.renderer import Renderer
    >>> from src.spheretrace.scene.final_scene import create_final_scene
    >>>
    >>> scene, config = create_final_scene(seed=42)
    >>> renderer = Renderer(config)
    >>> image = renderer.render(seed=7)
    >>> renderer.save("final.png")
"""

import os
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.spheretrace.camera.camera import CameraConfig, CameraGeometry, setup_camera
from src.spheretrace.core.integrator import (
    get_linear_image_numpy,
    render_bands,
    rows_per_band,
    setup_render_target,
)
from src.spheretrace.output.encode import to_uint8
from src.spheretrace.output.export import save_image, write_ppm

# Upper bound (exclusive) of freshly drawn seeds, kept within a signed 32-bit kernel argument
SEED_RANGE = 2**31


def resolve_worker_count(num_threads: int) -> int:
    """Number of workers to render with.

    A positive num_threads is used as is; otherwise the platform's CPU count
    is used, falling back to 1 when it cannot be determined.
    """
    if num_threads > 0:
        return num_threads
    return os.cpu_count() or 1


class Renderer:
    """Blocking renderer for a CameraConfig against the current scene.

    The scene itself lives in the module-level registries filled through a
    SceneManager; the renderer only reads it.

    Attributes:
        config: The camera configuration being rendered.
        geometry: Projection geometry derived from config.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Initialize the renderer.

        Args:
            config: Camera configuration (image size, sampling, lens).

        Raises:
            ValueError: If the image exceeds the supported render target size.
        """
        self.config = config
        self.geometry: CameraGeometry = setup_camera(config)
        self._num_workers = resolve_worker_count(config.num_threads)
        self._image: npt.NDArray[np.float32] | None = None
        self._last_seed: int | None = None
        setup_render_target(self.width, self.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.geometry.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.geometry.image_height

    @property
    def num_workers(self) -> int:
        """Get the resolved worker count."""
        return self._num_workers

    @property
    def num_bands(self) -> int:
        """Number of row bands: one per worker, never more than the rows."""
        return max(1, min(self._num_workers, self.height))

    @property
    def rows_per_band(self) -> int:
        """Rows assigned to each band (the last band may get fewer)."""
        return rows_per_band(self.height, self.num_bands)

    @property
    def last_seed(self) -> int | None:
        """Seed used by the most recent render, or None before any render."""
        return self._last_seed

    def render(self, seed: int | None = None) -> npt.NDArray[np.float32]:
        """Render the full image, blocking until every band has finished.

        Args:
            seed: Seed for the random streams. A fresh one is drawn if None.
                Renders with the same seed are identical regardless of the
                worker count.

        Returns:
            Linear image of shape (height, width, 3), row 0 at the top.
        """
        if seed is None:
            seed = int(np.random.default_rng().integers(0, SEED_RANGE))
        self._last_seed = seed

        # Fields may have been rewritten by another renderer since __init__
        setup_camera(self.config)
        setup_render_target(self.width, self.height)

        render_bands(
            self.num_bands,
            self.config.samples_per_pixel,
            self.config.max_depth,
            seed % SEED_RANGE,
        )
        self._image = get_linear_image_numpy()
        return self._image

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the linear image of the last render.

        Raises:
            RuntimeError: If render() has not been called yet.
        """
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._image

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the last render gamma-encoded and quantized to 8 bits."""
        return to_uint8(self.get_image_numpy())

    def write_ppm(self, stream: TextIO) -> None:
        """Write the last render to a text stream as a plain PPM."""
        write_ppm(stream, self.get_image_uint8())

    def save(self, filepath: str) -> None:
        """Save the last render to a .png or .ppm file."""
        save_image(filepath, self.get_image_uint8())

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.config.samples_per_pixel}, "
            f"max_depth={self.config.max_depth}, workers={self.num_workers})"
        )
