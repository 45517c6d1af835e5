"""Thin-lens camera model for perspective ray generation.

This module implements the camera that generates primary rays. It supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Box-filter anti-aliasing with sub-pixel jitter in [-0.5, 0.5]
- Depth of field from a defocus disk (a pinhole when defocus_angle is 0)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel (0, 0) is the upper-left corner of the image; rows increase downward.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.camera.camera import CameraConfig, setup_camera, get_ray
    >>>
    >>> config = CameraConfig(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     defocus_angle=0.6,
    ...     focus_dist=10.0,
    ... )
    >>> geometry = setup_camera(config)
    >>> geometry.image_height
    225
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.spheretrace.core.sampler import next_float, random_in_unit_disk

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class CameraConfig:
    """Viewing and sampling parameters for one render.

    Built once before rendering and treated as read-only afterwards.

    Attributes:
        aspect_ratio: Ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            0 gives a pinhole camera with everything in focus.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
        num_threads: Worker count. 0 selects the platform default.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0
    num_threads: int = 0


@dataclass
class CameraGeometry:
    """Projection geometry derived from a CameraConfig.

    Attributes:
        image_width: Image width in pixels (at least 1).
        image_height: Image height in pixels (at least 1).
        center: Camera center (lookfrom).
        pixel00_loc: World-space location of the center of pixel (0, 0).
        pixel_delta_u: Offset to the pixel to the right.
        pixel_delta_v: Offset to the pixel below.
        u: Camera frame basis vector pointing right.
        v: Camera frame basis vector pointing up.
        w: Camera frame basis vector pointing opposite the view direction.
        defocus_radius: Radius of the defocus disk.
        defocus_disk_u: Defocus disk horizontal radius vector.
        defocus_disk_v: Defocus disk vertical radius vector.
    """

    image_width: int
    image_height: int
    center: npt.NDArray[np.float64]
    pixel00_loc: npt.NDArray[np.float64]
    pixel_delta_u: npt.NDArray[np.float64]
    pixel_delta_v: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]
    w: npt.NDArray[np.float64]
    defocus_radius: float
    defocus_disk_u: npt.NDArray[np.float64]
    defocus_disk_v: npt.NDArray[np.float64]


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per render)
# =============================================================================


def image_dimensions(config: CameraConfig) -> tuple[int, int]:
    """Compute (width, height) of the image, each clamped to at least 1."""
    width = max(1, int(config.image_width))
    height = max(1, int(width / config.aspect_ratio))
    return width, height


def compute_camera_geometry(config: CameraConfig) -> CameraGeometry:
    """Derive the projection basis, pixel grid and defocus disk from a config.

    The viewport sits focus_dist in front of the camera, so rays through the
    same pixel from any point of the defocus disk converge on the focus plane.
    """
    width, height = image_dimensions(config)

    theta = math.radians(config.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * config.focus_dist
    viewport_width = viewport_height * (width / height)

    lookfrom = np.array(config.lookfrom, dtype=np.float64)
    lookat = np.array(config.lookat, dtype=np.float64)
    vup = np.array(config.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / width
    pixel_delta_v = viewport_v / height

    viewport_upper_left = (
        lookfrom - config.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = config.focus_dist * math.tan(math.radians(config.defocus_angle / 2.0))

    return CameraGeometry(
        image_width=width,
        image_height=height,
        center=lookfrom,
        pixel00_loc=pixel00_loc,
        pixel_delta_u=pixel_delta_u,
        pixel_delta_v=pixel_delta_v,
        u=u,
        v=v,
        w=w,
        defocus_radius=defocus_radius,
        defocus_disk_u=u * defocus_radius,
        defocus_disk_v=v * defocus_radius,
    )


def setup_camera(config: CameraConfig) -> CameraGeometry:
    """Initialize camera state from configuration.

    Computes the camera geometry and copies it into the Taichi fields read by
    get_ray(). This must be called before rendering.

    Args:
        config: Camera configuration with position, orientation, and lens.

    Returns:
        The derived CameraGeometry.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    geometry = compute_camera_geometry(config)

    _camera_center[None] = geometry.center.tolist()
    _pixel00_loc[None] = geometry.pixel00_loc.tolist()
    _pixel_delta_u[None] = geometry.pixel_delta_u.tolist()
    _pixel_delta_v[None] = geometry.pixel_delta_v.tolist()
    _defocus_disk_u[None] = geometry.defocus_disk_u.tolist()
    _defocus_disk_v[None] = geometry.defocus_disk_v.tolist()
    _defocus_angle[None] = config.defocus_angle

    return geometry


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, state: ti.u32):
    """Generate a sample ray for pixel (pixel_i, pixel_j).

    The ray originates on the defocus disk (or at the camera center when the
    defocus angle is zero) and is directed at a randomly jittered point within
    the pixel's square on the focus plane.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        state: The random stream state.

    Returns:
        A tuple of (origin, direction, new_state).
    """
    s = state
    rx, s = next_float(s)
    ry, s = next_float(s)
    offset_x = rx - 0.5
    offset_y = ry - 0.5

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f32) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f32) + offset_y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        p, s = random_in_unit_disk(s)
        origin = _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]

    direction = pixel_sample - origin
    return origin, direction, s


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, pixel00_loc, pixel deltas and defocus disk vectors.
    """

    def _as_tuple(field: "ti.MatrixField") -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "center": _as_tuple(_camera_center),
        "pixel00_loc": _as_tuple(_pixel00_loc),
        "pixel_delta_u": _as_tuple(_pixel_delta_u),
        "pixel_delta_v": _as_tuple(_pixel_delta_v),
        "defocus_disk_u": _as_tuple(_defocus_disk_u),
        "defocus_disk_v": _as_tuple(_defocus_disk_v),
    }
