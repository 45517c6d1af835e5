"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimate and the band-partitioned
rendering kernel. Rays are traced from the camera through the scene,
scattered off surfaces according to their materials and terminated on
escape (sky), absorption, or when the bounce budget runs out.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background for escaped rays
    - Row bands rendered as independent parallel tasks
    - Per-sample random streams, so the image does not depend on banding

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.integrator import (
    ...     get_linear_image_numpy, render_bands, setup_render_target
    ... )
    >>> from src.spheretrace.camera.camera import CameraConfig, setup_camera
    >>>
    >>> geometry = setup_camera(CameraConfig(image_width=64))
    >>> setup_render_target(64, 64)
    >>> render_bands(num_bands=4, samples_per_pixel=10, max_depth=10, seed=1)
    >>> image = get_linear_image_numpy()
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretrace.camera.camera import get_ray
from src.spheretrace.core.sampler import seed_sample_state
from src.spheretrace.materials.dielectric import (
    get_dielectric_ior,
    scatter_dielectric,
)
from src.spheretrace.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from src.spheretrace.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from src.spheretrace.scene.intersection import intersect_scene
from src.spheretrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Valid hit interval. T_MIN keeps scattered rays off the surface they left.
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints, blended by the ray's vertical direction
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color buffer indexed [row, column], row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer.
    The buffer is preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 1x1")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def reset_render_target() -> None:
    """Forget the active render target so it must be set up again."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


# =============================================================================
# Background
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Vertical white-to-blue gradient seen by rays that escape the scene."""
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_HORIZON_COLOR + a * SKY_ZENITH_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing against the ray).
        front_face: 1 if hit front face, 0 if back face.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        Unknown material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, s = scatter_lambertian(albedo, normal, s)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter, s = scatter_metal(
            albedo, fuzz, incident_direction, normal, s
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter, s = scatter_dielectric(
            ior, incident_direction, normal, front_face, s
        )

    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    The bounce recursion is unrolled into a loop that carries the current
    ray, the product of attenuations so far and the remaining depth.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be unit length).
        max_depth: Maximum number of scene queries. 0 yields black.
        state: The random stream state.

    Returns:
        A tuple of (color, new_state).
    """
    s = state
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Taichi doesn't support break inside ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction = vec3(0.0, 0.0, 0.0)
                attenuation = vec3(0.0, 0.0, 0.0)
                did_scatter = 0
                scattered_direction, attenuation, did_scatter, s = _scatter_material(
                    hit_record.material_id,
                    ray_direction,
                    hit_record.normal,
                    hit_record.front_face,
                    s,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = hit_record.point
                    ray_direction = scattered_direction

    # Paths still active here ran out of depth and contribute black
    return color, s


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_bands(
    num_bands: ti.i32,
    rows_per_band: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    """Render every pixel, one parallel task per band of rows.

    Only the outermost loop is parallelized; rows and pixels inside a band
    are rendered serially by the task that owns the band. Each band writes
    a disjoint set of rows of the color buffer.
    """
    ti.loop_config(block_dim=1)
    for band in range(num_bands):
        row_start = band * rows_per_band
        row_end = ti.min(row_start + rows_per_band, height)
        for j in range(row_start, row_end):
            for i in range(width):
                pixel_color = vec3(0.0, 0.0, 0.0)
                for sample in range(samples_per_pixel):
                    state = seed_sample_state(seed, i, j, sample)
                    origin, direction, state = get_ray(i, j, state)
                    color, state = ray_color(origin, direction, max_depth, state)
                    pixel_color += color
                if samples_per_pixel > 0:
                    pixel_color /= ti.cast(samples_per_pixel, ti.f32)
                _color_buffer[j, i] = pixel_color


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Estimate the radiance along one ray with a fixed random stream."""
    state = seed_sample_state(seed, 0, 0, 0)
    color, state = ray_color(vec3(ox, oy, oz), vec3(dx, dy, dz), max_depth, state)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def rows_per_band(height: int, num_bands: int) -> int:
    """Number of rows in each band: ceil(height / num_bands)."""
    return math.ceil(height / num_bands)


def render_bands(num_bands: int, samples_per_pixel: int, max_depth: int, seed: int) -> None:
    """Render the active image into the color buffer.

    Blocks until every band has finished. The camera must have been set up
    with setup_camera() and the render target with setup_render_target().

    Args:
        num_bands: Number of row bands. Clamped to [1, image height].
        samples_per_pixel: Samples averaged per pixel. 0 leaves pixels black.
        max_depth: Maximum bounce depth per sample.
        seed: Seed of the per-sample random streams.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    bands = max(1, min(num_bands, height))

    _render_bands(
        bands,
        rows_per_band(height, bands),
        width,
        height,
        max(0, samples_per_pixel),
        max_depth,
        seed,
    )


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray against the current scene.

    This is a Python-callable function for testing and debugging. For
    production rendering, use render_bands().

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(
        origin[0], origin[1], origin[2],
        direction[0], direction[1], direction[2],
        max_depth,
        seed,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered linear image as a NumPy array.

    The array shape is (height, width, 3) with row 0 at the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
