"""Counter-based random streams for Monte Carlo sampling.

Taichi's built-in ``ti.random()`` keeps one generator per CPU thread, so the
numbers a pixel receives depend on which thread happens to render it. The
render kernel instead derives an independent 32-bit stream for every
(seed, pixel, sample) triple by hashing the counters together, and every
function that consumes randomness takes the stream state and returns the
advanced state alongside its result.

Because a pixel's samples depend only on the seed and the pixel
coordinates, the image is the same whichever band or worker renders a row.

Example:
    >>> @ti.kernel
    ... def demo() -> ti.f32:
    ...     state = seed_sample_state(7, 10, 20, 0)
    ...     value, state = next_float(state)
    ...     return value
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import length_squared

# Type alias for 3D vectors
vec3 = tm.vec3

# LCG step constants (Numerical Recipes)
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223

# Scale mapping the top 24 bits of a hash to [0, 1)
FLOAT_SCALE = 1.0 / 16777216.0

# Attempts before rejection sampling gives up and returns its fallback
MAX_REJECTION_ATTEMPTS = 100


@ti.func
def wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer with Thomas Wang's integer hash."""
    h = key
    h = (h ^ ti.u32(61)) ^ (h >> ti.u32(16))
    h = h * ti.u32(9)
    h = h ^ (h >> ti.u32(4))
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ (h >> ti.u32(15))
    return h


@ti.func
def seed_sample_state(seed: ti.i32, pixel_i: ti.i32, pixel_j: ti.i32, sample: ti.i32) -> ti.u32:
    """Derive the initial stream state for one pixel sample.

    Args:
        seed: The per-render seed.
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        sample: Sample index within the pixel.

    Returns:
        A 32-bit state unique to the (seed, pixel, sample) triple.
    """
    h = wang_hash(ti.cast(seed, ti.u32))
    h = wang_hash(h ^ ti.cast(pixel_j, ti.u32))
    h = wang_hash(h ^ ti.cast(pixel_i, ti.u32))
    h = wang_hash(h ^ ti.cast(sample, ti.u32))
    return h


@ti.func
def next_float(state: ti.u32):
    """Advance the stream and draw a uniform value in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple (value, new_state).
    """
    s = state * ti.u32(LCG_MULTIPLIER) + ti.u32(LCG_INCREMENT)
    value = ti.cast(wang_hash(s) >> ti.u32(8), ti.f32) * FLOAT_SCALE
    return value, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Draw a point uniformly inside the unit disk in the xy-plane.

    Uses rejection sampling, as needed for defocus-disk ray origins.

    Args:
        state: The current stream state.

    Returns:
        A tuple (point, new_state) where point is (x, y, 0) with x^2 + y^2 < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            rx, s = next_float(s)
            ry, s = next_float(s)
            candidate = vec3(rx * 2.0 - 1.0, ry * 2.0 - 1.0, 0.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a unit vector uniformly distributed on the unit sphere.

    Points are rejection sampled inside the unit ball and projected onto its
    surface. Candidates too close to the origin are rejected so the
    normalization never divides by a vanishing length.

    Args:
        state: The current stream state.

    Returns:
        A tuple (direction, new_state).
    """
    s = state
    result = vec3(0.0, 1.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            rx, s = next_float(s)
            ry, s = next_float(s)
            rz, s = next_float(s)
            p = vec3(rx * 2.0 - 1.0, ry * 2.0 - 1.0, rz * 2.0 - 1.0)
            lensq = length_squared(p)
            if lensq > 1e-12 and lensq <= 1.0:
                result = p / ti.sqrt(lensq)
                found = True
    return result, s
