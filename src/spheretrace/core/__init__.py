"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Counter-hashed random streams and sampling helpers
    integrator: The ray_color loop, band-partitioned render kernel and render target
    renderer: Render orchestration (worker count, seeding, finalization)

The integrator estimates each pixel by averaging samples_per_pixel paths.
A path bounces until it escapes to the sky, is absorbed by a material, or
runs out of depth.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    vec3,
)
from .sampler import (
    next_float,
    random_in_unit_disk,
    random_unit_vector,
    seed_sample_state,
    wang_hash,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.spheretrace.core.integrator or src.spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "wang_hash",
    "seed_sample_state",
    "next_float",
    "random_in_unit_disk",
    "random_unit_vector",
]
