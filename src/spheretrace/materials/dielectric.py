"""Dielectric (glass/water) material implementation.

Dielectrics either reflect or refract every incoming ray and never absorb:

    - Snell's law: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1
    - Schlick's approximation for the angle-dependent reflectance

When refraction is possible, a uniform random value decides between
reflection and refraction with probability equal to the Schlick reflectance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import reflect, refract, schlick_fresnel
from src.spheretrace.core.sampler import next_float

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio n_incident / n_transmitted for the side the ray arrives from.

    Entering the surface (front_face=1) gives 1 / ior, leaving it gives ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def dielectric_direction(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    random_value: ti.f32,
) -> vec3:
    """Choose between the reflected and the refracted direction.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The surface normal facing against the incoming ray (unit length).
        front_face: 1 if the ray arrives from outside the surface, 0 otherwise.
        random_value: A uniform value in [0, 1) compared against the
            Schlick reflectance.

    Returns:
        The reflected direction under total internal reflection or when the
        reflectance exceeds random_value, otherwise the refracted direction.
    """
    ratio = refraction_ratio(ior, front_face)
    unit_direction = tm.normalize(incident_direction)

    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = ratio * sin_theta > 1.0

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_fresnel(cos_theta, ratio) > random_value:
        direction = reflect(unit_direction, normal)
    else:
        direction = refract(unit_direction, normal, ratio)

    return direction


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the ray arrives from outside the surface, 0 otherwise.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        The attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    random_value, s = next_float(state)
    scattered_direction = dielectric_direction(
        ior, incident_direction, normal, front_face, random_value
    )
    did_scatter = 1
    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 512

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]
