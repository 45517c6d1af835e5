"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides a scatter function returning the scattered direction,
the attenuation color and (for materials that can absorb) a did_scatter flag,
plus the advanced random stream state. A deterministic *_direction helper
takes the random sample explicitly.

Material parameters live in per-type Taichi fields and are addressed by a
type-local index; scene.manager maps unified material ids onto them.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    dielectric_direction,
    get_dielectric_ior,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
)
from .metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    metal_direction,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "lambertian_direction",
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "metal_direction",
    "scatter_metal",
    "clamp_fuzz",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "refraction_ratio",
    "dielectric_direction",
    "scatter_dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
]
