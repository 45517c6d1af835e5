"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage and the closest-hit scene query
    manager: Unified scene manager coordinating spheres and materials
    final_scene: Demonstration scene with randomized small spheres

Scene data is organized for the Taichi kernels:
    - Structure-of-Arrays layout for sphere data
    - Unified material ids mapped to per-type material registries
"""

from .final_scene import create_final_scene
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Demonstration scene
    "create_final_scene",
]
