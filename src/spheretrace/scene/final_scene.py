"""Demonstration scene: a field of small random spheres around three large ones.

The scene consists of:
- A huge Lambertian sphere acting as the ground plane
- A 22x22 grid of small spheres (radius 0.2) with jittered positions and
  randomly chosen materials: 80% diffuse, 15% metal, 5% glass
- Three large feature spheres: glass in the middle, diffuse brown on the
  left and a polished metal on the right

Small spheres that would overlap the metal feature sphere are skipped.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.final_scene import create_final_scene
    >>> from src.spheretrace.core.renderer import Renderer
    >>>
    >>> scene, config = create_final_scene(image_width=400, seed=42)
    >>> Renderer(config).render()
"""

import numpy as np

from src.spheretrace.camera.camera import CameraConfig
from src.spheretrace.scene.manager import SceneManager

# =============================================================================
# Scene Layout
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on a grid of cells [GRID_MIN, GRID_MAX) in x and z
GRID_MIN = -11
GRID_MAX = 11
SMALL_RADIUS = 0.2

# Cumulative material probabilities for small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

# Small spheres closer than this to CLEARANCE_POINT are not placed
CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
CLEARANCE_DISTANCE = 0.9

GLASS_IOR = 1.5
FEATURE_RADIUS = 1.0


def _add_small_spheres(scene: SceneManager, rng: np.random.Generator) -> None:
    """Scatter the grid of small randomized spheres."""
    for a in range(GRID_MIN, GRID_MAX):
        for b in range(GRID_MIN, GRID_MAX):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - CLEARANCE_POINT) <= CLEARANCE_DISTANCE:
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(position, SMALL_RADIUS, tuple(albedo.tolist()))
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(position, SMALL_RADIUS, tuple(albedo.tolist()), float(fuzz))
            else:
                scene.add_dielectric_sphere(position, SMALL_RADIUS, GLASS_IOR)


def create_final_scene(
    image_width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
    num_threads: int = 0,
    seed: int | None = None,
) -> tuple[SceneManager, CameraConfig]:
    """Create the demonstration scene and its camera.

    Args:
        image_width: Width of the rendered image in pixels.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum bounce depth.
        num_threads: Worker count, 0 for the platform default.
        seed: Seed for sphere placement and materials. The same seed
            always produces the same scene; None draws a fresh layout.

    Returns:
        Tuple of (SceneManager, CameraConfig). The manager has already
        loaded the scene into the registries.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    _add_small_spheres(scene, rng)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), FEATURE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), FEATURE_RADIUS, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), FEATURE_RADIUS, (0.7, 0.6, 0.5), 0.0)

    config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
        num_threads=num_threads,
    )

    return scene, config
