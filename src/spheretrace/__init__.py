"""Monte Carlo sphere path tracer built on Taichi.

This package renders scenes of spheres with stochastic path tracing:
- Lambertian, metal and dielectric materials
- Thin-lens camera with depth of field and anti-aliasing jitter
- Row bands rendered in parallel on the CPU thread pool
- PPM and PNG output

Subpackages:
    core: Ray utilities, random streams, integrator and renderer
    geometry: Sphere intersection
    materials: Surface scattering models
    scene: Scene storage, scene manager and the demonstration scene
    camera: Camera configuration and primary ray generation
    output: Gamma encoding and image writers

Taichi must be initialized (ti.init) before importing the subpackages,
since they allocate Taichi fields at import time.
"""

__version__ = "0.1.0"
