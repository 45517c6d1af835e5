"""Camera module for view setup and primary ray generation.

Components:
    camera: Thin-lens camera (pinhole when the defocus angle is zero)

Camera responsibilities:
    - Derive the projection basis and pixel grid once per render
    - Apply sub-pixel jitter for box-filter anti-aliasing
    - Sample ray origins on the defocus disk for depth of field
"""

from .camera import (
    CameraConfig,
    CameraGeometry,
    compute_camera_geometry,
    get_camera_info,
    get_ray,
    image_dimensions,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "CameraGeometry",
    "compute_camera_geometry",
    "image_dimensions",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
