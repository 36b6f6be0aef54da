"""Camera module for the transforms that drive primary ray generation.

Components:
    pinhole: Look-at pinhole camera with camera-to-world and inverse
        projection matrices in the OpenGL convention

Primary rays are reconstructed on the GPU from normalized device
coordinates in [-1, 1], jittered by a per-frame sub-pixel offset.
"""

from .pinhole import (
    FAR_PLANE,
    NEAR_PLANE,
    PinholeCamera,
    camera_basis,
    camera_to_world_matrix,
    inverse_projection_matrix,
    orbit,
    projection_matrix,
)

__all__ = [
    "PinholeCamera",
    "camera_basis",
    "camera_to_world_matrix",
    "projection_matrix",
    "inverse_projection_matrix",
    "orbit",
    "NEAR_PLANE",
    "FAR_PLANE",
]
