"""Scene module for sphere records, generation and device storage.

Components:
    sphere: Immutable sphere records and the packed 44-byte GPU layout
    generator: Single-pass rejection sampling of non-overlapping spheres
    buffer: Read-only device copy of a generated sphere field
    light: Directional light
    skybox: Equirectangular environment texture
"""

from .buffer import SceneBuffer
from .generator import (
    DIELECTRIC_SPECULAR,
    METALLIC_PROBABILITY,
    generate_scene,
    generate_spheres,
    random_hsv_color,
    random_point_in_disk,
)
from .light import DirectionalLight
from .skybox import Skybox
from .sphere import SPHERE_DTYPE, SPHERE_STRIDE, SphereData, pack_spheres, unpack_spheres

__all__ = [
    # Sphere records
    "SphereData",
    "SPHERE_DTYPE",
    "SPHERE_STRIDE",
    "pack_spheres",
    "unpack_spheres",
    # Generation
    "generate_spheres",
    "generate_scene",
    "random_point_in_disk",
    "random_hsv_color",
    "METALLIC_PROBABILITY",
    "DIELECTRIC_SPECULAR",
    # Device resources
    "SceneBuffer",
    "Skybox",
    "DirectionalLight",
]
