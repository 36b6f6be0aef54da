"""Sphere records and their packed GPU layout.

A sphere is an immutable value created in a batch by the scene generator.
Every component is rounded to float32 when the record is created, so the
values seen on the host are exactly the values uploaded to the device.

The packed layout is a structured array of 11 float32 fields (44 bytes per
element) in the order position.xyz, radius, albedo.xyz, specular.xyz,
roughness.

Example:
    >>> from spherefield.scene.sphere import SphereData, pack_spheres
    >>> sphere = SphereData.create((0.0, 1.0, 0.0), 1.0, (0.8, 0.2, 0.2), (0.04,) * 3, 0.5)
    >>> pack_spheres([sphere]).itemsize
    44
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

Vec3 = tuple[float, float, float]

# Packed record layout consumed by the trace kernel
SPHERE_DTYPE = np.dtype(
    [
        ("position", np.float32, (3,)),
        ("radius", np.float32),
        ("albedo", np.float32, (3,)),
        ("specular", np.float32, (3,)),
        ("roughness", np.float32),
    ]
)

# Size of one packed sphere in bytes
SPHERE_STRIDE = SPHERE_DTYPE.itemsize


def to_f32(value: float) -> float:
    """Round a Python float to the nearest float32 value."""
    return float(np.float32(value))


def _vec3_f32(values: Sequence[float]) -> Vec3:
    return (to_f32(values[0]), to_f32(values[1]), to_f32(values[2]))


@dataclass(frozen=True)
class SphereData:
    """A sphere resting in the scene with its surface properties.

    Attributes:
        position: World-space center (x, y, z).
        radius: Sphere radius (positive).
        albedo: Diffuse color, each component in [0, 1].
        specular: Specular reflectance color, each component in [0, 1].
        roughness: Perturbation of specular reflections in [0, 1].
    """

    position: Vec3
    radius: float
    albedo: Vec3
    specular: Vec3
    roughness: float

    @classmethod
    def create(
        cls,
        position: Sequence[float],
        radius: float,
        albedo: Sequence[float],
        specular: Sequence[float],
        roughness: float,
    ) -> "SphereData":
        """Create a sphere with every component rounded to float32."""
        return cls(
            position=_vec3_f32(position),
            radius=to_f32(radius),
            albedo=_vec3_f32(albedo),
            specular=_vec3_f32(specular),
            roughness=to_f32(roughness),
        )

    @property
    def is_metallic(self) -> bool:
        """Whether the sphere is metallic (no diffuse albedo)."""
        return self.albedo == (0.0, 0.0, 0.0)

    def overlaps(self, other: "SphereData") -> bool:
        """Test whether two spheres interpenetrate.

        Touching spheres (center distance equal to the radius sum) do not overlap.
        """
        dx = self.position[0] - other.position[0]
        dy = self.position[1] - other.position[1]
        dz = self.position[2] - other.position[2]
        min_dist = self.radius + other.radius
        return dx * dx + dy * dy + dz * dz < min_dist * min_dist


def pack_spheres(spheres: Sequence[SphereData]) -> npt.NDArray[np.void]:
    """Pack spheres into the 44-byte structured layout.

    Args:
        spheres: Spheres in buffer order.

    Returns:
        Structured array of dtype SPHERE_DTYPE with one element per sphere.
    """
    packed = np.zeros(len(spheres), dtype=SPHERE_DTYPE)
    for i, sphere in enumerate(spheres):
        packed[i] = (
            sphere.position,
            sphere.radius,
            sphere.albedo,
            sphere.specular,
            sphere.roughness,
        )
    return packed


def unpack_spheres(packed: npt.NDArray[np.void]) -> list[SphereData]:
    """Rebuild sphere records from a packed structured array."""
    return [
        SphereData.create(
            tuple(record["position"]),
            float(record["radius"]),
            tuple(record["albedo"]),
            tuple(record["specular"]),
            float(record["roughness"]),
        )
        for record in packed
    ]
