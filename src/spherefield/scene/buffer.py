"""Device-side storage for a generated sphere field.

A SceneBuffer uploads a sequence of spheres into Taichi fields once and is
never modified afterwards. Re-seeding the scene builds a new buffer and
releases the old one.

Spheres are stored as a Structure of Arrays for GPU efficiency. The fields
are allocated through a FieldsBuilder so that their device memory can be
released explicitly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from spherefield.scene.buffer import SceneBuffer
    >>> buffer = SceneBuffer.from_spheres(spheres)
    >>> buffer.count
    42
    >>> buffer.release()
"""

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from spherefield.core.errors import ResourceError
from spherefield.scene.sphere import SphereData, pack_spheres, unpack_spheres

logger = logging.getLogger(__name__)


class SceneBuffer:
    """Read-only device copy of a sphere field.

    Attributes:
        positions: Vector field of sphere centers.
        radii: Scalar field of sphere radii.
        albedos: Vector field of diffuse colors.
        speculars: Vector field of specular colors.
        roughness: Scalar field of roughness values.
    """

    def __init__(self, packed: npt.NDArray[np.void]) -> None:
        """Upload packed sphere records to the device.

        Prefer from_spheres() unless the records are already packed.

        Args:
            packed: Structured array of dtype SPHERE_DTYPE.

        Raises:
            ResourceError: If the device fields could not be allocated.
        """
        self._packed = packed.copy()
        self._packed.setflags(write=False)
        self._count = len(packed)
        self._tree: Any = None

        self.positions = ti.Vector.field(3, dtype=ti.f32)
        self.radii = ti.field(dtype=ti.f32)
        self.albedos = ti.Vector.field(3, dtype=ti.f32)
        self.speculars = ti.Vector.field(3, dtype=ti.f32)
        self.roughness = ti.field(dtype=ti.f32)

        # Taichi cannot allocate zero-length fields; an empty scene keeps one unused slot
        capacity = max(self._count, 1)
        try:
            builder = ti.FieldsBuilder()
            builder.dense(ti.i, capacity).place(
                self.positions, self.radii, self.albedos, self.speculars, self.roughness
            )
            self._tree = builder.finalize()
        except RuntimeError as e:
            raise ResourceError(f"Failed to allocate scene buffer for {self._count} spheres") from e

        if self._count > 0:
            self.positions.from_numpy(np.ascontiguousarray(packed["position"]))
            self.radii.from_numpy(np.ascontiguousarray(packed["radius"]))
            self.albedos.from_numpy(np.ascontiguousarray(packed["albedo"]))
            self.speculars.from_numpy(np.ascontiguousarray(packed["specular"]))
            self.roughness.from_numpy(np.ascontiguousarray(packed["roughness"]))

        logger.debug("Uploaded scene buffer with %d spheres", self._count)

    @classmethod
    def from_spheres(cls, spheres: Sequence[SphereData]) -> "SceneBuffer":
        """Pack and upload a sequence of spheres."""
        return cls(pack_spheres(spheres))

    @property
    def count(self) -> int:
        """Number of spheres in the buffer."""
        return self._count

    @property
    def packed(self) -> npt.NDArray[np.void]:
        """The packed host copy of the uploaded records (read-only)."""
        return self._packed

    @property
    def released(self) -> bool:
        """Whether the device fields have been released."""
        return self._tree is None

    def spheres(self) -> list[SphereData]:
        """Get the uploaded spheres as host records."""
        return unpack_spheres(self._packed)

    def release(self) -> None:
        """Free the device fields. Safe to call more than once."""
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None
            logger.debug("Released scene buffer with %d spheres", self._count)

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"SceneBuffer(count={self._count}, released={self.released})"
