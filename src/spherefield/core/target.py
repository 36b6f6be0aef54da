"""Floating-point render targets backed by releasable Taichi fields.

A RenderTarget holds an RGBA float32 image of shape (width, height) with
the origin at the bottom-left. ensure() reallocates the field whenever the
requested size differs from the current one; the old device memory is
destroyed first.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from spherefield.core.target import RenderTarget
    >>> target = RenderTarget()
    >>> target.ensure(640, 480)
    True
    >>> target.ensure(640, 480)
    False
"""

import logging
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from spherefield.core.errors import ResourceError

logger = logging.getLogger(__name__)

# Largest supported target dimension in pixels
MAX_TARGET_SIZE = 8192


class RenderTarget:
    """Resizable RGBA float image with random-write access from kernels."""

    def __init__(self, name: str = "target") -> None:
        self.name = name
        self._width = 0
        self._height = 0
        self._field: ti.MatrixField | None = None
        self._tree: Any = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def allocated(self) -> bool:
        return self._field is not None

    @property
    def field(self) -> ti.MatrixField:
        """The underlying Taichi field.

        Raises:
            ResourceError: If the target has not been allocated.
        """
        if self._field is None:
            raise ResourceError(f"Render target '{self.name}' is not allocated")
        return self._field

    def ensure(self, width: int, height: int) -> bool:
        """Make sure the target matches the requested dimensions.

        Args:
            width: Requested width in pixels.
            height: Requested height in pixels.

        Returns:
            True if the target was (re)allocated, False if it already matched.

        Raises:
            ResourceError: If the dimensions are non-positive, exceed
                MAX_TARGET_SIZE, or the allocation fails.
        """
        if self._field is not None and width == self._width and height == self._height:
            return False

        if width <= 0 or height <= 0:
            raise ResourceError(f"Render target dimensions must be positive, got {width}x{height}")
        if width > MAX_TARGET_SIZE or height > MAX_TARGET_SIZE:
            raise ResourceError(
                f"Render target dimensions ({width}x{height}) exceed maximum supported "
                f"({MAX_TARGET_SIZE}x{MAX_TARGET_SIZE})"
            )

        self.release()

        field = ti.Vector.field(4, dtype=ti.f32)
        try:
            builder = ti.FieldsBuilder()
            builder.dense(ti.ij, (width, height)).place(field)
            self._tree = builder.finalize()
        except RuntimeError as e:
            raise ResourceError(
                f"Failed to allocate render target '{self.name}' ({width}x{height})"
            ) from e

        field.fill(0.0)
        self._field = field
        self._width = width
        self._height = height
        logger.debug("Allocated render target '%s' (%dx%d)", self.name, width, height)
        return True

    def clear(self) -> None:
        """Fill the target with zeros."""
        if self._field is not None:
            self._field.fill(0.0)

    def release(self) -> None:
        """Free the device memory. Safe to call more than once."""
        if self._tree is not None:
            self._tree.destroy()
            logger.debug(
                "Released render target '%s' (%dx%d)", self.name, self._width, self._height
            )
        self._tree = None
        self._field = None
        self._width = 0
        self._height = 0

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Get the RGB channels as a NumPy image.

        Returns:
            Array of shape (height, width, 3) with the origin at the top-left.
            Values are linear and not clamped.
        """
        data = self.field.to_numpy()

        # Transpose from (width, height, 4) to (height, width, 4) for standard image format
        image = np.transpose(data, (1, 0, 2))

        # Flip vertically (Taichi uses bottom-left origin, images use top-left)
        image = np.flipud(image)

        return np.ascontiguousarray(image[:, :, :3], dtype=np.float32)

    def __repr__(self) -> str:
        return f"RenderTarget({self.name!r}, {self._width}x{self._height})"
