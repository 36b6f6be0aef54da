"""Blend pass that folds each traced frame into the display target.

The blend is a linear interpolation with a per-frame weight:

    display = display * (1 - weight) + sample * weight

With weight = 1 / (k + 1) for the k-th sample, the display holds the running
average of every sample since the last reset.
"""

import taichi as ti

from spherefield.core.errors import CompositeError
from spherefield.core.target import RenderTarget


@ti.kernel
def _blend_kernel(
    source: ti.template(),
    destination: ti.template(),
    width: ti.i32,
    height: ti.i32,
    weight: ti.f32,
):
    for i, j in ti.ndrange(width, height):
        destination[i, j] = destination[i, j] * (1.0 - weight) + source[i, j] * weight


class BlendCompositor:
    """Alpha-blends a source render target over a destination target."""

    def composite(
        self,
        source: RenderTarget,
        destination: RenderTarget,
        weight: float,
    ) -> None:
        """Blend source into destination.

        Args:
            source: Raw kernel output for this frame.
            destination: Accumulated display target.
            weight: Contribution of the new sample in [0, 1]. 1 replaces history.

        Raises:
            CompositeError: If the targets differ in size or the weight is
                outside [0, 1].
        """
        if (source.width, source.height) != (destination.width, destination.height):
            raise CompositeError(
                f"Cannot composite {source.width}x{source.height} onto "
                f"{destination.width}x{destination.height}"
            )
        if not 0.0 <= weight <= 1.0:
            raise CompositeError(f"Blend weight must be in [0, 1], got {weight}")

        _blend_kernel(source.field, destination.field, source.width, source.height, weight)
