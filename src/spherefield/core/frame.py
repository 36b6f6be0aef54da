"""Per-frame parameters handed to the trace kernel.

FrameParameters gathers everything the kernel needs for one dispatch: the
camera transforms, a fresh sub-pixel jitter offset, the light, and a
reference to the scene buffer. It is rebuilt every frame and never stored.

The jitter offset decorrelates sampling across frames so that progressive
accumulation anti-aliases edges instead of reinforcing the same sample
positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from spherefield.camera.pinhole import (
    PinholeCamera,
    camera_to_world_matrix,
    inverse_projection_matrix,
)
from spherefield.scene.light import DirectionalLight

if TYPE_CHECKING:
    from spherefield.scene.buffer import SceneBuffer


@dataclass(frozen=True)
class FrameParameters:
    """Uniforms and buffers for a single kernel dispatch.

    Attributes:
        camera_to_world: 4x4 camera-to-world transform.
        inverse_projection: 4x4 inverse projection transform.
        pixel_offset: Sub-pixel jitter (x, y), each in [0, 1).
        light: Normalized light direction and intensity (x, y, z, intensity).
        scene: The scene buffer to trace against.
    """

    camera_to_world: npt.NDArray[np.float32]
    inverse_projection: npt.NDArray[np.float32]
    pixel_offset: tuple[float, float]
    light: tuple[float, float, float, float]
    scene: SceneBuffer

    @property
    def light_direction(self) -> tuple[float, float, float]:
        return self.light[:3]

    @property
    def light_intensity(self) -> float:
        return self.light[3]


class FrameParameterBuilder:
    """Assembles FrameParameters with an independent jitter draw per call.

    The builder owns its random generator; it reads but never modifies the
    camera, light and scene it is given.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    def next_pixel_offset(self) -> tuple[float, float]:
        """Draw a sub-pixel offset uniformly in [0, 1) x [0, 1)."""
        x, y = self._rng.random(2)
        return float(x), float(y)

    def build(
        self,
        camera: PinholeCamera,
        light: DirectionalLight,
        scene: SceneBuffer,
        aspect_ratio: float,
    ) -> FrameParameters:
        """Build the parameters for the next frame.

        Args:
            camera: Current camera.
            light: Current directional light.
            scene: Scene buffer, passed through by reference.
            aspect_ratio: Width divided by height of the output target.

        Returns:
            A new FrameParameters with a freshly drawn pixel offset.
        """
        camera_to_world = camera_to_world_matrix(camera)
        inverse_projection = inverse_projection_matrix(camera, aspect_ratio)
        camera_to_world.setflags(write=False)
        inverse_projection.setflags(write=False)

        return FrameParameters(
            camera_to_world=camera_to_world,
            inverse_projection=inverse_projection,
            pixel_offset=self.next_pixel_offset(),
            light=light.as_vec4(),
            scene=scene,
        )
