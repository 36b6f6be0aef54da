"""Directional light shared by every frame of the trace kernel."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class DirectionalLight:
    """A light infinitely far away, shining along a fixed direction.

    Attributes:
        direction: Direction the light travels (need not be normalized).
        intensity: Scalar brightness applied to diffuse shading.
    """

    direction: tuple[float, float, float] = (0.3, -1.0, 0.5)
    intensity: float = 1.0

    def __post_init__(self) -> None:
        if math.hypot(*self.direction) <= 1e-8:
            raise ValueError("Light direction must be non-zero")

    def normalized_direction(self) -> tuple[float, float, float]:
        """Get the unit-length light direction."""
        length = math.hypot(*self.direction)
        x, y, z = self.direction
        return (x / length, y / length, z / length)

    def as_vec4(self) -> tuple[float, float, float, float]:
        """Pack direction and intensity as (x, y, z, intensity)."""
        x, y, z = self.normalized_direction()
        return (x, y, z, float(self.intensity))
