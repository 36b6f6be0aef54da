"""Configuration surface for scene generation and progressive sampling.

The RenderConfig is read when the scene is generated and whenever the
accumulation is reset. Editing it through RenderOrchestrator.on_config_changed()
always invalidates the accumulated image, and regenerates the scene when a
generation field changed.

Example:
    >>> from spherefield.config import RenderConfig
    >>> config = RenderConfig(spheres_max=50, sphere_placement_radius=60.0)
    >>> config.generation_key()
    ((3.0, 8.0), 50, 60.0, None)
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

# Largest sample count representable by the uint32 blend input
MAX_SAMPLE_LIMIT = 2**32 - 2


@dataclass
class RenderConfig:
    """Parameters for scene generation and accumulation.

    Attributes:
        sphere_radius: Radius range (min, max) sampled uniformly per sphere.
            A range with min > max produces an empty scene.
        spheres_max: Number of placement trials (upper bound on sphere count).
        sphere_placement_radius: Radius of the disk on the ground plane that
            sphere centers are drawn from. Negative values produce an empty scene.
        progressive_sampling: Whether successive frames are blended together.
        max_samples: Sample count after which the accumulation saturates.
        seed: Seed for scene generation and jitter. None draws fresh entropy.
        skybox_path: Optional equirectangular image used as the environment.
            None uses a procedural gradient sky.
    """

    sphere_radius: tuple[float, float] = (3.0, 8.0)
    spheres_max: int = 100
    sphere_placement_radius: float = 100.0
    progressive_sampling: bool = True
    max_samples: int = 4096
    seed: int | None = None
    skybox_path: str | None = None

    def __post_init__(self) -> None:
        self.sphere_radius = (float(self.sphere_radius[0]), float(self.sphere_radius[1]))
        if self.spheres_max < 0:
            raise ValueError(f"spheres_max must be non-negative, got {self.spheres_max}")
        if not 0 <= self.max_samples <= MAX_SAMPLE_LIMIT:
            raise ValueError(
                f"max_samples must be in [0, {MAX_SAMPLE_LIMIT}], got {self.max_samples}"
            )

    def generation_key(self) -> tuple[Any, ...]:
        """Return the fields that determine the generated scene.

        Two configs with equal keys produce the same scene for the same seed.
        """
        return (
            self.sphere_radius,
            self.spheres_max,
            self.sphere_placement_radius,
            self.seed,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the configuration to a plain dictionary."""
        data = asdict(self)
        data["sphere_radius"] = list(self.sphere_radius)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Create a configuration from a dictionary.

        Args:
            data: Mapping of field names to values. Missing fields use defaults.

        Raises:
            ValueError: If the mapping contains unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        values = dict(data)
        if "sphere_radius" in values:
            low, high = values["sphere_radius"]
            values["sphere_radius"] = (float(low), float(high))
        return cls(**values)
