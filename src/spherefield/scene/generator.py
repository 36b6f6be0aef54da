"""Random sphere field generation.

Scenes are built by a single pass of independent placement trials. Each trial
draws a radius and a position on a disk, and the candidate is dropped if it
overlaps any sphere accepted so far. Dropped trials are not retried, so the
number of spheres can be lower than the trial budget and generation time is
bounded by the budget alone.

Example:
    >>> import numpy as np
    >>> from spherefield.scene.generator import generate_spheres
    >>> rng = np.random.default_rng(7)
    >>> spheres = generate_spheres(100, (3.0, 8.0), 100.0, rng)
    >>> len(spheres) <= 100
    True
"""

import colorsys
import logging
import math

import numpy as np

from spherefield.config import RenderConfig
from spherefield.scene.sphere import SphereData, to_f32

logger = logging.getLogger(__name__)

# Probability that an accepted sphere is metallic
METALLIC_PROBABILITY = 0.5

# Specular reflectance of dielectric spheres (grey)
DIELECTRIC_SPECULAR = 0.04


def random_point_in_disk(rng: np.random.Generator, radius: float) -> tuple[float, float]:
    """Draw a point uniformly distributed inside a disk centered at the origin.

    Uses polar sampling with a square-root radial term so that the density is
    uniform over the disk area.

    Args:
        rng: Random number generator.
        radius: Disk radius.

    Returns:
        Tuple (x, z) on the ground plane.
    """
    r = radius * math.sqrt(rng.random())
    theta = 2.0 * math.pi * rng.random()
    return r * math.cos(theta), r * math.sin(theta)


def random_hsv_color(rng: np.random.Generator) -> tuple[float, float, float]:
    """Draw an RGB color from uniformly random hue, saturation and value."""
    hue, saturation, value = rng.random(3)
    return colorsys.hsv_to_rgb(float(hue), float(saturation), float(value))


def _random_surface(rng: np.random.Generator):
    color = random_hsv_color(rng)
    if rng.random() < METALLIC_PROBABILITY:
        albedo = (0.0, 0.0, 0.0)
        specular = color
    else:
        albedo = color
        specular = (DIELECTRIC_SPECULAR,) * 3
    roughness = rng.random()
    return albedo, specular, roughness


def generate_spheres(
    capacity: int,
    radius_range: tuple[float, float],
    placement_radius: float,
    rng: np.random.Generator,
) -> list[SphereData]:
    """Generate non-overlapping spheres resting on the ground plane.

    Runs ``capacity`` independent trials. Each trial draws a radius uniformly
    in ``radius_range`` and a center uniformly inside a disk of radius
    ``placement_radius``, with the vertical coordinate equal to the radius.
    A candidate whose squared center distance to any accepted sphere is less
    than the squared radius sum is skipped.

    Accepted spheres get a random HSV color. Half of them are metallic
    (black albedo, colored specular), the rest dielectric (colored albedo,
    0.04 grey specular). Roughness is uniform in [0, 1).

    Degenerate inputs never raise: a range with min > max or a negative
    placement radius yields an empty scene, and trials that draw a
    non-positive radius are skipped.

    Args:
        capacity: Number of placement trials.
        radius_range: Tuple (min, max) of sphere radii.
        placement_radius: Radius of the placement disk.
        rng: Random number generator.

    Returns:
        Accepted spheres in acceptance order. May be shorter than capacity.
    """
    min_radius, max_radius = radius_range
    if min_radius > max_radius:
        logger.warning(
            "Sphere radius range is inverted (%s > %s); generating an empty scene",
            min_radius,
            max_radius,
        )
        return []
    if placement_radius < 0.0:
        logger.warning(
            "Placement radius %s is negative; generating an empty scene", placement_radius
        )
        return []

    spheres: list[SphereData] = []
    for _ in range(max(capacity, 0)):
        radius = to_f32(min_radius + rng.random() * (max_radius - min_radius))
        x, z = random_point_in_disk(rng, placement_radius)
        if radius <= 0.0:
            continue

        candidate = SphereData.create((x, radius, z), radius, (0.0,) * 3, (0.0,) * 3, 0.0)
        if any(candidate.overlaps(other) for other in spheres):
            continue

        albedo, specular, roughness = _random_surface(rng)
        spheres.append(
            SphereData.create(candidate.position, radius, albedo, specular, roughness)
        )

    logger.info("Generated %d spheres from %d trials", len(spheres), max(capacity, 0))
    return spheres


def generate_scene(config: RenderConfig, rng: np.random.Generator) -> list[SphereData]:
    """Generate a sphere field from the configuration surface."""
    return generate_spheres(
        config.spheres_max,
        config.sphere_radius,
        config.sphere_placement_radius,
        rng,
    )
