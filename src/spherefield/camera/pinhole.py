"""Pinhole camera model expressed as the transforms the trace kernel consumes.

The kernel reconstructs primary rays from two matrices, in the OpenGL
convention where the camera looks down its local -Z axis:

- camera-to-world: columns are the camera's right (u), up (v) and backward
  (w) axes and its position
- inverse projection: maps a clip-space point (x, y, 0, 1) with x, y in
  [-1, 1] to a view-space direction

The camera basis is built from look-at parameters the same way as a
classic ray tracing camera:

- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Example:
    >>> from spherefield.camera.pinhole import PinholeCamera, camera_to_world_matrix
    >>> camera = PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0))
    >>> camera_to_world_matrix(camera)[:3, 3]
    array([0., 0., 0.], dtype=float32)
"""

import math
from dataclasses import dataclass, replace

import numpy as np
import numpy.typing as npt

# Clip planes of the perspective projection
NEAR_PLANE = 0.1
FAR_PLANE = 1000.0


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
    """

    lookfrom: tuple[float, float, float] = (0.0, 60.0, -180.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0


def camera_basis(camera: PinholeCamera) -> tuple[npt.NDArray[np.float64], ...]:
    """Compute the camera's orthonormal basis.

    Returns:
        A tuple (u, v, w) of right, up and backward unit vectors.

    Raises:
        ValueError: If lookfrom equals lookat or vup is parallel to the view axis.
    """
    lookfrom = np.asarray(camera.lookfrom, dtype=np.float64)
    lookat = np.asarray(camera.lookat, dtype=np.float64)
    vup = np.asarray(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_length = np.linalg.norm(w)
    if w_length < 1e-12:
        raise ValueError("Camera lookfrom and lookat must differ")
    w = w / w_length

    u = np.cross(vup, w)
    u_length = np.linalg.norm(u)
    if u_length < 1e-12:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_length

    v = np.cross(w, u)
    return u, v, w


def camera_to_world_matrix(camera: PinholeCamera) -> npt.NDArray[np.float32]:
    """Build the 4x4 camera-to-world transform."""
    u, v, w = camera_basis(camera)
    matrix = np.identity(4, dtype=np.float64)
    matrix[:3, 0] = u
    matrix[:3, 1] = v
    matrix[:3, 2] = w
    matrix[:3, 3] = camera.lookfrom
    return matrix.astype(np.float32)


def projection_matrix(
    vfov: float,
    aspect_ratio: float,
    near: float = NEAR_PLANE,
    far: float = FAR_PLANE,
) -> npt.NDArray[np.float32]:
    """Build an OpenGL-style perspective projection.

    Args:
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        near: Distance to the near clip plane.
        far: Distance to the far clip plane.
    """
    if aspect_ratio <= 0.0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")

    focal = 1.0 / math.tan(math.radians(vfov) / 2.0)
    matrix = np.zeros((4, 4), dtype=np.float64)
    matrix[0, 0] = focal / aspect_ratio
    matrix[1, 1] = focal
    matrix[2, 2] = (far + near) / (near - far)
    matrix[2, 3] = 2.0 * far * near / (near - far)
    matrix[3, 2] = -1.0
    return matrix.astype(np.float32)


def inverse_projection_matrix(
    camera: PinholeCamera,
    aspect_ratio: float,
) -> npt.NDArray[np.float32]:
    """Build the inverse of the camera's projection for the given aspect."""
    projection = projection_matrix(camera.vfov, aspect_ratio).astype(np.float64)
    return np.linalg.inv(projection).astype(np.float32)


def orbit(camera: PinholeCamera, yaw: float = 0.0, height: float = 0.0) -> PinholeCamera:
    """Move the camera around its look-at point.

    Args:
        camera: Camera to move.
        yaw: Rotation about the vertical axis through lookat, in degrees.
        height: Vertical offset added to lookfrom.

    Returns:
        A new camera with the same target and orientation parameters.
    """
    angle = math.radians(yaw)
    dx = camera.lookfrom[0] - camera.lookat[0]
    dz = camera.lookfrom[2] - camera.lookat[2]
    rotated_x = dx * math.cos(angle) - dz * math.sin(angle)
    rotated_z = dx * math.sin(angle) + dz * math.cos(angle)
    lookfrom = (
        camera.lookat[0] + rotated_x,
        camera.lookfrom[1] + height,
        camera.lookat[2] + rotated_z,
    )
    return replace(camera, lookfrom=lookfrom)
