"""Equirectangular environment map sampled by rays that escape the scene.

The skybox is a read-only RGB Taichi field indexed (u, v) with v = 0 at the
bottom row, matching the render target orientation. Images are converted
from sRGB to linear on load.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from spherefield.scene.skybox import Skybox
    >>> sky = Skybox.from_image("assets/sky.jpg")
    >>> sky.width, sky.height
    (2048, 1024)
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Procedural sky colors (linear RGB)
ZENITH_COLOR = (0.25, 0.45, 0.85)
HORIZON_COLOR = (0.85, 0.9, 1.0)
NADIR_COLOR = (0.3, 0.28, 0.25)


class Skybox:
    """Environment texture bound to the trace kernel.

    Attributes:
        texture: Taichi Vector.field of shape (width, height) with linear RGB.
    """

    def __init__(self, image: npt.NDArray[np.float32]) -> None:
        """Create a skybox from a linear RGB image.

        Args:
            image: Array of shape (height, width, 3), top row first.

        Raises:
            ValueError: If the image is not an RGB array.
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Skybox image must have shape (H, W, 3), got {image.shape}")

        height, width = image.shape[:2]
        self.texture: ti.MatrixField = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

        # NumPy images are (height, width) with top-left origin;
        # the field is (width, height) with bottom-left origin
        transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2)).astype(np.float32)
        )
        self.texture.from_numpy(transposed)

    @property
    def width(self) -> int:
        return int(self.texture.shape[0])

    @property
    def height(self) -> int:
        return int(self.texture.shape[1])

    @classmethod
    def from_image(cls, filepath: str | Path, gamma: float = 2.2) -> "Skybox":
        """Load an equirectangular image file.

        Args:
            filepath: Path to any image format Pillow can read.
            gamma: Decoding gamma applied to convert sRGB to linear.

        Returns:
            A new Skybox.
        """
        with PILImage.open(filepath) as pil_image:
            image = np.asarray(pil_image.convert("RGB"), dtype=np.float32) / 255.0
        logger.info("Loaded skybox %s (%dx%d)", filepath, image.shape[1], image.shape[0])
        return cls(np.power(image, gamma))

    @classmethod
    def gradient(cls, width: int = 256, height: int = 128) -> "Skybox":
        """Create a procedural sky fading from zenith to horizon to ground.

        Args:
            width: Texture width in texels.
            height: Texture height in texels.
        """
        # Elevation from +1 (top row) to -1 (bottom row)
        elevation = np.cos(np.linspace(0.0, np.pi, height, dtype=np.float32))
        zenith = np.asarray(ZENITH_COLOR, dtype=np.float32)
        horizon = np.asarray(HORIZON_COLOR, dtype=np.float32)
        nadir = np.asarray(NADIR_COLOR, dtype=np.float32)

        up = np.clip(elevation, 0.0, 1.0)[:, None]
        down = np.clip(-elevation, 0.0, 1.0)[:, None]
        rows = np.where(
            elevation[:, None] >= 0.0,
            horizon + (zenith - horizon) * np.sqrt(up),
            horizon + (nadir - horizon) * np.sqrt(down),
        )
        image = np.repeat(rows[:, None, :], width, axis=1)
        return cls(image.astype(np.float32))
