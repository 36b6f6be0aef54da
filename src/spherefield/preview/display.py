"""Tone mapping, gamma correction and Matplotlib preview of rendered images.

The display target holds linear HDR radiance. These helpers map it into the
displayable [0, 1] range.

Example:
    >>> from spherefield.preview.display import show_preview
    >>> show_preview(orchestrator, tone_map="reinhard")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from spherefield.core.orchestrator import RenderOrchestrator


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Compress accumulated radiance with L / (1 + L).

    Metallic spheres under a bright light or skybox reflect values well above
    1; this keeps their highlights from clipping while leaving the diffuse
    ground close to linear.

    Args:
        image: Display target radiance of shape (H, W, 3).

    Returns:
        Image in [0, 1).
    """
    radiance = np.maximum(image, 0.0)
    return (radiance / (1.0 + radiance)).astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Map radiance through a film-like curve 1 - exp(-L * exposure).

    Useful when the light intensity slider is far from 1 and the sky
    dominates the frame.

    Args:
        image: Display target radiance of shape (H, W, 3).
        exposure: Scale applied before the curve. Higher values brighten.
    """
    radiance = np.maximum(image, 0.0)
    return (-np.expm1(-radiance * exposure)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode tone-mapped linear values for an 8-bit or GGUI display.

    The inverse of the decoding Skybox.from_image applies on load. Values are
    clamped to [0, 1] first; gamma 1 returns the input unchanged.
    """
    if gamma == 1.0:
        return image

    encoded = np.clip(image, 0.0, 1.0) ** (1.0 / gamma)
    return encoded.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Tone map, gamma correct and clamp an image for display.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value.
        exposure: Exposure value for exposure tone mapping.

    Returns:
        Processed image in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = image.copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    result = np.clip(result, 0.0, 1.0)
    return result.astype(np.float32)


def show_preview(
    orchestrator: RenderOrchestrator,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (10, 6),
    block: bool = True,
) -> None:
    """Display the accumulated image in a Matplotlib figure.

    The title shows the accumulated sample count unless one is given.

    Args:
        orchestrator: The orchestrator whose display target to show.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value.
        exposure: Exposure value for exposure tone mapping.
        title: Custom title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(
        orchestrator.display_image(),
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"{orchestrator.sample_count} samples"
        if orchestrator.accumulation.is_saturated:
            title += " (converged)"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
