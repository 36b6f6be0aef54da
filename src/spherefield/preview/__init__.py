"""Preview module for output and visualization.

Components:
    display: Tone mapping and Matplotlib-based static preview
    export: 8-bit sRGB PNG export and image comparison
    interactive: Taichi GGUI window driving the orchestrator

Example:
    >>> from spherefield.preview import save_png, show_preview
    >>> show_preview(orchestrator, tone_map="reinhard")
    >>> save_png(orchestrator, "spheres.png", gamma=2.2)
"""

from spherefield.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from spherefield.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)
from spherefield.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
