#!/usr/bin/env python3
"""Interactive sphere field renderer with real-time parameter controls.

Usage:
    python -m examples.interactive_spheres [--seed SEED]

Features:
    - Progressive rendering that restarts whenever the view changes
    - Camera orbit with A/D and height with W/S
    - Light direction and intensity sliders
    - Scene generation sliders and a reseed button
    - PNG export with timestamp
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys

import taichi as ti

logger = logging.getLogger("interactive_spheres")


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            logger.info("Metal backend unavailable")

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        logger.info("GPU backend unavailable")

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive sphere field renderer.")
    parser.add_argument("--width", type=int, default=960)
    parser.add_argument("--height", type=int, default=540)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Initialize Taichi first (before creating any fields)
    backend = initialize_taichi()
    logger.info("Taichi backend: %s", backend)

    from spherefield.config import RenderConfig
    from spherefield.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        logger.error("No display available. Cannot run interactive preview.")
        return 1

    preview = InteractivePreview(args.width, args.height, RenderConfig(seed=args.seed))
    try:
        preview.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
