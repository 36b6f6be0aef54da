#!/usr/bin/env python3
"""Render a random sphere field offline and save it as a PNG.

The script generates a scene from the command-line parameters, drives the
orchestrator for a fixed number of ticks, and writes the accumulated image.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 360)
    --samples SAMPLES       Number of accumulated frames (default: 64)
    --spheres N             Number of placement trials (default: 100)
    --placement-radius R    Radius of the placement disk (default: 100.0)
    --min-radius R          Smallest sphere radius (default: 3.0)
    --max-radius R          Largest sphere radius (default: 8.0)
    --seed SEED             Seed for scene and jitter (default: random)
    --skybox PATH           Equirectangular environment image
    --output OUTPUT         Output file path (default: spheres.png)
    --quiet                 Only log warnings and errors

Example:
    python -m examples.render_spheres --width 320 --height 180 --samples 32 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a random sphere field.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument(
        "--samples", type=int, default=64, help="Number of accumulated frames (default: 64)"
    )
    parser.add_argument(
        "--spheres", type=int, default=100, help="Number of placement trials (default: 100)"
    )
    parser.add_argument(
        "--placement-radius",
        type=float,
        default=100.0,
        help="Radius of the placement disk (default: 100.0)",
    )
    parser.add_argument("--min-radius", type=float, default=3.0, help="Smallest sphere radius")
    parser.add_argument("--max-radius", type=float, default=8.0, help="Largest sphere radius")
    parser.add_argument("--seed", type=int, default=None, help="Seed for scene and jitter")
    parser.add_argument("--skybox", type=str, default=None, help="Equirectangular environment image")
    parser.add_argument(
        "--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)"
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args()


def render_spheres(
    width: int = 640,
    height: int = 360,
    num_samples: int = 64,
    output_path: str = "spheres.png",
    *,
    spheres_max: int = 100,
    placement_radius: float = 100.0,
    sphere_radius: tuple[float, float] = (3.0, 8.0),
    seed: int | None = None,
    skybox_path: str | None = None,
) -> Path:
    """Render the sphere field and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of frames to accumulate.
        output_path: Output file path (PNG).
        spheres_max: Number of placement trials.
        placement_radius: Radius of the placement disk.
        sphere_radius: Radius range (min, max).
        seed: Seed for scene generation and jitter.
        skybox_path: Optional environment image.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spherefield.config import RenderConfig
    from spherefield.core.orchestrator import RenderOrchestrator
    from spherefield.preview.export import save_png

    config = RenderConfig(
        sphere_radius=sphere_radius,
        spheres_max=spheres_max,
        sphere_placement_radius=placement_radius,
        max_samples=max(num_samples, 1),
        seed=seed,
        skybox_path=skybox_path,
    )
    orchestrator = RenderOrchestrator(config)
    orchestrator.on_enable()
    logger.info("Rendering %d frames at %dx%d", num_samples, width, height)

    start_time = time.time()
    try:
        skipped = 0
        for _ in range(num_samples):
            if not orchestrator.on_tick(width, height):
                skipped += 1
        if skipped:
            logger.warning("%d of %d frames were skipped", skipped, num_samples)

        output_file = Path(output_path)
        save_png(orchestrator, output_file, tone_map="reinhard", gamma=2.2)
    finally:
        orchestrator.on_disable()

    logger.info("Total time: %.2fs", time.time() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        logger.info("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        logger.info("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            output_path=args.output,
            spheres_max=args.spheres,
            placement_radius=args.placement_radius,
            sphere_radius=(args.min_radius, args.max_radius),
            seed=args.seed,
            skybox_path=args.skybox,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
