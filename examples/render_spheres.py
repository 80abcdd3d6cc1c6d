#!/usr/bin/env python3
"""Render one of the preset sphere scenes.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene NAME          Preset: single, three or random (default: three)
    --width WIDTH         Image width in pixels (default: 400)
    --height HEIGHT       Image height in pixels (default: width / aspect)
    --samples SAMPLES     Samples per pixel (default: 100)
    --max-depth DEPTH     Maximum path segments per sample (default: 50)
    --seed SEED           Random seed (default: 0)
    --rows-per-chunk N    Rows per progress update (default: 16)
    --arch ARCH           Taichi backend (default: cpu)
    --output OUTPUT       Output file path (default: spheres.png)
    --log-level LEVEL     Logging level (default: INFO)

Example:
    python examples/render_spheres.py --scene random --width 600 --samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pathtracer.config import init_backend
from pathtracer.errors import PathTracerError
from pathtracer.logging_config import setup_logging
from pathtracer.scene.presets import PRESETS

logger = logging.getLogger("pathtracer.examples.render_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=sorted(PRESETS), default="three", help="Preset scene")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels")
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: derived from the preset's aspect ratio)",
    )
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=50, help="Maximum path segments")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--rows-per-chunk", type=int, default=16, help="Rows per progress update")
    parser.add_argument("--arch", default="cpu", help="Taichi backend (cpu, gpu, cuda, vulkan...)")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output PNG path")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args()


def render_preset(
    scene_name: str = "three",
    width: int = 400,
    height: int | None = None,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    rows_per_chunk: int = 16,
    output_path: str = "spheres.png",
) -> Path:
    """Render a preset scene and save it as PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer import api
    from pathtracer.output.export import save_png

    scene, camera = PRESETS[scene_name]()
    if height is None:
        height = max(1, int(width / camera.aspect_ratio))

    logger.info("Scene %r: %d spheres, %dx%d", scene_name, len(scene), width, height)

    start_time = time.perf_counter()

    def progress(rows_done: int, total: int) -> None:
        elapsed = time.perf_counter() - start_time
        logger.info("Progress: %d/%d rows (%.1f%%) - %.1fs", rows_done, total,
                    100.0 * rows_done / total, elapsed)

    image = api.render(
        scene,
        camera,
        width,
        height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        seed=seed,
        rows_per_chunk=rows_per_chunk,
        progress=progress,
    )

    output_file = Path(output_path)
    save_png(image, output_file)
    logger.info("Saved to %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.log_level)

    try:
        init_backend(args.arch)
        render_preset(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            rows_per_chunk=args.rows_per_chunk,
            output_path=args.output,
        )
        return 0
    except PathTracerError as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
