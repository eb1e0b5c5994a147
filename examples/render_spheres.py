#!/usr/bin/env python3
"""Render one of the built-in sphere scenes to a PPM file.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene SCENE       single, demo or random (default: random)
    --width WIDTH       Image width in pixels (default: 400)
    --aspect-ratio R    Width / height (default: 1.5)
    --samples SAMPLES   Samples per pixel (default: 100)
    --max-depth DEPTH   Maximum bounces per path (default: 50)
    --threads THREADS   Number of render workers (default: 8)
    --seed SEED         Seed for scene generation and sampling
    --output OUTPUT     Output file path (default: image.ppm)
    --verbose           Show library log messages
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --scene demo --width 400 --samples 32
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

SCENES = ("single", "demo", "random")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene to a PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default="random",
        help="Scene to render (default: random)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=3.0 / 2.0,
        help="Image width divided by height (default: 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=8,
        help="Number of render workers (default: 8)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene generation and sampling (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path (default: image.ppm)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show library log messages",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_scene(
    scene_name: str = "random",
    width: int = 400,
    aspect_ratio: float = 3.0 / 2.0,
    num_samples: int = 100,
    max_depth: int = 50,
    num_threads: int = 8,
    seed: int | None = None,
    output_path: str = "image.ppm",
    quiet: bool = False,
) -> Path:
    """Build a scene, render it and save it as PPM.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from weekend_raytracer.core.renderer import RenderSettings, render_with_settings
    from weekend_raytracer.export.ppm import write_ppm
    from weekend_raytracer.scene.presets import (
        create_material_demo_scene,
        create_random_scene,
        create_single_sphere_scene,
    )

    settings = RenderSettings.from_aspect_ratio(
        width,
        aspect_ratio,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        num_threads=num_threads,
        seed=seed,
    )
    settings.validate()

    if not quiet:
        print(f"Creating {scene_name} scene ({settings.width}x{settings.height})...")

    if scene_name == "single":
        scene, camera = create_single_sphere_scene(settings.aspect_ratio)
    elif scene_name == "demo":
        scene, camera = create_material_demo_scene(settings.aspect_ratio)
    else:
        scene, camera = create_random_scene(settings.aspect_ratio, seed=seed)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at {num_samples} samples per "
            f"pixel on {num_threads} threads..."
        )

    start_time = time.time()
    image = render_with_settings(scene, camera, settings)

    output_file = Path(output_path)
    write_ppm(image, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )

    if not 1 <= args.threads <= 256:
        print(f"Error: --threads must be between 1 and 256, got {args.threads}", file=sys.stderr)
        return 1

    # Workers run on the CPU backend, one thread each
    ti.init(arch=ti.cpu, cpu_max_num_threads=args.threads)

    try:
        render_scene(
            scene_name=args.scene,
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            max_depth=args.max_depth,
            num_threads=args.threads,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
