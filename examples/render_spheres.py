#!/usr/bin/env python3
"""Render the three spheres scene.

Builds the ground, diffuse, glass and metal sphere scene, renders it with
progressive refinement and writes the result as plain-text PPM to stdout,
or to a file. Progress goes to stderr so stdout can be redirected.

Usage:
    python -m examples.render_spheres [options] > image.ppm

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --aspect RATIO      Width divided by height (default: 16/9)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --max-depth DEPTH   Maximum scatter events per ray (default: 50)
    --output OUTPUT     Output path; "-" for stdout, *.png for PNG (default: -)
    --batch-size SIZE   Samples per progress update (default: 1)
    --scene NAME        three_spheres or single_sphere (default: three_spheres)
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --samples 20 --output spheres.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

SCENES = ("three_spheres", "single_sphere")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the three spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect",
        type=float,
        default=16.0 / 9.0,
        help="Width divided by height (default: 16/9)",
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
        help="Maximum scatter events per ray (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output path; "-" writes PPM to stdout, *.png writes PNG (default: -)',
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1,
        help="Samples per progress update (default: 1)",
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default="three_spheres",
        help="Scene to render (default: three_spheres)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    aspect_ratio: float = 16.0 / 9.0,
    num_samples: int = 100,
    max_depth: int = 50,
    output_path: str = "-",
    batch_size: int = 1,
    scene_name: str = "three_spheres",
    quiet: bool = False,
) -> Path | None:
    """Render a preset scene and write the image.

    Args:
        width: Image width in pixels.
        aspect_ratio: Width divided by height.
        num_samples: Number of samples per pixel.
        max_depth: Maximum scatter events per camera ray.
        output_path: "-" for PPM on stdout, a *.png path for PNG, or any
            other path for a PPM file.
        batch_size: Number of samples to render between progress updates.
        scene_name: One of SCENES.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file, or None when writing to stdout.

    Raises:
        ValueError: If the settings or scene name are invalid.
    """
    # Lazy imports to allow Taichi initialization first
    from mcray.camera.thin_lens import setup_camera
    from mcray.core.progressive import ProgressiveRenderer, RenderSettings
    from mcray.scene.presets import create_single_sphere_scene, create_three_spheres_scene

    settings = RenderSettings(
        image_width=width,
        aspect_ratio=aspect_ratio,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
    )
    settings.validate()

    if scene_name == "three_spheres":
        _scene, camera = create_three_spheres_scene(aspect_ratio)
    elif scene_name == "single_sphere":
        _scene, camera = create_single_sphere_scene(aspect_ratio)
    else:
        raise ValueError(f"Unknown scene: {scene_name}")

    setup_camera(camera)
    renderer = ProgressiveRenderer.from_settings(settings)

    if not quiet:
        print(
            f"Rendering {settings.image_width}x{settings.image_height} "
            f"at {num_samples} samples per pixel...",
            file=sys.stderr,
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            print(f"\rSamples remaining: {target - current} ", end="", file=sys.stderr, flush=True)

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    output_file = None
    if output_path == "-":
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    else:
        output_file = Path(output_path)
        if output_file.suffix.lower() == ".png":
            renderer.save_png(output_file)
        else:
            renderer.save_ppm(output_file)

    if not quiet:
        print(f"\nDone. ({time.time() - start_time:.2f}s)", file=sys.stderr)
        if output_file is not None:
            print(f"Saved to: {output_file.absolute()}", file=sys.stderr)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Single-threaded CPU rendering in double precision
    ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_spheres(
            width=args.width,
            aspect_ratio=args.aspect,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            batch_size=args.batch_size,
            scene_name=args.scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
