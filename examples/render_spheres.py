#!/usr/bin/env python3
"""Render a sphere scene to a PNG file.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 360)
    --samples SAMPLES     Samples per pixel (default: 4)
    --max-depth DEPTH     Bounce limit per path (default: 100)
    --seed SEED           Frame seed (default: random per process)
    --scene SCENE         "default", "showcase" or a JSON scene file (default: showcase)
    --normals             Shade surface normals instead of path tracing
    --threaded            Render on the background render worker
    --output OUTPUT       Output file path (default: spheres.png)
    --quiet               Suppress progress output

Example:
    python examples/render_spheres.py --width 320 --height 180 --samples 16 --seed 7
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene to a PNG file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument("--samples", type=int, default=4, help="Samples per pixel (default: 4)")
    parser.add_argument("--max-depth", type=int, default=100, help="Bounce limit per path (default: 100)")
    parser.add_argument("--seed", type=int, default=None, help="Frame seed (default: random per process)")
    parser.add_argument(
        "--scene",
        type=str,
        default="showcase",
        help='"default", "showcase" or a JSON scene file (default: showcase)',
    )
    parser.add_argument("--normals", action="store_true", help="Shade surface normals")
    parser.add_argument("--threaded", action="store_true", help="Render on the background worker")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output file path")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def load_scene(name: str):
    """Resolve a preset name or JSON file into a Scene."""
    from skytrace.scene import Scene, default_scene, showcase_scene

    if name == "default":
        return default_scene()
    if name == "showcase":
        return showcase_scene()
    with open(name, encoding="utf-8") as f:
        return Scene.from_dict(json.load(f))


def render_spheres(args: argparse.Namespace) -> Path:
    """Render the requested scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from skytrace.core.renderer import RenderSettings, ShadingMode, render
    from skytrace.core.worker import FrameSink, RenderWorker
    from skytrace.preview.export import save_png

    scene = load_scene(args.scene)
    settings = RenderSettings(
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        shading=ShadingMode.NORMALS if args.normals else ShadingMode.PATH,
    )

    if not args.quiet:
        print(f"Rendering {len(scene)} spheres at {args.width}x{args.height}, {args.samples} spp...")

    start_time = time.time()

    if args.threaded:
        sink = FrameSink(args.width, args.height)
        with RenderWorker(scene, settings=settings) as worker:
            worker.submit(args.width, args.height)
            sink.accept(worker.get_result())
        pixels = sink.pixels
    else:
        pixels = render(args.width, args.height, scene, settings=settings)

    output_file = Path(args.output)
    save_png(pixels, args.width, args.height, output_file)

    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    ti.init(arch=ti.cpu)

    try:
        render_spheres(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
