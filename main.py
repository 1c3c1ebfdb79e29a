#!/usr/bin/env python3
"""
PathForge - A Python Monte Carlo Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

from pathforge.vec3 import Vec3, Color, Point3
from pathforge.ray import Ray
from pathforge.shapes import MaterialKind, Plane, Sphere
from pathforge.scene import Scene
from pathforge.framebuffer import Framebuffer
from pathforge.renderer import Renderer, RenderSettings
from pathforge.scene_parser import SceneParseError, load_scene


def create_demo_scene(settings: RenderSettings) -> Scene:
    """Create a Cornell-style box with plane walls, a mirror ball, a glass
    ball and a large spherical light poking through the ceiling."""
    camera = Ray(Point3(50, 52, 295.6), Vec3(0, -0.042612, -1))
    scene = Scene(camera, settings, ambient_index=1.0, medium_index=1.5)

    black = Color(0, 0, 0)
    white = Color(0.75, 0.75, 0.75)

    # Walls
    scene.add(Plane(Point3(1, 0, 0), Vec3(1, 0, 0), black, Color(0.75, 0.25, 0.25)))
    scene.add(Plane(Point3(99, 0, 0), Vec3(-1, 0, 0), black, Color(0.25, 0.25, 0.75)))
    scene.add(Plane(Point3(0, 0, 0), Vec3(0, 0, 1), black, white))
    scene.add(Plane(Point3(0, 0, 170), Vec3(0, 0, -1), black, black))
    scene.add(Plane(Point3(0, 0, 0), Vec3(0, 1, 0), black, white))
    scene.add(Plane(Point3(0, 81.6, 0), Vec3(0, -1, 0), black, white))

    # Mirror and glass balls
    scene.add(Sphere(Point3(27, 16.5, 47), 16.5, black, Color(0.999, 0.999, 0.999),
                     MaterialKind.SPECULAR))
    scene.add(Sphere(Point3(73, 16.5, 78), 16.5, black, Color(0.999, 0.999, 0.999),
                     MaterialKind.REFRACTIVE))

    # Light
    scene.add(Sphere(Point3(50, 681.6 - 0.27, 81.6), 600, Color(12, 12, 12), black))

    return scene


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='PathForge - A Python Monte Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py scenes/smallpt_plane.json
  python main.py scenes/smallpt_plane.json --samples 400 --output box.png
  python main.py --width 128 --height 96 --samples 16 --seed 7
        '''
    )

    parser.add_argument('scene_file', nargs='?', help='Scene file (JSON or YAML); omit for the demo box')
    parser.add_argument('--width', type=int, default=None, help='Image width (demo scene default: 256)')
    parser.add_argument('--height', type=int, default=None, help='Image height (demo scene default: 192)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel, split over 4 strata')
    parser.add_argument('--depth', type=int, default=None, help='Depth before Russian roulette starts')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--output', type=str, default=None,
                        help='Output filename (default: output/render_<samples>.png)')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Print header
    print("=" * 60)
    print("PathForge Path Tracer")
    print("=" * 60)

    overrides = {
        'width': args.width,
        'height': args.height,
        'samples_per_pixel': args.samples,
        'max_depth': args.depth,
        'num_threads': args.threads,
        'seed': args.seed,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        if args.scene_file:
            print(f"\nLoading scene: {args.scene_file}")
            scene, framebuffer = load_scene(args.scene_file)
            settings = dataclasses.replace(scene.settings, **overrides)
        else:
            print("\nCreating scene: demo")
            settings = RenderSettings(**{'width': 256, 'height': 192, **overrides})
            scene = create_demo_scene(settings)
    except SceneParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: invalid render settings: {e}", file=sys.stderr)
        return 1

    scene.settings = settings
    framebuffer = Framebuffer(settings.width, settings.height)

    print(f"  Objects in scene: {len(scene)}")
    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    # Render
    print("\nRendering...")
    start_time = time.time()

    renderer.render(scene, framebuffer)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    # Ensure output directory exists
    output_path = Path(args.output or f"output/render_{settings.samples_per_pixel}.png")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {output_path}")
    framebuffer.save(output_path, settings.gamma)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
