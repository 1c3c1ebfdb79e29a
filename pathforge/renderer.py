"""
Renderer module - drives the tracer across the image.

Implements:
- 2x2 stratified sub-pixel sampling with tent-filter jitter
- Per-pixel independent random streams (reproducible with a seed)
- Multi-threaded pixel rendering over a shuffled pixel order
- Progress reporting
"""

from __future__ import annotations
import logging
import math
import os
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .framebuffer import Framebuffer
from .tracer import Tracer

if TYPE_CHECKING:
    from .scene import Scene

logger = logging.getLogger(__name__)

STRATA = 2

# Each bounce costs a few interpreter frames; Russian roulette keeps paths
# short in expectation but long tails still happen.
MIN_RECURSION_LIMIT = 10000


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 1024
    height: int = 768
    samples_per_pixel: int = 40
    max_depth: int = 5
    num_threads: int = 0  # 0 = auto-detect
    ratio: float = 0.5135
    seed: Optional[int] = None
    gamma: float = 2.2

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel < STRATA * STRATA:
            raise ValueError(
                f"samples_per_pixel must be at least {STRATA * STRATA}, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be >= 0, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def samples_per_stratum(self) -> int:
        """Samples drawn in each of the 2x2 sub-pixel cells."""
        return self.samples_per_pixel // (STRATA * STRATA)


def clamp(x: float) -> float:
    """Clamp a value into [0, 1]."""
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x


def tent_filter(rng: np.random.Generator) -> float:
    """Draw a signed offset in (-1, 1) with a triangular distribution."""
    r = 2.0 * rng.random()
    if r < 1.0:
        return math.sqrt(r) - 1.0
    return 1.0 - math.sqrt(2.0 - r)


def camera_basis(direction: Vec3, width: int, height: int, ratio: float) -> Tuple[Vec3, Vec3]:
    """Return the (right, up) film vectors for a camera direction.

    Right spans the image width scaled by the aspect and field ratio; up
    is perpendicular to right and the viewing direction.
    """
    cx = Vec3(width * ratio / height, 0.0, 0.0)
    cy = cx.cross(direction).normalize() * ratio
    return cx, cy


def pixel_rng(seed_sequence: np.random.SeedSequence, x: int, y: int) -> np.random.Generator:
    """Independent random stream for one pixel.

    Derived from the render's seed and the pixel address only, so the
    result does not depend on thread scheduling or visitation order.
    """
    return np.random.default_rng([*seed_sequence.generate_state(4), x, y])


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        """Create a renderer.

        Args:
            settings: Render configuration; when None the scene's own
                settings are used at render time
        """
        self.settings = settings
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Scene, framebuffer: Optional[Framebuffer] = None) -> Framebuffer:
        """Render the scene into a framebuffer.

        Args:
            scene: The scene to render
            framebuffer: Target buffer; one sized from the settings is
                created when None

        Returns:
            The framebuffer with every pixel written once
        """
        settings = self.settings if self.settings else scene.settings
        if sys.getrecursionlimit() < MIN_RECURSION_LIMIT:
            sys.setrecursionlimit(MIN_RECURSION_LIMIT)

        if framebuffer is None:
            framebuffer = Framebuffer(settings.width, settings.height)

        width, height = framebuffer.width, framebuffer.height
        fw, fh = float(width), float(height)
        camera = scene.camera
        cx, cy = camera_basis(camera.direction, width, height, settings.ratio)
        offset = scene.camera_offset
        samples = settings.samples_per_stratum
        inv = 1.0 / samples
        tracer = Tracer(scene, settings.max_depth)

        logger.info("w: %d, h: %d, sample: %d, actual sample: %d",
                    width, height, settings.samples_per_pixel, samples * STRATA * STRATA)

        seed_sequence = np.random.SeedSequence(settings.seed)
        pixels: List[Tuple[int, int]] = [(x, y) for x in range(width) for y in range(height)]
        np.random.default_rng(seed_sequence.spawn(1)[0]).shuffle(pixels)

        total = len(pixels)
        completed = [0]
        lock = threading.Lock()

        def render_pixel(pixel: Tuple[int, int]) -> None:
            """Render a single pixel into its framebuffer cell."""
            x, y = pixel
            rng = pixel_rng(seed_sequence, x, y)
            total_color = Color(0, 0, 0)

            for sx in range(STRATA):
                for sy in range(STRATA):
                    c = Color(0, 0, 0)
                    for _ in range(samples):
                        ccx = cx * (((sx + 0.5 + tent_filter(rng)) / 2.0 + x) / fw - 0.5)
                        ccy = cy * (((sy + 0.5 + tent_filter(rng)) / 2.0 + y) / fh - 0.5)
                        d = ccx + ccy + camera.direction
                        ray = Ray(camera.origin + d * offset, d)
                        c = c + tracer.trace(ray, 0, rng) * inv
                    total_color = total_color + Color(clamp(c.x), clamp(c.y), clamp(c.z)) * 0.25

            framebuffer.set(x, height - y - 1, total_color)

            if self._progress_callback:
                with lock:
                    completed[0] += 1
                    progress = completed[0] / total
                self._progress_callback(progress)

        logger.info("start render with %d threads.", settings.num_threads)
        start = time.time()

        if settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=settings.num_threads) as executor:
                # Resolve every future so worker exceptions propagate
                for future in [executor.submit(render_pixel, p) for p in pixels]:
                    future.result()
        else:
            for pixel in pixels:
                render_pixel(pixel)

        logger.info("Rendering completed in %.2f seconds", time.time() - start)
        return framebuffer
