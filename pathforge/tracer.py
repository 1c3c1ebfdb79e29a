"""
Recursive Monte Carlo light transport.

Implements:
- Nearest-hit shading with emission plus albedo-filtered scattered light
- Russian roulette path termination past the configured depth
- Cosine-weighted diffuse scattering
- Mirror reflection
- Dielectric refraction with Schlick's Fresnel approximation
"""

from __future__ import annotations
import math
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import MaterialKind

if TYPE_CHECKING:
    from .scene import Scene

# Below this depth a refractive hit follows both branches instead of
# picking one at random.
SPLIT_DEPTH = 2


def reflect(direction: Vec3, normal: Vec3) -> Vec3:
    """Mirror a direction about a normal: d - 2(n.d)n."""
    return direction - normal * (2.0 * normal.dot(direction))


def refract(direction: Vec3, normal: Vec3, n: float, sign: float) -> Tuple[float, Optional[Vec3]]:
    """Bend a direction through a dielectric boundary with Snell's law.

    Args:
        direction: Incoming unit direction
        normal: Outward geometric normal of the surface
        n: Ratio of refractive indices across the boundary
        sign: +1 when entering the medium, -1 when leaving it

    Returns:
        (cos2t, transmitted) where cos2t is the squared cosine of the
        transmission angle; transmitted is None on total internal
        reflection (cos2t < 0)
    """
    oriented = normal * sign
    ddw = direction.dot(oriented)
    cos2t = 1.0 - n * n * (1.0 - ddw * ddw)
    if cos2t < 0.0:
        return cos2t, None
    transmitted = (direction * n - normal * ((ddw * n + math.sqrt(cos2t)) * sign)).normalize()
    return cos2t, transmitted


def schlick(r0: float, c: float) -> float:
    """Schlick's approximation of Fresnel reflectance, R0 + (1 - R0)c^5."""
    cc = c * c
    return r0 + (1.0 - r0) * cc * cc * c


def russian_roulette(color: Color, rng: np.random.Generator) -> Optional[Color]:
    """Decide whether a path survives past the maximum depth.

    The path survives with probability p = max(color) and its albedo is
    scaled by 1/p, so the expected contribution is unchanged.

    Returns:
        The reweighted albedo, or None if the path is terminated
    """
    p = color.max_component()
    if rng.random() < p:
        return color / p
    return None


def diffuse_direction(normal: Vec3, rng: np.random.Generator) -> Vec3:
    """Sample a cosine-weighted direction in the hemisphere around normal.

    The normal must already face the incoming ray's origin side.
    """
    r1 = 2.0 * math.pi * rng.random()
    r2 = rng.random()
    r2s = math.sqrt(r2)
    w = normal
    axis = Vec3(1.0, 0.0, 0.0) if abs(w.x) <= 0.1 else Vec3(0.0, 1.0, 0.0)
    u = axis.cross(w).normalize()
    v = w.cross(u)
    d = (u * math.cos(r1) + v * math.sin(r1)) * r2s + w * math.sqrt(1.0 - r2)
    return d.normalize()


class Tracer:
    """Estimates radiance along rays in a scene."""

    def __init__(self, scene: Scene, max_depth: Optional[int] = None):
        """Create a tracer.

        Args:
            scene: Scene to trace against
            max_depth: Depth past which Russian roulette applies
                (defaults to the scene's settings)
        """
        self.scene = scene
        self.max_depth = scene.settings.max_depth if max_depth is None else max_depth

    def trace(self, ray: Ray, depth: int, rng: np.random.Generator) -> Color:
        """Compute the radiance arriving along a ray.

        Args:
            ray: The ray to trace (unit direction)
            depth: Number of surfaces hit so far on this path
            rng: Random source owned by the calling pixel

        Returns:
            Estimated radiance; black when the ray escapes the scene
        """
        hit = self.scene.find(ray)
        if hit is None:
            return Color(0, 0, 0)

        geometry = hit.geometry
        color = geometry.color
        depth += 1

        if depth > self.max_depth:
            survived = russian_roulette(color, rng)
            if survived is None:
                return geometry.emission
            color = survived

        scattered = self._scatter(ray, hit.point, hit.normal, geometry.material, depth, rng)
        return geometry.emission + color.mul(scattered)

    def _scatter(
        self,
        ray: Ray,
        point: Vec3,
        normal: Vec3,
        material: MaterialKind,
        depth: int,
        rng: np.random.Generator,
    ) -> Color:
        """Radiance arriving at a hit point from the sampled next direction."""
        nd = normal.dot(ray.direction)

        if material is MaterialKind.DIFFUSE:
            facing = normal if nd < 0.0 else -normal
            direction = diffuse_direction(facing, rng)
            return self.trace(Ray(point, direction), depth, rng)

        reflected = Ray(point, reflect(ray.direction, normal))
        if material is MaterialKind.SPECULAR:
            return self.trace(reflected, depth, rng)

        return self._refract(ray, point, normal, nd, reflected, depth, rng)

    def _refract(
        self,
        ray: Ray,
        point: Vec3,
        normal: Vec3,
        nd: float,
        reflected: Ray,
        depth: int,
        rng: np.random.Generator,
    ) -> Color:
        scene = self.scene
        entering = nd < 0.0
        n, sign = (scene.n1, 1.0) if entering else (scene.n2, -1.0)

        cos2t, transmitted = refract(ray.direction, normal, n, sign)
        if transmitted is None:
            return self.trace(reflected, depth, rng)

        refracted = Ray(point, transmitted)
        if entering:
            c = 1.0 + ray.direction.dot(normal)
        else:
            c = 1.0 - transmitted.dot(normal)
        re = schlick(scene.r0, c)
        tr = 1.0 - re

        if depth > SPLIT_DEPTH:
            p = 0.25 + 0.5 * re
            if rng.random() < p:
                return self.trace(reflected, depth, rng) * (re / p)
            return self.trace(refracted, depth, rng) * (tr / (1.0 - p))

        return (self.trace(reflected, depth, rng) * re
                + self.trace(refracted, depth, rng) * tr)
