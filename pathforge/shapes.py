"""
Geometric shapes for the path tracer.

Each shape implements the Hittable interface: `hit` reports the forward
distance to the nearest intersection, and `geometry` exposes the shared
record (reference position, emission, albedo, material kind) the tracer
shades with.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import math

from .vec3 import Vec3, Point3, Color
from .ray import Ray

# Minimum forward distance accepted as a hit; rejects self-intersection
# of rays leaving a surface.
EPSILON = 1e-4


class MaterialKind(Enum):
    """Scattering rule applied at a hit point."""
    DIFFUSE = "diffuse"
    SPECULAR = "specular"
    REFRACTIVE = "refractive"

    @classmethod
    def parse(cls, name: str) -> MaterialKind:
        """Look up a material kind by name, ignoring case."""
        try:
            return cls(str(name).lower())
        except ValueError:
            choices = ', '.join(k.name.capitalize() for k in cls)
            raise ValueError(f"Unknown material '{name}' (expected one of: {choices})") from None


@dataclass(frozen=True)
class Geometry:
    """Shading record shared by every primitive.

    Attributes:
        position: Reference point; the outward normal at a hit point is
            normalize(hit - position) unless the shape overrides it
        emission: Radiance emitted by the surface
        color: Albedo, the fraction of incoming light reflected per channel
        material: How the surface scatters light
    """
    position: Point3
    emission: Color
    color: Color
    material: MaterialKind = MaterialKind.DIFFUSE


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    def __init__(self, geometry: Geometry):
        self._geometry = geometry

    @property
    def geometry(self) -> Geometry:
        return self._geometry

    @abstractmethod
    def hit(self, ray: Ray) -> Optional[float]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test (unit direction)

        Returns:
            Distance t > EPSILON to the nearest forward intersection,
            or None if the ray misses
        """

    def normal_at(self, point: Point3) -> Vec3:
        """Outward unit normal at a point on the surface."""
        return (point - self._geometry.position).normalize()


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(
        self,
        center: Point3,
        radius: float,
        emission: Optional[Color] = None,
        color: Optional[Color] = None,
        material: MaterialKind = MaterialKind.DIFFUSE,
    ):
        """Create a sphere.

        Args:
            center: Center point of the sphere (the geometry position)
            radius: Radius of the sphere
            emission: Emitted radiance (black if omitted)
            color: Albedo (black if omitted)
            material: Scattering rule
        """
        super().__init__(Geometry(
            position=center,
            emission=emission if emission is not None else Color(0, 0, 0),
            color=color if color is not None else Color(0, 0, 0),
            material=material,
        ))
        self.radius = radius

    @property
    def center(self) -> Point3:
        return self._geometry.position

    def hit(self, ray: Ray) -> Optional[float]:
        """Test ray-sphere intersection using the quadratic formula.

        With a unit direction d and op = C - O, the roots of
        |O + t*d - C|^2 = r^2 are t = b -/+ sqrt(b^2 - op.op + r^2)
        where b = op.d.
        """
        op = self.center - ray.origin
        b = op.dot(ray.direction)
        det = b * b - op.length_squared() + self.radius * self.radius
        if det < 0:
            return None

        sqrtd = math.sqrt(det)
        t = b - sqrtd
        if t > EPSILON:
            return t
        t = b + sqrtd
        if t > EPSILON:
            return t
        return None

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane(Hittable):
    """An infinite plane defined by a point and normal.

    The geometry position is the given point on the plane. The normal is
    constant, so `normal_at` returns it directly instead of deriving it
    from the position.
    """

    def __init__(
        self,
        point: Point3,
        normal: Vec3,
        emission: Optional[Color] = None,
        color: Optional[Color] = None,
        material: MaterialKind = MaterialKind.DIFFUSE,
    ):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
            emission: Emitted radiance (black if omitted)
            color: Albedo (black if omitted)
            material: Scattering rule
        """
        super().__init__(Geometry(
            position=point,
            emission=emission if emission is not None else Color(0, 0, 0),
            color=color if color is not None else Color(0, 0, 0),
            material=material,
        ))
        self.normal = normal.normalize()

    @property
    def point(self) -> Point3:
        return self._geometry.position

    def hit(self, ray: Ray) -> Optional[float]:
        """Test ray-plane intersection."""
        denom = self.normal.dot(ray.direction)

        # Ray is parallel to plane
        if abs(denom) < 1e-8:
            return None

        t = (self.point - ray.origin).dot(self.normal) / denom
        if t > EPSILON:
            return t
        return None

    def normal_at(self, point: Point3) -> Vec3:
        return self.normal

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"
