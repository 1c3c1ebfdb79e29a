"""
Scene aggregate: the primitives, the camera, render settings and the
refractive indices of the two media, plus the nearest-hit search used by
the tracer.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .vec3 import Vec3, Point3
from .ray import Ray
from .shapes import Geometry, Hittable
from .renderer import RenderSettings

# Larger than any distance a scene will produce
FAR_DISTANCE = 1e30


@dataclass
class Intersection:
    """Result of a successful scene query.

    Attributes:
        geometry: Shading record of the primitive that was hit
        point: World-space hit position
        normal: Outward unit normal at the hit point
        t: Distance along the ray
        obj: The primitive itself
    """
    geometry: Geometry
    point: Point3
    normal: Vec3
    t: float
    obj: Hittable


class Scene:
    """Collection of primitives plus camera and transport parameters.

    The derived refraction constants are computed once here and never
    change; the scene is shared read-only by all render workers.
    """

    def __init__(
        self,
        camera: Ray,
        settings: Optional[RenderSettings] = None,
        ambient_index: float = 1.0,
        medium_index: float = 1.5,
        camera_offset: float = 130.0,
    ):
        """Create an empty scene.

        Args:
            camera: Eye position and viewing direction
            settings: Sampling and threading parameters (defaults if None)
            ambient_index: Refractive index of the surrounding medium (Na)
            medium_index: Refractive index of refractive surfaces (Ng)
            camera_offset: Distance along each camera direction at which
                primary rays start
        """
        if ambient_index <= 0 or medium_index <= 0:
            raise ValueError("Refractive indices must be positive")
        self.objects: List[Hittable] = []
        self.camera = camera
        self.settings = settings if settings else RenderSettings()
        self.camera_offset = camera_offset
        self._na = ambient_index
        self._ng = medium_index
        self._n1 = ambient_index / medium_index
        self._n2 = medium_index / ambient_index
        self._r0 = ((ambient_index - medium_index) ** 2) / ((ambient_index + medium_index) ** 2)

    @property
    def ambient_index(self) -> float:
        return self._na

    @property
    def medium_index(self) -> float:
        return self._ng

    @property
    def n1(self) -> float:
        """Index ratio for rays entering the medium."""
        return self._n1

    @property
    def n2(self) -> float:
        """Index ratio for rays leaving the medium."""
        return self._n2

    @property
    def r0(self) -> float:
        """Schlick reflectance at normal incidence."""
        return self._r0

    def add(self, obj: Hittable) -> Scene:
        """Add a primitive; returns the scene for chaining."""
        self.objects.append(obj)
        return self

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)

    def find(self, ray: Ray) -> Optional[Intersection]:
        """Find the nearest primitive along a ray.

        Linear scan over every primitive; scenes are small enough that no
        acceleration structure is used.
        """
        closest_t = FAR_DISTANCE
        closest: Optional[Hittable] = None

        for obj in self.objects:
            t = obj.hit(ray)
            if t is not None and t < closest_t:
                closest_t = t
                closest = obj

        if closest is None:
            return None

        point = ray.at(closest_t)
        return Intersection(
            geometry=closest.geometry,
            point=point,
            normal=closest.normal_at(point),
            t=closest_t,
            obj=closest,
        )

    def __repr__(self) -> str:
        return f"Scene(objects={len(self.objects)}, camera={self.camera})"
