"""
PathForge - A Python Monte Carlo Path Tracer

Renders scenes of analytic surfaces with:
- Unbiased path tracing with Russian roulette termination
- Diffuse, mirror and glass (Fresnel-weighted) surfaces
- 2x2 stratified, tent-filtered pixel sampling
- Multi-threaded pixel rendering
- JSON/YAML scene files
"""

__version__ = "0.1.0"
__author__ = "PathForge Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import EPSILON, MaterialKind, Geometry, Hittable, Sphere, Plane
from .framebuffer import Framebuffer
from .tracer import Tracer, reflect, refract, schlick, russian_roulette, diffuse_direction
from .renderer import Renderer, RenderSettings, clamp, tent_filter, camera_basis, pixel_rng
from .scene import Scene, Intersection
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene, register_shape
