"""
Scene description parser.

Reads JSON or YAML scene files into a Scene and a matching Framebuffer.

Example scene file:
```json
{
  "width": 256, "height": 192,
  "camera": {"origin": [50, 52, 295.6], "direct": [0, -0.042612, -1]},
  "sample": 40, "max_depth": 5, "thread_num": 4,
  "Na": 1.0, "Ng": 1.5,
  "objects": [
    {"type": "Plane", "p": [1, 0, 0], "n": [1, 0, 0],
     "geo": {"emission": [0, 0, 0], "color": [0.75, 0.25, 0.25], "texture": "Diffuse"}},
    {"type": "Sphere", "c": [50, 681.33, 81.6], "r": 600,
     "geo": {"emission": [12, 12, 12], "color": [0, 0, 0], "texture": "Diffuse"}}
  ]
}
```

Every error raises SceneParseError naming the offending field; no
partially built scene is ever returned.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from .vec3 import Vec3
from .ray import Ray
from .shapes import Geometry, Hittable, MaterialKind, Sphere, Plane
from .scene import Scene
from .renderer import RenderSettings
from .framebuffer import Framebuffer

logger = logging.getLogger(__name__)

ShapeFactory = Callable[[Dict[str, Any], 'SceneParser', str], Hittable]

_REQUIRED_KEYS = ('width', 'height', 'camera', 'sample', 'max_depth', 'thread_num', 'Na', 'Ng', 'objects')


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


def _build_sphere(data: Dict[str, Any], parser: SceneParser, path: str) -> Hittable:
    center_key = parser.pick_key(data, path, 'c', 'center')
    radius_key = parser.pick_key(data, path, 'r', 'radius')
    geometry = parser.parse_geometry(data, path)
    radius = parser.parse_float(data[radius_key], f"{path}.{radius_key}")
    if radius <= 0:
        raise SceneParseError(f"{path}.{radius_key}: radius must be positive, got {radius}")
    return Sphere(
        parser.parse_vec3(data[center_key], f"{path}.{center_key}"),
        radius,
        geometry.emission,
        geometry.color,
        geometry.material,
    )


def _build_plane(data: Dict[str, Any], parser: SceneParser, path: str) -> Hittable:
    point_key = parser.pick_key(data, path, 'p', 'point')
    normal_key = parser.pick_key(data, path, 'n', 'normal')
    geometry = parser.parse_geometry(data, path)
    normal = parser.parse_vec3(data[normal_key], f"{path}.{normal_key}")
    if normal.near_zero():
        raise SceneParseError(f"{path}.{normal_key}: normal must be non-zero")
    return Plane(
        parser.parse_vec3(data[point_key], f"{path}.{point_key}"),
        normal,
        geometry.emission,
        geometry.color,
        geometry.material,
    )


_SHAPE_FACTORIES: Dict[str, ShapeFactory] = {
    'Sphere': _build_sphere,
    'Plane': _build_plane,
}


def register_shape(type_name: str, factory: ShapeFactory) -> None:
    """Register a constructor for a custom primitive type tag.

    Args:
        type_name: Value of the object's "type" field
        factory: Called as factory(object_dict, parser, field_path)
    """
    _SHAPE_FACTORIES[type_name] = factory


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, custom: Optional[Dict[str, ShapeFactory]] = None):
        """Create a parser.

        Args:
            custom: Extra type tags for this parser only, checked before
                the registered shapes
        """
        self.factories: Dict[str, ShapeFactory] = dict(_SHAPE_FACTORIES)
        if custom:
            self.factories.update(custom)

    def parse_file(self, filepath: str) -> Tuple[Scene, Framebuffer]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, framebuffer)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read {filepath}: {e}") from e

        logger.debug("Loaded scene description from %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Framebuffer]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, framebuffer)
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene description must be a mapping, got {type(data).__name__}")

        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise SceneParseError(f"Missing required field(s): {', '.join(missing)}")

        if 'stack_size' in data:
            logger.debug("Ignoring stack_size=%s", data['stack_size'])

        try:
            settings = RenderSettings(
                width=self.parse_int(data['width'], 'width'),
                height=self.parse_int(data['height'], 'height'),
                samples_per_pixel=self.parse_int(data['sample'], 'sample'),
                max_depth=self.parse_int(data['max_depth'], 'max_depth'),
                num_threads=self.parse_int(data['thread_num'], 'thread_num'),
                ratio=self.parse_float(data.get('ratio', 0.5135), 'ratio'),
                seed=self._parse_seed(data.get('seed')),
            )
        except ValueError as e:
            raise SceneParseError(str(e)) from e

        camera = self._parse_camera(data['camera'])
        na = self.parse_float(data['Na'], 'Na')
        ng = self.parse_float(data['Ng'], 'Ng')
        if na <= 0 or ng <= 0:
            raise SceneParseError(f"Na/Ng: refractive indices must be positive, got {na}/{ng}")

        scene = Scene(
            camera,
            settings,
            ambient_index=na,
            medium_index=ng,
            camera_offset=self.parse_float(data.get('camera_offset', 130.0), 'camera_offset'),
        )

        objects = data['objects']
        if not isinstance(objects, list):
            raise SceneParseError("objects: expected a list")
        for index, obj_data in enumerate(objects):
            scene.add(self._parse_object(obj_data, f"objects[{index}]"))

        logger.info("Parsed scene with %d objects", len(scene))
        return scene, Framebuffer(settings.width, settings.height)

    def pick_key(self, data: Dict[str, Any], path: str, *names: str) -> str:
        """Return the first of several accepted key spellings present."""
        for name in names:
            if name in data:
                return name
        raise SceneParseError(f"{path}: missing field '{names[0]}'")

    def parse_float(self, value: Any, field: str) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SceneParseError(f"{field}: expected a number, got {value!r}")
        return float(value)

    def parse_int(self, value: Any, field: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SceneParseError(f"{field}: expected an integer, got {value!r}")
        return value

    def parse_vec3(self, value: Any, field: str) -> Vec3:
        """Parse a Vec3 from a 3-element list or an x/y/z mapping."""
        if isinstance(value, (list, tuple)):
            if len(value) != 3:
                raise SceneParseError(f"{field}: expected 3 components, got {len(value)}")
            return Vec3(*(self.parse_float(c, f"{field}[{i}]") for i, c in enumerate(value)))
        elif isinstance(value, dict):
            missing = [axis for axis in ('x', 'y', 'z') if axis not in value]
            if missing:
                raise SceneParseError(f"{field}: missing component(s) {', '.join(missing)}")
            return Vec3(*(self.parse_float(value[axis], f"{field}.{axis}") for axis in ('x', 'y', 'z')))
        raise SceneParseError(f"{field}: cannot parse vector from {value!r}")

    def parse_geometry(self, data: Dict[str, Any], path: str) -> Geometry:
        """Parse the shading fields of an object.

        They are read from a nested "geo" block when present, otherwise
        from the object itself. The position is filled in by the shape.
        """
        if 'geo' in data:
            geo = data['geo']
            path = f"{path}.geo"
            if not isinstance(geo, dict):
                raise SceneParseError(f"{path}: expected a mapping")
        else:
            geo = data

        emission = self.parse_vec3(geo.get('emission', [0, 0, 0]), f"{path}.emission")
        color = self.parse_vec3(geo.get('color', [0, 0, 0]), f"{path}.color")
        try:
            material = MaterialKind.parse(geo.get('texture', 'Diffuse'))
        except ValueError as e:
            raise SceneParseError(f"{path}.texture: {e}") from e

        return Geometry(position=Vec3(0, 0, 0), emission=emission, color=color, material=material)

    def _parse_camera(self, camera_data: Any) -> Ray:
        if not isinstance(camera_data, dict):
            raise SceneParseError("camera: expected a mapping")
        origin_key = self.pick_key(camera_data, 'camera', 'origin')
        direct_key = self.pick_key(camera_data, 'camera', 'direct', 'direction')
        origin = self.parse_vec3(camera_data[origin_key], f"camera.{origin_key}")
        direction = self.parse_vec3(camera_data[direct_key], f"camera.{direct_key}")
        if direction.near_zero():
            raise SceneParseError(f"camera.{direct_key}: direction must be non-zero")
        return Ray(origin, direction)

    def _parse_seed(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        seed = self.parse_int(value, 'seed')
        if seed < 0:
            raise SceneParseError(f"seed: must be non-negative, got {seed}")
        return seed

    def _parse_object(self, obj_data: Any, path: str) -> Hittable:
        if not isinstance(obj_data, dict):
            raise SceneParseError(f"{path}: expected a mapping")
        obj_type = obj_data.get('type')
        if not isinstance(obj_type, str):
            raise SceneParseError(f"{path}.type: missing or invalid type tag {obj_type!r}")

        factory = self.factories.get(obj_type)
        if factory is None:
            raise SceneParseError(f"{path}.type: unknown object type '{obj_type}'")
        return factory(obj_data, self, path)


def load_scene(filepath: str, custom: Optional[Dict[str, ShapeFactory]] = None) -> Tuple[Scene, Framebuffer]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file
        custom: Extra primitive constructors keyed by type tag

    Returns:
        Tuple of (scene, framebuffer)
    """
    parser = SceneParser(custom)
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any], custom: Optional[Dict[str, ShapeFactory]] = None) -> Tuple[Scene, Framebuffer]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        custom: Extra primitive constructors keyed by type tag

    Returns:
        Tuple of (scene, framebuffer)
    """
    parser = SceneParser(custom)
    return parser.parse_dict(data)
