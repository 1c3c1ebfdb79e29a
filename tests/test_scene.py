"""Tests for the Scene aggregate and nearest-hit search."""

import pytest

from pathforge.vec3 import Vec3, Point3, Color
from pathforge.ray import Ray
from pathforge.shapes import MaterialKind, Sphere, Plane
from pathforge.scene import Scene, Intersection
from pathforge.renderer import RenderSettings


def make_scene(**kwargs) -> Scene:
    camera = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
    return Scene(camera, RenderSettings(width=4, height=4, samples_per_pixel=4, num_threads=1), **kwargs)


class TestSceneConstants:
    """Derived refraction constants."""

    def test_ratios(self):
        scene = make_scene(ambient_index=1.0, medium_index=1.5)
        assert scene.n1 == pytest.approx(1.0 / 1.5)
        assert scene.n2 == pytest.approx(1.5)

    def test_ratios_are_reciprocal(self):
        scene = make_scene(ambient_index=1.33, medium_index=2.4)
        assert scene.n1 * scene.n2 == pytest.approx(1.0)

    def test_r0_closed_form(self):
        scene = make_scene(ambient_index=1.0, medium_index=1.5)
        assert scene.r0 == pytest.approx(((1.0 - 1.5) / (1.0 + 1.5)) ** 2)
        assert scene.r0 == pytest.approx(0.04)

    def test_equal_indices_have_no_reflectance(self):
        scene = make_scene(ambient_index=1.2, medium_index=1.2)
        assert scene.r0 == 0.0

    def test_constants_are_read_only(self):
        scene = make_scene()
        with pytest.raises(AttributeError):
            scene.r0 = 0.5

    def test_rejects_non_positive_index(self):
        with pytest.raises(ValueError):
            make_scene(ambient_index=0.0)

    def test_camera_direction_normalized(self):
        scene = Scene(Ray(Point3(0, 0, 0), Vec3(0, 0, -4)))
        assert scene.camera.direction == Vec3(0, 0, -1)

    def test_default_settings(self):
        scene = Scene(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert isinstance(scene.settings, RenderSettings)


class TestSceneObjects:
    """Adding and iterating primitives."""

    def test_add_chains(self):
        scene = make_scene()
        a = Sphere(Point3(0, 0, -5), 1.0)
        b = Sphere(Point3(0, 0, -10), 1.0)
        assert scene.add(a).add(b) is scene
        assert len(scene) == 2
        assert list(scene) == [a, b]


class TestSceneFind:
    """Nearest-hit search."""

    def test_empty_scene(self):
        scene = make_scene()
        assert scene.find(Ray(Point3(0, 0, 0), Vec3(0, 0, -1))) is None

    def test_miss(self):
        scene = make_scene()
        scene.add(Sphere(Point3(0, 10, -5), 1.0))
        assert scene.find(Ray(Point3(0, 0, 0), Vec3(0, 0, -1))) is None

    def test_nearest_wins_regardless_of_order(self):
        far = Sphere(Point3(0, 0, -10), 1.0, color=Color(0, 0, 1))
        near = Sphere(Point3(0, 0, -5), 1.0, color=Color(1, 0, 0))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for order in ([far, near], [near, far]):
            scene = make_scene()
            for obj in order:
                scene.add(obj)
            hit = scene.find(ray)
            assert isinstance(hit, Intersection)
            assert hit.obj is near
            assert hit.geometry.color == Color(1, 0, 0)
            assert abs(hit.t - 4.0) < 1e-9

    def test_hit_point_and_normal(self):
        scene = make_scene()
        scene.add(Sphere(Point3(0, 0, -5), 1.0))
        hit = scene.find(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))

        assert hit.point == Point3(0, 0, -4)
        # Outward normal faces back toward the camera
        assert hit.normal == Vec3(0, 0, 1)

    def test_normal_from_inside_is_still_outward(self):
        scene = make_scene()
        scene.add(Sphere(Point3(0, 0, 0), 10.0))
        hit = scene.find(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))

        assert hit.point == Point3(0, 0, -10)
        assert hit.normal == Vec3(0, 0, -1)

    def test_unnormalized_ray_hits_sphere_surface(self):
        scene = make_scene()
        scene.add(Sphere(Point3(0, 0, -5), 1.0))
        hit = scene.find(Ray(Point3(0, 0, 0), Vec3(0, 0, -2)))

        assert abs(hit.t - 4.0) < 1e-9
        assert hit.point == Point3(0, 0, -4)
        assert abs((hit.point - Point3(0, 0, -5)).length() - 1.0) < 1e-9

    def test_plane_normal(self):
        scene = make_scene()
        scene.add(Plane(Point3(3, -2, 7), Vec3(0, 1, 0), material=MaterialKind.DIFFUSE))
        hit = scene.find(Ray(Point3(0, 5, 0), Vec3(1, -1, 0).normalize()))

        assert abs(hit.point.y + 2.0) < 1e-9
        assert hit.normal == Vec3(0, 1, 0)

    def test_sphere_in_front_of_plane(self):
        scene = make_scene()
        floor = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ball = Sphere(Point3(0, 1, 0), 1.0)
        scene.add(floor).add(ball)

        hit = scene.find(Ray(Point3(0, 10, 0), Vec3(0, -1, 0)))
        assert hit.obj is ball
        assert abs(hit.t - 8.0) < 1e-9
