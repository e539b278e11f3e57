import math

import numpy as np
import pytest

from gamebase.orbit_camera import OrbitCamera
from gamebase.scene import Camera, Transform, quat_rotate


def test_defaults():
    cam = OrbitCamera()
    assert cam.radius == 2.0
    assert cam.azimuth == 0.3
    assert cam.elevation == 0.2
    assert np.allclose(cam.target, 0.0)
    assert cam.flip_x is False


@pytest.mark.parametrize("elevation,expected", [(0.2, False), (2.0, True), (-2.0, True), (-1.0, False)])
def test_press_sets_flip(elevation, expected):
    cam = OrbitCamera(elevation=elevation)
    cam.press()
    assert cam.flip_x is expected


def test_wheel_clamps_low_and_high():
    cam = OrbitCamera()
    cam.wheel(1000)
    assert cam.radius == pytest.approx(0.1)
    cam.wheel(-100000)
    assert cam.radius == pytest.approx(1e6)


def test_wheel_zero_keeps_radius():
    cam = OrbitCamera(radius=3.0)
    cam.wheel(0)
    assert cam.radius == 3.0


def test_wheel_round_trip():
    cam = OrbitCamera(radius=5.0)
    cam.wheel(7)
    assert cam.radius < 5.0
    cam.wheel(-7)
    assert cam.radius == pytest.approx(5.0)


def test_tumble_round_trip():
    cam = OrbitCamera()
    cam.motion(10, 5, (800, 600))
    assert cam.azimuth != pytest.approx(0.3)
    cam.motion(-10, -5, (800, 600))
    assert cam.azimuth == pytest.approx(0.3)
    assert cam.elevation == pytest.approx(0.2)


def test_tumble_keeps_angles_in_range():
    cam = OrbitCamera()
    for _ in range(50):
        cam.motion(137, -91, (400, 300))
        assert -math.pi - 1e-6 <= cam.azimuth <= math.pi + 1e-6
        assert -math.pi - 1e-6 <= cam.elevation <= math.pi + 1e-6


def test_flip_reverses_azimuth():
    normal = OrbitCamera()
    flipped = OrbitCamera(flip_x=True)
    normal.motion(20, 0, (800, 800))
    flipped.motion(20, 0, (800, 800))
    assert normal.azimuth - 0.3 == pytest.approx(-(flipped.azimuth - 0.3))


def test_pan_round_trip_and_leaves_angles():
    cam = OrbitCamera()
    cam.motion(30, 20, (800, 600), shift=True)
    assert np.linalg.norm(cam.target) > 0.0
    assert cam.azimuth == 0.3
    assert cam.elevation == 0.2
    cam.motion(-30, -20, (800, 600), shift=True)
    assert np.allclose(cam.target, 0.0)


def test_pan_is_perpendicular_to_view():
    cam = OrbitCamera()
    cam.motion(25, -40, (640, 480), shift=True)
    view = quat_rotate(cam.rotation(), (0.0, 0.0, 1.0))
    assert float(np.dot(cam.target, view)) == pytest.approx(0.0, abs=1e-9)


def test_rotation_is_unit():
    cam = OrbitCamera(azimuth=1.1, elevation=-0.7)
    q = np.array(cam.rotation())
    assert np.linalg.norm(q) == pytest.approx(1.0)


def test_apply_places_camera_looking_at_target():
    cam = OrbitCamera(radius=4.0, target=(1.0, 2.0, 3.0))
    camera = Camera(Transform())
    cam.apply(camera, (1280, 720))
    t = camera.transform
    assert np.linalg.norm(t.position - cam.target) == pytest.approx(4.0)
    forward = quat_rotate(t.rotation, (0.0, 0.0, -1.0))
    assert np.allclose(t.position + 4.0 * forward, cam.target)
    assert np.allclose(t.scale, 1.0)
    assert camera.aspect == pytest.approx(1280 / 720)


def test_apply_world_to_local_maps_target_onto_view_axis():
    cam = OrbitCamera(radius=3.0)
    camera = Camera(Transform())
    cam.apply(camera, (100, 100))
    local = camera.transform.make_world_to_local() @ np.append(cam.target, 1.0)
    assert np.allclose(local, [0.0, 0.0, -3.0])