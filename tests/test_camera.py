import math

import numpy as np
import pytest

from pathcorrection.model.geometry_primitives import Vector, BoundingBox
from pathcorrection.scene.camera import (
    OrbitCamera, OrbitInteractor, MouseButton, GestureMode, POLAR_MARGIN, MIN_DISTANCE,
)


def _offset(camera):
    return camera.position - camera.look_at


def test_auto_fit_small_box_uses_minimum_distance():
    camera = OrbitCamera()
    camera.auto_fit(BoundingBox(Vector(0.0, 0.0, 0.0), Vector(20.0, 20.0, 20.0)))

    assert camera.look_at == Vector(10.0, 10.0, 10.0)
    assert camera.distance == pytest.approx(100.0)
    k = 100.0 / math.sqrt(3.0)
    assert camera.position.to_tuple() == pytest.approx((10.0 + k, 10.0 + k, 10.0 + k))


def test_auto_fit_large_box_and_determinism():
    bbox = BoundingBox(Vector(-100.0, 0.0, 0.0), Vector(100.0, 50.0, 10.0))
    a = OrbitCamera()
    b = OrbitCamera(distance=3.0)
    a.auto_fit(bbox)
    b.auto_fit(bbox)
    assert a.distance == pytest.approx(300.0)
    assert a.state() == b.state()


def test_auto_fit_without_box_frames_origin():
    camera = OrbitCamera(look_at=Vector(5.0, 5.0, 5.0))
    camera.auto_fit(None)
    assert camera.look_at == Vector(0.0, 0.0, 0.0)
    assert camera.distance == pytest.approx(100.0)


def test_rotate_clamps_polar_angle():
    camera = OrbitCamera()
    for _ in range(100):
        camera.rotate(0.05, 1.0)
    radius, _, phi = camera.spherical()
    assert phi == pytest.approx(math.pi - POLAR_MARGIN)
    assert radius == pytest.approx(500.0)

    for _ in range(100):
        camera.rotate(0.0, -1.0)
    _, _, phi = camera.spherical()
    assert phi == pytest.approx(POLAR_MARGIN)


def test_rotate_changes_azimuth():
    camera = OrbitCamera()
    _, theta_before, _ = camera.spherical()
    camera.rotate(0.1, 0.0)
    _, theta_after, _ = camera.spherical()
    assert theta_after - theta_before == pytest.approx(0.1)


def test_pan_moves_camera_and_target_together():
    camera = OrbitCamera()
    offset_before = _offset(camera)
    camera.pan(10.0, -4.0)

    assert _offset(camera).to_tuple() == pytest.approx(offset_before.to_tuple())
    moved = camera.look_at
    # Movement stays in the view plane
    assert abs(moved.dot(camera.look_direction.normalize())) < 1e-9
    # scale = 0.002 * distance = 1.0 per pixel
    assert moved.magnitude == pytest.approx(math.hypot(10.0, 4.0))


def test_zoom_in_and_out():
    camera = OrbitCamera()
    camera.zoom(1)
    assert camera.distance == pytest.approx(450.0)
    assert _offset(camera).magnitude == pytest.approx(450.0)
    camera.zoom(-1)
    assert camera.distance == pytest.approx(495.0)


def test_distance_is_clamped():
    camera = OrbitCamera()
    camera.distance = -5.0
    assert camera.distance == MIN_DISTANCE


def test_view_matrix_maps_eye_to_origin():
    camera = OrbitCamera()
    m = camera.view_matrix()
    eye = np.append(camera.position.to_tuple(), 1.0)
    target = np.append(camera.look_at.to_tuple(), 1.0)
    assert np.allclose(m @ eye, [0.0, 0.0, 0.0, 1.0])
    assert np.allclose(m @ target, [0.0, 0.0, -camera.distance, 1.0])


def test_interactor_left_drag_rotates():
    camera = OrbitCamera()
    interactor = OrbitInteractor(camera)
    _, theta_before, _ = camera.spherical()

    assert interactor.pointer_move(5.0, 5.0) is False
    interactor.pointer_down(MouseButton.LEFT, 0.0, 0.0)
    assert interactor.mode is GestureMode.ROTATING
    assert interactor.pointer_move(10.0, 0.0) is True

    _, theta_after, _ = camera.spherical()
    assert theta_after - theta_before == pytest.approx(0.1)

    interactor.pointer_up()
    assert interactor.mode is GestureMode.IDLE
    assert interactor.pointer_move(50.0, 0.0) is False


def test_interactor_right_drag_pans_and_wheel_zooms():
    camera = OrbitCamera()
    interactor = OrbitInteractor(camera)

    interactor.pointer_down(MouseButton.RIGHT, 0.0, 0.0)
    assert interactor.mode is GestureMode.PANNING
    interactor.pointer_move(3.0, 0.0)
    assert camera.look_at != Vector(0.0, 0.0, 0.0)

    assert interactor.wheel(120) is True
    assert camera.distance == pytest.approx(450.0)


def test_state_view_up_is_orthonormal_to_look_direction():
    camera = OrbitCamera()
    camera.rotate(0.3, -0.4)
    state = camera.state()
    assert state.view_up.magnitude == pytest.approx(1.0)
    assert abs(state.view_up.dot(state.look_direction.normalize())) < 1e-9
    # Still leans towards the world up axis
    assert state.view_up.z > 0.0


def test_zero_wheel_delta_keeps_distance():
    camera = OrbitCamera()
    position = camera.position
    camera.zoom(0)
    assert camera.distance == pytest.approx(500.0)
    assert camera.position == position

    interactor = OrbitInteractor(camera)
    assert interactor.wheel(0) is False
    assert camera.distance == pytest.approx(500.0)
