import pytest

from pathcorrection.controller.path_controller import PathController
from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.io import PointLoadError
from pathcorrection.model.orientation import OrientationPolicy
from pathcorrection.model.points import PointSequence
from pathcorrection.model.state import PathState
from pathcorrection.scene.mesh_builder import SceneStyle

from conftest import make_point


@pytest.fixture
def controller(straight_path):
    events = []
    ctrl = PathController(
        PathState(points=straight_path),
        style=SceneStyle(show_axes=False),
        sink=lambda e, p: events.append(e),
    )
    ctrl.events = events
    return ctrl


def test_first_rebuild_frames_the_path(controller):
    controller.rebuild()
    # Path spans x in [0, 4] -> center (2, 0, 0), minimum fit distance
    assert controller.camera.look_at == Vector(2.0, 0.0, 0.0)
    assert controller.camera.distance == pytest.approx(100.0)
    assert "scene_rebuilt" in controller.events


def test_rebuild_keeps_camera_for_same_point_set(controller):
    controller.rebuild()
    controller.camera.rotate(0.5, 0.2)
    controller.camera.pan(20.0, 0.0)
    user_view = controller.camera.state()

    # In place edit keeps the identity
    controller.state.points[0].position = Vector(-50.0, 0.0, 0.0)
    controller.rebuild()
    assert controller.camera.state() == user_view


def test_rebuild_reframes_on_identity_change(controller):
    controller.rebuild()
    controller.camera.pan(20.0, 0.0)

    controller.state.points.replace([make_point(0.0, 0.0, 0.0), make_point(0.0, 0.0, 400.0)])
    controller.rebuild()
    assert controller.camera.look_at == Vector(0.0, 0.0, 200.0)
    assert controller.camera.distance == pytest.approx(600.0)


def test_force_fit(controller):
    controller.rebuild()
    controller.camera.pan(20.0, 0.0)
    controller.rebuild(force_fit=True)
    assert controller.camera.look_at == Vector(2.0, 0.0, 0.0)


def test_reset_gives_placeholder_and_reframes(controller):
    controller.rebuild()
    controller.reset()
    scene = controller.rebuild()
    assert [p.kind for p in scene.primitives] == ["placeholder"]
    assert controller.camera.look_at == Vector(0.0, 0.0, 0.0)


def test_correction_is_applied_only_through_apply(controller):
    results = controller.compute_correction()
    assert all(p.orientation == Vector(0.0, 0.0, 0.0) for p in controller.state.points)
    assert not controller.state.is_corrected

    assert controller.apply_correction(results) == 5
    assert controller.state.is_corrected
    assert all(p.orientation.to_tuple() == pytest.approx((1.0, 0.0, 0.0)) for p in controller.state.points)
    assert "correction_applied" in controller.events


def test_correct_with_bisector_policy(controller):
    controller.state.options.policy = OrientationPolicy.PERPENDICULAR_BISECTOR
    assert controller.correct() == 5
    assert all(p.orientation.to_tuple() == pytest.approx((0.0, -1.0, 0.0)) for p in controller.state.points)


def test_load_and_save(tmp_path, controller):
    src = tmp_path / "in.csv"
    src.write_text("x,y,z,rx,ry,rz\n0,0,0,0,0,0\n1,0,0,0,0,0,SEG,4\n2,0,0,0,0,0\n")

    old_identity = controller.state.points.identity
    seq = controller.load(str(src))
    assert len(seq) == 3
    assert controller.state.filepath == str(src)
    assert controller.state.points.identity != old_identity
    assert len(controller.segments()) == 2

    controller.state.options.renumber_on_save = True
    out = tmp_path / "out.csv"
    controller.save(str(out))
    lines = out.read_text().splitlines()
    assert lines[1].endswith("SEG,0")
    assert lines[2].endswith("SEG,1")
    assert controller.state.filepath == str(out)
    assert "points_saved" in controller.events


def test_load_drops_first_point_when_configured(tmp_path, controller):
    src = tmp_path / "in.csv"
    src.write_text("9,9,9,0,0,0\n1,0,0,0,0,0\n")
    controller.state.drop_first_point = True
    seq = controller.load(str(src))
    assert len(seq) == 1
    assert seq[0].position == Vector(1.0, 0.0, 0.0)


def test_load_error_keeps_state(tmp_path, controller):
    points = controller.state.points
    with pytest.raises(PointLoadError):
        controller.load(str(tmp_path / "missing.csv"))
    assert controller.state.points is points


def test_save_without_path_raises():
    ctrl = PathController(PathState(points=PointSequence([make_point(0.0, 0.0, 0.0)])))
    with pytest.raises(ValueError):
        ctrl.save()
