import math

import pytest

from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.orientation import (
    OrientationPolicy, CorrectionCancelled, compute_orientations, apply_orientations,
    correct_orientations, tangent_direction, chord_normal, direction_to_angles,
)
from pathcorrection.model.points import PointSequence
from pathcorrection.model.segmenter import split_segments

from conftest import make_point


def test_tangent_boundaries_use_clamped_neighbours():
    seq = PointSequence([
        make_point(0.0, 0.0, 0.0),
        make_point(1.0, 0.0, 0.0),
        make_point(1.0, 1.0, 0.0),
    ])
    segment = split_segments(seq)[0]

    # First point: P1 - P0
    assert tangent_direction(segment, 0).to_tuple() == pytest.approx((1.0, 0.0, 0.0))
    # Middle point: P2 - P0
    s = 1.0 / math.sqrt(2.0)
    assert tangent_direction(segment, 1).to_tuple() == pytest.approx((s, s, 0.0))
    # Last point: P2 - P1
    assert tangent_direction(segment, 2).to_tuple() == pytest.approx((0.0, 1.0, 0.0))


def test_tangent_realign_maps_y_to_minus_z():
    seq = PointSequence([make_point(0.0, 0.0, 0.0), make_point(0.0, 2.0, 0.0)])
    results = compute_orientations(seq, OrientationPolicy.TANGENT, realign=True)
    for direction in results:
        # (x, y, z) -> (x, z, -y)
        assert direction.to_tuple() == pytest.approx((0.0, 0.0, -1.0))


def test_tangent_results_are_unit_vectors(straight_path):
    results = compute_orientations(straight_path, OrientationPolicy.TANGENT)
    assert all(r.magnitude == pytest.approx(1.0) for r in results)


def test_tangent_single_point_segment_is_unchanged():
    seq = PointSequence([
        make_point(0.0, 0.0, 0.0, seg=0),
        make_point(5.0, 0.0, 0.0, seg=1, orientation=(0.0, 0.0, 1.0)),
    ])
    results = compute_orientations(seq, OrientationPolicy.TANGENT)
    assert results == [None, None]

    assert apply_orientations(seq, results) == 0
    assert seq[1].orientation == Vector(0.0, 0.0, 1.0)


def test_tangent_does_not_cross_segment_boundary(two_segment_path):
    results = compute_orientations(two_segment_path, OrientationPolicy.TANGENT)
    # Last point of segment 0 still points along +X, not towards segment 1
    assert results[2].to_tuple() == pytest.approx((1.0, 0.0, 0.0))
    assert results[3].to_tuple() == pytest.approx((0.0, 1.0, 0.0))


def test_tangent_nan_propagates():
    seq = PointSequence([make_point(0.0, 0.0, 0.0), make_point(float("nan"), 1.0, 0.0)])
    results = compute_orientations(seq, OrientationPolicy.TANGENT)
    assert results[0] is not None
    assert math.isnan(results[0].x)


def test_bisector_is_orthogonal_to_chord():
    seq = PointSequence([
        make_point(0.0, 0.0, 0.0),
        make_point(3.0, 1.0, 0.5),
        make_point(4.0, 5.0, -1.0),
        make_point(2.0, 7.0, 0.0),
    ])
    results = compute_orientations(seq, OrientationPolicy.PERPENDICULAR_BISECTOR)
    chords = [
        seq[1].position - seq[0].position,
        seq[2].position - seq[0].position,
        seq[3].position - seq[1].position,
        seq[3].position - seq[2].position,
    ]
    for direction, chord in zip(results, chords):
        assert direction.magnitude == pytest.approx(1.0)
        assert abs(direction.dot(chord)) < 1e-9


def test_bisector_vertical_chord_uses_x_reference():
    p1 = make_point(0.0, 0.0, 0.0)
    p2 = make_point(0.0, 0.0, 10.0)
    normal = chord_normal(p1, p2)
    # (0, 0, 10) x (1, 0, 0) = (0, 10, 0)
    assert normal.to_tuple() == pytest.approx((0.0, 1.0, 0.0))


def test_bisector_zero_length_chord_is_unchanged():
    p = make_point(1.0, 2.0, 3.0)
    assert chord_normal(p, make_point(1.0, 2.0, 3.0)) is None

    seq = PointSequence([make_point(1.0, 1.0, 1.0) for _ in range(4)])
    results = compute_orientations(seq, OrientationPolicy.PERPENDICULAR_BISECTOR)
    assert results == [None, None, None, None]


def test_bisector_needs_three_points():
    seq = PointSequence([make_point(0.0, 0.0, 0.0), make_point(1.0, 0.0, 0.0)])
    events = []
    results = compute_orientations(
        seq, OrientationPolicy.PERPENDICULAR_BISECTOR, sink=lambda e, p: events.append(e)
    )
    assert results == [None, None]
    assert "correction_skipped" in events


def test_bisector_ignores_realign(straight_path):
    plain = compute_orientations(straight_path, OrientationPolicy.PERPENDICULAR_BISECTOR)
    realigned = compute_orientations(straight_path, OrientationPolicy.PERPENDICULAR_BISECTOR, realign=True)
    assert [r.to_tuple() for r in plain] == [r.to_tuple() for r in realigned]


def test_compute_does_not_mutate(straight_path):
    before = [p.orientation for p in straight_path]
    compute_orientations(straight_path, OrientationPolicy.TANGENT)
    assert [p.orientation for p in straight_path] == before


def test_cancel_between_points(straight_path):
    calls = []

    def should_cancel():
        calls.append(1)
        return len(calls) > 2

    with pytest.raises(CorrectionCancelled):
        compute_orientations(straight_path, OrientationPolicy.TANGENT, should_cancel=should_cancel)
    assert all(p.orientation == Vector(0.0, 0.0, 0.0) for p in straight_path)


def test_progress_and_events(straight_path):
    progress = []
    events = []
    compute_orientations(
        straight_path,
        OrientationPolicy.TANGENT,
        sink=lambda e, p: events.append((e, p)),
        progress=lambda done, total: progress.append((done, total)),
    )
    assert progress[-1] == (5, 5)
    assert [e for e, _ in events] == ["correction_started", "correction_computed"]
    assert events[0][1]["policy"] == "tangent"


def test_apply_length_mismatch_raises(straight_path):
    with pytest.raises(ValueError):
        apply_orientations(straight_path, [None])


def test_correct_orientations_writes_in_place(straight_path):
    updated = correct_orientations(straight_path, OrientationPolicy.TANGENT)
    assert updated == 5
    assert all(p.orientation.to_tuple() == pytest.approx((1.0, 0.0, 0.0)) for p in straight_path)


def test_direction_to_angles():
    assert direction_to_angles(Vector(1.0, 0.0, 0.0)) == pytest.approx((0.0, 0.0))
    assert direction_to_angles(Vector(0.0, 2.0, 0.0)) == pytest.approx((90.0, 0.0))
    assert direction_to_angles(Vector(0.0, 0.0, 1.0))[1] == pytest.approx(90.0)
    assert direction_to_angles(Vector(0.0, 0.0, 0.0)) == (0.0, 0.0)
