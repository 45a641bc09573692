"""
Orientation Correction
======================
Recomputes the per-point direction vector from neighbouring geometry.

Two policies are available, the caller picks one per pass:

* TANGENT: central difference between the previous and next point of the
  segment, optionally re-expressed in the render/export axes.
* PERPENDICULAR_BISECTOR: unit normal to the chord between two neighbours.

Both store a unit direction vector in `PathPoint.orientation`. Display angles
are derived from it only when shown to the user (see direction_to_angles).

The work is split in two steps so it can run in a worker thread:
compute_orientations() is pure over its inputs, apply_orientations() mutates
the sequence and must run in the thread that owns the view.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pathcorrection.model.geometry_primitives import Vector, X_AXIS, Z_AXIS
from pathcorrection.model.points import PathPoint, PointSequence, Segment, SEGMENT_MARKER
from pathcorrection.model.segmenter import split_segments

logger = logging.getLogger(__name__)

# Structured observability sink: sink(event_name, payload)
EventSink = Callable[[str, Dict[str, Any]], None]

NEAR_Z_RATIO = 0.9
MIN_BISECTOR_POINTS = 3


class OrientationPolicy(Enum):
    TANGENT = "tangent"
    PERPENDICULAR_BISECTOR = "perpendicular_bisector"

    @property
    def label(self) -> str:
        return {
            OrientationPolicy.TANGENT: "Tangent (neighbours)",
            OrientationPolicy.PERPENDICULAR_BISECTOR: "Perpendicular bisector",
        }[self]


class CorrectionCancelled(Exception):
    """Raised when the caller requested cancellation between two points."""


def realign_to_render_axes(direction: Vector) -> Vector:
    """Rotate by -90 deg about X: (x, y, z) -> (x, z, -y)."""
    return direction.rotate_x(-math.pi / 2.0)


def tangent_direction(segment: Segment, index: int, realign: bool = False) -> Optional[Vector]:
    """
    Direction from the previous to the next point, clamped at the segment ends.

    Returns:
        Unit vector, or None when prev and next coincide (single point
        segment, duplicate points). None means "leave orientation unchanged".
    """
    n = len(segment)
    prev_pt = segment[max(0, index - 1)]
    next_pt = segment[min(n - 1, index + 1)]

    d = next_pt.position - prev_pt.position
    if d.magnitude == 0.0:
        return None

    d = d.normalize()
    if realign:
        d = realign_to_render_axes(d)
    return d


def chord_normal(p1: PathPoint, p2: PathPoint) -> Optional[Vector]:
    """
    Unit vector perpendicular to the chord p1 -> p2.

    The reference axis is Z, or X when the chord is nearly parallel to Z,
    so the cross product does not collapse.
    """
    chord = p2.position - p1.position
    length = chord.magnitude
    ref = X_AXIS if abs(chord.z) >= NEAR_Z_RATIO * length else Z_AXIS

    perp = chord.cross(ref)
    if perp.magnitude == 0.0:
        return None
    return perp.normalize()


def bisector_normal(segment: Segment, index: int) -> Optional[Vector]:
    n = len(segment)
    if n < 2:
        return None
    if index == 0:
        return chord_normal(segment[0], segment[1])
    if index == n - 1:
        return chord_normal(segment[n - 2], segment[n - 1])
    return chord_normal(segment[index - 1], segment[index + 1])


def compute_orientations(
    sequence: PointSequence,
    policy: OrientationPolicy,
    *,
    realign: bool = False,
    marker: str = SEGMENT_MARKER,
    sink: Optional[EventSink] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
    progress: Optional[Callable[[int, int], None]] = None,
) -> List[Optional[Vector]]:
    """
    Compute new orientations without touching the sequence.

    Args:
        sequence: Points to correct.
        policy: Which correction to run.
        realign: Apply the -90 deg X realignment (tangent policy only).
        marker: Segment marker token.
        sink: Optional structured event callback.
        should_cancel: Polled between points. Returning True raises CorrectionCancelled.
        progress: Called as progress(done, total) after each point.

    Returns:
        One entry per point. None means the point keeps its current orientation.
    """
    total = len(sequence)
    results: List[Optional[Vector]] = [None] * total
    segments = split_segments(sequence, marker)

    _emit(sink, "correction_started", policy=policy.value, points=total, segments=len(segments))

    if policy is OrientationPolicy.PERPENDICULAR_BISECTOR and total < MIN_BISECTOR_POINTS:
        _emit(sink, "correction_skipped", reason="too_few_points", points=total)
        logger.debug(f"Perpendicular bisector needs {MIN_BISECTOR_POINTS} points, got {total}.")
        return results

    done = 0
    unchanged = 0
    for segment in segments:
        for i in range(len(segment)):
            if should_cancel is not None and should_cancel():
                _emit(sink, "correction_cancelled", done=done, points=total)
                raise CorrectionCancelled(f"Cancelled after {done} of {total} points.")

            if policy is OrientationPolicy.TANGENT:
                direction = tangent_direction(segment, i, realign=realign)
            else:
                direction = bisector_normal(segment, i)

            if direction is None:
                unchanged += 1
            results[segment.start + i] = direction

            done += 1
            if progress is not None:
                progress(done, total)

    _emit(sink, "correction_computed", points=total, unchanged=unchanged)
    return results


def apply_orientations(sequence: PointSequence, results: List[Optional[Vector]]) -> int:
    """
    Write computed orientations into the sequence.

    Returns:
        Number of points that were updated.
    """
    if len(results) != len(sequence):
        raise ValueError(
            f"Result count {len(results)} does not match sequence length {len(sequence)}."
        )

    updated = 0
    for point, direction in zip(sequence, results):
        if direction is None:
            continue
        point.orientation = direction
        updated += 1
    logger.debug(f"Applied {updated} orientations.")
    return updated


def correct_orientations(
    sequence: PointSequence,
    policy: OrientationPolicy,
    *,
    realign: bool = False,
    marker: str = SEGMENT_MARKER,
    sink: Optional[EventSink] = None,
) -> int:
    """Compute and apply in one go, on the calling thread."""
    results = compute_orientations(sequence, policy, realign=realign, marker=marker, sink=sink)
    return apply_orientations(sequence, results)


def direction_to_angles(direction: Vector) -> tuple[float, float]:
    """
    Display angles of a direction vector.

    Returns:
        (azimuth, elevation) in degrees. Azimuth is measured in the XY plane
        from +X, elevation from the XY plane towards +Z. Zero vector -> (0, 0).
    """
    if direction.magnitude == 0.0:
        return 0.0, 0.0
    d = direction.normalize()
    azimuth = math.degrees(math.atan2(d.y, d.x))
    elevation = math.degrees(math.asin(max(-1.0, min(1.0, d.z))))
    return azimuth, elevation


def _emit(sink: Optional[EventSink], event: str, **payload: Any) -> None:
    if sink is not None:
        sink(event, payload)
