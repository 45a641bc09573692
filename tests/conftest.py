import os

# Qt widgets and the worker thread run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.points import PathPoint, PointSequence, SEGMENT_MARKER


def make_point(x, y, z, seg=None, orientation=(0.0, 0.0, 0.0), extra=()):
    tags = [SEGMENT_MARKER, str(seg)] if seg is not None else []
    tags.extend(extra)
    return PathPoint(position=Vector(x, y, z), orientation=Vector(*orientation), tags=tags)


@pytest.fixture
def straight_path():
    """Five points along +X in one marked segment."""
    return PointSequence([make_point(float(i), 0.0, 0.0, seg=0 if i == 0 else None) for i in range(5)])


@pytest.fixture
def two_segment_path():
    """Segment 0 runs along +X, segment 1 runs along +Y."""
    return PointSequence([
        make_point(0.0, 0.0, 0.0, seg=0),
        make_point(1.0, 0.0, 0.0),
        make_point(2.0, 0.0, 0.0),
        make_point(2.0, 1.0, 0.0, seg=1),
        make_point(2.0, 2.0, 0.0),
        make_point(2.0, 3.0, 0.0),
    ])
