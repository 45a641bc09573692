"""
Path Points (Data Model)
========================
Ordered samples of a machining/scanning path.

Classes:
    PathPoint: One sample (position, orientation, opaque trailing tags).
    PointSequence: Ordered, mutable list of PathPoints. Order is the path order.
    Segment: Non-owning index range over a PointSequence.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, TYPE_CHECKING

import numpy as np

from pathcorrection.model.geometry_primitives import Vector, BoundingBox

if TYPE_CHECKING:
    import numpy.typing as npt

# Reserved first tag token. `[SEGMENT_MARKER, "<int>"]` starts a new segment.
SEGMENT_MARKER = "SEG"


def parse_segment_id(tags: List[str], marker: str = SEGMENT_MARKER) -> Optional[int]:
    """Returns the segment id encoded in the first two tags, or None."""
    if len(tags) < 2 or tags[0].strip() != marker:
        return None
    try:
        return int(tags[1].strip())
    except ValueError:
        return None


@dataclass
class PathPoint:
    position: Vector = field(default_factory=lambda: Vector(0.0, 0.0, 0.0))
    # Unit direction vector once a correction policy has written it.
    orientation: Vector = field(default_factory=lambda: Vector(0.0, 0.0, 0.0))
    tags: List[str] = field(default_factory=list)

    def segment_id(self, marker: str = SEGMENT_MARKER) -> Optional[int]:
        return parse_segment_id(self.tags, marker)

    def set_segment_id(self, segment_id: int, marker: str = SEGMENT_MARKER) -> None:
        """Rewrite the marker pair. Every other tag is kept as it is."""
        if parse_segment_id(self.tags, marker) is not None:
            self.tags[1] = str(segment_id)
        else:
            self.tags[0:0] = [marker, str(segment_id)]


class PointSequence:
    """
    Ordered list of PathPoints plus the header row it was loaded with.

    `identity` changes only when the content is replaced as a whole
    (new file, replace()), never when a single point is edited in place.
    """

    def __init__(self, points: Optional[Iterable[PathPoint]] = None, header: Optional[List[str]] = None) -> None:
        self._points: List[PathPoint] = list(points) if points is not None else []
        self.header: Optional[List[str]] = header
        self.identity: str = uuid.uuid4().hex

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PathPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> PathPoint:
        return self._points[index]

    def __bool__(self) -> bool:
        return bool(self._points)

    def __repr__(self) -> str:
        return f"PointSequence(n={len(self._points)}, identity={self.identity[:8]})"

    def append(self, point: PathPoint) -> None:
        self._points.append(point)

    def extend(self, points: Iterable[PathPoint]) -> None:
        self._points.extend(points)

    def clear(self) -> None:
        self._points.clear()
        self.identity = uuid.uuid4().hex

    def replace(self, points: Iterable[PathPoint], header: Optional[List[str]] = None) -> None:
        self._points = list(points)
        self.header = header
        self.identity = uuid.uuid4().hex

    def snapshot(self) -> PointSequence:
        """
        Detached copy for background computation.

        Points and tag lists are copied, the identity is kept so results can
        be matched back to the sequence they were computed from.
        """
        copy = PointSequence(
            (PathPoint(p.position, p.orientation, list(p.tags)) for p in self._points),
            header=list(self.header) if self.header is not None else None,
        )
        copy.identity = self.identity
        return copy

    def positions(self) -> npt.NDArray[np.float64]:
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([p.position.to_tuple() for p in self._points], dtype=np.float64)

    def orientations(self) -> npt.NDArray[np.float64]:
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([p.orientation.to_tuple() for p in self._points], dtype=np.float64)

    def bounding_box(self) -> Optional[BoundingBox]:
        return BoundingBox.from_points(self.positions())


@dataclass(frozen=True)
class Segment:
    """A contiguous run [start, stop) of points sharing one segment id."""
    sequence: PointSequence
    start: int
    stop: int
    segment_id: Optional[int] = None

    def __len__(self) -> int:
        return self.stop - self.start

    def __iter__(self) -> Iterator[PathPoint]:
        for i in range(self.start, self.stop):
            yield self.sequence[i]

    def __getitem__(self, index: int) -> PathPoint:
        if not 0 <= index < len(self):
            raise IndexError(f"Segment index {index} out of range (len={len(self)}).")
        return self.sequence[self.start + index]

    @property
    def indices(self) -> range:
        return range(self.start, self.stop)
