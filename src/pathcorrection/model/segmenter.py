from __future__ import annotations

import logging
from typing import List, Optional

from pathcorrection.model.points import PointSequence, Segment, SEGMENT_MARKER

logger = logging.getLogger(__name__)


def split_segments(sequence: PointSequence, marker: str = SEGMENT_MARKER) -> List[Segment]:
    """
    Split a sequence into segments at the marker tags.

    A point tagged `[marker, "<id>"]` with an id different from the current one
    closes the open segment and starts a new one (the marker point belongs to
    the segment it starts). Points before the first marker form an implicit
    first segment with `segment_id=None`.

    Args:
        sequence: The points to scan, in path order.
        marker: Reserved first tag token.

    Returns:
        Segments covering the whole sequence in order, without gaps or overlaps.
        An empty sequence yields an empty list.
    """
    segments: List[Segment] = []
    current_id: Optional[int] = None
    start = 0

    for i, point in enumerate(sequence):
        seg_id = point.segment_id(marker)
        if seg_id is None or seg_id == current_id:
            continue
        if i > start:
            segments.append(Segment(sequence, start, i, current_id))
        start = i
        current_id = seg_id

    if len(sequence) > start:
        segments.append(Segment(sequence, start, len(sequence), current_id))

    logger.debug(f"Split {len(sequence)} points into {len(segments)} segments.")
    return segments


def renumber_segments(sequence: PointSequence, marker: str = SEGMENT_MARKER) -> int:
    """
    Write consecutive ids (0, 1, ...) onto the first point of every segment.

    Only the marker pair is touched. The implicit unmarked leading segment
    gets a marker as well, so the result is canonical.

    Returns:
        Number of segments written.
    """
    segments = split_segments(sequence, marker)
    for new_id, segment in enumerate(segments):
        segment[0].set_segment_id(new_id, marker)
        # Inner points keeping a stale marker pair would start a new segment.
        for point in list(segment)[1:]:
            if point.segment_id(marker) is not None:
                point.set_segment_id(new_id, marker)
    return len(segments)
