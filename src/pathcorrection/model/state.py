"""
Path State (Data Model)
=======================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the loaded point sequence and the active
   correction options in one place.
2. Ownership: Exactly one PointSequence is live per view. Controllers write to
   this object; views read from it.

Classes:
    CorrectionOptions: Which policy runs and how.
    PathState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional

from pathcorrection.model.orientation import OrientationPolicy
from pathcorrection.model.points import PointSequence, SEGMENT_MARKER

logger = logging.getLogger(__name__)


@dataclass
class CorrectionOptions:
    policy: OrientationPolicy = OrientationPolicy.TANGENT
    realign_axes: bool = False
    segment_marker: str = SEGMENT_MARKER
    # Renumber the segment marker pairs before saving
    renumber_on_save: bool = False


@dataclass
class PathState:
    """
    Holds the state of the open point file.
    Pass this instance to your Controllers and Views.
    """
    filepath: Optional[str] = None
    points: PointSequence = field(default_factory=PointSequence)
    options: CorrectionOptions = field(default_factory=CorrectionOptions)
    drop_first_point: bool = False

    is_corrected: bool = False

    def reset(self) -> None:
        """Clear all data for a new session. Options are kept."""
        self.filepath = None
        self.points = PointSequence()
        self.is_corrected = False
        logger.info("Path state has been reset.")
