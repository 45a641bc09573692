"""
Path Controller
===============
Glue between the PointSource (CSV), the correction engine and the scene.

Why is this file needed?
------------------------
1. Explicit rebuilds: Nothing is re-rendered because a field changed. The host
   calls rebuild() when it decides a change is render relevant.
2. Thread split: compute_correction() is pure and may run in a worker thread.
   apply_correction() and rebuild() mutate shared state and must run in the
   thread that owns the rendering surface.
3. Camera framing: The camera is auto-fitted only when the point set changes
   identity (new file, reset), not on every edit of existing points.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.io import PointCsvIO
from pathcorrection.model.orientation import (
    EventSink, compute_orientations, apply_orientations
)
from pathcorrection.model.points import PointSequence, Segment
from pathcorrection.model.segmenter import split_segments, renumber_segments
from pathcorrection.model.state import CorrectionOptions, PathState
from pathcorrection.scene.camera import OrbitCamera
from pathcorrection.scene.mesh_builder import Scene, SceneBuilder, SceneStyle

logger = logging.getLogger(__name__)


class PathController:
    def __init__(
        self,
        state: PathState,
        style: Optional[SceneStyle] = None,
        camera: Optional[OrbitCamera] = None,
        sink: Optional[EventSink] = None,
    ) -> None:
        self.state = state
        self.builder = SceneBuilder(style)
        self.camera = camera or OrbitCamera()
        self.sink = sink

        self._framed_identity: Optional[str] = None
        self.scene: Optional[Scene] = None

    # ------------------------------------------------------------------------------
    # PointSource
    # ------------------------------------------------------------------------------

    def load(self, filepath: str) -> PointSequence:
        """Load a CSV file into the state. Raises PointLoadError."""
        sequence = PointCsvIO.load(filepath, drop_first_point=self.state.drop_first_point)
        self.state.points = sequence
        self.state.filepath = filepath
        self.state.is_corrected = False
        self._emit("points_loaded", path=filepath, points=len(sequence))
        return sequence

    def save(self, filepath: Optional[str] = None) -> str:
        """Save the points. Raises PointSaveError, or ValueError without a path."""
        target = filepath or self.state.filepath
        if not target:
            raise ValueError("No file path to save to.")

        if self.state.options.renumber_on_save:
            renumber_segments(self.state.points, self.state.options.segment_marker)

        PointCsvIO.save(target, self.state.points)
        self.state.filepath = target
        self._emit("points_saved", path=target, points=len(self.state.points))
        return target

    def reset(self) -> None:
        self.state.reset()

    # ------------------------------------------------------------------------------
    # Correction
    # ------------------------------------------------------------------------------

    def segments(self) -> List[Segment]:
        return split_segments(self.state.points, self.state.options.segment_marker)

    def snapshot(self) -> Tuple[PointSequence, CorrectionOptions]:
        """Detached points and options for a worker thread. Call in the GUI thread."""
        return self.state.points.snapshot(), replace(self.state.options)

    def compute_correction(
        self,
        should_cancel=None,
        progress=None,
        points: Optional[PointSequence] = None,
        options: Optional[CorrectionOptions] = None,
    ) -> List[Optional[Vector]]:
        """
        Pure step. From a worker thread, pass a snapshot() so the live state is
        never read concurrently.
        """
        points = points if points is not None else self.state.points
        options = options if options is not None else self.state.options
        return compute_orientations(
            points,
            options.policy,
            realign=options.realign_axes,
            marker=options.segment_marker,
            sink=self.sink,
            should_cancel=should_cancel,
            progress=progress,
        )

    def apply_correction(self, results: List[Optional[Vector]]) -> int:
        """Write results into the live sequence. Run in the surface thread."""
        updated = apply_orientations(self.state.points, results)
        self.state.is_corrected = True
        self._emit("correction_applied", updated=updated, points=len(self.state.points))
        return updated

    def correct(self) -> int:
        return self.apply_correction(self.compute_correction())

    # ------------------------------------------------------------------------------
    # Scene
    # ------------------------------------------------------------------------------

    def rebuild(self, force_fit: bool = False) -> Scene:
        """
        Rebuild all meshes from the current points.

        Args:
            force_fit: Re-frame the camera even if the point set is the same.
        """
        points = self.state.points
        self.scene = self.builder.rebuild(points)

        if force_fit or points.identity != self._framed_identity:
            self.camera.auto_fit(self.scene.bounding_box)
            self._framed_identity = points.identity

        self._emit("scene_rebuilt", primitives=len(self.scene.primitives), triangles=self.scene.triangle_count)
        return self.scene

    def _emit(self, event: str, **payload) -> None:
        logger.debug(f"{event}: {payload}")
        if self.sink is not None:
            self.sink(event, payload)
