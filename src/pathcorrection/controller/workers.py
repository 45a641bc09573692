"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: Correcting a large path on the main thread freezes the GUI.
   The pure compute step runs here instead.
2. Signals: Results travel back to the GUI thread through Qt Signals. The
   receiving slot applies them and rebuilds the scene, so point data and
   meshes are only ever mutated in the thread that owns the viewport.
3. Snapshot: The worker computes on a detached copy of the points and
   options taken when it is created, so edits or saves in the GUI thread never
   race with the background pass.

Classes:
    CorrectionWorker: Runs the orientation correction pass.
"""
import logging
from PySide6.QtCore import QThread, Signal

from pathcorrection.controller.path_controller import PathController
from pathcorrection.model.orientation import CorrectionCancelled

logger = logging.getLogger(__name__)


class CorrectionWorker(QThread):
    # Signals to update the UI from the background
    progress_updated = Signal(int, str)  # e.g., (10, "Correcting point 50/500...")
    results_ready = Signal(object)  # list[Vector | None]
    cancelled = Signal()
    error_occurred = Signal(str)

    def __init__(self, controller: PathController):
        super().__init__()
        self.controller = controller
        # Taken in the GUI thread; run() never touches the live state
        self.points, self.options = controller.snapshot()
        self.is_running = True
        self._last_percentage = -1

    def run(self):
        try:
            logger.info("Starting orientation correction in background thread...")
            self.progress_updated.emit(0, "Correcting orientations...")

            def progress_callback(done: int, total: int) -> None:
                percentage = int(100 * done / total) if total else 100
                percentage = min(percentage, 99)  # Cap until results are applied
                if percentage != self._last_percentage:
                    self._last_percentage = percentage
                    self.progress_updated.emit(percentage, f"Correcting point {done}/{total}...")

            results = self.controller.compute_correction(
                should_cancel=lambda: not self.is_running,
                progress=progress_callback,
                points=self.points,
                options=self.options,
            )

            logger.info(f"Correction computed for {len(results)} points.")
            self.results_ready.emit(results)

        except CorrectionCancelled as e:
            logger.info(f"Correction cancelled: {e}")
            self.cancelled.emit()

        except Exception as e:
            logger.exception(f"Error in CorrectionWorker: {e}")
            self.error_occurred.emit(str(e))

    def stop(self) -> None:
        self.is_running = False
