"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the control panel and the
3D viewport.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Save) and the panel
   buttons to the PathController.
3. Threading: It owns the CorrectionWorker and applies its results on the GUI
   thread before triggering a rebuild.
"""
import os
import logging

from typing import Any, Dict, List, Optional
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QFileDialog, QMessageBox
)
from PySide6.QtCore import Qt, QSettings, Signal
from PySide6.QtGui import QAction

from pathcorrection.config import AppSettings, CSV_FILE_FILTER, VISIBLE_APP_NAME, DEFAULT_INDICATOR_THICKNESS
from pathcorrection.controller.path_controller import PathController
from pathcorrection.controller.workers import CorrectionWorker
from pathcorrection.model.geometry_primitives import Vector
from pathcorrection.model.io import PointLoadError, PointSaveError
from pathcorrection.model.state import PathState
from pathcorrection.scene.camera import OrbitInteractor
from pathcorrection.scene.mesh_builder import SceneStyle
from pathcorrection.view.tabs.tab_correction import CorrectionControlPanel
from pathcorrection.view.widgets.plot_3d import PathViewport

logger = logging.getLogger(__name__)

STATUS_TIMEOUT_MS = 5000


class MainWindow(QMainWindow):
    # Engine events may come from the worker thread, this signal queues them to the GUI thread
    engine_event = Signal(str, object)

    def __init__(self, path_state: PathState, settings: Optional[QSettings] = None) -> None:
        super().__init__()
        self.state: PathState = path_state
        self.settings: QSettings = settings or QSettings()
        self.app_settings: AppSettings = AppSettings.load(self.settings)
        self.is_modified: bool = False
        self.worker: Optional[CorrectionWorker] = None

        self._apply_settings_to_state()

        self.update_window_title()
        self.resize(1400, 900)

        # --- CONTROLLER ---
        style = SceneStyle(
            line_thickness=self.app_settings.line_thickness,
            indicator_thickness=DEFAULT_INDICATOR_THICKNESS,
            show_axes=self.app_settings.show_axes,
        )
        self.controller = PathController(self.state, style=style, sink=self.engine_event.emit)
        self.engine_event.connect(self.on_engine_event)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)

        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        # --- LEFT SIDE: Control Panel ---
        self.panel = CorrectionControlPanel(self.state)
        self.panel.set_view_options(self.app_settings.line_thickness, self.app_settings.show_axes)
        splitter.addWidget(self.panel)

        # --- RIGHT SIDE: 3D Visualization ---
        self.viewport = PathViewport(OrbitInteractor(self.controller.camera))
        self.viewport.fit_requested = lambda: self.update_visualization(force_fit=True)
        splitter.addWidget(self.viewport)

        # Set initial proportions (1 part sidebar : 3 parts 3D view)
        splitter.setSizes([400, 1000])

        # --- SIGNAL CONNECTIONS ---
        self.panel.apply_requested.connect(self.on_apply_correction)
        self.panel.cancel_requested.connect(self.on_cancel_correction)
        self.panel.style_changed.connect(self.on_style_changed)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # Initial Render (placeholder marker)
        self.refresh_ui_from_state()

    def _apply_settings_to_state(self) -> None:
        options = self.state.options
        options.policy = self.app_settings.policy
        options.realign_axes = self.app_settings.realign_axes
        options.segment_marker = self.app_settings.segment_marker
        options.renumber_on_save = self.app_settings.renumber_on_save
        self.state.drop_first_point = self.app_settings.drop_first_point

    def _create_actions(self) -> None:
        self.act_open = QAction("Open CSV...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_save = QAction("Save", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_file_save)

        self.act_save_as = QAction("Save As...", self)
        self.act_save_as.setShortcut("Ctrl+Shift+S")
        self.act_save_as.triggered.connect(self.on_file_save_as)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_save)
        file_menu.addAction(self.act_save_as)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on filename and dirty state."""
        filename = self.state.filepath if self.state.filepath else "Untitled"
        title = f"{VISIBLE_APP_NAME} - [{os.path.basename(filename)}"
        if self.is_modified:
            title += "*"
        title += "]"
        self.setWindowTitle(title)

    def set_modified(self, modified: bool) -> None:
        """Sets the dirty flag and updates title if changed."""
        if self.is_modified != modified:
            self.is_modified = modified
            self.update_window_title()

    def set_busy(self, busy: bool) -> None:
        self.panel.set_busy(busy)
        self.act_open.setEnabled(not busy)
        self.act_save.setEnabled(not busy)
        self.act_save_as.setEnabled(not busy)

    def on_engine_event(self, event: str, payload: Dict[str, Any]) -> None:
        logger.info(f"{event}: {payload}")
        if event == "correction_skipped":
            self.statusBar().showMessage(f"Correction skipped: {payload.get('reason', '')}", STATUS_TIMEOUT_MS)
        elif event == "correction_applied":
            self.statusBar().showMessage(
                f"Corrected {payload.get('updated', 0)} of {payload.get('points', 0)} points.", STATUS_TIMEOUT_MS
            )
        elif event in ("points_loaded", "points_saved"):
            verb = "Loaded" if event == "points_loaded" else "Saved"
            self.statusBar().showMessage(
                f"{verb} {payload.get('points', 0)} points: {payload.get('path', '')}", STATUS_TIMEOUT_MS
            )

    # --- CORRECTION SLOTS ---

    def on_apply_correction(self) -> None:
        if self.worker is not None:
            return
        if not self.state.points:
            QMessageBox.information(self, "No Points", "Load a CSV file before applying a correction.")
            return

        self.worker = CorrectionWorker(self.controller)
        self.worker.progress_updated.connect(self.panel.on_progress)
        self.worker.results_ready.connect(self.on_correction_ready)
        self.worker.cancelled.connect(self.on_correction_cancelled)
        self.worker.error_occurred.connect(self.on_correction_error)
        self.worker.finished.connect(self.on_worker_finished)

        self.set_busy(True)
        self.worker.start()

    def on_cancel_correction(self) -> None:
        if self.worker is not None:
            self.panel.status_message = "Cancelling..."
            self.worker.stop()

    def on_correction_ready(self, results: List[Optional[Vector]]) -> None:
        """Runs on the GUI thread: mutate the points, then rebuild."""
        worker = self.worker
        if worker is not None and worker.points.identity != self.state.points.identity:
            logger.warning("Discarding correction results computed for a replaced point set.")
            return
        self.controller.apply_correction(results)
        self.set_modified(True)
        self.refresh_ui_from_state()

    def on_correction_cancelled(self) -> None:
        self.panel.set_status_styled("Status: Correction cancelled", "orange", bold=True)

    def on_correction_error(self, message: str) -> None:
        self.panel.set_status_styled("Status: Correction failed", "red", bold=True)
        QMessageBox.critical(self, "Correction Error", f"Correction failed:\n{message}")

    def on_worker_finished(self) -> None:
        self.set_busy(False)
        if self.worker is not None:
            self.worker.deleteLater()
            self.worker = None

    def stop_worker(self) -> None:
        """Cancel a running correction and drop its pending results."""
        worker = self.worker
        if worker is None:
            return
        worker.results_ready.disconnect(self.on_correction_ready)
        worker.finished.disconnect(self.on_worker_finished)
        worker.stop()
        worker.wait()
        self.on_worker_finished()

    def on_style_changed(self) -> None:
        style = self.controller.builder.style
        style.line_thickness = self.panel.line_thickness
        style.show_axes = self.panel.show_axes
        self.update_visualization()

    # --- FILE SLOTS ---

    def on_file_open(self) -> None:
        if not self._confirm_discard():
            return

        fname, _ = QFileDialog.getOpenFileName(
            self, "Open Points", self.app_settings.last_directory, CSV_FILE_FILTER
        )
        if fname:
            self.open_file(fname)

    def open_file(self, fname: str) -> bool:
        try:
            self.controller.load(fname)
        except PointLoadError as e:
            QMessageBox.critical(self, "Error", f"Could not open file:\n{e}")
            return False

        self.app_settings.last_directory = os.path.dirname(fname)
        # Reset dirty flag
        self.is_modified = False
        # Explicitly update title to show new filename
        self.update_window_title()
        self.refresh_ui_from_state()
        return True

    def on_file_save(self) -> bool:
        if not self.state.filepath:
            return self.on_file_save_as()
        return self._save_to(self.state.filepath)

    def on_file_save_as(self) -> bool:
        start = self.state.filepath or self.app_settings.last_directory
        fname, _ = QFileDialog.getSaveFileName(
            self, "Save Points", start, CSV_FILE_FILTER
        )
        if not fname:
            return False
        # Ensure extension
        if not fname.lower().endswith(".csv"):
            fname += ".csv"
        return self._save_to(fname)

    def _save_to(self, filepath: str) -> bool:
        if self.worker is not None:
            QMessageBox.warning(self, "Busy", "Wait for the running correction to finish before saving.")
            return False
        try:
            self.controller.save(filepath)
        except PointSaveError as e:
            QMessageBox.critical(self, "Error", f"Could not save file:\n{e}")
            return False

        self.app_settings.last_directory = os.path.dirname(filepath)
        # Reset dirty flag
        self.is_modified = False
        self.update_window_title()
        return True

    def _confirm_discard(self) -> bool:
        """Asks to save unsaved corrections. False means the user aborted."""
        if not self.is_modified:
            return True

        reply = QMessageBox.question(
            self,
            "Save Changes?",
            "The points were modified. Do you want to save the changes?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel
        )
        if reply == QMessageBox.Save:
            return self.on_file_save()
        return reply == QMessageBox.Discard

    def refresh_ui_from_state(self) -> None:
        """
        After loading or correcting, the State is updated, but the Widgets are old.
        We need to force the Widgets to read from the State again.
        """
        points = self.state.points
        self.panel.populate_table(points)
        self.panel.update_stats(len(points), len(self.controller.segments()))
        self.panel.update_status_from_state()
        self.update_visualization()

    def update_visualization(self, force_fit: bool = False) -> None:
        scene = self.controller.rebuild(force_fit=force_fit)
        self.viewport.present(scene, self.controller.camera.state())

    def _store_settings(self) -> None:
        options = self.state.options
        self.app_settings.policy = options.policy
        self.app_settings.realign_axes = options.realign_axes
        self.app_settings.segment_marker = options.segment_marker
        self.app_settings.renumber_on_save = options.renumber_on_save
        self.app_settings.drop_first_point = self.state.drop_first_point
        self.app_settings.line_thickness = self.panel.line_thickness
        self.app_settings.show_axes = self.panel.show_axes
        self.app_settings.store(self.settings)

    def closeEvent(self, event, /) -> None:
        """Handle window close event to prompt for saving if modified."""
        # Stop a running correction first. Its pending results must not reach
        # the viewport, and saving below must not race with the worker.
        self.stop_worker()

        if not self._confirm_discard():
            event.ignore()  # Don't close window
            return

        self._store_settings()

        # Close the PyVista plotter safely
        if self.viewport and self.viewport.plotter:
            self.viewport.plotter.close()

        event.accept()  # Actually close the window
