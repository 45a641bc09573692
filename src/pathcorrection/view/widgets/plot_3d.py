"""
3D Visualization Widget (PyVista Wrapper) - Path Viewport
"""

from __future__ import annotations

from typing import Optional, Callable

import logging

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QFrame, QStyle
)
from PySide6.QtGui import QCloseEvent, QResizeEvent

from pyvistaqt import QtInteractor
import pyvista as pv
from vtkmodules.vtkInteractionStyle import vtkInteractorStyleUser

from pathcorrection.scene.camera import CameraState, MouseButton, OrbitInteractor
from pathcorrection.scene.mesh_builder import Scene
from pathcorrection.view.widgets.vtk_utils import VtkUtils, COLOR_ARRAY

logger = logging.getLogger(__name__)


class PathViewport(QWidget):
    """
    Rendering surface for the path scene.

    Mouse input is not handled by a VTK interactor style. Raw pointer and wheel
    events are forwarded to an OrbitInteractor and the resulting CameraState is
    copied into the VTK camera.
    """

    def __init__(self, interactor: OrbitInteractor, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.interactor = interactor
        # Called when the user asks to re-frame the scene
        self.fit_requested: Optional[Callable[[], None]] = None

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        # --- Actors state ---
        self._scene_actor: Optional[pv.Actor] = None

        self._attach_observers()
        self._setup_overlay_controls()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def present(self, scene: Scene, camera_state: CameraState) -> None:
        """
        Replace the displayed meshes and apply the camera.
        Called after every rebuild.
        """
        logger.debug(f"Presenting scene with {len(scene.primitives)} primitives.")
        self._clear_scene_layer()

        poly = VtkUtils.scene_to_polydata(scene)
        if poly.n_cells > 0:
            self._scene_actor = self.plotter.add_mesh(
                poly,
                scalars=COLOR_ARRAY,
                rgb=True,
                preference="cell",
                show_scalar_bar=False,
                pickable=False,
                culling=False,
            )

        self.update_camera(camera_state, render=False)
        self.plotter.render()

    def update_camera(self, camera_state: CameraState, render: bool = True) -> None:
        VtkUtils.apply_camera_state(self.plotter.camera, camera_state)
        self.plotter.reset_camera_clipping_range()
        if render:
            self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal: Layer Management
    # ------------------------------------------------------------------------------

    def _clear_scene_layer(self) -> None:
        if self._scene_actor:
            self.plotter.remove_actor(self._scene_actor)
            self._scene_actor = None

    # ------------------------------------------------------------------------------
    # Internal: Setup & Observers
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background("white")
        self.plotter.disable_parallel_projection()
        # A passive style: all camera motion goes through the OrbitInteractor
        self.plotter.iren.interactor.SetInteractorStyle(vtkInteractorStyleUser())

    def _attach_observers(self) -> None:
        iren = self.plotter.iren
        iren.add_observer("LeftButtonPressEvent", lambda *_: self._on_pointer_down(MouseButton.LEFT))
        iren.add_observer("RightButtonPressEvent", lambda *_: self._on_pointer_down(MouseButton.RIGHT))
        iren.add_observer("LeftButtonReleaseEvent", lambda *_: self._on_pointer_up())
        iren.add_observer("RightButtonReleaseEvent", lambda *_: self._on_pointer_up())
        iren.add_observer("MouseMoveEvent", lambda *_: self._on_pointer_move())
        iren.add_observer("MouseWheelForwardEvent", lambda *_: self._on_wheel(1))
        iren.add_observer("MouseWheelBackwardEvent", lambda *_: self._on_wheel(-1))

    def _event_position(self) -> tuple[float, float]:
        # VTK reports y upwards, the interactor expects screen coordinates (y down)
        x, y = self.plotter.iren.get_event_position()
        return float(x), float(-y)

    def _on_pointer_down(self, button: MouseButton) -> None:
        x, y = self._event_position()
        self.interactor.pointer_down(button, x, y)

    def _on_pointer_up(self) -> None:
        self.interactor.pointer_up()

    def _on_pointer_move(self) -> None:
        x, y = self._event_position()
        if self.interactor.pointer_move(x, y):
            self.update_camera(self.interactor.camera.state())

    def _on_wheel(self, delta: int) -> None:
        if self.interactor.wheel(delta):
            self.update_camera(self.interactor.camera.state())

    def _setup_overlay_controls(self) -> None:
        """Floating buttons."""
        self.overlay_widget = QFrame(self)
        self.overlay_widget.setStyleSheet("""
            QFrame { background-color: rgba(255, 255, 255, 200); border-radius: 6px; border: 1px solid #ccc; }
            QPushButton { background-color: transparent; border: none; padding: 4px; }
            QPushButton:hover { background-color: rgba(0, 0, 0, 10); }
        """)

        layout = QHBoxLayout(self.overlay_widget)
        layout.setContentsMargins(4, 4, 4, 4)

        self.btn_fit = QPushButton()
        self.btn_fit.setIcon(self.style().standardIcon(QStyle.SP_BrowserReload))
        self.btn_fit.setToolTip("Fit view to path")
        self.btn_fit.clicked.connect(self.on_fit_clicked)
        layout.addWidget(self.btn_fit)

        self.overlay_widget.adjustSize()

    def on_fit_clicked(self) -> None:
        if self.fit_requested is not None:
            self.fit_requested()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        margin = 8
        self.overlay_widget.move(self.width() - self.overlay_widget.width() - margin, margin)
        self.overlay_widget.raise_()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.plotter.close()
        event.accept()
