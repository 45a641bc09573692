"""
Orientation Correction Control Panel
"""
from typing import List, Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QDoubleSpinBox, QGroupBox, QFormLayout,
    QCheckBox, QComboBox, QProgressBar, QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView
)
from PySide6.QtCore import Signal, Qt

from pathcorrection.config import MIN_LINE_THICKNESS, MAX_LINE_THICKNESS
from pathcorrection.model.orientation import OrientationPolicy, direction_to_angles
from pathcorrection.model.points import PointSequence
from pathcorrection.model.segmenter import split_segments
from pathcorrection.model.state import PathState

# Filling thousands of table rows is slow and not useful
MAX_TABLE_ROWS = 2000
TABLE_COLUMNS = ["X", "Y", "Z", "Segment", "Azimuth [°]", "Elevation [°]"]


class CorrectionControlPanel(QWidget):
    apply_requested = Signal()
    cancel_requested = Signal()
    # Render relevant option changed (line thickness, axes)
    style_changed = Signal()

    def __init__(self, path_state: PathState) -> None:
        super().__init__()
        self.state = path_state

        layout = QVBoxLayout(self)

        # --- Correction Group ---
        grp = QGroupBox("Orientation Correction")
        form = QFormLayout(grp)

        # 1. Policy
        self.cmb_policy = QComboBox()
        for policy in OrientationPolicy:
            self.cmb_policy.addItem(policy.label, policy)
        form.addRow("Policy:", self.cmb_policy)

        # 2. Realign (tangent only)
        self.chk_realign = QCheckBox("")
        self.chk_realign.setToolTip("Rotate tangents by -90° about X (render/export axes)")
        form.addRow("Realign axes:", self.chk_realign)

        # Connect after population, otherwise the first addItem overwrites the state
        self.cmb_policy.currentIndexChanged.connect(self.on_policy_changed)
        self.chk_realign.toggled.connect(self.on_realign_toggled)

        layout.addWidget(grp)

        # --- Import Group ---
        grp_io = QGroupBox("Import")
        form_io = QFormLayout(grp_io)

        self.chk_drop_first = QCheckBox("")
        self.chk_drop_first.setToolTip("Discard the first data row when loading (applies to the next load)")
        self.chk_drop_first.toggled.connect(self.on_drop_first_toggled)
        form_io.addRow("Drop first point:", self.chk_drop_first)

        self.chk_renumber = QCheckBox("")
        self.chk_renumber.setToolTip("Rewrite segment ids as 0, 1, 2, ... when saving")
        self.chk_renumber.toggled.connect(self.on_renumber_toggled)
        form_io.addRow("Renumber segments on save:", self.chk_renumber)

        layout.addWidget(grp_io)

        # --- View Group ---
        grp_view = QGroupBox("View")
        form_view = QFormLayout(grp_view)

        self.thickness_spin = QDoubleSpinBox()
        self.thickness_spin.setRange(MIN_LINE_THICKNESS, MAX_LINE_THICKNESS)
        self.thickness_spin.setSingleStep(0.1)
        self.thickness_spin.setValue(1.0)
        self.thickness_spin.valueChanged.connect(lambda *_: self.style_changed.emit())
        form_view.addRow("Line thickness:", self.thickness_spin)

        self.chk_axes = QCheckBox("")
        self.chk_axes.setChecked(True)
        self.chk_axes.toggled.connect(lambda *_: self.style_changed.emit())
        form_view.addRow("Show axes:", self.chk_axes)

        layout.addWidget(grp_view)

        # --- Actions ---
        actions = QHBoxLayout()
        self.btn_apply = QPushButton("Apply Correction")
        self.btn_apply.setMinimumHeight(40)
        self.btn_apply.clicked.connect(self.apply_requested.emit)
        actions.addWidget(self.btn_apply)

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.setMinimumHeight(40)
        self.btn_cancel.setEnabled(False)
        self.btn_cancel.clicked.connect(self.cancel_requested.emit)
        actions.addWidget(self.btn_cancel)
        layout.addLayout(actions)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(False)
        layout.addWidget(self.progress_bar)

        # --- Status Info ---
        self.lbl_status = QLabel("Status: No points loaded.")
        self.lbl_status.setAlignment(Qt.AlignCenter)
        self.lbl_status.setStyleSheet("color: gray;")
        layout.addWidget(self.lbl_status)

        self.lbl_stats = QLabel("")
        self.lbl_stats.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.lbl_stats)

        # --- Points Table ---
        self.table = QTableWidget(0, len(TABLE_COLUMNS))
        self.table.setHorizontalHeaderLabels(TABLE_COLUMNS)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.verticalHeader().setDefaultSectionSize(20)
        layout.addWidget(self.table, stretch=1)

        self.load_from_state()

    # --- PROPERTIES ---

    @property
    def status_message(self) -> str:
        return self.lbl_status.text()

    @status_message.setter
    def status_message(self, text: str) -> None:
        self.lbl_status.setText(text)
        self.lbl_status.setStyleSheet("color: gray;")

    def set_status_styled(self, text: str, color: str, bold: bool = False) -> None:
        self.lbl_status.setText(text)
        weight = "bold" if bold else "normal"
        self.lbl_status.setStyleSheet(f"color: {color}; font-weight: {weight};")

    @property
    def line_thickness(self) -> float:
        return self.thickness_spin.value()

    @property
    def show_axes(self) -> bool:
        return self.chk_axes.isChecked()

    # --- SLOTS ---

    def on_policy_changed(self) -> None:
        policy = self.cmb_policy.currentData()
        self.state.options.policy = policy
        # Realignment only exists for tangents
        self.chk_realign.setEnabled(policy is OrientationPolicy.TANGENT)

    def on_realign_toggled(self, checked: bool) -> None:
        self.state.options.realign_axes = checked

    def on_drop_first_toggled(self, checked: bool) -> None:
        self.state.drop_first_point = checked

    def on_renumber_toggled(self, checked: bool) -> None:
        self.state.options.renumber_on_save = checked

    # --- STATE SYNC ---

    def load_from_state(self) -> None:
        options = self.state.options
        index = self.cmb_policy.findData(options.policy)
        if index >= 0:
            self.cmb_policy.setCurrentIndex(index)
        self.chk_realign.setChecked(options.realign_axes)
        self.chk_realign.setEnabled(options.policy is OrientationPolicy.TANGENT)
        self.chk_drop_first.setChecked(self.state.drop_first_point)
        self.chk_renumber.setChecked(options.renumber_on_save)

    def set_view_options(self, line_thickness: float, show_axes: bool) -> None:
        self.thickness_spin.blockSignals(True)
        self.chk_axes.blockSignals(True)
        try:
            self.thickness_spin.setValue(line_thickness)
            self.chk_axes.setChecked(show_axes)
        finally:
            self.thickness_spin.blockSignals(False)
            self.chk_axes.blockSignals(False)

    def set_busy(self, busy: bool) -> None:
        self.btn_apply.setEnabled(not busy)
        self.btn_cancel.setEnabled(busy)
        self.cmb_policy.setEnabled(not busy)
        self.chk_realign.setEnabled(not busy and self.state.options.policy is OrientationPolicy.TANGENT)
        self.progress_bar.setVisible(busy)
        if busy:
            self.progress_bar.setValue(0)

    def on_progress(self, percentage: int, message: str) -> None:
        self.progress_bar.setValue(percentage)
        self.status_message = message

    def update_stats(self, n_points: int, n_segments: int) -> None:
        self.lbl_stats.setText(
            f"Points: {n_points}\n"
            f"Segments: {n_segments}"
        )

    def update_status_from_state(self) -> None:
        if not self.state.points:
            self.status_message = "Status: No points loaded."
        elif self.state.is_corrected:
            self.set_status_styled("Status: Corrected ✓", "green", bold=True)
        else:
            self.set_status_styled("Status: Loaded (not corrected)", "orange", bold=True)

    def populate_table(self, points: PointSequence) -> None:
        marker = self.state.options.segment_marker
        n_rows = min(len(points), MAX_TABLE_ROWS)

        # Every row shows the segment it belongs to, not only the marker rows
        row_segments: List[Optional[int]] = [None] * n_rows
        for segment in split_segments(points, marker):
            for row in segment.indices:
                if row >= n_rows:
                    break
                row_segments[row] = segment.segment_id

        self.table.setUpdatesEnabled(False)
        try:
            self.table.setRowCount(n_rows)
            for row in range(n_rows):
                point = points[row]
                azimuth, elevation = direction_to_angles(point.orientation)
                seg_id = row_segments[row]
                values = [
                    f"{point.position.x:.3f}",
                    f"{point.position.y:.3f}",
                    f"{point.position.z:.3f}",
                    "" if seg_id is None else str(seg_id),
                    f"{azimuth:.2f}",
                    f"{elevation:.2f}",
                ]
                for col, text in enumerate(values):
                    self.table.setItem(row, col, QTableWidgetItem(text))
        finally:
            self.table.setUpdatesEnabled(True)
