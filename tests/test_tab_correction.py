from pathcorrection.model.orientation import OrientationPolicy
from pathcorrection.model.state import PathState, CorrectionOptions
from pathcorrection.view.tabs.tab_correction import CorrectionControlPanel

from conftest import make_point


def test_panel_reads_options_from_state(qtbot):
    state = PathState(options=CorrectionOptions(policy=OrientationPolicy.PERPENDICULAR_BISECTOR))
    panel = CorrectionControlPanel(state)
    qtbot.addWidget(panel)

    assert panel.cmb_policy.currentData() is OrientationPolicy.PERPENDICULAR_BISECTOR
    assert not panel.chk_realign.isEnabled()
    assert state.options.policy is OrientationPolicy.PERPENDICULAR_BISECTOR


def test_panel_writes_options_to_state(qtbot):
    state = PathState()
    panel = CorrectionControlPanel(state)
    qtbot.addWidget(panel)

    panel.chk_realign.setChecked(True)
    panel.chk_drop_first.setChecked(True)
    panel.chk_renumber.setChecked(True)
    panel.cmb_policy.setCurrentIndex(panel.cmb_policy.findData(OrientationPolicy.PERPENDICULAR_BISECTOR))

    assert state.options.realign_axes is True
    assert state.drop_first_point is True
    assert state.options.renumber_on_save is True
    assert state.options.policy is OrientationPolicy.PERPENDICULAR_BISECTOR


def test_panel_table_and_stats(qtbot, two_segment_path):
    state = PathState(points=two_segment_path)
    state.points[0].orientation = make_point(0.0, 0.0, 0.0, orientation=(0.0, 1.0, 0.0)).orientation
    panel = CorrectionControlPanel(state)
    qtbot.addWidget(panel)

    panel.populate_table(state.points)
    panel.update_stats(len(state.points), 2)

    assert panel.table.rowCount() == 6
    assert panel.table.item(0, 3).text() == "0"
    assert panel.table.item(1, 3).text() == "0"
    assert [panel.table.item(row, 3).text() for row in range(3, 6)] == ["1", "1", "1"]
    assert panel.table.item(0, 4).text() == "90.00"
    assert "Segments: 2" in panel.lbl_stats.text()


def test_panel_busy_state_and_signals(qtbot):
    panel = CorrectionControlPanel(PathState())
    qtbot.addWidget(panel)

    with qtbot.waitSignal(panel.apply_requested, timeout=1000):
        panel.btn_apply.click()

    panel.set_busy(True)
    assert not panel.btn_apply.isEnabled()
    assert panel.btn_cancel.isEnabled()

    with qtbot.waitSignal(panel.style_changed, timeout=1000):
        panel.thickness_spin.setValue(3.0)
    assert panel.line_thickness == 3.0


def test_panel_table_leaves_unmarked_leading_rows_blank(qtbot):
    state = PathState()
    state.points.extend([
        make_point(0.0, 0.0, 0.0),
        make_point(1.0, 0.0, 0.0),
        make_point(2.0, 0.0, 0.0, seg=4),
        make_point(3.0, 0.0, 0.0),
    ])
    panel = CorrectionControlPanel(state)
    qtbot.addWidget(panel)

    panel.populate_table(state.points)
    assert [panel.table.item(row, 3).text() for row in range(4)] == ["", "", "4", "4"]


def test_panel_reads_renumber_option_from_state(qtbot):
    state = PathState(options=CorrectionOptions(renumber_on_save=True))
    panel = CorrectionControlPanel(state)
    qtbot.addWidget(panel)
    assert panel.chk_renumber.isChecked()
