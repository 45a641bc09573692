"""
Configuration & Settings
========================
This module serves as the central registry for global constants and the
persisted user preferences.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (line widths, marker names, file
   filters) scattered throughout the GUI code.
2. Persistence: User choices (correction policy, last folder, ...) survive a
   restart through QSettings, in the INI format configured by main.create_app().

Exports:
    AppSettings: Dataclass with the persisted preferences.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from PySide6.QtCore import QSettings

from pathcorrection.model.orientation import OrientationPolicy
from pathcorrection.model.points import SEGMENT_MARKER

logger = logging.getLogger(__name__)

# Global Constants
ORG_ID = "pathcorrection"
APP_ID = "path-correction-tool"
VISIBLE_APP_NAME = "Path Correction Tool"

CSV_FILE_FILTER = "CSV Files (*.csv);;All Files (*.*)"

DEFAULT_LINE_THICKNESS: float = 1.0
DEFAULT_INDICATOR_THICKNESS: float = 4.0
MIN_LINE_THICKNESS: float = 0.01
MAX_LINE_THICKNESS: float = 100.0


@dataclass
class AppSettings:
    """User preferences restored at startup and stored on exit."""
    segment_marker: str = SEGMENT_MARKER
    policy: OrientationPolicy = OrientationPolicy.TANGENT
    realign_axes: bool = False
    line_thickness: float = DEFAULT_LINE_THICKNESS
    drop_first_point: bool = False
    renumber_on_save: bool = False
    show_axes: bool = True
    last_directory: str = ""

    @classmethod
    def load(cls, settings: QSettings) -> AppSettings:
        defaults = cls()

        policy_name = settings.value("correction/policy", defaults.policy.name, type=str)
        try:
            policy = OrientationPolicy[policy_name]
        except KeyError:
            logger.warning(f"Unknown correction policy '{policy_name}' in settings, using default.")
            policy = defaults.policy

        thickness = settings.value("view/line_thickness", defaults.line_thickness, type=float)
        thickness = min(max(thickness, MIN_LINE_THICKNESS), MAX_LINE_THICKNESS)

        marker = settings.value("io/segment_marker", defaults.segment_marker, type=str)

        return cls(
            segment_marker=marker or defaults.segment_marker,
            policy=policy,
            realign_axes=settings.value("correction/realign_axes", defaults.realign_axes, type=bool),
            line_thickness=thickness,
            drop_first_point=settings.value("io/drop_first_point", defaults.drop_first_point, type=bool),
            renumber_on_save=settings.value("io/renumber_on_save", defaults.renumber_on_save, type=bool),
            show_axes=settings.value("view/show_axes", defaults.show_axes, type=bool),
            last_directory=settings.value("io/last_directory", defaults.last_directory, type=str),
        )

    def store(self, settings: QSettings) -> None:
        settings.setValue("io/segment_marker", self.segment_marker)
        settings.setValue("correction/policy", self.policy.name)
        settings.setValue("correction/realign_axes", self.realign_axes)
        settings.setValue("view/line_thickness", self.line_thickness)
        settings.setValue("io/drop_first_point", self.drop_first_point)
        settings.setValue("io/renumber_on_save", self.renumber_on_save)
        settings.setValue("view/show_axes", self.show_axes)
        settings.setValue("io/last_directory", self.last_directory)
        settings.sync()
