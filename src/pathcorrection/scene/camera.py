"""
Orbit Camera
============
Spherical-coordinate camera around a look-at point, driven by
rotate / pan / zoom gestures, plus auto-framing of a bounding box.

The camera is plain data + numpy. The viewport copies CameraState into the
VTK camera after every change.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

import numpy as np

from pathcorrection.model.geometry_primitives import Vector, BoundingBox, Z_AXIS

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

POLAR_MARGIN = 0.1  # rad, keeps the camera off the poles
MIN_DISTANCE = 1e-6
MIN_FIT_DISTANCE = 100.0
FIT_MARGIN = 1.5
PAN_SPEED = 0.002
ZOOM_IN_FACTOR = 0.9
ZOOM_OUT_FACTOR = 1.1
ROTATE_SPEED = 0.01  # rad per pixel


@dataclass(frozen=True)
class CameraState:
    position: Vector
    look_at: Vector
    look_direction: Vector
    up_direction: Vector
    # up_direction made orthogonal to the look direction (row 1 of the view matrix)
    view_up: Vector
    distance: float


class OrbitCamera:
    def __init__(
        self,
        look_at: Optional[Vector] = None,
        distance: float = 500.0,
        up_direction: Vector = Z_AXIS,
    ) -> None:
        self.look_at: Vector = look_at if look_at is not None else Vector(0.0, 0.0, 0.0)
        self.up_direction: Vector = up_direction
        self._distance: float = max(distance, MIN_DISTANCE)
        offset = self._distance / math.sqrt(3.0)
        self.position: Vector = self.look_at + Vector(offset, offset, offset)

    # ------------------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------------------

    @property
    def distance(self) -> float:
        return self._distance

    @distance.setter
    def distance(self, value: float) -> None:
        self._distance = max(value, MIN_DISTANCE)

    @property
    def look_direction(self) -> Vector:
        return self.look_at - self.position

    def spherical(self) -> tuple[float, float, float]:
        """(radius, theta, phi) of the camera position relative to look_at."""
        rel = self.position - self.look_at
        radius = rel.magnitude
        if radius == 0.0:
            return 0.0, 0.0, math.pi / 2.0
        theta = math.atan2(rel.y, rel.x)
        phi = math.acos(max(-1.0, min(1.0, rel.z / radius)))
        return radius, theta, phi

    def state(self) -> CameraState:
        return CameraState(
            position=self.position,
            look_at=self.look_at,
            look_direction=self.look_direction,
            up_direction=self.up_direction,
            view_up=Vector.from_array(self.view_matrix()[1, :3]),
            distance=self._distance,
        )

    # ------------------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------------------

    def rotate(self, delta_theta: float, delta_phi: float) -> None:
        """Orbit around look_at. The polar angle stays within [0.1, pi - 0.1]."""
        radius, theta, phi = self.spherical()
        if radius == 0.0:
            radius = self._distance

        theta += delta_theta
        phi += delta_phi
        phi = max(POLAR_MARGIN, min(math.pi - POLAR_MARGIN, phi))

        rel = Vector(
            radius * math.sin(phi) * math.cos(theta),
            radius * math.sin(phi) * math.sin(theta),
            radius * math.cos(phi),
        )
        self.position = self.look_at + rel

    def pan(self, delta_x: float, delta_y: float) -> None:
        """
        Move camera and look_at together in the view plane.
        Speed scales with the distance so screen-space drag feels constant.
        """
        look = self.look_direction.normalize()
        up = self.up_direction.normalize()
        right = look.cross(up).normalize()
        if right.magnitude == 0.0:
            # Looking along the up axis, pick any horizontal right vector
            right = Vector(1.0, 0.0, 0.0)
        cam_up = right.cross(look).normalize()

        scale = self._distance * PAN_SPEED
        pan_vector = right * (-delta_x * scale) + cam_up * (delta_y * scale)

        self.position = self.position + pan_vector
        self.look_at = self.look_at + pan_vector

    def zoom(self, wheel_delta: float) -> None:
        """Positive delta zooms in, negative zooms out, zero does nothing."""
        if wheel_delta == 0:
            return
        factor = ZOOM_IN_FACTOR if wheel_delta > 0 else ZOOM_OUT_FACTOR
        self.distance = self._distance * factor
        self._place_along_look_direction()

    def auto_fit(self, bbox: Optional[BoundingBox]) -> None:
        """Frame the box from an isometric direction."""
        if bbox is None:
            center = Vector(0.0, 0.0, 0.0)
            max_range = 0.0
        else:
            center = bbox.center
            max_range = bbox.max_extent

        self.look_at = center
        self.distance = max(max_range * FIT_MARGIN, MIN_FIT_DISTANCE)
        offset = self._distance / math.sqrt(3.0)
        self.position = center + Vector(offset, offset, offset)
        logger.debug(f"Camera auto-fit: center={center.to_tuple()}, distance={self._distance:.3f}")

    def view_matrix(self) -> npt.NDArray[np.float64]:
        """4x4 right-handed look-at matrix (world -> camera)."""
        f = self.look_direction.normalize()
        s = f.cross(self.up_direction).normalize()
        if s.magnitude == 0.0:
            s = Vector(1.0, 0.0, 0.0)
        u = s.cross(f)
        eye = self.position

        m = np.eye(4)
        m[0, :3] = s.to_tuple()
        m[1, :3] = u.to_tuple()
        m[2, :3] = (-f).to_tuple()
        m[0, 3] = -s.dot(eye)
        m[1, 3] = -u.dot(eye)
        m[2, 3] = f.dot(eye)
        return m

    def _place_along_look_direction(self) -> None:
        direction = self.look_direction.normalize()
        if direction.magnitude == 0.0:
            direction = Vector(-1.0, -1.0, -1.0).normalize()
        self.position = self.look_at - direction * self._distance


class MouseButton(Enum):
    LEFT = auto()
    MIDDLE = auto()
    RIGHT = auto()


class GestureMode(Enum):
    IDLE = auto()
    ROTATING = auto()
    PANNING = auto()


class OrbitInteractor:
    """
    Maps pointer and wheel events of the hosting surface to camera operations.

    Left drag rotates, right drag pans, the wheel zooms. Every handler returns
    True when the camera changed and the surface should redraw.
    """

    def __init__(self, camera: OrbitCamera, rotate_speed: float = ROTATE_SPEED) -> None:
        self.camera = camera
        self.rotate_speed = rotate_speed
        self.mode = GestureMode.IDLE
        self._last: Optional[tuple[float, float]] = None

    def pointer_down(self, button: MouseButton, x: float, y: float) -> bool:
        self._last = (x, y)
        if button is MouseButton.LEFT:
            self.mode = GestureMode.ROTATING
        elif button is MouseButton.RIGHT:
            self.mode = GestureMode.PANNING
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        if self.mode is GestureMode.IDLE or self._last is None:
            return False

        dx = x - self._last[0]
        dy = y - self._last[1]
        self._last = (x, y)

        if self.mode is GestureMode.ROTATING:
            self.camera.rotate(dx * self.rotate_speed, dy * self.rotate_speed)
        else:
            self.camera.pan(dx, dy)
        return True

    def pointer_up(self) -> bool:
        self.mode = GestureMode.IDLE
        self._last = None
        return False

    def wheel(self, delta: float) -> bool:
        if delta == 0:
            return False
        self.camera.zoom(delta)
        return True
