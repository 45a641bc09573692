"""
Procedural Scene Builder
========================
Generates renderable triangle geometry for the point path.

Why is this file needed?
------------------------
1. Independence: The geometry is plain numpy (positions + triangle indices +
   colour), so it can be built and tested without Qt or VTK. The view converts
   it to PyVista PolyData (see view/widgets/vtk_utils.py).
2. Predictable cost: The whole scene is rebuilt on every explicit rebuild()
   call. There is no incremental diffing.

Classes:
    MeshPrimitive: One coloured triangle mesh.
    SceneStyle: Camera independent styling parameters.
    Scene: Result of a rebuild.
    SceneBuilder: Turns a PointSequence into a Scene.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from pathcorrection.model.geometry_primitives import Vector, BoundingBox
from pathcorrection.model.points import PointSequence

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]

RED: Color = (1.0, 0.0, 0.0)
GREEN: Color = (0.0, 1.0, 0.0)
BLUE: Color = (0.0, 0.0, 1.0)

RAMP_LOW: Color = BLUE
RAMP_HIGH: Color = RED

SPHERE_LAT_SEGMENTS = 8
SPHERE_LON_SEGMENTS = 12

# Below this length the in-plane perpendicular is unreliable (direction ~ Z)
PERPENDICULAR_MIN_LENGTH = 0.1
MIN_INDICATOR_LENGTH = 1e-4

PLACEHOLDER_RADIUS = 5.0


@dataclass
class MeshPrimitive:
    positions: npt.NDArray[np.float64]
    triangle_indices: npt.NDArray[np.int_]
    color: Color
    double_sided: bool = False
    kind: str = "mesh"

    @property
    def n_triangles(self) -> int:
        return len(self.triangle_indices) // 3

    @property
    def is_empty(self) -> bool:
        return len(self.positions) == 0


@dataclass
class SceneStyle:
    line_thickness: float = 1.0
    indicator_thickness: float = 4.0
    path_color: Color = RED
    show_axes: bool = True
    axis_length: float = 50.0


@dataclass
class Scene:
    primitives: List[MeshPrimitive] = field(default_factory=list)
    bounding_box: Optional[BoundingBox] = None
    marker_radius: float = PLACEHOLDER_RADIUS

    @property
    def triangle_count(self) -> int:
        return sum(p.n_triangles for p in self.primitives)

    def of_kind(self, kind: str) -> List[MeshPrimitive]:
        return [p for p in self.primitives if p.kind == kind]


def color_ramp(t: float) -> Color:
    """Linear blend from RAMP_LOW (t=0) to RAMP_HIGH (t=1). t is clamped."""
    t = max(0.0, min(1.0, t))
    return tuple(lo + (hi - lo) * t for lo, hi in zip(RAMP_LOW, RAMP_HIGH))


def ramp_scalar(orientation: Vector) -> float:
    """Colour ramp parameter of a point: the Z component of its direction, clamped to [0, 1]."""
    return max(0.0, min(1.0, orientation.z))


def marker_radius(bbox: Optional[BoundingBox], count: int) -> float:
    """Marker size proportional to the path extent, smaller for dense paths."""
    max_range = bbox.max_extent if bbox is not None else 0.0
    radius = max(max_range * 0.01, 1.0)
    if count > 100:
        radius *= 0.5
    elif count > 50:
        radius *= 0.7
    return radius


def build_thick_line(
    start: Vector,
    end: Vector,
    thickness: float,
    color: Color,
    kind: str = "line"
) -> MeshPrimitive:
    """
    A flat quad of width `thickness` between two points, visible from both sides.

    Returns:
        Primitive with 4 vertices and 2 triangles, or an empty primitive when
        start and end coincide.
    """
    direction = (end - start).normalize()
    if direction.magnitude == 0.0:
        return MeshPrimitive(
            positions=np.empty((0, 3), dtype=np.float64),
            triangle_indices=np.empty(0, dtype=np.int_),
            color=color,
            double_sided=True,
            kind=kind,
        )

    perpendicular = Vector(direction.y, -direction.x, 0.0)
    if perpendicular.magnitude < PERPENDICULAR_MIN_LENGTH:
        perpendicular = Vector(0.0, direction.z, -direction.y)
    perpendicular = perpendicular.normalize() * (thickness / 2.0)

    positions = np.array([
        (start + perpendicular).to_tuple(),
        (start - perpendicular).to_tuple(),
        (end + perpendicular).to_tuple(),
        (end - perpendicular).to_tuple(),
    ], dtype=np.float64)
    triangle_indices = np.array([0, 1, 2, 1, 3, 2], dtype=np.int_)

    return MeshPrimitive(positions, triangle_indices, color, double_sided=True, kind=kind)


def build_uv_sphere(
    center: Vector,
    radius: float,
    color: Color,
    kind: str = "marker"
) -> MeshPrimitive:
    """
    UV sphere with a fixed 8 x 12 latitude/longitude subdivision.

    Vertices are laid out row by row (latitude 0..8, longitude 0..12, the
    seam column duplicated), which gives 8 * 12 * 2 = 192 triangles.
    """
    phi = np.linspace(0.0, np.pi, SPHERE_LAT_SEGMENTS + 1)
    theta = np.linspace(0.0, 2.0 * np.pi, SPHERE_LON_SEGMENTS + 1)
    phi_grid, theta_grid = np.meshgrid(phi, theta, indexing="ij")

    x = center.x + radius * np.sin(phi_grid) * np.cos(theta_grid)
    y = center.y + radius * np.sin(phi_grid) * np.sin(theta_grid)
    z = center.z + radius * np.cos(phi_grid)
    positions = np.column_stack((x.ravel(), y.ravel(), z.ravel()))

    row = SPHERE_LON_SEGMENTS + 1
    lat, lon = np.meshgrid(
        np.arange(SPHERE_LAT_SEGMENTS), np.arange(SPHERE_LON_SEGMENTS), indexing="ij"
    )
    current = (lat * row + lon).ravel()
    below = current + row

    triangles = np.column_stack((
        current, below, current + 1,
        current + 1, below, below + 1,
    )).reshape(-1, 3)

    return MeshPrimitive(positions, triangles.ravel().astype(np.int_), color, kind=kind)


class SceneBuilder:
    """
    Rebuilds all geometry from the current points.

    Call rebuild() whenever a change is render relevant. The builder keeps no
    state between calls except the style.
    """

    def __init__(self, style: Optional[SceneStyle] = None) -> None:
        self.style = style or SceneStyle()

    def rebuild(self, sequence: PointSequence) -> Scene:
        scene = Scene()

        if self.style.show_axes:
            scene.primitives.extend(self._build_axes())

        if len(sequence) == 0:
            scene.primitives.append(
                build_uv_sphere(Vector(0.0, 0.0, 0.0), PLACEHOLDER_RADIUS, color_ramp(0.0), kind="placeholder")
            )
            logger.debug("Empty sequence, built placeholder marker.")
            return scene

        bbox = sequence.bounding_box()
        radius = marker_radius(bbox, len(sequence))
        scene.bounding_box = bbox
        scene.marker_radius = radius

        # Path
        for p1, p2 in zip(list(sequence)[:-1], list(sequence)[1:]):
            line = build_thick_line(
                p1.position, p2.position, self.style.line_thickness, self.style.path_color, kind="path"
            )
            if not line.is_empty:
                scene.primitives.append(line)

        # Markers and direction indicators
        for point in sequence:
            t = ramp_scalar(point.orientation)
            color = color_ramp(t)
            scene.primitives.append(build_uv_sphere(point.position, radius, color))

            direction = point.orientation
            if not direction.magnitude > MIN_INDICATOR_LENGTH:
                continue
            length = radius * (6.0 + 6.0 * t)
            end = point.position + direction.normalize() * length
            indicator = build_thick_line(
                point.position, end, self.style.indicator_thickness, color, kind="indicator"
            )
            if not indicator.is_empty:
                scene.primitives.append(indicator)

        logger.debug(
            f"Scene rebuilt: {len(scene.primitives)} primitives, {scene.triangle_count} triangles."
        )
        return scene

    def _build_axes(self) -> List[MeshPrimitive]:
        origin = Vector(0.0, 0.0, 0.0)
        length = self.style.axis_length
        thickness = self.style.line_thickness
        return [
            build_thick_line(origin, Vector(length, 0.0, 0.0), thickness, RED, kind="axis"),
            build_thick_line(origin, Vector(0.0, length, 0.0), thickness, GREEN, kind="axis"),
            build_thick_line(origin, Vector(0.0, 0.0, length), thickness, BLUE, kind="axis"),
        ]


def merge_primitives(primitives: List[MeshPrimitive]) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int_], npt.NDArray[np.float64]]:
    """
    Concatenate primitives into one triangle soup.

    Returns:
        positions (N, 3), triangles (M, 3) with offset indices, and per
        triangle colours (M, 3).
    """
    non_empty = [p for p in primitives if not p.is_empty]
    if not non_empty:
        return (
            np.empty((0, 3), dtype=np.float64),
            np.empty((0, 3), dtype=np.int_),
            np.empty((0, 3), dtype=np.float64),
        )

    positions = []
    triangles = []
    colors = []
    offset = 0
    for primitive in non_empty:
        positions.append(primitive.positions)
        triangles.append(primitive.triangle_indices.reshape(-1, 3) + offset)
        colors.append(np.tile(primitive.color, (primitive.n_triangles, 1)))
        offset += len(primitive.positions)

    return np.vstack(positions), np.vstack(triangles), np.vstack(colors).astype(np.float64)
