"""
VTK and Geometry Utilities
Helper functions for converting scene primitives into PyVista data.
"""
import numpy as np
import numpy.typing as npt
import pyvista as pv

import logging

from pathcorrection.scene.camera import CameraState
from pathcorrection.scene.mesh_builder import Scene, merge_primitives

logger = logging.getLogger(__name__)

COLOR_ARRAY = "colors"


class VtkUtils:
    @staticmethod
    def faces_from_triangles(triangles: npt.NDArray[np.int_]) -> npt.NDArray[np.int_]:
        """
        Convert (M, 3) triangle indices to the flat VTK cell layout
        [3, i0, i1, i2, 3, ...].
        """
        tri = np.asarray(triangles, dtype=np.int_).reshape(-1, 3)
        sizes = np.full((tri.shape[0], 1), 3, dtype=np.int_)
        return np.hstack([sizes, tri]).ravel()

    @staticmethod
    def scene_to_polydata(scene: Scene) -> pv.PolyData:
        """
        Merge all primitives into one PolyData with per-cell RGB colours.
        One actor per scene keeps the render cost flat for large paths.
        """
        positions, triangles, colors = merge_primitives(scene.primitives)
        if len(positions) == 0:
            return pv.PolyData()

        pd = pv.PolyData(positions, faces=VtkUtils.faces_from_triangles(triangles))
        pd.cell_data[COLOR_ARRAY] = (np.clip(colors, 0.0, 1.0) * 255).astype(np.uint8)
        return pd

    @staticmethod
    def apply_camera_state(camera: pv.Camera, state: CameraState) -> None:
        """Copy the orbit camera into the VTK camera."""
        camera.position = state.position.to_tuple()
        camera.focal_point = state.look_at.to_tuple()
        camera.up = state.view_up.to_tuple()
