from __future__ import annotations

from typing import Mapping, TYPE_CHECKING

import numpy as np
import pyvista as pv
from pyvistaqt import QtInteractor
from PySide6.QtWidgets import QWidget, QVBoxLayout
from vtkmodules.vtkFiltersGeneral import vtkContourTriangulator

if TYPE_CHECKING:
    import numpy.typing as npt
    from fluidshape.model.geometry import AnalysisResult

GRID_SPACING_MM = 20.0


class ProfilePreview(QWidget):
    """
    PyVista/Qt preview of the cross-section with:
      - locked orthographic XY camera (pan/zoom only),
      - a background grid,
      - the filled profile with its outline,
      - the centroid marker and the A-E dimension labels.
    """
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent=parent)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        self.setLayout(layout)

        self.plotter = QtInteractor(self)
        self.plotter.set_background("#0a0f1d")
        layout.addWidget(self.plotter.interactor)

        self._actors: list[pv.Actor] = []
        # 2D only: orthographic XY view, pan/zoom interaction
        self.plotter.enable_parallel_projection()
        self.plotter.view_xy()
        self.plotter.enable_image_style()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def set_profile(self, numeric: Mapping[str, float], result: AnalysisResult) -> None:
        """Redraw the profile for the given parameters and analysis."""
        self._clear()

        vertices = np.array(result.vertices, dtype=np.float64)
        ring = np.vstack([vertices, vertices[:1]])
        outline = self._ring_polydata(ring)

        fill = self._triangulate(outline)
        if fill.n_cells > 0:
            self._actors.append(self.plotter.add_mesh(
                fill, color="#3b82f6", opacity=0.2, pickable=False, show_scalar_bar=False
            ))

        self._actors.append(self.plotter.add_mesh(
            outline, color="#3b82f6", line_width=2, pickable=False, show_scalar_bar=False
        ))

        cx, cy = result.centroid
        self._actors.append(self.plotter.add_points(
            np.array([[cx, cy, 0.1]]), color="#f43f5e", point_size=10, render_points_as_spheres=True
        ))

        self._draw_dimension_labels(numeric)
        self._draw_grid(ring)
        self._frame(ring)
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _clear(self) -> None:
        for actor in self._actors:
            self.plotter.remove_actor(actor)
        self._actors.clear()

    def _draw_dimension_labels(self, numeric: Mapping[str, float]) -> None:
        a, b, c, d, e = (numeric.get(k, 0.0) for k in ("A", "B", "C", "D", "E"))
        max_y = max(b, c, d)
        anchors = np.array([
            (a / 2, -15.0, 0.0),
            (-15.0, c / 2, 0.0),
            (a + 15.0, d / 2, 0.0),
            (e + 12.0, b, 0.0),
            (e / 2, max_y + 15.0, 0.0),
        ])
        labels = [f"{key}: {value:g}" for key, value in zip("ACDBE", (a, c, d, b, e))]
        self._actors.append(self.plotter.add_point_labels(
            anchors, labels,
            font_size=10,
            text_color="#94a3b8",
            shape_opacity=0.0,
            show_points=False,
            always_visible=True,
        ))

    def _draw_grid(self, ring: npt.NDArray[np.float64], margin: float = 50.0) -> None:
        """Background lines every GRID_SPACING_MM, snapped to multiples of the spacing."""
        lo = np.floor((ring.min(axis=0) - margin) / GRID_SPACING_MM) * GRID_SPACING_MM
        hi = np.ceil((ring.max(axis=0) + margin) / GRID_SPACING_MM) * GRID_SPACING_MM
        xs = np.arange(lo[0], hi[0] + GRID_SPACING_MM / 2, GRID_SPACING_MM)
        ys = np.arange(lo[1], hi[1] + GRID_SPACING_MM / 2, GRID_SPACING_MM)

        # one segment per grid line, slightly behind the profile
        starts = np.vstack([np.c_[xs, np.full_like(xs, lo[1])], np.c_[np.full_like(ys, lo[0]), ys]])
        ends = np.vstack([np.c_[xs, np.full_like(xs, hi[1])], np.c_[np.full_like(ys, hi[0]), ys]])
        points = np.empty((2 * len(starts), 3))
        points[0::2, :2] = starts
        points[1::2, :2] = ends
        points[:, 2] = -0.1
        n = len(starts)
        lines = np.c_[np.full(n, 2), np.arange(0, 2 * n, 2), np.arange(1, 2 * n, 2)].ravel()

        self._actors.append(self.plotter.add_mesh(
            pv.PolyData(points, lines=lines), color="#1e293b", line_width=1, opacity=0.8, pickable=False
        ))

    @staticmethod
    def _ring_polydata(ring: npt.NDArray[np.float64]) -> pv.PolyData:
        """Closed ring (first point repeated last) as a single polyline on Z=0."""
        n = len(ring)
        return pv.PolyData(np.c_[ring, np.zeros(n)], lines=np.r_[n, np.arange(n)])

    @staticmethod
    def _triangulate(outline: pv.PolyData) -> pv.PolyData:
        """Fill the outline with triangles on Z=0."""
        tri = vtkContourTriangulator()
        tri.SetInputData(outline)
        tri.Update()
        return pv.wrap(tri.GetOutput())

    def _frame(self, ring: npt.NDArray[np.float64], margin: float = 0.6) -> None:
        lo, hi = ring.min(axis=0), ring.max(axis=0)
        cx, cy = (lo + hi) / 2
        extent = max(1e-6, *(hi - lo))
        cam = self.plotter.camera
        cam.focal_point = (cx, cy, 0.0)
        cam.position = (cx, cy, 1.0)
        cam.up = (0.0, 1.0, 0.0)
        cam.parallel_scale = 0.5 * (1.0 + margin) * extent
        self.plotter.reset_camera_clipping_range()
