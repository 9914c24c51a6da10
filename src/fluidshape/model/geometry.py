"""
Cross-Section Geometry
======================
Turns the numeric parameter view into the 5-vertex profile polygon and
derives the section properties from it.

The vertex order is fixed:

    (0, 0) -> (A, 0) -> (A, D) -> (E, B) -> (0, C) -> back to (0, 0)

Simplicity of the loop is not checked. For self-intersecting parameter
combinations the shoelace formulas still run, but area and centroid lose
their usual meaning.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict, Mapping, Tuple, TYPE_CHECKING

import numpy as np

from fluidshape.model.parameters import effective_length

if TYPE_CHECKING:
    import numpy.typing as npt

MM_PER_M = 1000.0
MM3_PER_M3 = 1e9


@dataclass(frozen=True)
class AnalysisResult:
    area: float  # mm^2
    perimeter: float  # mm
    hydraulic_radius: float  # mm
    volume: float  # mm^3
    mass: float  # kg
    centroid: Tuple[float, float]  # mm, mm
    effective_length: float  # m
    vertices: Tuple[Tuple[float, float], ...]

    def summary(self) -> Dict[str, str]:
        """Formatted values of the metric cards."""
        return {
            "area": f"{self.area:.1f}",
            "hydraulic_radius": f"{self.hydraulic_radius:.2f}",
            "volume_cm3": f"{self.volume / 1000.0:.0f}",
            "mass": f"{self.mass:.3f}",
            "effective_length": f"{self.effective_length:.3f}",
        }

    def area_snapshot(self) -> str:
        """Area as stored with a saved profile."""
        return f"{self.area:.2f}"


def build_polygon(numeric: Mapping[str, float]) -> npt.NDArray[np.float64]:
    """Return the (5, 2) vertex array of the profile."""
    a, b, c, d, e = (numeric.get(k, 0.0) for k in ("A", "B", "C", "D", "E"))
    return np.array([
        (0.0, 0.0),
        (a, 0.0),
        (a, d),
        (e, b),
        (0.0, c),
    ], dtype=np.float64)


def _cross_terms(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """x_i * y_{i+1} - x_{i+1} * y_i for every cyclic edge."""
    nxt = np.roll(points, -1, axis=0)
    return points[:, 0] * nxt[:, 1] - nxt[:, 0] * points[:, 1]


def signed_area(points: npt.NDArray[np.float64]) -> float:
    """Shoelace area, positive for counter-clockwise loops."""
    return float(np.sum(_cross_terms(points)) / 2.0)


def perimeter(points: npt.NDArray[np.float64]) -> float:
    edges = np.roll(points, -1, axis=0) - points
    return float(np.sum(np.linalg.norm(edges, axis=1)))


def centroid(points: npt.NDArray[np.float64]) -> Tuple[float, float]:
    """
    Polygon centroid, reported as absolute coordinates.

    A zero-area polygon has its centroid at (0, 0).
    """
    area = signed_area(points)
    if area == 0.0:
        return 0.0, 0.0

    nxt = np.roll(points, -1, axis=0)
    cross = _cross_terms(points)
    cx = float(np.sum((points[:, 0] + nxt[:, 0]) * cross)) / (6.0 * area)
    cy = float(np.sum((points[:, 1] + nxt[:, 1]) * cross)) / (6.0 * area)
    # Sign is dropped on purpose; saved profiles were always displayed this way.
    return abs(cx), abs(cy)


def hydraulic_radius(area: float, wetted_perimeter: float) -> float:
    if wetted_perimeter == 0.0:
        return 0.0
    rh = area / wetted_perimeter
    return rh if math.isfinite(rh) else 0.0


def analyze(numeric: Mapping[str, float]) -> AnalysisResult:
    """
    Compute all section properties for a numeric parameter view.

    Args:
        numeric: Mapping of the parameter keys to floats (see
            `ParameterSet.numeric_view`).

    Returns:
        AnalysisResult with zero-valued outputs for degenerate input.
    """
    points = build_polygon(numeric)

    area = abs(signed_area(points))
    length_m = effective_length(numeric)
    per = perimeter(points)
    volume = area * length_m * MM_PER_M
    mass = (volume / MM3_PER_M3) * numeric.get("rho", 0.0)

    return AnalysisResult(
        area=area,
        perimeter=per,
        hydraulic_radius=hydraulic_radius(area, per),
        volume=volume,
        mass=mass,
        centroid=centroid(points),
        effective_length=length_m,
        vertices=tuple((float(x), float(y)) for x, y in points),
    )
