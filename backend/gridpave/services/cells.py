"""
Grid cell shapes.

A grid cell is a rectangle whose corners are stored counter-clockwise,
starting at the bottom-left corner::

    3 ........ 2
      .      .
      .      .
    0 ........ 1

Side ``k`` runs from corner ``k`` to corner ``(k + 1) % 4``.  The side
index is how the bucketer records that a boundary point lies on a
cell's perimeter.

Two concrete variants share the :class:`CellShape` capability
interface: :class:`Cell2D` lives in the face's parameter plane and is
what the pipeline computes with, :class:`Cell3D` is the same rectangle
embedded in model space for consumers that place physical tiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

import numpy as np

from .planar import Point2D, Segment2D
from .settings import CELL_VERTEX_COUNT

Vec3 = Tuple[float, float, float]


class CellShape(Protocol):
    """Capabilities shared by 2D and 3D cells."""

    def vertices(self) -> list: ...

    def center(self): ...

    def area(self) -> float: ...


@dataclass(frozen=True)
class Cell2D:
    """Rectangular grid cell in the (u, v) parameter plane."""

    corners: Tuple[Point2D, Point2D, Point2D, Point2D]
    row: int = 0
    column: int = 0

    def __post_init__(self) -> None:
        if len(self.corners) != CELL_VERTEX_COUNT:
            raise ValueError(f"a cell needs {CELL_VERTEX_COUNT} corners, got {len(self.corners)}")

    @classmethod
    def from_location(
        cls,
        location: Point2D,
        length_direction: Point2D,
        width_direction: Point2D,
        length: float,
        width: float,
        row: int = 0,
        column: int = 0,
    ) -> "Cell2D":
        """Build a cell from its corner 0, the two edge directions and its size."""
        if length <= 0.0 or width <= 0.0:
            raise ValueError("cell length and width must be positive")
        along = length_direction.normalized() * length
        across = width_direction.normalized() * width
        c1 = location + along
        return cls((location, c1, c1 + across, location + across), row, column)

    def vertices(self) -> List[Point2D]:
        return list(self.corners)

    def center(self) -> Point2D:
        u = sum(c.u for c in self.corners) / CELL_VERTEX_COUNT
        v = sum(c.v for c in self.corners) / CELL_VERTEX_COUNT
        return Point2D(u, v)

    def area(self) -> float:
        return self.corners[0].distance_to(self.corners[1]) * self.corners[1].distance_to(self.corners[2])

    def side(self, index: int) -> Segment2D:
        return Segment2D(self.corners[index], self.corners[(index + 1) % CELL_VERTEX_COUNT])

    def sides(self) -> List[Segment2D]:
        return [self.side(k) for k in range(CELL_VERTEX_COUNT)]


@dataclass(frozen=True)
class Cell3D:
    """Rectangular cell embedded in 3D model space."""

    corners: Tuple[Vec3, Vec3, Vec3, Vec3]
    row: int = 0
    column: int = 0

    @classmethod
    def from_location(
        cls,
        location: Sequence[float],
        length_direction: Sequence[float],
        width_direction: Sequence[float],
        length: float,
        width: float,
        row: int = 0,
        column: int = 0,
    ) -> "Cell3D":
        if length <= 0.0 or width <= 0.0:
            raise ValueError("cell length and width must be positive")
        origin = np.asarray(location, dtype=float)
        along = _unit(length_direction) * length
        across = _unit(width_direction) * width
        pts = [origin, origin + along, origin + along + across, origin + across]
        return cls(tuple(_as_vec3(p) for p in pts), row, column)  # type: ignore[arg-type]

    def vertices(self) -> List[Vec3]:
        return list(self.corners)

    def center(self) -> Vec3:
        return _as_vec3(np.mean(np.asarray(self.corners, dtype=float), axis=0))

    def area(self) -> float:
        c = np.asarray(self.corners, dtype=float)
        return float(np.linalg.norm(c[1] - c[0]) * np.linalg.norm(c[2] - c[1]))


def _unit(vector: Sequence[float]) -> np.ndarray:
    arr = np.asarray(vector, dtype=float)
    n = float(np.linalg.norm(arr))
    if n == 0.0:
        raise ValueError("direction vector must be non-zero")
    return arr / n


def _as_vec3(p: np.ndarray) -> Vec3:
    return (float(p[0]), float(p[1]), float(p[2]))


def lift_cell(
    cell: Cell2D,
    origin: Sequence[float],
    u_axis: Sequence[float],
    v_axis: Sequence[float],
) -> Cell3D:
    """Map a parameter-plane cell onto the 3D plane ``origin + u*u_axis + v*v_axis``."""
    o = np.asarray(origin, dtype=float)
    ua = np.asarray(u_axis, dtype=float)
    va = np.asarray(v_axis, dtype=float)
    corners = tuple(_as_vec3(o + c.u * ua + c.v * va) for c in cell.corners)
    return Cell3D(corners, cell.row, cell.column)  # type: ignore[arg-type]
