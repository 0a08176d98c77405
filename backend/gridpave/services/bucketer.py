"""
Per-cell bucketing of classified boundary points.

Every boundary point is assigned to the cells whose closed extent
contains it.  The candidate row and column come from floor division by
the pitch.  An exact span check then rejects points in the inter-cell
gap.  Points on a line shared by two cells (zero gap) or on a shared
corner go into every cell they touch.  Points on the far boundary of
the last row or column are clamped into it.  Gap points stay in the
loop streams but belong to no cell.

For each cell the bucketer also builds the side list.  This is the
cell's perimeter walked counter-clockwise: corner 0, the boundary points
on side 0 ordered from corner 0, corner 1, the points on side 1, and so
on.  A boundary point that coincides with a corner is not repeated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .cells import Cell2D
from .classifier import ClassifiedPoint, PointFeature
from .grid import GridBuilder
from .planar import Point2D, PointRegistry, near_equal
from .settings import CELL_VERTEX_COUNT, PaveInvariantError, PaveSettings

logger = logging.getLogger(__name__)


@dataclass
class CellBucket:
    """Boundary points belonging to one grid cell.

    ``area_points`` is consumed by the tracer; once a cell has been traced
    ``exhausted`` is set and tracing it again yields nothing.
    """

    cell: Cell2D
    area_points: List[ClassifiedPoint] = field(default_factory=list)
    side_points: List[ClassifiedPoint] = field(default_factory=list)
    corner_hits: Set[int] = field(default_factory=set)
    exhausted: bool = False

    @property
    def row(self) -> int:
        return self.cell.row

    @property
    def column(self) -> int:
        return self.cell.column

    @property
    def touches_boundary(self) -> bool:
        """True when some boundary point lies on the perimeter, not only at corners."""
        return len(self.side_points) > CELL_VERTEX_COUNT


class CellBucketer:
    """Distributes loop streams into per-cell buckets and builds side lists."""

    def __init__(self, grid: GridBuilder, settings: Optional[PaveSettings] = None) -> None:
        self.grid = grid
        self.settings = settings or grid.settings
        self.buckets: List[List[CellBucket]] = []
        self.gap_points = 0

    def bucket(self, streams: Sequence[Sequence[ClassifiedPoint]]) -> bool:
        """Fill :attr:`buckets` from the classifier's streams.  Returns False if the grid is not built."""
        if not self.grid.is_ready:
            logger.warning("Bucketing skipped: grid is not built")
            return False

        self.buckets = [[CellBucket(cell) for cell in row] for row in self.grid.cells]
        self.gap_points = 0
        for stream in streams:
            for cp in stream:
                cells = self.locate(cp.point)
                if not cells:
                    self.gap_points += 1
                    continue
                for r, c in cells:
                    self.buckets[r][c].area_points.append(cp)

        for row in self.buckets:
            for bucket in row:
                self._build_side_points(bucket)

        logger.info(
            "Bucketed boundary points into %dx%d cells (%d points in gaps or off-grid)",
            self.grid.rows,
            self.grid.columns,
            self.gap_points,
        )
        return True

    def locate(self, point: Point2D) -> List[Tuple[int, int]]:
        """Return every ``(row, column)`` whose closed cell contains ``point``."""
        grid = self.grid
        columns = self._axis_candidates(
            point.u - grid.origin.u, point.u, grid.length_pitch, grid.columns, grid.column_span
        )
        if not columns:
            return []
        rows = self._axis_candidates(
            point.v - grid.origin.v, point.v, grid.width_pitch, grid.rows, grid.row_span
        )
        return [(r, c) for r in rows for c in columns]

    def _axis_candidates(
        self,
        relative: float,
        absolute: float,
        pitch: float,
        count: int,
        span: Callable[[int], Tuple[float, float]],
    ) -> List[int]:
        tol = self.settings.tolerance
        coarse = math.floor(relative / pitch)
        found: List[int] = []
        for idx in (coarse - 1, coarse, coarse + 1):
            if idx < 0 or idx >= count:
                continue
            lo, hi = span(idx)
            if lo - tol <= absolute <= hi + tol:
                found.append(idx)
        return found

    def bucket_at(self, row: int, column: int) -> CellBucket:
        if not (0 <= row < len(self.buckets) and 0 <= column < len(self.buckets[row])):
            raise PaveInvariantError(f"no cell bucket at row={row} column={column}")
        return self.buckets[row][column]

    def _build_side_points(self, bucket: CellBucket) -> None:
        tol = self.settings.tolerance
        cell = bucket.cell
        sides = cell.sides()
        on_side: List[List[ClassifiedPoint]] = [[] for _ in range(CELL_VERTEX_COUNT)]
        seen = PointRegistry(tol)

        for cp in bucket.area_points:
            corner = next((k for k, c in enumerate(cell.corners) if near_equal(cp.point, c, tol)), None)
            if corner is not None:
                bucket.corner_hits.add(corner)
                continue
            for k, side in enumerate(sides):
                if not side.contains_point(cp.point, tol):
                    continue
                known = len(seen)
                seen.register(cp.point)
                if len(seen) > known:
                    on_side[k].append(cp)
                break

        side_points: List[ClassifiedPoint] = []
        for k, side in enumerate(sides):
            side_points.append(ClassifiedPoint(cell.corners[k], PointFeature.VERTEX))
            on_side[k].sort(key=lambda cp: side.start.distance_to(cp.point))
            side_points.extend(on_side[k])
        bucket.side_points = side_points
