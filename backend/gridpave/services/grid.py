"""
Grid construction over the bounding rectangle of a face.

The rectangle is given by its two extreme points in parameter space and
is always axis aligned there: the length direction is ``+u`` and the
width direction is ``+v``.  Cells are laid out row-major from the
rectangle's bottom-left corner with a constant pitch of ``length + gap``
along ``u`` and ``width + gap`` along ``v``.  The last row and column may
overhang the rectangle; the classifier and bucketer cope with that.

Besides the cells the builder derives the grid lines used as
intersection targets: ``column_lines[2k]`` / ``column_lines[2k + 1]`` are
the left / right boundary of column ``k`` spanning every row, and
``row_lines[2r]`` / ``row_lines[2r + 1]`` the bottom / top boundary of
row ``r`` spanning every column.
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .cells import Cell2D
from .planar import Point2D, Segment2D
from .settings import PaveSettings

logger = logging.getLogger(__name__)


class LineAxis(str, Enum):
    """Which family a grid line belongs to."""

    COLUMN = "column"  # constant u, runs along v
    ROW = "row"  # constant v, runs along u


@dataclass(frozen=True)
class GridLine:
    """One cell boundary line of the grid.

    Attributes:
        segment: The line's extent across the whole grid.
        axis: Column lines have constant ``u``; row lines constant ``v``.
        offset: The constant coordinate (``u`` or ``v``) of the line.
        index: Position in ``column_lines`` / ``row_lines``.
    """

    segment: Segment2D
    axis: LineAxis
    offset: float
    index: int


def cell_count(extent: float, dim: float, gap: float, tolerance: float = 0.0) -> int:
    """Return how many cells of size ``dim`` separated by ``gap`` cover ``extent``.

    The result is the smallest ``n`` with ``n * (dim + gap) - gap >= extent``:
    as many full pitches as fit, one more cell for any remainder and one
    more again if the remainder reaches into the trailing gap.
    """
    if extent <= 0.0 or dim <= 0.0 or gap < 0.0:
        raise ValueError(f"invalid cell_count arguments extent={extent} dim={dim} gap={gap}")
    pitch = dim + gap
    full = math.floor(extent / pitch)
    remainder = extent - full * pitch
    count = full
    if remainder > tolerance:
        count += 1
    if count * pitch - gap < extent - tolerance:
        count += 1
    return max(count, 1)


def rectangle_corners(bounds: Sequence[Point2D]) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
    """Expand ``(min, max)`` extreme points into four counter-clockwise corners.

    Four corners are accepted as well and returned unchanged.
    """
    if len(bounds) == 4:
        c0, c1, c2, c3 = bounds
        return (c0, c1, c2, c3)
    if len(bounds) != 2:
        raise ValueError("rectangle must be given as (min, max) or four corners")
    lo, hi = bounds
    if hi.u < lo.u or hi.v < lo.v:
        raise ValueError(f"rectangle max {hi} is below min {lo}")
    return (lo, Point2D(hi.u, lo.v), hi, Point2D(lo.u, hi.v))


class GridBuilder:
    """Builds the cell array and grid lines for one gap/length/width setting.

    Construction only stores the configuration; call :meth:`build` to
    compute the grid.  :meth:`reset` swaps the configuration and discards
    everything derived from the previous one.
    """

    def __init__(
        self,
        bounds: Sequence[Point2D],
        gap: float,
        length: float,
        width: float,
        settings: Optional[PaveSettings] = None,
    ) -> None:
        self.settings = settings or PaveSettings()
        self.reset(bounds, gap, length, width)

    def reset(self, bounds: Sequence[Point2D], gap: float, length: float, width: float) -> None:
        self.corners = rectangle_corners(bounds)
        # Sub-epsilon gaps are treated as no gap at all.
        self.gap = 0.0 if gap < sys.float_info.epsilon else float(gap)
        self.length = float(length)
        self.width = float(width)
        self.rows = 0
        self.columns = 0
        self.cells: List[List[Cell2D]] = []
        self.column_lines: List[GridLine] = []
        self.row_lines: List[GridLine] = []
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def origin(self) -> Point2D:
        return self.corners[0]

    @property
    def length_direction(self) -> Point2D:
        return (self.corners[1] - self.corners[0]).normalized()

    @property
    def width_direction(self) -> Point2D:
        return (self.corners[3] - self.corners[0]).normalized()

    @property
    def length_pitch(self) -> float:
        return self.length + self.gap

    @property
    def width_pitch(self) -> float:
        return self.width + self.gap

    def build(self) -> bool:
        """Compute cells and grid lines.  Returns False for invalid settings."""
        self._ready = False
        if self.length <= 0.0 or self.width <= 0.0:
            logger.warning(
                "Grid not built: cell length=%s width=%s must be positive", self.length, self.width
            )
            return False

        extent_u = self.corners[0].distance_to(self.corners[1])
        extent_v = self.corners[0].distance_to(self.corners[3])
        floor_dim = self.settings.min_dimension
        if extent_u < floor_dim or extent_v < floor_dim or extent_u == 0.0 or extent_v == 0.0:
            logger.warning(
                "Grid not built: rectangle %.6gx%.6g is below the minimum dimension %.6g",
                extent_u,
                extent_v,
                floor_dim,
            )
            return False

        tol = self.settings.tolerance
        self.columns = cell_count(extent_u, self.length, self.gap, tol)
        self.rows = cell_count(extent_v, self.width, self.gap, tol)

        length_dir = self.length_direction
        width_dir = self.width_direction
        self.cells = []
        for r in range(self.rows):
            row_cells: List[Cell2D] = []
            row_start = self.origin + width_dir * (r * self.width_pitch)
            for c in range(self.columns):
                location = row_start + length_dir * (c * self.length_pitch)
                row_cells.append(
                    Cell2D.from_location(location, length_dir, width_dir, self.length, self.width, r, c)
                )
            self.cells.append(row_cells)

        self._build_lines()
        self._ready = True
        logger.info(
            "Grid built: %d rows x %d columns (length=%s width=%s gap=%s)",
            self.rows,
            self.columns,
            self.length,
            self.width,
            self.gap,
        )
        return True

    def _build_lines(self) -> None:
        first_row = self.cells[0]
        last_row = self.cells[-1]
        self.column_lines = []
        for c in range(self.columns):
            bottom, top = first_row[c], last_row[c]
            left = Segment2D(bottom.corners[0], top.corners[3])
            right = Segment2D(bottom.corners[1], top.corners[2])
            self.column_lines.append(GridLine(left, LineAxis.COLUMN, left.start.u, 2 * c))
            self.column_lines.append(GridLine(right, LineAxis.COLUMN, right.start.u, 2 * c + 1))

        self.row_lines = []
        for r in range(self.rows):
            first, last = self.cells[r][0], self.cells[r][-1]
            lower = Segment2D(first.corners[0], last.corners[1])
            upper = Segment2D(first.corners[3], last.corners[2])
            self.row_lines.append(GridLine(lower, LineAxis.ROW, lower.start.v, 2 * r))
            self.row_lines.append(GridLine(upper, LineAxis.ROW, upper.start.v, 2 * r + 1))

    def cell(self, row: int, column: int) -> Cell2D:
        return self.cells[row][column]

    def column_span(self, column: int) -> Tuple[float, float]:
        """``u`` range ``(left, right)`` of a column."""
        return (self.column_lines[2 * column].offset, self.column_lines[2 * column + 1].offset)

    def row_span(self, row: int) -> Tuple[float, float]:
        """``v`` range ``(bottom, top)`` of a row."""
        return (self.row_lines[2 * row].offset, self.row_lines[2 * row + 1].offset)
