"""
Boundary classification against the grid lines.

For each boundary loop the classifier walks the edges in stored order
and produces one stream of :class:`ClassifiedPoint` objects containing
every original vertex and every crossing with a grid line, ordered along
the loop.  Each point is tagged:

- ``VERTEX``: an original boundary vertex that lies on no grid line.
- ``INTERSECTION``: a crossing of a boundary edge with a grid line.
- ``VERTEX_AND_HIT``: an original vertex that also lies on a grid line.
  It appears exactly once in the stream.

Crossings are computed per axis.  Only lines whose offset lies within
the edge's coordinate range on that axis are tested.  Both per-axis
lists are already ordered along the edge, so they are merged rather
than re-sorted.  Crossings that coincide with the edge's start are folded
into the start vertex.  Crossings that coincide with the edge's end are
dropped, because the next edge emits that point as its start.
"""

from __future__ import annotations

import bisect
import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .grid import GridBuilder, GridLine, LineAxis
from .planar import Point2D, Segment2D, near_equal, near_value
from .settings import PaveInvariantError, PaveSettings, debug_enabled

logger = logging.getLogger(__name__)


class PointFeature(str, Enum):
    VERTEX = "vertex"
    INTERSECTION = "intersection"
    VERTEX_AND_HIT = "vertex_and_hit"


@dataclass(frozen=True)
class ClassifiedPoint:
    """A boundary point with its feature tag and position in its loop stream.

    ``loop`` and ``index`` identify the point inside
    ``BoundaryClassifier.streams``; cell corners added by the bucketer use
    ``-1`` for both.
    """

    point: Point2D
    feature: PointFeature
    loop: int = -1
    index: int = -1

    @property
    def is_hit(self) -> bool:
        """True for points produced by a grid-line crossing."""
        return self.feature is not PointFeature.VERTEX

    @property
    def key(self) -> Tuple[int, int]:
        return (self.loop, self.index)


class BoundaryClassifier:
    """Computes the classified point stream of every boundary loop."""

    def __init__(self, grid: GridBuilder, settings: Optional[PaveSettings] = None) -> None:
        self.grid = grid
        self.settings = settings or grid.settings
        self.streams: List[List[ClassifiedPoint]] = []
        self.skipped_edges = 0

    def classify(self, loops: Sequence[Sequence[Point2D]]) -> bool:
        """Populate :attr:`streams`.  Returns False when there is nothing to classify."""
        self.streams = []
        self.skipped_edges = 0
        if not self.grid.is_ready:
            logger.warning("Boundary classification skipped: grid is not built")
            return False
        if not loops:
            logger.warning("Boundary classification skipped: no boundary loops")
            return False

        for loop_idx, loop in enumerate(loops):
            tagged = self._classify_loop(loop)
            self.streams.append(
                [ClassifiedPoint(p, feature, loop_idx, i) for i, (p, feature) in enumerate(tagged)]
            )
        logger.info(
            "Classified %d loops into %d boundary points (%d degenerate edges skipped)",
            len(self.streams),
            sum(len(s) for s in self.streams),
            self.skipped_edges,
        )
        return True

    def _classify_loop(self, loop: Sequence[Point2D]) -> List[Tuple[Point2D, PointFeature]]:
        tol = self.settings.tolerance
        n = len(loop)
        tagged: List[Tuple[Point2D, PointFeature]] = []
        for i in range(n):
            start, end = loop[i], loop[(i + 1) % n]
            if near_equal(start, end, tol):
                self.skipped_edges += 1
                logger.debug("Skipping zero-length boundary edge at %s", start)
                continue
            tagged.extend(self.classify_edge(start, end))
        return tagged

    def classify_edge(self, start: Point2D, end: Point2D) -> List[Tuple[Point2D, PointFeature]]:
        """Tag the start vertex of an edge and every grid crossing up to (not including) its end."""
        tol = self.settings.tolerance
        edge = Segment2D(start, end)
        column_hits, start_on_column = self._axis_hits(edge, self.grid.column_lines, lambda p: p.u)
        row_hits, start_on_row = self._axis_hits(edge, self.grid.row_lines, lambda p: p.v)
        start_is_hit = start_on_column or start_on_row

        merged = self._merge_hits(start, column_hits, row_hits)

        if merged and near_equal(merged[0], start, tol):
            merged.pop(0)
            start_is_hit = True
        while merged and near_equal(merged[-1], end, tol):
            merged.pop()

        feature = PointFeature.VERTEX_AND_HIT if start_is_hit else PointFeature.VERTEX
        result: List[Tuple[Point2D, PointFeature]] = [(start, feature)]
        result.extend((p, PointFeature.INTERSECTION) for p in merged)
        if debug_enabled():
            logger.debug("Edge %s -> %s: %d crossings, start %s", start, end, len(merged), feature.value)
        return result

    def _axis_hits(
        self,
        edge: Segment2D,
        lines: Sequence[GridLine],
        coord: Callable[[Point2D], float],
    ) -> Tuple[List[Point2D], bool]:
        """Crossings of ``edge`` with one family of grid lines.

        Returns the crossings ordered from the edge's start towards its end
        and whether the edge runs exactly along one of the lines.  In that case
        the start vertex is the only point this axis contributes.
        """
        tol = self.settings.tolerance
        a, b = coord(edge.start), coord(edge.end)
        offsets = [line.offset for line in lines]

        if near_value(a, b, tol):
            lo_idx = bisect.bisect_left(offsets, a - tol)
            on_line = lo_idx < len(offsets) and near_value(offsets[lo_idx], a, tol)
            return [], on_line

        lo, hi = (a, b) if a < b else (b, a)
        first = bisect.bisect_left(offsets, lo - tol)
        last = bisect.bisect_right(offsets, hi + tol)
        hits: List[Point2D] = []
        previous: Optional[float] = None
        for line in lines[first:last]:
            if previous is not None and near_value(previous, line.offset, tol):
                # Coincident lines of adjacent cells when the gap is zero.
                continue
            previous = line.offset
            p = edge.intersect_line(line.segment, tol)
            if p is None:
                raise PaveInvariantError(
                    f"{line.axis.value} line {line.index} at {line.offset} selected for edge "
                    f"{edge.start} -> {edge.end} but does not intersect it"
                )
            if line.axis is LineAxis.COLUMN:
                hits.append(Point2D(line.offset, p.v))
            else:
                hits.append(Point2D(p.u, line.offset))
        if a > b:
            hits.reverse()
        return hits, False

    def _merge_hits(self, start: Point2D, column_hits: List[Point2D], row_hits: List[Point2D]) -> List[Point2D]:
        """Merge both per-axis crossing lists by distance from ``start``.

        A crossing through a grid corner shows up once per axis; the pair is
        collapsed into the exact corner point.
        """
        tol = self.settings.tolerance
        tagged = heapq.merge(
            ((p, LineAxis.COLUMN) for p in column_hits),
            ((p, LineAxis.ROW) for p in row_hits),
            key=lambda item: start.distance_to(item[0]),
        )
        merged: List[Tuple[Point2D, LineAxis]] = []
        for p, axis in tagged:
            if merged and near_equal(merged[-1][0], p, tol):
                prev, prev_axis = merged[-1]
                if prev_axis is not axis:
                    col, row = (prev, p) if prev_axis is LineAxis.COLUMN else (p, prev)
                    merged[-1] = (Point2D(col.u, row.v), prev_axis)
                continue
            merged.append((p, axis))
        return [p for p, _ in merged]
