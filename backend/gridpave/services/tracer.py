"""
Per-cell polygon tracing.

Given a cell's bucket the tracer reconstructs the closed polygon(s)
covering ``region ∩ cell``:

* A cell whose bucket holds no boundary point at all is either entirely
  inside or entirely outside the region; one membership test at the cell
  center decides, and an inside cell is emitted as its four corners.
* Otherwise the covered area is bounded by boundary runs through the
  cell (pairs of consecutive loop-stream points that both lie in the
  cell) and by stretches of the cell perimeter between consecutive
  side-list points that lie inside the region.  Starting from the first
  remaining boundary vertex in ``area_points``, the tracer follows the
  run to the point where it leaves the cell, then walks the side list
  counter-clockwise to the next point where a run re-enters.  It repeats
  until it is back at the start.  Where several continuations meet at one
  point the sharpest left turn wins, so sub-regions that touch at a single
  point come out as separate polygons.

Because loops are oriented with the region on their left, traced
polygons are counter-clockwise and traced holes (loops lying wholly in
the cell interior) clockwise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .bucketer import CellBucket
from .cells import Cell2D
from .classifier import ClassifiedPoint, PointFeature
from .planar import Point2D, PointRegistry, Segment2D, dedupe_consecutive, near_equal, polygon_signed_area, remove_collinear
from .region import InsidePredicate
from .settings import CELL_VERTEX_COUNT, PaveInvariantError, PaveSettings, debug_enabled

logger = logging.getLogger(__name__)


@dataclass
class CellCoverage:
    """Every portion of the region that falls inside one cell."""

    row: int
    column: int
    polygons: List[List[Point2D]] = field(default_factory=list)
    holes: List[List[Point2D]] = field(default_factory=list)
    full: bool = False

    @property
    def polygon_count(self) -> int:
        return len(self.polygons)

    def add_polygon(self, points: Sequence[Point2D]) -> None:
        self.polygons.append(list(points))

    def area(self) -> float:
        return sum(polygon_signed_area(p) for p in self.polygons) + sum(
            polygon_signed_area(h) for h in self.holes
        )


@dataclass
class _TraceEdge:
    start: Point2D
    end: Point2D
    source: Optional[ClassifiedPoint] = None
    used: bool = False

    @property
    def vector(self) -> Point2D:
        return self.end - self.start


def _turn(incoming: Point2D, outgoing: Point2D, tolerance: float) -> float:
    """Signed turn angle from ``incoming`` to ``outgoing``; a U-turn ranks last."""
    cross = incoming.cross(outgoing)
    dot = incoming.dot(outgoing)
    if dot < 0.0 and abs(cross) <= tolerance * incoming.length() * outgoing.length():
        return -math.pi
    return math.atan2(cross, dot)


class PolygonTracer:
    """Turns cell buckets into :class:`CellCoverage` results.

    Args:
        settings: Shared numeric configuration.
        is_inside: Region membership predicate for parameter-plane points.
        stream_lengths: Number of points in each classified loop stream,
            used to find the successor of a point along its loop.
    """

    def __init__(
        self,
        settings: PaveSettings,
        is_inside: InsidePredicate,
        stream_lengths: Sequence[int],
    ) -> None:
        self.settings = settings
        self.is_inside = is_inside
        self.stream_lengths = list(stream_lengths)

    def trace(self, bucket: CellBucket) -> CellCoverage:
        coverage = CellCoverage(bucket.row, bucket.column)
        if bucket.exhausted:
            return coverage

        cell = bucket.cell
        if not bucket.area_points and len(bucket.side_points) == CELL_VERTEX_COUNT:
            if self.is_inside(cell.center()):
                coverage.add_polygon(cell.vertices())
                coverage.full = True
            bucket.exhausted = True
            return coverage

        registry = PointRegistry(self.settings.tolerance, seed=cell.corners)
        boundary_edges, along_sides = self._boundary_edges(bucket, registry)
        perimeter_edges = self._perimeter_edges(bucket, registry, along_sides)
        outgoing: Dict[Point2D, List[_TraceEdge]] = {}
        for edge in boundary_edges + perimeter_edges:
            outgoing.setdefault(edge.start, []).append(edge)
        by_source = {edge.source.key: edge for edge in boundary_edges if edge.source is not None}
        total = len(boundary_edges) + len(perimeter_edges)

        for seed in self._seed_order(bucket, by_source, boundary_edges, perimeter_edges):
            if seed.used:
                continue
            cycle = self._walk(seed, outgoing, total)
            self._emit(coverage, cycle)

        # Every run has been walked; the work queue is spent.
        bucket.area_points.clear()
        bucket.exhausted = True
        self._mark_full(coverage, cell)
        if debug_enabled():
            logger.debug(
                "Cell (%d, %d): %d polygons, %d holes",
                coverage.row,
                coverage.column,
                len(coverage.polygons),
                len(coverage.holes),
            )
        return coverage

    def _boundary_edges(
        self, bucket: CellBucket, registry: PointRegistry
    ) -> Tuple[List[_TraceEdge], List[Segment2D]]:
        """Boundary runs inside the cell, plus every boundary stretch lying on a side."""
        tol = self.settings.tolerance
        cell = bucket.cell
        sides = cell.sides()
        # Register side points first so perimeter and boundary edges share end points.
        for cp in bucket.side_points:
            registry.register(cp.point)
        members = {cp.key: cp for cp in bucket.area_points}

        edges: List[_TraceEdge] = []
        along_sides: List[Segment2D] = []
        for cp in bucket.area_points:
            if cp.loop < 0 or cp.loop >= len(self.stream_lengths):
                raise PaveInvariantError(f"boundary point {cp} does not belong to a loop stream")
            successor = members.get((cp.loop, (cp.index + 1) % self.stream_lengths[cp.loop]))
            if successor is None:
                continue
            start = registry.register(cp.point)
            end = registry.register(successor.point)
            if start == end:
                continue
            side = next(
                (s for s in sides if s.contains_point(start, tol) and s.contains_point(end, tol)),
                None,
            )
            if side is not None:
                along_sides.append(Segment2D(start, end))
                if (end - start).dot(side.vector) <= 0.0:
                    # Region lies outside the cell along this stretch.
                    continue
            edges.append(_TraceEdge(start, end, cp))
        return edges, along_sides

    def _perimeter_edges(
        self, bucket: CellBucket, registry: PointRegistry, along_sides: List[Segment2D]
    ) -> List[_TraceEdge]:
        """Perimeter stretches between consecutive side points that are covered by the region."""
        tol = self.settings.tolerance
        ring = dedupe_consecutive([registry.register(cp.point) for cp in bucket.side_points], tol)
        edges: List[_TraceEdge] = []
        for i, start in enumerate(ring):
            end = ring[(i + 1) % len(ring)]
            mid = Segment2D(start, end).midpoint()
            if any(seg.contains_point(mid, tol) for seg in along_sides):
                continue
            if self.is_inside(mid):
                edges.append(_TraceEdge(start, end))
        return edges

    @staticmethod
    def _seed_order(
        bucket: CellBucket,
        by_source: Dict[Tuple[int, int], _TraceEdge],
        boundary_edges: List[_TraceEdge],
        perimeter_edges: List[_TraceEdge],
    ) -> Iterator[_TraceEdge]:
        """Candidate start edges, best first: boundary vertices, other runs, then perimeter stretches.

        Edges consumed by an earlier walk are still yielded; the caller skips them.
        """
        for cp in bucket.area_points:
            if cp.feature is PointFeature.VERTEX:
                edge = by_source.get(cp.key)
                if edge is not None:
                    yield edge
        yield from boundary_edges
        yield from perimeter_edges

    def _walk(self, seed: _TraceEdge, outgoing: Dict[Point2D, List[_TraceEdge]], limit: int) -> List[Point2D]:
        tol = self.settings.tolerance
        origin = seed.start
        cycle = [origin]
        seed.used = True
        current = seed
        while current.end != origin:
            vertex = current.end
            cycle.append(vertex)
            candidates = [e for e in outgoing.get(vertex, ()) if not e.used]
            if not candidates or len(cycle) > limit:
                raise PaveInvariantError(f"polygon trace from {origin} is open at {vertex}")
            incoming = current.vector
            current = max(candidates, key=lambda e: _turn(incoming, e.vector, tol))
            current.used = True
        return cycle

    def _emit(self, coverage: CellCoverage, cycle: List[Point2D]) -> None:
        tol = self.settings.tolerance
        polygon = remove_collinear(cycle, tol)
        area = polygon_signed_area(polygon)
        if len(polygon) < 3 or abs(area) <= tol * tol:
            logger.debug("Dropping degenerate trace in cell (%d, %d)", coverage.row, coverage.column)
            return
        if area > 0.0:
            coverage.polygons.append(polygon)
        else:
            coverage.holes.append(polygon)

    def _mark_full(self, coverage: CellCoverage, cell: Cell2D) -> None:
        tol = self.settings.tolerance
        if len(coverage.polygons) != 1 or coverage.holes:
            return
        polygon = coverage.polygons[0]
        if len(polygon) != CELL_VERTEX_COUNT:
            return
        if all(any(near_equal(p, c, tol) for p in polygon) for c in cell.corners):
            coverage.polygons[0] = cell.vertices()
            coverage.full = True
