"""
Planar primitives used throughout the paving pipeline.

All geometry lives in the 2D parameter plane of the face being paved.
Points are compared with a tolerance everywhere; the only exact float
comparison is the fast path inside :func:`near_equal`, which returns
early when both coordinates match bit for bit.

The module is deliberately free of numpy so that the per-edge code paths
stay cheap for the small point counts they handle.  Vectorised work
(point membership over many boundary edges) lives in ``region``.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Point2D:
    """A point (or vector) in the face's (u, v) parameter plane."""

    u: float
    v: float

    def __iter__(self) -> Iterator[float]:
        yield self.u
        yield self.v

    def __add__(self, other: "Point2D") -> "Point2D":
        return Point2D(self.u + other.u, self.v + other.v)

    def __sub__(self, other: "Point2D") -> "Point2D":
        return Point2D(self.u - other.u, self.v - other.v)

    def __mul__(self, factor: float) -> "Point2D":
        return Point2D(self.u * factor, self.v * factor)

    __rmul__ = __mul__

    def dot(self, other: "Point2D") -> float:
        return self.u * other.u + self.v * other.v

    def cross(self, other: "Point2D") -> float:
        """Z component of the 3D cross product; positive when ``other`` is to the left."""
        return self.u * other.v - self.v * other.u

    def length(self) -> float:
        return math.hypot(self.u, self.v)

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(self.u - other.u, self.v - other.v)

    def normalized(self) -> "Point2D":
        n = self.length()
        if n == 0.0:
            raise ValueError("cannot normalise a zero-length vector")
        return Point2D(self.u / n, self.v / n)

    def as_tuple(self) -> tuple[float, float]:
        return (self.u, self.v)


def near_equal(a: Point2D, b: Point2D, tolerance: float) -> bool:
    """Return True when ``a`` and ``b`` coincide within ``tolerance``.

    Exact coordinate equality short-circuits before the distance test.
    """
    if a.u == b.u and a.v == b.v:
        return True
    return a.distance_to(b) < tolerance


def near_value(a: float, b: float, tolerance: float) -> bool:
    """Scalar counterpart of :func:`near_equal`."""
    return a == b or abs(a - b) < tolerance


@dataclass(frozen=True)
class Segment2D:
    """Directed line segment from ``start`` to ``end``."""

    start: Point2D
    end: Point2D

    @property
    def vector(self) -> Point2D:
        return self.end - self.start

    def length(self) -> float:
        return self.start.distance_to(self.end)

    def direction(self) -> Point2D:
        """Unit vector pointing from ``start`` to ``end``."""
        return self.vector.normalized()

    def midpoint(self) -> Point2D:
        return Point2D(0.5 * (self.start.u + self.end.u), 0.5 * (self.start.v + self.end.v))

    def is_degenerate(self, tolerance: float) -> bool:
        return near_equal(self.start, self.end, tolerance)

    def closest_point(self, p: Point2D) -> Point2D:
        """Project ``p`` onto the segment, clamping to its end points."""
        d = self.vector
        denom = d.dot(d)
        if denom == 0.0:
            return self.start
        t = (p - self.start).dot(d) / denom
        if t <= 0.0:
            return self.start
        if t >= 1.0:
            return self.end
        return self.start + d * t

    def distance_to_point(self, p: Point2D) -> float:
        return self.closest_point(p).distance_to(p)

    def contains_point(self, p: Point2D, tolerance: float) -> bool:
        return self.distance_to_point(p) < tolerance

    def intersect_line(self, other: "Segment2D", tolerance: float) -> Optional[Point2D]:
        """Intersect the infinite lines carrying ``self`` and ``other``.

        Returns ``None`` when the lines are parallel (including collinear).
        """
        d1 = self.vector
        d2 = other.vector
        denom = d1.cross(d2)
        scale = d1.length() * d2.length()
        if scale == 0.0 or abs(denom) <= tolerance * tolerance * scale:
            return None
        t = (other.start - self.start).cross(d2) / denom
        return self.start + d1 * t

    def intersect(self, other: "Segment2D", tolerance: float) -> Optional[Point2D]:
        """Intersect two bounded segments, accepting end points within ``tolerance``."""
        p = self.intersect_line(other, tolerance)
        if p is None:
            return None
        if self.contains_point(p, tolerance) and other.contains_point(p, tolerance):
            return p
        return None


class PointRegistry:
    """Snap points onto a growing set of canonical representatives.

    The first registered point within ``tolerance`` of a query wins; later
    near-duplicates are mapped onto it.  This is the single deduplication
    rule used by every stage so that ties are always broken in traversal
    order.

    Points are hashed into square buckets of side ``tolerance``.  Any point
    closer than ``tolerance`` to a query lies in the query's bucket or one
    of its eight neighbours, so a lookup touches a bounded number of
    candidates instead of every registered point.
    """

    def __init__(self, tolerance: float, seed: Iterable[Point2D] = ()) -> None:
        self.tolerance = tolerance
        self._points: List[Point2D] = []
        self._buckets: Dict[Tuple[int, int], List[int]] = {}
        for p in seed:
            self.register(p)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point2D]:
        return iter(self._points)

    def _bucket_key(self, p: Point2D) -> Tuple[int, int]:
        return (math.floor(p.u / self.tolerance), math.floor(p.v / self.tolerance))

    def find(self, p: Point2D) -> Optional[Point2D]:
        bu, bv = self._bucket_key(p)
        best: Optional[int] = None
        for du in (-1, 0, 1):
            for dv in (-1, 0, 1):
                for order in self._buckets.get((bu + du, bv + dv), ()):
                    if (best is None or order < best) and near_equal(p, self._points[order], self.tolerance):
                        best = order
        return None if best is None else self._points[best]

    def register(self, p: Point2D) -> Point2D:
        existing = self.find(p)
        if existing is not None:
            return existing
        self._buckets.setdefault(self._bucket_key(p), []).append(len(self._points))
        self._points.append(p)
        return p


def dedupe_consecutive(points: Sequence[Point2D], tolerance: float, closed: bool = True) -> List[Point2D]:
    """Drop points that coincide with their predecessor.

    When ``closed`` is True the last point is also compared with the first.
    """
    result: List[Point2D] = []
    for p in points:
        if result and near_equal(result[-1], p, tolerance):
            continue
        result.append(p)
    if closed:
        while len(result) > 1 and near_equal(result[-1], result[0], tolerance):
            result.pop()
    return result


def polygon_signed_area(points: Sequence[Point2D]) -> float:
    """Shoelace area; positive for counter-clockwise order."""
    n = len(points)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        p0 = points[i]
        p1 = points[(i + 1) % n]
        area += p0.u * p1.v - p1.u * p0.v
    return 0.5 * area


def remove_collinear(points: Sequence[Point2D], tolerance: float) -> List[Point2D]:
    """Collapse runs of collinear points in a closed polygon to their two ends.

    Runs are collapsed in a single stack pass; the closing seam between the
    last and first point is checked afterwards.
    """
    chain = dedupe_consecutive(points, tolerance)
    if len(chain) < 3:
        return chain
    out: List[Point2D] = []
    for p in chain:
        while len(out) >= 2 and Segment2D(out[-2], p).contains_point(out[-1], tolerance):
            out.pop()
        out.append(p)
    seam = deque(out)
    changed = True
    while changed and len(seam) > 2:
        changed = False
        if Segment2D(seam[-2], seam[0]).contains_point(seam[-1], tolerance):
            seam.pop()
            changed = True
        elif Segment2D(seam[-1], seam[1]).contains_point(seam[0], tolerance):
            seam.popleft()
            changed = True
    return list(seam)
