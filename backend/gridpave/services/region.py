"""
The planar region being paved: an outer boundary loop plus optional holes.

Loops arrive from the geometry collaborator as ordered 2D vertex lists,
each implicitly closed.  Their winding is not guaranteed, so the region
normalises it once on construction: the outer loop becomes
counter-clockwise and every hole clockwise.  With that convention the
region interior always lies to the left of each boundary edge, which is
what the tracer relies on when deciding which side of a cell-aligned
boundary edge is covered.

Point membership uses the even-odd rule over all loops at once, so it
does not depend on winding.  It is vectorised with numpy because the
tracer evaluates it for many cell-side midpoints.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from .planar import Point2D, polygon_signed_area

logger = logging.getLogger(__name__)

InsidePredicate = Callable[[Point2D], bool]


def as_point(p) -> Point2D:
    """Coerce a ``Point2D`` or an ``(u, v)`` pair into a ``Point2D``."""
    if isinstance(p, Point2D):
        return p
    u, v = p
    return Point2D(float(u), float(v))


def orient_loops(loops: Sequence[List[Point2D]]) -> List[List[Point2D]]:
    """Return copies of *loops* with the outer loop CCW and holes CW.

    Loops with fewer than three points are passed through unchanged.
    """
    oriented: List[List[Point2D]] = []
    for idx, loop in enumerate(loops):
        if len(loop) < 3:
            oriented.append(list(loop))
            continue
        area = polygon_signed_area(loop)
        want_ccw = idx == 0
        if (area < 0.0 and want_ccw) or (area > 0.0 and not want_ccw):
            logger.debug("Reversing loop %d (signed area %.6g)", idx, area)
            oriented.append(list(reversed(loop)))
        else:
            oriented.append(list(loop))
    return oriented


class BoundaryRegion:
    """Outer boundary loop and hole loops of a face in parameter space."""

    def __init__(self, loops: Iterable[Iterable], orient: bool = True) -> None:
        raw = [[as_point(p) for p in loop] for loop in loops]
        if not raw or len(raw[0]) < 3:
            raise ValueError("the outer boundary loop needs at least three vertices")
        for loop in raw:
            for p in loop:
                if not (math.isfinite(p.u) and math.isfinite(p.v)):
                    raise ValueError(f"non-finite boundary coordinate {p}")
        self.loops: List[List[Point2D]] = orient_loops(raw) if orient else raw
        self._edges = self._edge_array()

    @property
    def outer(self) -> List[Point2D]:
        return self.loops[0]

    @property
    def holes(self) -> List[List[Point2D]]:
        return self.loops[1:]

    def bounds(self) -> tuple[Point2D, Point2D]:
        """Axis-aligned ``(min, max)`` extreme points of the outer loop."""
        us = [p.u for p in self.outer]
        vs = [p.v for p in self.outer]
        return Point2D(min(us), min(vs)), Point2D(max(us), max(vs))

    def area(self) -> float:
        """Covered area: outer loop minus holes."""
        return sum(polygon_signed_area(loop) for loop in self.loops)

    def _edge_array(self) -> np.ndarray:
        rows = []
        for loop in self.loops:
            n = len(loop)
            for i in range(n):
                a, b = loop[i], loop[(i + 1) % n]
                rows.append((a.u, a.v, b.u, b.v))
        return np.asarray(rows, dtype=float).reshape(-1, 4)

    def contains_many(self, points: Sequence[Point2D]) -> np.ndarray:
        """Vectorised even-odd membership test for several points."""
        if not len(points):
            return np.zeros(0, dtype=bool)
        pts = np.asarray([(p.u, p.v) for p in points], dtype=float)
        x1, y1, x2, y2 = (self._edges[:, k][np.newaxis, :] for k in range(4))
        px = pts[:, 0][:, np.newaxis]
        py = pts[:, 1][:, np.newaxis]
        straddles = (y1 > py) != (y2 > py)
        with np.errstate(divide="ignore", invalid="ignore"):
            x_cross = x1 + (py - y1) * (x2 - x1) / (y2 - y1)
        crossings = np.count_nonzero(straddles & (px < x_cross), axis=1)
        return (crossings % 2) == 1

    def is_inside(self, point: Point2D) -> bool:
        """Even-odd membership of a single point (boundary points are unspecified)."""
        return bool(self.contains_many([point])[0])


def make_inside_predicate(region: BoundaryRegion, external: Optional[InsidePredicate] = None) -> InsidePredicate:
    """Prefer the collaborator's predicate and fall back to the region's own test."""
    return external if external is not None else region.is_inside
