"""
Orchestration of the paving pipeline for one face.

``PaveManager`` owns the immutable inputs (boundary loops, bounding
rectangle, inside predicate, settings) and the per-configuration derived
state.  Each call to :meth:`PaveManager.pave` rebuilds everything from
scratch in the fixed order grid -> classification -> bucketing ->
tracing; a phase reporting failure stops the run and leaves no partial
result behind.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, List, Optional, Sequence, Tuple

from .bucketer import CellBucketer
from .classifier import BoundaryClassifier
from .grid import GridBuilder
from .planar import Point2D
from .region import BoundaryRegion, InsidePredicate, as_point, make_inside_predicate
from .settings import PaveSettings
from .tracer import CellCoverage, PolygonTracer

logger = logging.getLogger(__name__)


class PaveManager:
    """Tiles a region with a gapped grid and clips every cell against it.

    Args:
        loops: Boundary loops as point sequences; the first is the outer
            boundary, the rest are holes.
        gap: Spacing between adjacent cells (>= 0).
        length: Cell size along ``u`` (> 0).
        width: Cell size along ``v`` (> 0).
        bounds: ``(min, max)`` extreme points of the rectangle to tile.  The
            outer loop's bounding box is used when omitted.
        settings: Shared numeric configuration.
        is_inside: Optional membership predicate supplied by the geometry
            collaborator; the region's own even-odd test is used otherwise.
    """

    def __init__(
        self,
        loops: Iterable[Iterable],
        gap: float,
        length: float,
        width: float,
        bounds: Optional[Sequence] = None,
        settings: Optional[PaveSettings] = None,
        is_inside: Optional[InsidePredicate] = None,
    ) -> None:
        self.settings = settings or PaveSettings()
        self.region = BoundaryRegion(loops)
        self.bounds: List[Point2D] = (
            [as_point(p) for p in bounds] if bounds is not None else list(self.region.bounds())
        )
        self.is_inside = make_inside_predicate(self.region, is_inside)
        self.grid = GridBuilder(self.bounds, gap, length, width, self.settings)
        self.classifier: Optional[BoundaryClassifier] = None
        self.bucketer: Optional[CellBucketer] = None
        self.coverage: List[List[CellCoverage]] = []
        self.timings: dict = {}

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def columns(self) -> int:
        return self.grid.columns

    def configure(self, gap: float, length: float, width: float) -> bool:
        """Switch to a new cell configuration, discarding all derived state."""
        self.grid.reset(self.bounds, gap, length, width)
        self._discard()
        return self.grid.build()

    def _discard(self) -> None:
        self.classifier = None
        self.bucketer = None
        self.coverage = []
        self.timings = {}

    def pave(self) -> bool:
        """Run the full pipeline.  Returns False when any phase fails."""
        self._discard()
        t0 = time.perf_counter()
        if not self.grid.build():
            return False
        t1 = time.perf_counter()

        classifier = BoundaryClassifier(self.grid, self.settings)
        if not classifier.classify(self.region.loops):
            return False
        t2 = time.perf_counter()

        bucketer = CellBucketer(self.grid, self.settings)
        if not bucketer.bucket(classifier.streams):
            return False
        t3 = time.perf_counter()

        tracer = PolygonTracer(self.settings, self.is_inside, [len(s) for s in classifier.streams])
        coverage = [[tracer.trace(bucket) for bucket in row] for row in bucketer.buckets]
        t4 = time.perf_counter()

        self.classifier = classifier
        self.bucketer = bucketer
        self.coverage = coverage
        self.timings = {
            "grid": t1 - t0,
            "classify": t2 - t1,
            "bucket": t3 - t2,
            "trace": t4 - t3,
        }
        logger.info(
            "Paved %dx%d grid: %d polygons (%d full cells) in %.3fs",
            self.rows,
            self.columns,
            self.polygon_count(),
            sum(1 for row in coverage for cov in row if cov.full),
            t4 - t0,
        )
        return True

    def polygons(self) -> List[List[Tuple[List[List[Point2D]], List[List[Point2D]]]]]:
        """Per ``[row][column]`` pair of ``(polygons, holes)``.

        Holes are loops lying wholly inside a cell and are returned clockwise;
        a cell's covered area is its polygons minus its holes.
        """
        return [[(cov.polygons, cov.holes) for cov in row] for row in self.coverage]

    def cell_coverage(self, row: int, column: int) -> CellCoverage:
        return self.coverage[row][column]

    def polygon_count(self) -> int:
        return sum(cov.polygon_count for row in self.coverage for cov in row)
