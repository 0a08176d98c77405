"""
Tests for per-cell polygon tracing in ``tracer.py``.

The tracer is exercised on buckets produced by the real grid,
classifier and bucketer so that the point streams match what the
pipeline feeds it.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gridpave.services.bucketer import CellBucketer
from gridpave.services.classifier import BoundaryClassifier
from gridpave.services.grid import GridBuilder
from gridpave.services.planar import Point2D, polygon_signed_area
from gridpave.services.region import BoundaryRegion
from gridpave.services.settings import PaveSettings
from gridpave.services.tracer import CellCoverage, PolygonTracer


def _prepare(loops, size: float = 5.0):
    region = BoundaryRegion(loops)
    grid = GridBuilder([Point2D(0, 0), Point2D(10, 10)], gap=0.0, length=size, width=size)
    assert grid.build()
    classifier = BoundaryClassifier(grid)
    assert classifier.classify(region.loops)
    bucketer = CellBucketer(grid)
    assert bucketer.bucket(classifier.streams)
    tracer = PolygonTracer(PaveSettings(), region.is_inside, [len(s) for s in classifier.streams])
    return bucketer, tracer


def test_inner_square_clipped_into_quarters() -> None:
    bucketer, tracer = _prepare([[(1, 1), (9, 1), (9, 9), (1, 9)]])
    cov = tracer.trace(bucketer.bucket_at(0, 0))
    assert cov.polygons == [[Point2D(1, 1), Point2D(5, 1), Point2D(5, 5), Point2D(1, 5)]]
    assert not cov.full
    top_right = tracer.trace(bucketer.bucket_at(1, 1))
    assert top_right.polygon_count == 1
    assert polygon_signed_area(top_right.polygons[0]) == pytest.approx(16.0)


def test_full_cells_are_emitted_as_cell_corners() -> None:
    bucketer, tracer = _prepare([[(0, 0), (10, 0), (10, 10), (0, 10)]])
    for row in bucketer.buckets:
        for bucket in row:
            cov = tracer.trace(bucket)
            assert cov.full
            assert cov.polygons == [bucket.cell.vertices()]


def test_cell_without_boundary_points_uses_center_test() -> None:
    # A small region in cell (0, 0) leaves cell (1, 1) untouched and outside.
    bucketer, tracer = _prepare([[(1, 1), (3, 1), (3, 3), (1, 3)]])
    empty = tracer.trace(bucketer.bucket_at(1, 1))
    assert empty.polygons == [] and not empty.full
    inside = tracer.trace(bucketer.bucket_at(0, 0))
    assert inside.polygons == [[Point2D(1, 1), Point2D(3, 1), Point2D(3, 3), Point2D(1, 3)]]


def test_hole_inside_one_cell() -> None:
    bucketer, tracer = _prepare(
        [
            [(0, 0), (10, 0), (10, 10), (0, 10)],
            [(2, 2), (4, 2), (4, 4), (2, 4)],
        ]
    )
    cov = tracer.trace(bucketer.bucket_at(0, 0))
    assert cov.polygon_count == 1
    assert len(cov.holes) == 1
    assert polygon_signed_area(cov.holes[0]) == pytest.approx(-4.0)
    assert cov.area() == pytest.approx(21.0)
    assert not cov.full


def test_tracing_twice_yields_nothing() -> None:
    bucketer, tracer = _prepare([[(0, 0), (10, 0), (0, 10)]])
    bucket = bucketer.bucket_at(0, 1)
    first = tracer.trace(bucket)
    assert first.polygon_count == 1
    assert bucket.exhausted
    assert bucket.area_points == []
    second = tracer.trace(bucket)
    assert second.polygons == [] and second.holes == []


def test_coverage_area_sums_polygons_and_holes() -> None:
    cov = CellCoverage(0, 0)
    cov.add_polygon([Point2D(0, 0), Point2D(4, 0), Point2D(4, 4), Point2D(0, 4)])
    cov.holes.append([Point2D(1, 1), Point2D(1, 2), Point2D(2, 2), Point2D(2, 1)])
    assert cov.polygon_count == 1
    assert cov.area() == pytest.approx(15.0)
