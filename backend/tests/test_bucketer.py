"""Tests for assigning boundary points to cells in ``bucketer.py``."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gridpave.services.bucketer import CellBucketer
from gridpave.services.classifier import BoundaryClassifier, PointFeature
from gridpave.services.grid import GridBuilder
from gridpave.services.planar import Point2D
from gridpave.services.settings import PaveInvariantError


def _grid(size: float, gap: float) -> GridBuilder:
    grid = GridBuilder([Point2D(0, 0), Point2D(10, 10)], gap=gap, length=size, width=size)
    assert grid.build()
    return grid


@pytest.mark.parametrize(
    "point, expected",
    [
        (Point2D(2, 2), [(0, 0)]),
        (Point2D(4, 2), [(0, 0)]),
        (Point2D(4.5, 2), []),
        (Point2D(2, 4.5), []),
        (Point2D(10, 2), [(0, 2)]),
        (Point2D(12, 13), [(2, 2)]),
        (Point2D(20, 2), []),
    ],
)
def test_locate_with_gap(point: Point2D, expected) -> None:
    bucketer = CellBucketer(_grid(4.0, 1.0))
    assert bucketer.locate(point) == expected


@pytest.mark.parametrize(
    "point, expected",
    [
        (Point2D(5, 2), [(0, 0), (0, 1)]),
        (Point2D(5, 5), [(0, 0), (0, 1), (1, 0), (1, 1)]),
        (Point2D(10, 10), [(1, 1)]),
        (Point2D(0, 7), [(1, 0)]),
    ],
)
def test_locate_on_shared_lines(point: Point2D, expected) -> None:
    bucketer = CellBucketer(_grid(5.0, 0.0))
    assert bucketer.locate(point) == expected


def _bucketed(loop, size: float = 5.0, gap: float = 0.0) -> CellBucketer:
    grid = _grid(size, gap)
    classifier = BoundaryClassifier(grid)
    assert classifier.classify([loop])
    bucketer = CellBucketer(grid)
    assert bucketer.bucket(classifier.streams)
    return bucketer


def test_side_list_walks_perimeter_counter_clockwise() -> None:
    loop = [Point2D(1, 1), Point2D(9, 1), Point2D(9, 9), Point2D(1, 9)]
    bucketer = _bucketed(loop)
    bucket = bucketer.bucket_at(0, 0)
    assert [cp.point for cp in bucket.area_points] == [Point2D(1, 1), Point2D(5, 1), Point2D(1, 5)]
    assert [cp.point for cp in bucket.side_points] == [
        Point2D(0, 0),
        Point2D(5, 0),
        Point2D(5, 1),
        Point2D(5, 5),
        Point2D(1, 5),
        Point2D(0, 5),
    ]
    assert bucket.touches_boundary
    assert bucket.corner_hits == set()


def test_corner_points_are_not_repeated_in_side_list() -> None:
    loop = [Point2D(0, 0), Point2D(10, 0), Point2D(10, 10), Point2D(0, 10)]
    bucketer = _bucketed(loop)
    bucket = bucketer.bucket_at(0, 0)
    assert len(bucket.side_points) == 4
    assert bucket.corner_hits == {0, 1, 3}
    assert not bucket.touches_boundary


def test_gap_points_belong_to_no_cell() -> None:
    # The loop's left edge runs through the gap between columns 0 and 1.
    loop = [Point2D(4.5, 1), Point2D(8, 1), Point2D(8, 3), Point2D(4.5, 3)]
    bucketer = _bucketed(loop, size=4.0, gap=1.0)
    assert bucketer.gap_points == 2
    assert bucketer.bucket_at(0, 0).area_points == []
    assert [cp.point for cp in bucketer.bucket_at(0, 1).area_points] == [
        Point2D(5, 1),
        Point2D(8, 1),
        Point2D(8, 3),
        Point2D(5, 3),
    ]


def test_bucket_at_out_of_range() -> None:
    bucketer = _bucketed([Point2D(1, 1), Point2D(4, 1), Point2D(4, 4)])
    with pytest.raises(PaveInvariantError):
        bucketer.bucket_at(2, 0)


def test_bucket_requires_built_grid() -> None:
    grid = GridBuilder([Point2D(0, 0), Point2D(10, 10)], gap=0.0, length=5.0, width=5.0)
    assert not CellBucketer(grid).bucket([])


def test_vertex_on_shared_line_appears_once_per_side_list() -> None:
    loop = [Point2D(1, 1), Point2D(5, 2), Point2D(9, 1), Point2D(9, 4), Point2D(1, 4)]
    bucketer = _bucketed(loop)
    for row, column in ((0, 0), (0, 1)):
        bucket = bucketer.bucket_at(row, column)
        on_line = [cp for cp in bucket.side_points if cp.point == Point2D(5, 2)]
        assert len(on_line) == 1
        assert on_line[0].feature is PointFeature.VERTEX_AND_HIT
