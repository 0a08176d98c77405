"""Tests for the 2D and 3D cell variants and the lifting helper."""

from __future__ import annotations

import sys
from pathlib import Path
import math

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gridpave.services.cells import Cell2D, Cell3D, lift_cell
from gridpave.services.planar import Point2D


def test_cell2d_from_location() -> None:
    cell = Cell2D.from_location(Point2D(1, 1), Point2D(2, 0), Point2D(0, 5), 4.0, 3.0, row=2, column=3)
    assert cell.vertices() == [Point2D(1, 1), Point2D(5, 1), Point2D(5, 4), Point2D(1, 4)]
    assert cell.center() == Point2D(3.0, 2.5)
    assert math.isclose(cell.area(), 12.0)
    assert (cell.row, cell.column) == (2, 3)
    # Side k runs from corner k to corner k+1
    assert cell.side(3).start == Point2D(1, 4)
    assert cell.side(3).end == Point2D(1, 1)


def test_cell2d_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        Cell2D.from_location(Point2D(0, 0), Point2D(1, 0), Point2D(0, 1), 0.0, 1.0)
    with pytest.raises(ValueError):
        Cell2D((Point2D(0, 0), Point2D(1, 0), Point2D(1, 1)))  # type: ignore[arg-type]


def test_cell3d_from_location() -> None:
    cell = Cell3D.from_location((0.0, 0.0, 2.0), (0.0, 3.0, 0.0), (0.0, 0.0, 1.0), 2.0, 1.5)
    assert cell.vertices() == [
        (0.0, 0.0, 2.0),
        (0.0, 2.0, 2.0),
        (0.0, 2.0, 3.5),
        (0.0, 0.0, 3.5),
    ]
    assert math.isclose(cell.area(), 3.0)
    cx, cy, cz = cell.center()
    assert math.isclose(cx, 0.0) and math.isclose(cy, 1.0) and math.isclose(cz, 2.75)


def test_lift_cell_onto_plane() -> None:
    """A parameter-plane cell lifted onto the XZ plane at y=-1 keeps its area."""
    cell = Cell2D((Point2D(0, 0), Point2D(2, 0), Point2D(2, 3), Point2D(0, 3)), row=1, column=4)
    lifted = lift_cell(cell, origin=(0.0, -1.0, 0.0), u_axis=(1.0, 0.0, 0.0), v_axis=(0.0, 0.0, 1.0))
    assert lifted.corners[2] == (2.0, -1.0, 3.0)
    assert all(c[1] == -1.0 for c in lifted.corners)
    assert math.isclose(lifted.area(), cell.area())
    assert (lifted.row, lifted.column) == (1, 4)
