"""
Pydantic data models for the paving API.

These models define the request and response shapes of ``POST
/api/pave``.  Field names use camelCase like the rest of the HTTP
surface; the service layer works with ``Point2D`` and snake_case.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class UVPoint(BaseModel):
    """Single point in the face's 2D parameter plane."""

    u: float
    v: float


class PaveRequest(BaseModel):
    """Request body for paving a region."""

    loops: List[List[UVPoint]] = Field(
        ...,
        min_length=1,
        description="Boundary loops; the first is the outer boundary, the rest are holes",
    )
    gap: float = Field(default=0.0, description="Spacing between adjacent cells")
    cellLength: float = Field(..., description="Cell size along u")
    cellWidth: float = Field(..., description="Cell size along v")
    boundsMin: UVPoint | None = Field(
        default=None,
        description="Minimum corner of the rectangle to tile (defaults to the outer loop's bounding box)",
    )
    boundsMax: UVPoint | None = Field(
        default=None,
        description="Maximum corner of the rectangle to tile (defaults to the outer loop's bounding box)",
    )
    tolerance: float | None = Field(
        default=None,
        gt=0.0,
        description="Override for the point comparison tolerance",
    )


class CellPolygons(BaseModel):
    """Coverage of one grid cell."""

    row: int
    column: int
    full: bool = Field(..., description="Whether the whole cell lies inside the region")
    polygons: List[List[UVPoint]] = Field(..., description="Closed polygons, counter-clockwise")
    holes: List[List[UVPoint]] = Field(
        default_factory=list, description="Boundary loops lying wholly inside the cell, clockwise"
    )


class PaveResponse(BaseModel):
    """Response returned after paving."""

    rows: int = Field(..., description="Number of grid rows")
    columns: int = Field(..., description="Number of grid columns")
    cells: List[CellPolygons] = Field(..., description="Cells that received at least one polygon")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Summary counts and timings")
