"""
API route for paving a planar region.

The endpoint receives the region's boundary loops in parameter space
together with the cell configuration, runs the paving pipeline and
returns every non-empty cell with its clipped polygons.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from ..services.planar import Point2D
from ..services.pave_manager import PaveManager
from ..services.settings import PaveSettings, settings_from_env
from .models import CellPolygons, PaveRequest, PaveResponse, UVPoint

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_uv(points: List[Point2D]) -> List[UVPoint]:
    return [UVPoint(u=p.u, v=p.v) for p in points]


@router.post("/pave", response_model=PaveResponse)
async def pave_region(body: PaveRequest) -> PaveResponse:
    """Tile the region with gapped cells and clip each cell against it."""
    settings = settings_from_env()
    if body.tolerance is not None:
        settings = PaveSettings(tolerance=body.tolerance, min_dimension=settings.min_dimension)

    bounds = None
    if (body.boundsMin is None) != (body.boundsMax is None):
        raise HTTPException(status_code=400, detail="boundsMin and boundsMax must be given together")
    if body.boundsMin is not None and body.boundsMax is not None:
        bounds = [(body.boundsMin.u, body.boundsMin.v), (body.boundsMax.u, body.boundsMax.v)]

    loops = [[(p.u, p.v) for p in loop] for loop in body.loops]
    try:
        manager = PaveManager(
            loops,
            gap=body.gap,
            length=body.cellLength,
            width=body.cellWidth,
            bounds=bounds,
            settings=settings,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        ok = manager.pave()
    except Exception as exc:
        logger.exception("pave endpoint error: %s", exc)
        raise HTTPException(status_code=500, detail=f"Failed to pave region: {exc}")
    if not ok:
        raise HTTPException(
            status_code=400,
            detail="Invalid paving configuration: cell sizes must be positive and the rectangle above the minimum size",
        )

    cells: List[CellPolygons] = []
    full_cells = 0
    for row in manager.coverage:
        for cov in row:
            if not cov.polygons and not cov.holes:
                continue
            full_cells += int(cov.full)
            cells.append(
                CellPolygons(
                    row=cov.row,
                    column=cov.column,
                    full=cov.full,
                    polygons=[_to_uv(p) for p in cov.polygons],
                    holes=[_to_uv(h) for h in cov.holes],
                )
            )
    metadata = {
        "totalPolygons": manager.polygon_count(),
        "fullCells": full_cells,
        "partialCells": len(cells) - full_cells,
        "gap": manager.grid.gap,
        "tolerance": settings.tolerance,
        "timings": manager.timings,
    }
    return PaveResponse(rows=manager.rows, columns=manager.columns, cells=cells, metadata=metadata)
