"""
Process-level configuration for the paving pipeline.

``PaveSettings`` bundles the numeric constants every pipeline stage
needs: the comparison tolerance used for near-equality tests, the
minimum rectangle dimension below which no grid is generated and the
number of corners of a grid cell.  A single instance is created by the
caller and threaded into each component constructor so that tests can
run the whole pipeline with a different tolerance without touching
globals.

Values may be overridden from the environment via ``PAVE_TOLERANCE``
and ``PAVE_MIN_DIMENSION``; see :func:`settings_from_env`.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-6
DEFAULT_MIN_DIMENSION = 1e-3
CELL_VERTEX_COUNT = 4


class PaveInvariantError(RuntimeError):
    """Raised when intermediate paving state is internally inconsistent.

    This signals a programming error (for example a grid line that was
    selected for an edge but does not intersect it) rather than bad user
    input, so it is never caught inside the pipeline.
    """


@dataclass(frozen=True)
class PaveSettings:
    """Immutable numeric configuration shared by all pipeline stages.

    Attributes:
        tolerance: Distance below which two points are considered equal.
        min_dimension: Smallest rectangle length/width for which a grid is
            built.  Smaller rectangles make the grid builder report failure.
        cell_vertex_count: Number of corners of a grid cell.  Only
            rectangular cells are supported so this is always 4.
    """

    tolerance: float = DEFAULT_TOLERANCE
    min_dimension: float = DEFAULT_MIN_DIMENSION
    cell_vertex_count: int = CELL_VERTEX_COUNT

    def __post_init__(self) -> None:
        if not math.isfinite(self.tolerance) or self.tolerance <= 0.0:
            raise ValueError(f"tolerance must be a positive number, got {self.tolerance!r}")
        if not math.isfinite(self.min_dimension) or self.min_dimension < 0.0:
            raise ValueError(f"min_dimension must be non-negative, got {self.min_dimension!r}")
        if self.cell_vertex_count != CELL_VERTEX_COUNT:
            raise ValueError("only four-cornered cells are supported")


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default


def settings_from_env() -> PaveSettings:
    """Build a :class:`PaveSettings` honouring environment overrides.

    ``PAVE_TOLERANCE`` and ``PAVE_MIN_DIMENSION`` replace the defaults
    when they parse as floats; anything else is logged and ignored.
    """
    settings = PaveSettings(
        tolerance=_float_from_env("PAVE_TOLERANCE", DEFAULT_TOLERANCE),
        min_dimension=_float_from_env("PAVE_MIN_DIMENSION", DEFAULT_MIN_DIMENSION),
    )
    if os.getenv("PAVE_DEBUG"):
        logger.debug(
            "PaveSettings from env: tolerance=%s min_dimension=%s",
            settings.tolerance,
            settings.min_dimension,
        )
    return settings


def debug_enabled() -> bool:
    """Return True when verbose per-cell logging is requested via ``PAVE_DEBUG``."""
    return bool(os.getenv("PAVE_DEBUG"))
