"""Tests for the immutable pipeline configuration and its environment overrides."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gridpave.services.settings import (
    DEFAULT_MIN_DIMENSION,
    DEFAULT_TOLERANCE,
    PaveSettings,
    settings_from_env,
)


def test_defaults() -> None:
    settings = PaveSettings()
    assert settings.tolerance == DEFAULT_TOLERANCE
    assert settings.min_dimension == DEFAULT_MIN_DIMENSION
    assert settings.cell_vertex_count == 4


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tolerance": 0.0},
        {"tolerance": -1.0},
        {"tolerance": float("nan")},
        {"min_dimension": -0.5},
        {"cell_vertex_count": 3},
    ],
)
def test_invalid_settings_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        PaveSettings(**kwargs)


def test_settings_are_frozen() -> None:
    settings = PaveSettings()
    with pytest.raises(Exception):
        settings.tolerance = 1.0  # type: ignore[misc]


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAVE_TOLERANCE", "1e-4")
    monkeypatch.setenv("PAVE_MIN_DIMENSION", "2.5")
    settings = settings_from_env()
    assert settings.tolerance == 1e-4
    assert settings.min_dimension == 2.5


def test_unparsable_env_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAVE_TOLERANCE", "tight")
    monkeypatch.delenv("PAVE_MIN_DIMENSION", raising=False)
    settings = settings_from_env()
    assert settings.tolerance == DEFAULT_TOLERANCE
    assert settings.min_dimension == DEFAULT_MIN_DIMENSION
