"""Roster fixture file helpers for tests."""

from __future__ import annotations

from pathlib import Path

FIXTURES_ROOT = Path(__file__).resolve().parent / "fixtures"


def fixture_path(file_name: str) -> Path:
    """Resolve a roster fixture under tests/fixtures.

    Args:
        file_name: Fixture file name, e.g. ``roster_valid.csv``.

    Returns:
        Absolute fixture path.
    """
    return FIXTURES_ROOT / file_name
