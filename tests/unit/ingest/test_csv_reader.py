"""Unit tests for roster CSV reading."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import RosterIngestError
from ingest.csv_reader import open_csv_rows, read_roster_file
from tests.fixture_paths import fixture_path


def test_open_csv_rows_skips_blank_lines() -> None:
    """Blank lines should not become data rows."""
    _, rows = open_csv_rows("Random,Name,QR Content\n\nR1,Alice,a1\n\n")

    assert list(rows) == [("R1", "Alice", "a1")]


def test_open_csv_rows_strips_byte_order_mark() -> None:
    """A UTF-8 byte order mark should not leak into the first header."""
    header, _ = open_csv_rows("\ufeffRandom,Name,QR Content\nR1,Alice,a1\n")

    assert header == ("Random", "Name", "QR Content")


def test_open_csv_rows_handles_escaped_quotes() -> None:
    """Doubled quotes inside quoted cells should unescape."""
    _, rows = open_csv_rows('Random,Name,QR Content\nR1,"Al ""Ace"" Smith",a1\n')

    assert next(rows)[1] == 'Al "Ace" Smith'


def test_read_roster_file_returns_text_and_name() -> None:
    """Reading a fixture should return its text and base name."""
    text, file_name = read_roster_file(fixture_path("roster_valid.csv"))

    assert file_name == "roster_valid.csv" and text.startswith("Random,Name")


def test_read_roster_file_rejects_non_csv(tmp_path: Path) -> None:
    """Only CSV files should be accepted."""
    path = tmp_path / "roster.txt"
    path.write_text("Random,Name,QR Content\n", encoding="utf-8")

    with pytest.raises(RosterIngestError, match="CSV"):
        read_roster_file(path)


def test_read_roster_file_raises_for_missing_file(tmp_path: Path) -> None:
    """A missing path should fail with a read error."""
    with pytest.raises(RosterIngestError, match="does not exist"):
        read_roster_file(tmp_path / "absent.csv")
