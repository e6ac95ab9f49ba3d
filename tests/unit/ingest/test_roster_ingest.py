"""Unit tests for roster validation and normalization."""

from __future__ import annotations

import pytest

from core.errors import EmptyFileError, MissingColumnsError, NoValidRecordsError
from core.types import Record
from ingest.column_resolution import resolve_columns
from ingest.roster_ingest import build_record, ingest_roster
from tests.fixture_paths import fixture_path


def test_ingest_roster_drops_incomplete_rows_and_renumbers() -> None:
    """Rows missing a field should be dropped and ids stay dense."""
    raw_text = fixture_path("roster_valid.csv").read_text(encoding="utf-8")

    result = ingest_roster(raw_text, "roster_valid.csv")

    assert result.dataset.records == (
        Record(id=1, random="R1", name="Alice", qr_content="alice-001"),
        Record(id=2, random="R3", name="Carol", qr_content="carol-003"),
    )
    assert (result.report.total_rows, result.report.valid_rows, result.report.dropped_rows) == (3, 2, 1)
    assert result.report.warnings == ("Row 2: Missing required data",)


def test_ingest_roster_trims_fields_and_keeps_quoted_commas() -> None:
    """Quoted cells may hold commas and surrounding spaces are trimmed."""
    raw_text = 'Random,Name,QR Content\n"R1"," Smith, Jane ","  q1 "\n'

    result = ingest_roster(raw_text)

    assert result.dataset.records[0] == Record(id=1, random="R1", name="Smith, Jane", qr_content="q1")


def test_ingest_roster_counts_blank_rows_without_warning() -> None:
    """Rows with every required cell blank are counted as empty, not warned."""
    raw_text = "Random,Name,QR Content\n,,\nR1,Alice,a1\n"

    result = ingest_roster(raw_text)

    assert (result.report.empty_rows, result.report.warnings) == (1, ())


def test_ingest_roster_short_row_is_dropped() -> None:
    """Rows with fewer cells than the header should be padded and dropped."""
    raw_text = "Random,Name,QR Content\nR1,Alice\nR2,Bob,b2\n"

    result = ingest_roster(raw_text)

    assert [record.name for record in result.dataset.records] == ["Bob"]


def test_ingest_roster_reports_duplicate_qr_content() -> None:
    """Duplicates under normalization should be kept but reported."""
    raw_text = "Random,Name,QR Content\nR1,Alice,ABC\nR2,Bob,abc\n"

    result = ingest_roster(raw_text)

    assert len(result.dataset.records) == 2
    assert result.report.duplicate_qr_count == 1
    assert result.report.warnings == ('Row 2: Duplicate QR content "abc"',)


def test_ingest_roster_raises_for_missing_columns() -> None:
    """A header without a QR column should name the missing role."""
    raw_text = fixture_path("roster_missing_columns.csv").read_text(encoding="utf-8")

    with pytest.raises(MissingColumnsError) as error_info:
        ingest_roster(raw_text)

    assert error_info.value.missing_columns == ("QR Content",)
    assert "Missing required columns: QR Content" in str(error_info.value)


def test_ingest_roster_raises_for_header_only_file() -> None:
    """A file with a header and no data rows is empty."""
    with pytest.raises(EmptyFileError):
        ingest_roster("Random,Name,QR Content\n")


def test_ingest_roster_raises_for_blank_text() -> None:
    """Whitespace-only text is empty rather than missing columns."""
    with pytest.raises(EmptyFileError):
        ingest_roster("\n\n")


def test_ingest_roster_raises_when_no_row_is_valid() -> None:
    """Every row incomplete should raise a no-valid-data error."""
    with pytest.raises(NoValidRecordsError):
        ingest_roster("Random,Name,QR Content\nR1,,\n")


def test_resolve_columns_accepts_header_variants() -> None:
    """Column roles should resolve through case and alias variants."""
    columns = resolve_columns(("random", "Full Name", "qr_content", "Extra"))

    assert (columns.random_column, columns.name_column, columns.qr_column) == (
        "random",
        "Full Name",
        "qr_content",
    )


def test_resolve_columns_accepts_short_qr_header() -> None:
    """A bare QR header should resolve the QR content role."""
    columns = resolve_columns(("RANDOM", "NAME", "QR"))

    assert columns.qr_column == "QR"


def test_build_record_rejects_whitespace_fields() -> None:
    """Whitespace-only fields count as missing."""
    assert build_record(1, "R1", "   ", "q1") is None


def test_ingest_roster_keeps_every_complete_row_in_order() -> None:
    """Fully populated rows should all survive with positional ids."""
    rows = [f"R{index},Name {index},qr-{index}" for index in range(1, 26)]
    raw_text = "Random,Name,QR Content\n" + "\n".join(rows) + "\n"

    result = ingest_roster(raw_text)

    assert [record.id for record in result.dataset.records] == list(range(1, 26))
    assert result.dataset.records[-1].qr_content == "qr-25"
