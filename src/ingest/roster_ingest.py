"""Roster validation and record normalization.

This module converts parsed CSV rows into canonical Records.
Rows missing a required field are dropped; ids stay dense over kept rows.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from core.constants import MAX_REPORT_WARNINGS
from core.errors import EmptyFileError, NoValidRecordsError
from core.logging_config import get_logger
from core.normalization import normalize
from core.types import ColumnMapping, Dataset, IngestReport, IngestResult, Record
from ingest.column_resolution import column_indices, resolve_columns
from ingest.csv_reader import open_csv_rows

_LOGGER = get_logger(__name__)


def clean_field(value: object) -> str:
    """Coerce a cell to a trimmed display string, preserving case."""
    if value is None:
        return ""
    return str(value).strip()


def build_record(record_id: int, random: object, name: object, qr_content: object) -> Record | None:
    """Build a Record when all three required fields are present.

    Args:
        record_id: One-based id to assign.
        random: Raw random cell.
        name: Raw name cell.
        qr_content: Raw QR content cell.

    Returns:
        The record, or None when any field is empty after trimming.
    """
    cleaned = (clean_field(random), clean_field(name), clean_field(qr_content))
    if not all(cleaned):
        return None
    return Record(id=record_id, random=cleaned[0], name=cleaned[1], qr_content=cleaned[2])


class RosterRowBuilder:
    """Accumulate records and statistics one row at a time.

    Both the synchronous and the chunked ingest paths feed rows through
    this builder, which keeps their outputs identical.
    """

    def __init__(self, header: tuple[str, ...], columns: ColumnMapping) -> None:
        self._columns = columns
        self._indices = column_indices(header, columns)
        self._records: list[Record] = []
        self._seen_keys: set[str] = set()
        self._warnings: list[str] = []
        self._total_rows = 0
        self._empty_rows = 0
        self._duplicate_count = 0

    @property
    def rows_processed(self) -> int:
        return self._total_rows

    def add_rows(self, rows: Iterable[Sequence[str]]) -> None:
        for row in rows:
            self.add_row(row)

    def add_row(self, row: Sequence[str]) -> None:
        """Validate one data row and keep it when complete."""
        self._total_rows += 1
        random, name, qr_content = (_cell(row, index) for index in self._indices)
        record = build_record(len(self._records) + 1, random, name, qr_content)
        if record is None:
            if not (clean_field(random) or clean_field(name) or clean_field(qr_content)):
                self._empty_rows += 1
            else:
                self._warn(f"Row {self._total_rows}: Missing required data")
            return
        key = normalize(record.qr_content)
        if key in self._seen_keys:
            self._duplicate_count += 1
            self._warn(f'Row {self._total_rows}: Duplicate QR content "{record.qr_content}"')
        else:
            self._seen_keys.add(key)
        self._records.append(record)

    def finish(self, file_name: str) -> IngestResult:
        """Close the ingestion and return the dataset.

        Raises:
            NoValidRecordsError: If no row survived validation.
        """
        if not self._records:
            raise NoValidRecordsError(self._total_rows)
        report = IngestReport(
            total_rows=self._total_rows,
            valid_rows=len(self._records),
            dropped_rows=self._total_rows - len(self._records),
            empty_rows=self._empty_rows,
            duplicate_qr_count=self._duplicate_count,
            warnings=tuple(self._warnings),
        )
        if report.duplicate_qr_count:
            _LOGGER.warning(
                "roster_duplicate_qr_content",
                file_name=file_name,
                duplicate_qr_count=report.duplicate_qr_count,
            )
        _LOGGER.info(
            "roster_ingested",
            file_name=file_name,
            total_rows=report.total_rows,
            valid_rows=report.valid_rows,
            dropped_rows=report.dropped_rows,
        )
        dataset = Dataset(records=tuple(self._records), source_file_name=file_name)
        return IngestResult(dataset=dataset, report=report, columns=self._columns)

    def _warn(self, message: str) -> None:
        if len(self._warnings) < MAX_REPORT_WARNINGS:
            self._warnings.append(message)


def start_roster_build(
    raw_text: str,
    file_name: str,
) -> tuple[RosterRowBuilder, Iterable[tuple[str, ...]]]:
    """Parse the header, resolve columns, and return a builder plus pending rows.

    Args:
        raw_text: Full roster text.
        file_name: Source file name, used in error messages.

    Returns:
        Builder already holding the first data row, and the remaining rows.

    Raises:
        EmptyFileError: If the text has no data rows.
        MissingColumnsError: If a required column cannot be resolved.
    """
    header, rows = open_csv_rows(raw_text)
    first_row = next(rows, None)
    if first_row is None:
        raise EmptyFileError(file_name)
    builder = RosterRowBuilder(header, resolve_columns(header))
    builder.add_row(first_row)
    return builder, rows


def ingest_roster(raw_text: str, file_name: str = "") -> IngestResult:
    """Parse, validate, and normalize a roster in one synchronous pass.

    Args:
        raw_text: Full CSV text with a header line.
        file_name: Name of the uploaded file.

    Returns:
        Dataset, row statistics, and the resolved columns.

    Raises:
        EmptyFileError: If zero data rows were parsed.
        MissingColumnsError: If a required column is missing.
        NoValidRecordsError: If every row was dropped.
        RosterIngestError: If the CSV structure is unreadable.
    """
    builder, rows = start_roster_build(raw_text, file_name)
    builder.add_rows(rows)
    return builder.finish(file_name)


def _cell(row: Sequence[str], index: int) -> str:
    """Return a cell, treating short rows as blank trailing cells."""
    if index < len(row):
        return row[index]
    return ""
