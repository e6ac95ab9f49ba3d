"""Shared typed models.

This module defines immutable data models used by ingest, store,
and scan layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import DEFAULT_PROFILE_INITIAL


@dataclass(frozen=True)
class Record:
    """Canonical roster entry.

    Attributes:
        id: One-based position among valid rows, in file order.
        random: Display value from the "Random" column.
        name: Attendee display name.
        qr_content: Join key compared against scanned payloads.
    """

    id: int
    random: str
    name: str
    qr_content: str


@dataclass(frozen=True)
class Dataset:
    """Full roster plus the file name it was uploaded from."""

    records: tuple[Record, ...] = ()
    source_file_name: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class Profile:
    """Operator profile persisted independently of the dataset."""

    user_name: str = ""

    @property
    def initial(self) -> str:
        """Upper-cased first letter of the user name for avatar display."""
        stripped = self.user_name.strip()
        if not stripped:
            return DEFAULT_PROFILE_INITIAL
        return stripped[0].upper()


@dataclass(frozen=True)
class ColumnMapping:
    """Header names resolved once per ingestion for each required role."""

    random_column: str
    name_column: str
    qr_column: str


@dataclass(frozen=True)
class IngestReport:
    """Row statistics and soft warnings collected during ingestion.

    Attributes:
        total_rows: Parsed data rows, excluding the header.
        valid_rows: Rows that became records.
        dropped_rows: Rows missing at least one required field.
        empty_rows: Dropped rows where all required fields were blank.
        duplicate_qr_count: Valid rows whose QR content repeats an earlier row.
        warnings: Human-readable warnings for dropped and duplicate rows.
    """

    total_rows: int
    valid_rows: int
    dropped_rows: int
    empty_rows: int
    duplicate_qr_count: int
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class IngestResult:
    """Successful ingestion output."""

    dataset: Dataset
    report: IngestReport
    columns: ColumnMapping


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a QR content lookup.

    Attributes:
        found: Whether a record matched.
        match: Matched record, if any.
        total_records: Size of the dataset searched.
        match_kind: ``"exact"`` or ``"partial"`` when found.
    """

    found: bool
    match: Record | None
    total_records: int
    match_kind: str | None = None


@dataclass(frozen=True)
class StorageStatus:
    """Snapshot of the storage queue for observability."""

    queue_length: int
    processing: bool


@dataclass(frozen=True)
class StorageEvent:
    """Lifecycle event for one queued storage operation."""

    status: str
    operation_id: str | None
    queue_length: int
    error: str | None = None


@dataclass(frozen=True)
class IngestProgress:
    """Progress event for a background roster ingest."""

    status: str
    file_name: str
    rows_processed: int = 0
    percentage: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ScanOutcome:
    """Result message produced for one admitted scan.

    Attributes:
        status: ``"success"``, ``"failure"``, or ``"no_data"``.
        message: Text to show the operator.
        payload: Raw decoded payload.
        codec_type: Barcode type reported by the camera layer.
        record: Matched record on success.
        scanned_at: Monotonic milliseconds when the scan was admitted.
        expires_at: Monotonic milliseconds after which the message is hidden.
    """

    status: str
    message: str
    payload: str
    codec_type: str
    record: Record | None
    scanned_at: float
    expires_at: float

    def is_visible(self, now: float) -> bool:
        return now < self.expires_at
