"""Rostercheck exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RosterError(Exception):
    """Base exception for all rostercheck failures."""


class RosterConfigError(RosterError):
    """Raised for invalid runtime configuration."""


class RosterIngestError(RosterError):
    """Raised for roster file reading and ingest failures."""


class RosterValidationError(RosterIngestError):
    """Raised when an uploaded roster fails validation.

    Validation errors are never retried; the operator must supply
    a corrected file.
    """


class EmptyFileError(RosterValidationError):
    """Raised when a roster contains no data rows."""

    def __init__(self, file_name: str = "") -> None:
        label = f" '{file_name}'" if file_name else ""
        super().__init__(
            f"Roster file{label} is empty or could not be parsed. "
            "Upload a CSV with a header line and at least one data row."
        )


class MissingColumnsError(RosterValidationError):
    """Raised when required roster columns cannot be resolved."""

    def __init__(self, missing_columns: tuple[str, ...]) -> None:
        self.missing_columns = missing_columns
        super().__init__(
            f"Missing required columns: {', '.join(missing_columns)}. "
            "File must contain columns: Random, Name, QR Content."
        )


class NoValidRecordsError(RosterValidationError):
    """Raised when every roster row is missing a required field."""

    def __init__(self, total_rows: int) -> None:
        self.total_rows = total_rows
        super().__init__(
            f"No valid data found in {total_rows} row(s). "
            "Check that all rows have Random, Name, and QR Content."
        )


class RosterStoreError(RosterError):
    """Raised for key/value persistence and dataset store failures."""


class QueueClearedError(RosterStoreError):
    """Raised into pending storage operations when the queue is cleared."""


class ChunkSetError(RosterStoreError):
    """Raised when a chunked value cannot be reassembled."""
