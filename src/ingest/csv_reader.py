"""CSV text readers for roster ingestion.

This module turns raw roster text into a header plus data rows.
It applies standard comma/quote rules and skips blank lines.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterator

from core.constants import SUPPORTED_ROSTER_EXTENSIONS
from core.errors import RosterIngestError

_BOM = "\ufeff"


def open_csv_rows(raw_text: str) -> tuple[tuple[str, ...], Iterator[tuple[str, ...]]]:
    """Start a lazy parse of CSV text.

    Args:
        raw_text: Full roster text.

    Returns:
        Header cells and an iterator over remaining non-blank rows.
        The header is empty when the text has no content.
    """
    reader = csv.reader(io.StringIO(raw_text, newline=""))
    rows = _non_blank_rows(reader)
    first_row = next(rows, None)
    if first_row is None:
        return (), iter(())
    header = tuple(cell.strip() for cell in first_row)
    if header and header[0].startswith(_BOM):
        header = (header[0][len(_BOM):].strip(),) + header[1:]
    return header, rows


def estimate_row_count(raw_text: str) -> int:
    """Cheap upper bound on data rows, used only for progress percentages."""
    return max(1, raw_text.count("\n"))


def read_roster_file(file_path: Path) -> tuple[str, str]:
    """Read a roster CSV from disk.

    Args:
        file_path: Path to a ``.csv`` file.

    Returns:
        Decoded text and the file's base name.

    Raises:
        RosterIngestError: If the file is missing, not a CSV, or not UTF-8.
    """
    if file_path.suffix.lower() not in SUPPORTED_ROSTER_EXTENSIONS:
        raise RosterIngestError(
            f"Unsupported roster file {file_path.name}: please upload a CSV file only."
        )
    if not file_path.is_file():
        raise RosterIngestError(
            f"Failed to read roster at {file_path}: file does not exist. "
            "Provide an existing CSV file."
        )
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as error:
        raise RosterIngestError(
            f"Failed to decode roster at {file_path}: {error.reason}. "
            "Save the file as UTF-8 and retry."
        ) from error
    return text, file_path.name


def _non_blank_rows(reader: Iterator[list[str]]) -> Iterator[tuple[str, ...]]:
    """Yield rows as tuples, skipping lines with no cells."""
    try:
        for row in reader:
            if not row:
                continue
            if len(row) == 1 and not row[0].strip():
                continue
            yield tuple(row)
    except csv.Error as error:
        raise RosterIngestError(
            f"Failed to parse roster CSV: {error}. Fix the file structure and retry."
        ) from error
