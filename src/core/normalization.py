"""String normalization shared by ingestion and matching.

A value accepted at upload time normalizes the same way at scan time,
so stored QR content and scanned payloads are always comparable.
"""

from __future__ import annotations


def normalize(value: str) -> str:
    """Canonicalize a string for comparison.

    Lower-cases, drops every character that is not a letter, digit, or
    whitespace, then collapses whitespace runs to single spaces and trims.

    Args:
        value: Raw string.

    Returns:
        Normalized string, empty for blank or punctuation-only input.
    """
    kept = "".join(char for char in value.lower() if char.isalnum() or char.isspace())
    return " ".join(kept.split())
