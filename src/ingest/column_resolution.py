"""Required column resolution for roster headers.

Header names vary between exports ("QR Content", "qr_content", "QR"),
so each role is resolved once per ingestion into a fixed mapping.
"""

from __future__ import annotations

from core.constants import COLUMN_ROLE_ALIASES, NAME_ROLE, QR_ROLE, RANDOM_ROLE
from core.errors import MissingColumnsError
from core.types import ColumnMapping


def resolve_columns(header: tuple[str, ...]) -> ColumnMapping:
    """Resolve the random, name, and QR content columns.

    Matching is case-insensitive substring containment. Aliases are tried
    in priority order and the first header containing an alias wins.

    Args:
        header: Header cells from the roster.

    Returns:
        Typed column mapping.

    Raises:
        MissingColumnsError: If any role has no matching header.
    """
    resolved = {role: _find_column(header, aliases) for role, aliases in COLUMN_ROLE_ALIASES.items()}
    missing = tuple(role for role, column in resolved.items() if column is None)
    if missing:
        raise MissingColumnsError(missing)
    return ColumnMapping(
        random_column=str(resolved[RANDOM_ROLE]),
        name_column=str(resolved[NAME_ROLE]),
        qr_column=str(resolved[QR_ROLE]),
    )


def column_indices(header: tuple[str, ...], columns: ColumnMapping) -> tuple[int, int, int]:
    """Map resolved column names to their first header positions."""
    return (
        header.index(columns.random_column),
        header.index(columns.name_column),
        header.index(columns.qr_column),
    )


def _find_column(header: tuple[str, ...], aliases: tuple[str, ...]) -> str | None:
    lowered = [column.lower() for column in header]
    for alias in aliases:
        for column, lowered_column in zip(header, lowered):
            if alias in lowered_column:
                return column
    return None
