"""Runtime configuration model for rostercheck.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_THRESHOLD,
    DEFAULT_DATA_ROOT,
    DEFAULT_INGEST_BATCH_ROWS,
    DEFAULT_RESULT_DISPLAY_MS,
    DEFAULT_SCAN_COOLDOWN_MS,
    DEFAULT_WORKER_THRESHOLD,
)
from core.errors import RosterConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class RosterConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for persisted key/value files.
        chunk_threshold: Serialized length above which values are chunked.
        chunk_size: Length of each stored chunk.
        scan_cooldown_ms: Window in which a repeated payload is suppressed.
        result_display_ms: Lifetime of a scan result message.
        ingest_batch_rows: Rows parsed between cooperative yield points.
        worker_threshold: Text length above which parsing moves to a thread.
        partial_match: Whether substring matching is used as a fallback.
    """

    data_root: Path
    chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD
    chunk_size: int = DEFAULT_CHUNK_SIZE
    scan_cooldown_ms: int = DEFAULT_SCAN_COOLDOWN_MS
    result_display_ms: int = DEFAULT_RESULT_DISPLAY_MS
    ingest_batch_rows: int = DEFAULT_INGEST_BATCH_ROWS
    worker_threshold: int = DEFAULT_WORKER_THRESHOLD
    partial_match: bool = True

    @classmethod
    def from_env(cls) -> "RosterConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RosterConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ROSTER_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        chunk_threshold = _parse_positive_int("ROSTER_CHUNK_THRESHOLD", DEFAULT_CHUNK_THRESHOLD)
        chunk_size = _parse_positive_int("ROSTER_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)
        if chunk_size > chunk_threshold:
            raise RosterConfigError(
                f"Invalid ROSTER_CHUNK_SIZE value: {chunk_size} exceeds "
                f"ROSTER_CHUNK_THRESHOLD ({chunk_threshold}). "
                "Set a chunk size no larger than the threshold."
            )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            chunk_threshold=chunk_threshold,
            chunk_size=chunk_size,
            scan_cooldown_ms=_parse_positive_int(
                "ROSTER_SCAN_COOLDOWN_MS", DEFAULT_SCAN_COOLDOWN_MS
            ),
            result_display_ms=_parse_positive_int(
                "ROSTER_RESULT_DISPLAY_MS", DEFAULT_RESULT_DISPLAY_MS
            ),
            ingest_batch_rows=_parse_positive_int(
                "ROSTER_INGEST_BATCH_ROWS", DEFAULT_INGEST_BATCH_ROWS
            ),
            worker_threshold=_parse_positive_int(
                "ROSTER_WORKER_THRESHOLD", DEFAULT_WORKER_THRESHOLD
            ),
            partial_match=_parse_bool("ROSTER_PARTIAL_MATCH", True),
        )


def _parse_positive_int(env_name: str, default: int) -> int:
    """Parse a positive integer environment value.

    Args:
        env_name: Environment variable name.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        RosterConfigError: If value is not a positive integer.
    """
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default
    try:
        parsed = int(raw_value)
    except ValueError as error:
        raise RosterConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a positive numeric value."
        ) from error
    if parsed <= 0:
        raise RosterConfigError(
            f"Invalid {env_name} value: expected a positive integer, got {parsed}."
        )
    return parsed


def _parse_bool(env_name: str, default: bool) -> bool:
    """Parse a boolean flag environment value."""
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default
    lowered = raw_value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise RosterConfigError(
        f"Invalid {env_name} value: expected true/false, got '{raw_value}'."
    )
