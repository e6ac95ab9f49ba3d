"""Core constants used across rostercheck modules.

This module centralizes storage keys, thresholds, and timing defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".rostercheck")
KV_DIR_NAME = "kv"

UPLOADED_DATA_KEY = "uploadedData"
UPLOADED_FILE_NAME_KEY = "uploadedFileName"
PROFILE_KEY = "profile"

CHUNK_MARKER_PREFIX = "__CHUNKED__"
CHUNK_KEY_SEPARATOR = "__chunk__"
DEFAULT_CHUNK_THRESHOLD = 100_000
DEFAULT_CHUNK_SIZE = 50_000
QUEUE_ITEM_PAUSE_SECONDS = 0.01

DEFAULT_SCAN_COOLDOWN_MS = 2000
DEFAULT_RESULT_DISPLAY_MS = 1500

DEFAULT_INGEST_BATCH_ROWS = 500
DEFAULT_WORKER_THRESHOLD = 50_000
MAX_REPORT_WARNINGS = 100

RANDOM_ROLE = "Random"
NAME_ROLE = "Name"
QR_ROLE = "QR Content"
COLUMN_ROLE_ALIASES: dict[str, tuple[str, ...]] = {
    RANDOM_ROLE: ("random",),
    NAME_ROLE: ("name",),
    QR_ROLE: ("qr content", "qr_content", "qrcontent", "qr"),
}
SUPPORTED_ROSTER_EXTENSIONS = (".csv",)

SUCCESS_MESSAGE_PREFIX = "Success!"
FAILURE_MESSAGE = "Failure"
DEFAULT_PROFILE_INITIAL = "U"
DEFAULT_CODEC_TYPE = "qr"
