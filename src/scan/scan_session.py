"""Scan handling from decode event to result message.

This module wires the scan gate to the dataset store lookup and turns
each admitted scan into an outcome message with a fixed lifetime.
"""

from __future__ import annotations

from core.constants import (
    DEFAULT_CODEC_TYPE,
    DEFAULT_RESULT_DISPLAY_MS,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE_PREFIX,
)
from core.logging_config import get_logger
from core.types import Record, ScanOutcome
from scan.scan_gate import ScanGate
from store.dataset_store import DatasetStore

_LOGGER = get_logger(__name__)


class ScanSession:
    """Resolve decoded payloads against the roster.

    Args:
        store: Dataset store answering lookups.
        gate: Debounce gate; its clock also timestamps outcomes.
        display_ms: How long an outcome message stays visible.
    """

    def __init__(
        self,
        store: DatasetStore,
        gate: ScanGate,
        display_ms: float = DEFAULT_RESULT_DISPLAY_MS,
    ) -> None:
        self._store = store
        self._gate = gate
        self._display_ms = display_ms
        self._latest: ScanOutcome | None = None

    @property
    def gate(self) -> ScanGate:
        return self._gate

    def handle_decode(
        self,
        payload: str,
        codec_type: str = DEFAULT_CODEC_TYPE,
        now: float | None = None,
    ) -> ScanOutcome | None:
        """Process one decode callback from the camera layer.

        Args:
            payload: Decoded payload, treated as opaque text.
            codec_type: Barcode type reported by the camera; informational.
            now: Timestamp in milliseconds; defaults to the gate clock.

        Returns:
            The new outcome, or None when the gate suppressed the scan.
        """
        scanned_at = self._gate.now() if now is None else now
        if not self._gate.admit(payload, scanned_at):
            return None
        if not self._store.has_uploaded_data:
            outcome = self._outcome("no_data", FAILURE_MESSAGE, payload, codec_type, None, scanned_at)
        else:
            result = self._store.find_match(payload)
            if result.found and result.match is not None:
                message = f"{SUCCESS_MESSAGE_PREFIX} {result.match.name}"
                outcome = self._outcome("success", message, payload, codec_type, result.match, scanned_at)
            else:
                outcome = self._outcome("failure", FAILURE_MESSAGE, payload, codec_type, None, scanned_at)
        self._latest = outcome
        _LOGGER.info(
            "scan_resolved",
            status=outcome.status,
            codec_type=codec_type,
            record_id=outcome.record.id if outcome.record else None,
        )
        return outcome

    def current_outcome(self, now: float | None = None) -> ScanOutcome | None:
        """Return the latest outcome while it is still visible."""
        if self._latest is None:
            return None
        timestamp = self._gate.now() if now is None else now
        if not self._latest.is_visible(timestamp):
            return None
        return self._latest

    def _outcome(
        self,
        status: str,
        message: str,
        payload: str,
        codec_type: str,
        record: Record | None,
        scanned_at: float,
    ) -> ScanOutcome:
        return ScanOutcome(
            status=status,
            message=message,
            payload=payload,
            codec_type=codec_type,
            record=record,
            scanned_at=scanned_at,
            expires_at=scanned_at + self._display_ms,
        )
