"""Unit tests for scan session outcomes."""

from __future__ import annotations

import asyncio

from core.scheduler import AsyncioScheduler
from core.types import Record
from scan.scan_gate import ScanGate
from scan.scan_session import ScanSession
from store.chunked_kv_store import ChunkedKeyValueStore
from store.dataset_store import DatasetStore
from store.kv_backend import MemoryBackend

_RECORDS = (Record(id=1, random="R1", name="Alice", qr_content="alice-001"),)


def _build_session(with_records: bool) -> ScanSession:
    kv_store = ChunkedKeyValueStore(MemoryBackend(), AsyncioScheduler(offload=False))
    store = DatasetStore(kv_store)

    async def _fill() -> None:
        await kv_store.init()
        await store.update_dataset(_RECORDS, "roster.csv")

    if with_records:
        asyncio.run(_fill())
    return ScanSession(store, ScanGate(cooldown_ms=2000), display_ms=1500)


def test_scan_without_roster_reports_no_data() -> None:
    """Scanning before any upload should fail with a no-data status."""
    session = _build_session(with_records=False)

    outcome = session.handle_decode("alice-001", now=0)

    assert outcome is not None
    assert (outcome.status, outcome.message) == ("no_data", "Failure")


def test_matched_scan_shows_success_with_name() -> None:
    """A matched payload should produce a success message naming the record."""
    session = _build_session(with_records=True)

    outcome = session.handle_decode("ALICE-001", codec_type="qr", now=1000)

    assert outcome is not None
    assert (outcome.status, outcome.message) == ("success", "Success! Alice")
    assert outcome.record == _RECORDS[0] and outcome.expires_at == 2500


def test_unmatched_scan_reports_failure() -> None:
    """An unknown payload should produce a failure outcome."""
    session = _build_session(with_records=True)

    outcome = session.handle_decode("bob-002", now=0)

    assert outcome is not None
    assert (outcome.status, outcome.message, outcome.record) == ("failure", "Failure", None)


def test_outcome_expires_after_display_window() -> None:
    """The latest outcome should be visible only until it expires."""
    session = _build_session(with_records=True)
    outcome = session.handle_decode("alice-001", now=0)

    visible = session.current_outcome(now=1499)
    expired = session.current_outcome(now=1500)

    assert visible == outcome and expired is None


def test_suppressed_scan_keeps_previous_outcome() -> None:
    """A debounced repeat should return None and leave the last outcome."""
    session = _build_session(with_records=True)
    first = session.handle_decode("alice-001", now=0)

    repeat = session.handle_decode("alice-001", now=500)

    assert repeat is None and session.current_outcome(now=600) == first


def test_new_outcome_replaces_previous_one() -> None:
    """A later scan should replace the displayed outcome."""
    session = _build_session(with_records=True)
    session.handle_decode("alice-001", now=0)

    latest = session.handle_decode("bob-002", now=100)

    assert session.current_outcome(now=200) == latest
