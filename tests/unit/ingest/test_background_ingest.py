"""Unit tests for cooperative background ingestion."""

from __future__ import annotations

import asyncio

import pytest

from core.errors import MissingColumnsError, RosterIngestError
from core.scheduler import AsyncioScheduler
from core.types import IngestProgress
from ingest.background_ingest import BackgroundIngestor
from ingest.roster_ingest import ingest_roster

_ROSTER_TEXT = "Random,Name,QR Content\nR1,Alice,a1\nR2,Bob,\nR3,Carol,c3\nR4,Dan,d4\n"


def test_batched_ingest_matches_synchronous_ingest() -> None:
    """Batched ingestion should produce the same result as one pass."""
    ingestor = BackgroundIngestor(AsyncioScheduler(offload=False), batch_rows=2)

    result = asyncio.run(ingestor.ingest(_ROSTER_TEXT, "roster.csv"))

    assert result == ingest_roster(_ROSTER_TEXT, "roster.csv")


def test_worker_ingest_matches_synchronous_ingest() -> None:
    """Large inputs parsed on a worker thread should match one pass."""
    ingestor = BackgroundIngestor(AsyncioScheduler(), worker_threshold=10)

    result = asyncio.run(ingestor.ingest(_ROSTER_TEXT, "roster.csv"))

    assert result == ingest_roster(_ROSTER_TEXT, "roster.csv")


def test_ingest_emits_started_progress_and_completed() -> None:
    """Progress events should bracket batch updates."""
    ingestor = BackgroundIngestor(AsyncioScheduler(offload=False), batch_rows=1)
    events: list[IngestProgress] = []
    ingestor.progress.subscribe(events.append)

    asyncio.run(ingestor.ingest(_ROSTER_TEXT, "roster.csv"))

    statuses = [event.status for event in events]
    assert statuses[0] == "started" and statuses[-1] == "completed"
    assert statuses.count("progress") == 3
    assert events[-1].percentage == 100 and events[-1].rows_processed == 4


def test_ingest_emits_error_event_for_invalid_roster() -> None:
    """Validation failures should be published and re-raised."""
    ingestor = BackgroundIngestor(AsyncioScheduler(offload=False))
    events: list[IngestProgress] = []
    ingestor.progress.subscribe(events.append)

    with pytest.raises(MissingColumnsError):
        asyncio.run(ingestor.ingest("Random,Name\nR1,Alice\n", "bad.csv"))

    assert events[-1].status == "error" and not ingestor.is_processing


def test_ingest_rejects_concurrent_request() -> None:
    """A second ingestion while one is running should fail fast."""

    async def _run() -> None:
        ingestor = BackgroundIngestor(AsyncioScheduler(offload=False), batch_rows=1)
        first = asyncio.create_task(ingestor.ingest(_ROSTER_TEXT, "first.csv"))
        await asyncio.sleep(0)
        assert ingestor.is_processing
        with pytest.raises(RosterIngestError, match="busy"):
            await ingestor.ingest(_ROSTER_TEXT, "second.csv")
        await first

    asyncio.run(_run())
