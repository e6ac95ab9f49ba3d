"""Non-blocking roster ingestion.

This module runs roster ingestion without starving the event loop:
large texts are parsed on a worker thread, smaller ones in row batches
with a yield point between batches. Results match ``ingest_roster``.
"""

from __future__ import annotations

import time
from itertools import islice

from core.constants import DEFAULT_INGEST_BATCH_ROWS, DEFAULT_WORKER_THRESHOLD
from core.errors import RosterIngestError
from core.events import EventChannel
from core.logging_config import get_logger
from core.scheduler import Scheduler
from core.types import IngestProgress, IngestResult
from ingest.csv_reader import estimate_row_count
from ingest.roster_ingest import ingest_roster, start_roster_build

_LOGGER = get_logger(__name__)


class BackgroundIngestor:
    """Ingest rosters cooperatively and publish progress events.

    Only one ingestion runs at a time; a second request while busy fails
    fast instead of queuing behind a large file.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        batch_rows: int = DEFAULT_INGEST_BATCH_ROWS,
        worker_threshold: int = DEFAULT_WORKER_THRESHOLD,
    ) -> None:
        self._scheduler = scheduler
        self._batch_rows = batch_rows
        self._worker_threshold = worker_threshold
        self._processing = False
        self.progress: EventChannel[IngestProgress] = EventChannel("ingest_progress")

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def ingest(self, raw_text: str, file_name: str = "") -> IngestResult:
        """Ingest roster text without blocking the caller's loop.

        Args:
            raw_text: Full CSV text.
            file_name: Uploaded file name.

        Returns:
            Ingestion result identical to ``ingest_roster``.

        Raises:
            RosterIngestError: If another ingestion is running, or any
                validation error raised by ``ingest_roster``.
        """
        if self._processing:
            raise RosterIngestError(
                "Roster processor is busy. Wait for the current upload to finish."
            )
        self._processing = True
        started_at = time.monotonic()
        self.progress.emit(IngestProgress(status="started", file_name=file_name))
        try:
            if len(raw_text) > self._worker_threshold:
                result = await self._scheduler.run_blocking(ingest_roster, raw_text, file_name)
            else:
                result = await self._ingest_in_batches(raw_text, file_name)
        except RosterIngestError as error:
            self.progress.emit(
                IngestProgress(status="error", file_name=file_name, error=str(error))
            )
            raise
        finally:
            self._processing = False
        self.progress.emit(
            IngestProgress(
                status="completed",
                file_name=file_name,
                rows_processed=result.report.total_rows,
                percentage=100,
            )
        )
        _LOGGER.info(
            "roster_ingest_completed",
            file_name=file_name,
            valid_rows=result.report.valid_rows,
            elapsed_ms=round((time.monotonic() - started_at) * 1000, 1),
        )
        return result

    async def _ingest_in_batches(self, raw_text: str, file_name: str) -> IngestResult:
        builder, rows = start_roster_build(raw_text, file_name)
        estimated_rows = estimate_row_count(raw_text)
        rows_iter = iter(rows)
        while True:
            batch = list(islice(rows_iter, self._batch_rows))
            if not batch:
                break
            builder.add_rows(batch)
            self.progress.emit(
                IngestProgress(
                    status="progress",
                    file_name=file_name,
                    rows_processed=builder.rows_processed,
                    percentage=min(99, builder.rows_processed * 100 // estimated_rows),
                )
            )
            await self._scheduler.yield_now()
        return builder.finish(file_name)
