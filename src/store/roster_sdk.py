"""Python SDK for roster check operations.

This module wires storage, ingestion, and scanning into one client
with an explicit open/close lifecycle.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from core.config import RosterConfig
from core.constants import DEFAULT_CODEC_TYPE, KV_DIR_NAME
from core.logging_config import get_logger
from core.scheduler import AsyncioScheduler, Scheduler
from core.types import (
    Dataset,
    IngestResult,
    MatchResult,
    Profile,
    ScanOutcome,
    StorageStatus,
)
from ingest.background_ingest import BackgroundIngestor
from ingest.csv_reader import read_roster_file
from scan.scan_gate import ScanGate
from scan.scan_session import ScanSession
from store.chunked_kv_store import ChunkedKeyValueStore
from store.dataset_store import DatasetStore
from store.kv_backend import FileSystemBackend, StorageBackend

_LOGGER = get_logger(__name__)


class RosterClient:
    """Primary SDK entry point for roster workflows.

    Use as ``async with RosterClient(config) as client: ...`` or call
    ``open()`` and ``close()`` explicitly.
    """

    def __init__(
        self,
        config: RosterConfig | None = None,
        backend: StorageBackend | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            backend: Optional storage medium; defaults to files under
                ``<data_root>/kv``.
            scheduler: Optional scheduler; defaults to the asyncio one.
        """
        self._config = config or RosterConfig.from_env()
        self._backend = backend or FileSystemBackend(self._config.data_root / KV_DIR_NAME)
        self._scheduler = scheduler or AsyncioScheduler()
        self._kv_store = ChunkedKeyValueStore(
            self._backend,
            self._scheduler,
            chunk_threshold=self._config.chunk_threshold,
            chunk_size=self._config.chunk_size,
        )
        self._store = DatasetStore(self._kv_store, partial_match=self._config.partial_match)
        self._ingestor = BackgroundIngestor(
            self._scheduler,
            batch_rows=self._config.ingest_batch_rows,
            worker_threshold=self._config.worker_threshold,
        )
        self._session = ScanSession(
            self._store,
            ScanGate(cooldown_ms=self._config.scan_cooldown_ms),
            display_ms=self._config.result_display_ms,
        )

    async def __aenter__(self) -> "RosterClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def config(self) -> RosterConfig:
        return self._config

    @property
    def store(self) -> DatasetStore:
        return self._store

    @property
    def kv_store(self) -> ChunkedKeyValueStore:
        return self._kv_store

    @property
    def ingestor(self) -> BackgroundIngestor:
        return self._ingestor

    @property
    def session(self) -> ScanSession:
        return self._session

    async def open(self) -> None:
        """Start the storage queue and restore persisted state."""
        await self._kv_store.init()
        await self._store.load()

    async def close(self) -> None:
        """Flush queued writes and stop accepting storage calls."""
        await self._kv_store.dispose()

    async def upload(self, file_path: Path) -> IngestResult:
        """Ingest a roster CSV and replace the stored dataset.

        Args:
            file_path: Local ``.csv`` path.

        Returns:
            Ingestion result with row statistics.

        Raises:
            RosterIngestError: If the file cannot be read or validated.
            RosterStoreError: If persisting the dataset fails.
        """
        raw_text, file_name = read_roster_file(file_path)
        result = await self._ingestor.ingest(raw_text, file_name)
        await self._store.update_dataset(result.dataset.records, file_name)
        _LOGGER.info(
            "roster_uploaded",
            file_name=file_name,
            record_count=len(result.dataset.records),
        )
        return result

    async def clear(self) -> None:
        await self._store.clear_dataset()

    async def update_profile(self, user_name: str) -> Profile:
        """Set the operator name and wait for it to persist."""
        await self._store.update_profile({"user_name": user_name})
        return self._store.profile

    def dataset(self) -> Dataset:
        return self._store.dataset

    def profile(self) -> Profile:
        return self._store.profile

    def storage_status(self) -> StorageStatus:
        return self._store.storage_status

    def find_match(self, qr_content: str) -> MatchResult:
        return self._store.find_match(qr_content)

    def scan(self, payload: str, codec_type: str = DEFAULT_CODEC_TYPE) -> ScanOutcome | None:
        """Feed one decoded payload through the scan session.

        Returns:
            Outcome, or None when the payload was debounced.
        """
        return self._session.handle_decode(payload, codec_type)

    def scan_many(self, payloads: Iterable[str]) -> list[ScanOutcome | None]:
        return [self.scan(payload) for payload in payloads]
