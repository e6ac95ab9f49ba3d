"""Queued key/value persistence with transparent chunking.

This module serializes every storage call through one FIFO queue drained
by a background task, so callers never wait on I/O unless they choose to
await the returned future. Values above a size threshold are split into
fixed-size chunks plus a metadata marker and reassembled on read.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable
from uuid import uuid4

from core.constants import (
    CHUNK_KEY_SEPARATOR,
    CHUNK_MARKER_PREFIX,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CHUNK_THRESHOLD,
    QUEUE_ITEM_PAUSE_SECONDS,
)
from core.errors import ChunkSetError, QueueClearedError, RosterStoreError
from core.events import EventChannel
from core.logging_config import get_logger
from core.scheduler import Scheduler
from core.types import StorageEvent, StorageStatus
from store.kv_backend import StorageBackend

_LOGGER = get_logger(__name__)


@dataclass
class StorageQueueItem:
    """One deferred storage operation awaiting its turn in the queue."""

    label: str
    operation: Callable[[], Awaitable[Any]]
    future: asyncio.Future[Any]
    item_id: str = field(default_factory=lambda: uuid4().hex)
    enqueued_at: float = field(default_factory=time.monotonic)


def chunk_key(key: str, index: int) -> str:
    """Derive the storage key of one chunk."""
    return f"{key}{CHUNK_KEY_SEPARATOR}{index}"


class ChunkedKeyValueStore:
    """Non-blocking key/value store over a synchronous backend.

    Every public operation enqueues work and returns immediately with a
    future. One drain task runs queued items strictly in enqueue order,
    yielding to the event loop before each item and pausing between items.
    A failing item rejects only its own future.

    Lifecycle: call ``init()`` inside the running loop before use and
    ``dispose()`` to flush outstanding work and refuse new calls.
    """

    def __init__(
        self,
        backend: StorageBackend,
        scheduler: Scheduler,
        chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        item_pause_seconds: float = QUEUE_ITEM_PAUSE_SECONDS,
    ) -> None:
        if chunk_size <= 0 or chunk_size > chunk_threshold:
            raise RosterStoreError(
                f"Invalid chunk size {chunk_size}: expected 0 < size <= {chunk_threshold}."
            )
        self._backend = backend
        self._scheduler = scheduler
        self._chunk_threshold = chunk_threshold
        self._chunk_size = chunk_size
        self._item_pause_seconds = item_pause_seconds
        self._queue: deque[StorageQueueItem] = deque()
        self._processing = False
        self._drain_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self.events: EventChannel[StorageEvent] = EventChannel("storage_queue")

    async def init(self) -> None:
        """Bind the store to the running event loop."""
        self._loop = asyncio.get_running_loop()

    async def dispose(self) -> None:
        """Wait for queued work to finish, then refuse further calls."""
        # Work enqueued while draining may start a fresh drain task.
        while self._drain_task is not None:
            await self._drain_task
        self._loop = None

    def set_item(self, key: str, value: object) -> asyncio.Future[None]:
        """Queue a write. Non-string values are stored as JSON.

        Args:
            key: Storage key.
            value: String or JSON-serializable value.

        Returns:
            Future resolved once the value is durably written.
        """
        text = value if isinstance(value, str) else json.dumps(value)
        return self._enqueue(f"set:{key}", lambda: self._write(key, text))

    def get_item(self, key: str) -> asyncio.Future[str | None]:
        """Queue a read.

        Returns:
            Future resolved with the stored string, or None when absent.
            Rejected with ``ChunkSetError`` when a chunk set is broken.
        """
        return self._enqueue(f"get:{key}", lambda: self._read(key))

    def remove_item(self, key: str) -> asyncio.Future[None]:
        """Queue removal of a key and every chunk stored under it."""
        return self._enqueue(f"remove:{key}", lambda: self._remove(key))

    def get_status(self) -> StorageStatus:
        return StorageStatus(queue_length=len(self._queue), processing=self._processing)

    def clear_queue(self) -> int:
        """Reject every pending operation with ``QueueClearedError``.

        The operation currently running, if any, is allowed to finish.

        Returns:
            Number of operations rejected.
        """
        _LOGGER.warning("storage_queue_cleared", pending=len(self._queue))
        rejected = self._reject_pending(QueueClearedError("Storage queue cleared"))
        self.events.emit(StorageEvent(status="cleared", operation_id=None, queue_length=0))
        return rejected

    def _enqueue(self, label: str, operation: Callable[[], Awaitable[Any]]) -> asyncio.Future[Any]:
        if self._loop is None:
            raise RosterStoreError(
                f"Cannot run {label}: storage queue is not initialized. "
                "Call init() before use and avoid calls after dispose()."
            )
        item = StorageQueueItem(label=label, operation=operation, future=self._loop.create_future())
        self._queue.append(item)
        self.events.emit(
            StorageEvent(status="queued", operation_id=item.item_id, queue_length=len(self._queue))
        )
        if self._drain_task is None:
            self._drain_task = self._loop.create_task(self._drain())
        return item.future

    async def _drain(self) -> None:
        self._processing = True
        current: StorageQueueItem | None = None
        try:
            while self._queue:
                current = self._queue.popleft()
                await self._run_item(current)
                current = None
                if self._queue:
                    await self._scheduler.pause(self._item_pause_seconds)
        except asyncio.CancelledError:
            cancelled = QueueClearedError("Storage queue drain was cancelled")
            if current is not None and not current.future.done():
                current.future.set_exception(cancelled)
            self._reject_pending(cancelled)
            raise
        finally:
            self._processing = False
            self._drain_task = None

    async def _run_item(self, item: StorageQueueItem) -> None:
        self.events.emit(
            StorageEvent(status="processing", operation_id=item.item_id, queue_length=len(self._queue))
        )
        started_at = time.monotonic()
        try:
            await self._scheduler.yield_now()
            result = await item.operation()
        except Exception as error:
            _LOGGER.error(
                "storage_operation_failed",
                operation=item.label,
                operation_id=item.item_id,
                error=str(error),
                error_type=type(error).__name__,
            )
            self.events.emit(
                StorageEvent(
                    status="error",
                    operation_id=item.item_id,
                    queue_length=len(self._queue),
                    error=str(error),
                )
            )
            if not item.future.done():
                item.future.set_exception(error)
            return
        _LOGGER.debug(
            "storage_operation_completed",
            operation=item.label,
            duration_ms=round((time.monotonic() - started_at) * 1000, 2),
            waited_ms=round((started_at - item.enqueued_at) * 1000, 2),
        )
        self.events.emit(
            StorageEvent(status="completed", operation_id=item.item_id, queue_length=len(self._queue))
        )
        if not item.future.done():
            item.future.set_result(result)

    def _reject_pending(self, error: RosterStoreError) -> int:
        rejected = 0
        while self._queue:
            item = self._queue.popleft()
            if not item.future.done():
                item.future.set_exception(error)
                rejected += 1
        return rejected

    async def _write(self, key: str, text: str) -> None:
        # A small value that looks like a marker is chunked so reads stay unambiguous.
        if len(text) > self._chunk_threshold or text.startswith(CHUNK_MARKER_PREFIX):
            chunks = [
                text[start:start + self._chunk_size]
                for start in range(0, len(text), self._chunk_size)
            ]
            attempted = 0
            try:
                for index, chunk in enumerate(chunks):
                    attempted = index + 1
                    await self._scheduler.run_blocking(self._backend.set, chunk_key(key, index), chunk)
                await self._scheduler.run_blocking(
                    self._backend.set, key, f"{CHUNK_MARKER_PREFIX}{len(chunks)}"
                )
            except Exception:
                # An older marker must never reassemble a mix of old and new chunks.
                await self._discard_chunks(key, attempted)
                raise
            await self._remove_chunks(key, keep=len(chunks))
            return
        await self._scheduler.run_blocking(self._backend.set, key, text)
        await self._remove_chunks(key, keep=0)

    async def _read(self, key: str) -> str | None:
        value = await self._scheduler.run_blocking(self._backend.get, key)
        if value is None or not value.startswith(CHUNK_MARKER_PREFIX):
            return value
        count = _parse_chunk_count(key, value)
        chunks = await asyncio.gather(
            *(self._scheduler.run_blocking(self._backend.get, chunk_key(key, index)) for index in range(count))
        )
        missing = [index for index, chunk in enumerate(chunks) if chunk is None]
        if missing:
            raise ChunkSetError(
                f"Chunk set for key '{key}' is incomplete: missing chunk(s) {missing} of {count}. "
                "The value was only partially written and must be rewritten."
            )
        return "".join(chunk for chunk in chunks if chunk is not None)

    async def _remove(self, key: str) -> None:
        await self._scheduler.run_blocking(self._backend.remove, key)
        await self._remove_chunks(key, keep=0)

    async def _discard_chunks(self, key: str, count: int) -> None:
        """Remove the first ``count`` chunk keys after a failed chunked write."""
        for index in range(count):
            try:
                await self._scheduler.run_blocking(self._backend.remove, chunk_key(key, index))
            except RosterStoreError as error:
                _LOGGER.error(
                    "chunk_cleanup_failed",
                    key=key,
                    chunk_index=index,
                    error=str(error),
                )
                return

    async def _remove_chunks(self, key: str, keep: int) -> None:
        """Remove chunk keys for ``key`` whose index is not below ``keep``."""
        prefix = f"{key}{CHUNK_KEY_SEPARATOR}"
        stored_keys = await self._scheduler.run_blocking(self._backend.keys)
        for stored_key in stored_keys:
            if not stored_key.startswith(prefix):
                continue
            suffix = stored_key[len(prefix):]
            if suffix.isdigit() and int(suffix) < keep:
                continue
            await self._scheduler.run_blocking(self._backend.remove, stored_key)


def _parse_chunk_count(key: str, marker: str) -> int:
    raw_count = marker[len(CHUNK_MARKER_PREFIX):]
    if not raw_count.isdigit():
        raise ChunkSetError(
            f"Chunk marker for key '{key}' is malformed: '{marker[:40]}'. "
            "Remove the key and write it again."
        )
    return int(raw_count)
