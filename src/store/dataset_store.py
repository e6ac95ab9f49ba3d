"""Authoritative roster and profile state.

This module holds the in-memory Dataset and Profile, persists them
through the chunked key/value queue, and answers QR content lookups.
Memory is updated synchronously; persistence trails behind and its
failures never roll memory back.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Iterable, Mapping, TypeVar

from core.constants import PROFILE_KEY, UPLOADED_DATA_KEY, UPLOADED_FILE_NAME_KEY
from core.errors import RosterStoreError
from core.logging_config import get_logger
from core.normalization import normalize
from core.types import Dataset, MatchResult, Profile, Record, StorageStatus
from store.chunked_kv_store import ChunkedKeyValueStore
from store.record_payload import decode_profile, decode_records, encode_profile, encode_records

_LOGGER = get_logger(__name__)

_T = TypeVar("_T")

_PROFILE_FIELD_ALIASES = {"user_name": "user_name", "userName": "user_name"}


class DatasetStore:
    """Single owner of the roster Dataset and operator Profile.

    Args:
        kv_store: Initialized queue used for all persistence.
        partial_match: Whether substring matching backs up exact matching.
    """

    def __init__(self, kv_store: ChunkedKeyValueStore, partial_match: bool = True) -> None:
        self._kv_store = kv_store
        self._partial_match = partial_match
        self._dataset = Dataset()
        self._match_keys: tuple[str, ...] = ()
        self._profile = Profile()

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def has_uploaded_data(self) -> bool:
        return not self._dataset.is_empty

    @property
    def storage_status(self) -> StorageStatus:
        return self._kv_store.get_status()

    async def load(self) -> None:
        """Restore Dataset and Profile from storage.

        Each key is loaded independently: a missing or unreadable
        key falls back to its default without affecting the
        others.
        """
        data_future = self._kv_store.get_item(UPLOADED_DATA_KEY)
        file_name_future = self._kv_store.get_item(UPLOADED_FILE_NAME_KEY)
        profile_future = self._kv_store.get_item(PROFILE_KEY)
        records = await _load_key(UPLOADED_DATA_KEY, data_future, decode_records, ())
        file_name = await _load_key(UPLOADED_FILE_NAME_KEY, file_name_future, str, "")
        profile = await _load_key(PROFILE_KEY, profile_future, decode_profile, Profile())
        self._set_dataset(Dataset(records=records, source_file_name=file_name))
        self._profile = profile
        _LOGGER.info(
            "dataset_loaded",
            record_count=len(records),
            file_name=file_name,
            has_profile=bool(profile.user_name),
        )

    def update_dataset(self, records: Iterable[Record], file_name: str) -> asyncio.Future[Any]:
        """Replace the roster in memory, then queue its persistence.

        Args:
            records: New records in file order.
            file_name: Name of the uploaded file.

        Returns:
            Future that resolves when both keys are written, or rejects
            with the first storage error. Awaiting it is optional.
        """
        dataset = Dataset(records=tuple(records), source_file_name=file_name)
        self._set_dataset(dataset)
        _LOGGER.info("dataset_updated", record_count=len(dataset.records), file_name=file_name)
        return _track_persistence(
            "update_dataset",
            self._kv_store.set_item(UPLOADED_DATA_KEY, encode_records(dataset.records)),
            self._kv_store.set_item(UPLOADED_FILE_NAME_KEY, file_name),
        )

    def clear_dataset(self) -> asyncio.Future[Any]:
        """Empty the roster in memory, then queue removal of its keys."""
        self._set_dataset(Dataset())
        _LOGGER.info("dataset_cleared")
        return _track_persistence(
            "clear_dataset",
            self._kv_store.remove_item(UPLOADED_DATA_KEY),
            self._kv_store.remove_item(UPLOADED_FILE_NAME_KEY),
        )

    def update_profile(self, changes: Mapping[str, object]) -> asyncio.Future[Any]:
        """Merge fields into the Profile, then queue its persistence.

        Args:
            changes: Partial profile; ``user_name`` or ``userName`` keys.

        Raises:
            RosterStoreError: If an unknown profile field is given.
        """
        fields = dict(user_name=self._profile.user_name)
        for key, value in changes.items():
            field_name = _PROFILE_FIELD_ALIASES.get(key)
            if field_name is None:
                raise RosterStoreError(
                    f"Unknown profile field '{key}'. Supported fields: user_name."
                )
            fields[field_name] = "" if value is None else str(value)
        self._profile = Profile(**fields)
        return _track_persistence(
            "update_profile",
            self._kv_store.set_item(PROFILE_KEY, encode_profile(self._profile)),
        )

    def find_match(self, qr_content: object) -> MatchResult:
        """Find the roster record for a scanned payload.

        Exact normalized equality wins; otherwise, when enabled, the first
        record whose normalized QR content contains or is contained in the
        normalized payload. Ties resolve by file order.

        Args:
            qr_content: Raw scanned payload.

        Returns:
            Match result; ``found`` is False for empty input or data.
        """
        records = self._dataset.records
        total = len(records)
        if not qr_content or not records:
            return MatchResult(found=False, match=None, total_records=total)
        term = normalize(str(qr_content))
        if not term:
            return MatchResult(found=False, match=None, total_records=total)
        for record, key in zip(records, self._match_keys):
            if key == term:
                return MatchResult(found=True, match=record, total_records=total, match_kind="exact")
        if self._partial_match:
            for record, key in zip(records, self._match_keys):
                if key and (term in key or key in term):
                    _LOGGER.debug("partial_match_used", record_id=record.id)
                    return MatchResult(
                        found=True, match=record, total_records=total, match_kind="partial"
                    )
        return MatchResult(found=False, match=None, total_records=total)

    def _set_dataset(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self._match_keys = tuple(normalize(record.qr_content) for record in dataset.records)


async def _load_key(
    key: str,
    future: Awaitable[str | None],
    decode: Callable[[str], _T],
    default: _T,
) -> _T:
    """Await one stored key and decode it, falling back to ``default``."""
    try:
        raw_value = await future
        if raw_value is None:
            return default
        return decode(raw_value)
    except (RosterStoreError, ValueError) as error:
        _LOGGER.warning(
            "dataset_key_load_failed",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
        )
        return default


def _track_persistence(label: str, *futures: asyncio.Future[Any]) -> asyncio.Future[Any]:
    combined = asyncio.gather(*futures)
    combined.add_done_callback(partial(_log_persistence_outcome, label))
    return combined


def _log_persistence_outcome(label: str, future: asyncio.Future[Any]) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        _LOGGER.warning(
            "dataset_persist_failed",
            operation=label,
            error=str(error),
            error_type=type(error).__name__,
        )
