"""Shared JSON serialization for persisted roster payloads.

This module centralizes the wire format of records and profiles.
Field names stay camelCase so stored data matches the mobile app format.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from core.types import Profile, Record
from ingest.roster_ingest import build_record


def record_to_payload(record: Record) -> dict[str, object]:
    """Serialize a Record into a JSON-safe payload.

    Args:
        record: Roster record.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "id": record.id,
        "random": record.random,
        "name": record.name,
        "qrContent": record.qr_content,
    }


def encode_records(records: Iterable[Record]) -> str:
    """Encode records as a JSON array string."""
    return json.dumps([record_to_payload(record) for record in records])


def decode_records(raw_value: str) -> tuple[Record, ...]:
    """Decode a stored JSON array back into records.

    Entries are re-validated with the ingestion row rules, so an entry
    with a blank required field is dropped and ids are renumbered densely.

    Args:
        raw_value: Stored JSON text.

    Returns:
        Valid records in stored order.

    Raises:
        ValueError: If the payload is not a JSON array of objects.
    """
    payload = json.loads(raw_value)
    if not isinstance(payload, list):
        raise ValueError("Invalid records payload: expected JSON array")
    records: list[Record] = []
    for index, entry in enumerate(payload, 1):
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid record at position {index}: expected JSON object")
        record = build_record(
            len(records) + 1,
            entry.get("random"),
            entry.get("name"),
            _qr_field(entry),
        )
        if record is not None:
            records.append(record)
    return tuple(records)


def encode_profile(profile: Profile) -> str:
    return json.dumps({"userName": profile.user_name})


def decode_profile(raw_value: str) -> Profile:
    """Decode a stored profile object.

    Raises:
        ValueError: If the payload is not a JSON object.
    """
    payload = json.loads(raw_value)
    if not isinstance(payload, dict):
        raise ValueError("Invalid profile payload: expected JSON object")
    user_name = payload.get("userName", payload.get("user_name", ""))
    return Profile(user_name=str(user_name or ""))


def _qr_field(entry: dict[str, Any]) -> Any:
    if "qrContent" in entry:
        return entry["qrContent"]
    return entry.get("qr_content")
