"""Unit tests for the roster SDK client."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from core.config import RosterConfig
from core.errors import MissingColumnsError
from core.types import Dataset, IngestResult, ScanOutcome
from store.roster_sdk import RosterClient
from tests.fixture_paths import fixture_path


def test_upload_persists_roster_across_clients(tmp_path: Path) -> None:
    """An uploaded roster should be restored by a new client."""
    config = RosterConfig(data_root=tmp_path)

    async def _run() -> tuple[IngestResult, Dataset]:
        async with RosterClient(config) as client:
            result = await client.upload(fixture_path("roster_valid.csv"))
        async with RosterClient(config) as reopened:
            return result, reopened.dataset()

    result, restored = asyncio.run(_run())

    assert result.report.valid_rows == 2
    assert [record.name for record in restored.records] == ["Alice", "Carol"]
    assert restored.source_file_name == "roster_valid.csv"


def test_scan_reports_success_then_suppresses_repeat(tmp_path: Path) -> None:
    """A matched scan should succeed and an immediate repeat be debounced."""
    config = RosterConfig(data_root=tmp_path)

    async def _run() -> list[ScanOutcome | None]:
        async with RosterClient(config) as client:
            await client.upload(fixture_path("roster_valid.csv"))
            return client.scan_many(["ALICE-001", "ALICE-001"])

    first, second = asyncio.run(_run())

    assert first is not None and first.message == "Success! Alice"
    assert second is None


def test_invalid_upload_keeps_previous_roster(tmp_path: Path) -> None:
    """A rejected file should leave the stored roster untouched."""
    config = RosterConfig(data_root=tmp_path)

    async def _run() -> int:
        async with RosterClient(config) as client:
            await client.upload(fixture_path("roster_valid.csv"))
            with pytest.raises(MissingColumnsError):
                await client.upload(fixture_path("roster_missing_columns.csv"))
            return len(client.dataset().records)

    assert asyncio.run(_run()) == 2


def test_clear_and_profile_update(tmp_path: Path) -> None:
    """Clearing removes the roster while the profile persists separately."""
    config = RosterConfig(data_root=tmp_path)

    async def _run() -> tuple[bool, str]:
        async with RosterClient(config) as client:
            await client.upload(fixture_path("roster_valid.csv"))
            await client.update_profile("erin")
            await client.clear()
        async with RosterClient(config) as reopened:
            return reopened.store.has_uploaded_data, reopened.profile().initial

    assert asyncio.run(_run()) == (False, "E")
