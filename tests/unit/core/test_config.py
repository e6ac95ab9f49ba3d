"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import RosterConfig
from core.errors import RosterConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("ROSTER_DATA_ROOT", "./.tmp-roster")

    config = RosterConfig.from_env()

    assert config.data_root.name == ".tmp-roster"


def test_from_env_uses_documented_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset variables should fall back to the default timings and chunking."""
    for name in ("ROSTER_CHUNK_THRESHOLD", "ROSTER_CHUNK_SIZE", "ROSTER_SCAN_COOLDOWN_MS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("ROSTER_PARTIAL_MATCH", raising=False)

    config = RosterConfig.from_env()

    assert (config.chunk_threshold, config.chunk_size, config.scan_cooldown_ms) == (
        100_000,
        50_000,
        2000,
    )
    assert config.partial_match is True


def test_from_env_raises_for_invalid_cooldown(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric cooldown."""
    monkeypatch.setenv("ROSTER_SCAN_COOLDOWN_MS", "soon")

    with pytest.raises(RosterConfigError):
        RosterConfig.from_env()


def test_from_env_rejects_chunk_size_above_threshold(monkeypatch: pytest.MonkeyPatch) -> None:
    """Chunks larger than the chunking threshold should be rejected."""
    monkeypatch.setenv("ROSTER_CHUNK_THRESHOLD", "100")
    monkeypatch.setenv("ROSTER_CHUNK_SIZE", "200")

    with pytest.raises(RosterConfigError, match="ROSTER_CHUNK_SIZE"):
        RosterConfig.from_env()


def test_from_env_parses_partial_match_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Partial match flag should accept common false spellings."""
    monkeypatch.setenv("ROSTER_PARTIAL_MATCH", "off")

    config = RosterConfig.from_env()

    assert config.partial_match is False


def test_from_env_rejects_unknown_flag_value(monkeypatch: pytest.MonkeyPatch) -> None:
    """Partial match flag should fail for unrecognized values."""
    monkeypatch.setenv("ROSTER_PARTIAL_MATCH", "maybe")

    with pytest.raises(RosterConfigError):
        RosterConfig.from_env()
