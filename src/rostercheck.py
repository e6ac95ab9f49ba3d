"""Public SDK surface for rostercheck.

This module provides a stable import path for SDK users.
It re-exports the primary client, config, and typed models.
"""

from __future__ import annotations

from core.config import RosterConfig
from core.errors import (
    EmptyFileError,
    MissingColumnsError,
    NoValidRecordsError,
    RosterError,
    RosterIngestError,
    RosterStoreError,
)
from core.normalization import normalize
from core.types import (
    ColumnMapping,
    Dataset,
    IngestReport,
    IngestResult,
    MatchResult,
    Profile,
    Record,
    ScanOutcome,
)
from ingest.roster_ingest import ingest_roster
from store.roster_sdk import RosterClient

__all__ = [
    "ColumnMapping",
    "Dataset",
    "EmptyFileError",
    "IngestReport",
    "IngestResult",
    "MatchResult",
    "MissingColumnsError",
    "NoValidRecordsError",
    "Profile",
    "Record",
    "RosterClient",
    "RosterConfig",
    "RosterError",
    "RosterIngestError",
    "RosterStoreError",
    "ScanOutcome",
    "ingest_roster",
    "normalize",
]
