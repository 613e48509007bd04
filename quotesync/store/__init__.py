from __future__ import annotations

from ._store import RecordStore, now_iso
from .types import LOCAL, SYNCED, ConflictDescriptor, MergeReport, Record, SyncState

__all__ = [
    "LOCAL",
    "SYNCED",
    "ConflictDescriptor",
    "MergeReport",
    "Record",
    "RecordStore",
    "SyncState",
    "now_iso",
]
