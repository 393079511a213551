"""
Date manifest: in-memory index plus the coordinators that load and persist it.
"""

from .date_set import DateSet
from .freshness import FreshnessCache
from .loader import LoadCoordinator, dates_from_keys
from .manager import Manifest
from .saver import SaveCoordinator
from .snapshot import decode_snapshot, encode_snapshot

__all__ = [
    "DateSet",
    "FreshnessCache",
    "LoadCoordinator",
    "Manifest",
    "SaveCoordinator",
    "dates_from_keys",
    "decode_snapshot",
    "encode_snapshot",
]
