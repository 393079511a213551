"""
View manifest: a durable, self-healing index of dates backed by an object store.
"""

from .errors import (
    DecodeError,
    ManifestError,
    ManifestLoadError,
    NotFoundError,
    TransportError,
)
from .manifests import DateSet, Manifest

__all__ = [
    "DateSet",
    "DecodeError",
    "Manifest",
    "ManifestError",
    "ManifestLoadError",
    "NotFoundError",
    "TransportError",
]
