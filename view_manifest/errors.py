"""
Error taxonomy for manifest storage and loading.

Store implementations translate their native failures (botocore ClientError,
OSError) into these so the coordinators can treat every backend the same way.
"""

from __future__ import annotations

from typing import Dict


class ManifestError(Exception):
    """Base class for manifest failures."""


class NotFoundError(ManifestError):
    """Requested blob does not exist in the store."""

    def __init__(self, key: str, bucket: str | None = None):
        self.key = key
        self.bucket = bucket
        where = f"{bucket}/{key}" if bucket else key
        super().__init__(f"Object not found: {where}")


class TransportError(ManifestError):
    """Store unreachable or rejected the request."""


class DecodeError(ManifestError):
    """Persisted snapshot is not a valid manifest document."""


class ManifestLoadError(ManifestError):
    """Both the snapshot path and the listing path failed."""

    def __init__(self, errors: Dict[str, BaseException]):
        self.errors = dict(errors)
        detail = "; ".join(f"{path}: {err}" for path, err in self.errors.items())
        super().__init__(f"Manifest load failed ({detail})")
