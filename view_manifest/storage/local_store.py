"""
Filesystem-backed object store for Pi/SSD-only mode.

Mirrors the subset of the S3Client interface the manifest uses. Buckets are
directories under the root, keys are relative paths, and writes go through
a temp file + rename so readers never observe a partial blob.
"""

from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from ..errors import NotFoundError, TransportError


class LocalStore:
    """Directory tree pretending to be an object store."""

    def __init__(self, root: str | Path, bucket: str = "ata"):
        self.root = Path(root)
        self.bucket = bucket
        logger.info(f"LocalStore initialized: root={self.root}, bucket={self.bucket}")

    def _path(self, key: str, bucket: Optional[str]) -> Path:
        return self.root / (bucket or self.bucket) / key

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        bucket: Optional[str] = None,
    ) -> str:
        """Write blob atomically. content_type is accepted for interface parity."""
        path = self._path(key, bucket)
        tmp_path = path.parent / f".{path.name}_{uuid.uuid4().hex[:8]}.tmp"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            shutil.move(str(tmp_path), str(path))
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise TransportError(f"write {path} failed: {e}") from e
        logger.debug(f"Put local object: {path} ({len(data)} bytes)")
        return uuid.uuid4().hex

    def get_object(self, key: str, bucket: Optional[str] = None) -> bytes:
        path = self._path(key, bucket)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(key, bucket or self.bucket) from e
        except OSError as e:
            raise TransportError(f"read {path} failed: {e}") from e

    def list_objects(
        self,
        prefix: str = "",
        bucket: Optional[str] = None,
        delimiter: Optional[str] = None,
        max_keys: int = 1000,
    ) -> List[Dict]:
        """
        List keys starting with prefix, sorted, capped at max_keys.

        With a delimiter, keys containing it after the prefix are rolled up
        (excluded from Contents), matching S3 semantics.
        """
        base = self.root / (bucket or self.bucket)
        if not base.exists():
            return []

        keys: List[str] = []
        try:
            for dirpath, _dirnames, filenames in os.walk(base):
                for name in filenames:
                    if name.startswith(".") and name.endswith(".tmp"):
                        continue
                    key = (Path(dirpath) / name).relative_to(base).as_posix()
                    if not key.startswith(prefix):
                        continue
                    if delimiter and delimiter in key[len(prefix):]:
                        continue
                    keys.append(key)
        except OSError as e:
            raise TransportError(f"list {base}/{prefix} failed: {e}") from e

        keys.sort()
        if len(keys) > max_keys:
            logger.warning(
                f"Local listing of {prefix} truncated at {max_keys} keys; "
                "later keys are not included"
            )
            keys = keys[:max_keys]
        return [{'Key': key} for key in keys]
