"""
Environment-driven wiring for the view manifest.

Environment knobs (a .env file in the working directory is honoured):
- MANIFEST_BACKEND=s3|local (default s3)
- S3_ENDPOINT, S3_BUCKET (default ata), S3_REGION (default us-east-1)
- S3_FORCE_PATH_STYLE=true|false (default true)
- MANIFEST_PREFIX (default empty)
- MANIFEST_LOCAL_ROOT (default data_layer/objects, local backend only)
- MANIFEST_GRACE_SECONDS (default 1.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from .manifests.loader import GRACE_DELAY_SECONDS
from .manifests.manager import Manifest
from .storage.local_store import LocalStore
from .storage.s3_client import S3Client

BACKENDS = ("s3", "local")


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    try:
        return max(0.0, float(os.getenv(name, str(default))))
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={os.getenv(name)!r}; using {default}")
        return default


@dataclass
class ManifestSettings:
    """Everything needed to build a store and a Manifest."""
    backend: str = "s3"
    endpoint_url: Optional[str] = None
    bucket: str = "ata"
    region: str = "us-east-1"
    force_path_style: bool = True
    prefix: str = ""
    local_root: str = "data_layer/objects"
    grace_delay: float = GRACE_DELAY_SECONDS

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "ManifestSettings":
        if dotenv:
            load_dotenv()

        backend = os.getenv("MANIFEST_BACKEND", "s3").lower()
        if backend not in BACKENDS:
            raise ValueError(f"MANIFEST_BACKEND must be one of {BACKENDS}, got {backend!r}")

        return cls(
            backend=backend,
            endpoint_url=os.getenv("S3_ENDPOINT") or None,
            bucket=os.getenv("S3_BUCKET", "ata"),
            region=os.getenv("S3_REGION", "us-east-1"),
            force_path_style=_env_bool("S3_FORCE_PATH_STYLE", True),
            prefix=os.getenv("MANIFEST_PREFIX", ""),
            local_root=os.getenv("MANIFEST_LOCAL_ROOT", "data_layer/objects"),
            grace_delay=_env_float("MANIFEST_GRACE_SECONDS", GRACE_DELAY_SECONDS),
        )


def build_store(settings: ManifestSettings):
    """Create the RemoteStore selected by ``settings.backend``."""
    if settings.backend == "local":
        return LocalStore(root=settings.local_root, bucket=settings.bucket)
    return S3Client(
        endpoint_url=settings.endpoint_url,
        bucket=settings.bucket,
        region=settings.region,
        force_path_style=settings.force_path_style,
    )


def get_manifest(settings: Optional[ManifestSettings] = None) -> Manifest:
    """Factory function to create a Manifest from environment."""
    settings = settings or ManifestSettings.from_env()
    logger.info(f"Building manifest: backend={settings.backend}, prefix={settings.prefix!r}")
    return Manifest(
        store=build_store(settings),
        prefix=settings.prefix,
        grace_delay=settings.grace_delay,
    )
