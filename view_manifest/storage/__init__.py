"""
Storage layer for S3 and local filesystem operations.
"""

from .s3_client import S3Client
from .local_store import LocalStore

__all__ = ["S3Client", "LocalStore"]
