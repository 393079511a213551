"""
S3 storage client backing the date manifest.

Supports both MinIO (via Tailscale) and AWS S3. Botocore failures are mapped
onto the manifest error taxonomy so callers never handle ClientError directly.
"""

import os
from typing import Optional, Dict, List

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..errors import NotFoundError, TransportError

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(e: ClientError) -> Optional[str]:
    return e.response.get('Error', {}).get('Code')


class S3Client:
    """
    S3 client wrapper with MinIO/AWS compatibility.

    Provides:
    - Blob get/put for the manifest snapshot
    - Single-page key listing for rebuilding the manifest
    - Path-style addressing for MinIO
    - Transport retries and timeouts via botocore Config
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        bucket: Optional[str] = None,
        region: str = "us-east-1",
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        force_path_style: bool = True,
        max_attempts: int = 3,
    ):
        """
        Initialize S3 client.

        Args:
            endpoint_url: S3 endpoint (e.g., http://minio:9000)
            bucket: Default bucket name
            region: AWS region
            access_key: AWS/MinIO access key
            secret_key: AWS/MinIO secret key
            force_path_style: Use path-style addressing (required for MinIO)
            max_attempts: Transport-level retry attempts handled by botocore
        """
        self.endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT")
        self.bucket = bucket or os.getenv("S3_BUCKET", "ata")
        self.region = region or os.getenv("S3_REGION", "us-east-1")

        # Configure boto3 for MinIO compatibility
        config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path' if force_path_style else 'virtual'},
            retries={'max_attempts': max_attempts, 'mode': 'standard'},
        )

        self.s3 = boto3.client(
            's3',
            endpoint_url=self.endpoint_url,
            region_name=self.region,
            aws_access_key_id=access_key or os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=secret_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
            config=config
        )

        logger.info(f"S3Client initialized: endpoint={self.endpoint_url}, bucket={self.bucket}")

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
        bucket: Optional[str] = None,
    ) -> str:
        """
        Upload object to S3.

        Args:
            key: Object key (path)
            data: Object data as bytes
            content_type: MIME type stored with the object
            bucket: Override default bucket

        Returns:
            ETag of uploaded object

        Raises:
            TransportError: On any S3 failure
        """
        bucket = bucket or self.bucket

        kwargs = {
            'Bucket': bucket,
            'Key': key,
            'Body': data,
        }
        if content_type:
            kwargs['ContentType'] = content_type

        try:
            response = self.s3.put_object(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Put failed for s3://{bucket}/{key}: {e}")
            raise TransportError(f"put s3://{bucket}/{key} failed: {e}") from e

        etag = response['ETag'].strip('"')
        logger.debug(f"Put object: s3://{bucket}/{key} (ETag: {etag})")
        return etag

    def get_object(self, key: str, bucket: Optional[str] = None) -> bytes:
        """
        Download object from S3.

        Raises:
            NotFoundError: If the object does not exist
            TransportError: On any other S3 failure
        """
        bucket = bucket or self.bucket

        try:
            response = self.s3.get_object(Bucket=bucket, Key=key)
            data = response['Body'].read()
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                logger.debug(f"Object not found: s3://{bucket}/{key}")
                raise NotFoundError(key, bucket) from e
            raise TransportError(f"get s3://{bucket}/{key} failed: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"get s3://{bucket}/{key} failed: {e}") from e

        logger.debug(f"Got object: s3://{bucket}/{key} ({len(data)} bytes)")
        return data

    def list_objects(
        self,
        prefix: str = "",
        bucket: Optional[str] = None,
        delimiter: Optional[str] = None,
        max_keys: int = 1000,
    ) -> List[Dict]:
        """
        List one page of objects with given prefix.

        Continuation tokens are not followed; a truncated page is logged.

        Args:
            prefix: Key prefix to filter
            bucket: Override default bucket
            delimiter: Delimiter for hierarchical listing (e.g., '/')
            max_keys: Page size requested from S3

        Returns:
            List of object metadata dicts with keys: Key, Size, ETag, LastModified
        """
        bucket = bucket or self.bucket

        kwargs = {'Bucket': bucket, 'Prefix': prefix, 'MaxKeys': max_keys}
        if delimiter:
            kwargs['Delimiter'] = delimiter

        try:
            page = self.s3.list_objects_v2(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"List objects failed: {e}")
            raise TransportError(f"list s3://{bucket}/{prefix} failed: {e}") from e

        objects = [
            {
                'Key': obj['Key'],
                'Size': obj.get('Size'),
                'ETag': obj.get('ETag', '').strip('"'),
                'LastModified': obj.get('LastModified'),
            }
            for obj in page.get('Contents', [])
        ]
        if page.get('IsTruncated'):
            logger.warning(
                f"Listing s3://{bucket}/{prefix} truncated at {len(objects)} keys; "
                "later keys are not included"
            )
        logger.debug(f"Listed {len(objects)} objects with prefix: s3://{bucket}/{prefix}")
        return objects

    def delete_object(self, key: str, bucket: Optional[str] = None):
        """
        Delete object from S3.

        Maintenance helper (cleanup of test or retired prefixes); the manifest
        itself never deletes keys.
        """
        bucket = bucket or self.bucket
        try:
            self.s3.delete_object(Bucket=bucket, Key=key)
            logger.debug(f"Deleted object: s3://{bucket}/{key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Delete failed for s3://{bucket}/{key}: {e}")
            raise TransportError(f"delete s3://{bucket}/{key} failed: {e}") from e


def get_s3_client() -> S3Client:
    """Factory function to create S3 client from environment."""
    return S3Client(
        endpoint_url=os.getenv("S3_ENDPOINT"),
        bucket=os.getenv("S3_BUCKET", "ata"),
        region=os.getenv("S3_REGION", "us-east-1"),
        access_key=os.getenv("AWS_ACCESS_KEY_ID"),
        secret_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        force_path_style=os.getenv("S3_FORCE_PATH_STYLE", "true").lower() == "true",
    )
