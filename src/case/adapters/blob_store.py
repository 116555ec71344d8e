"""Blob storage for karyotype documents and report files."""

import abc
import logging
from io import BytesIO
from typing import Optional, Set

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError as TransportError

import config
from shared.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class AbstractBlobStore(abc.ABC):
    """Upload-by-path and public URL lookup, one bucket per document kind."""

    @abc.abstractmethod
    def put(self, bucket: str, key: str, content: bytes, content_type: str) -> str:
        """
        Store ``content`` at ``bucket/key``.

        Returns:
            The object key

        Raises:
            StorageError: If the object could not be stored
        """
        raise NotImplementedError

    @abc.abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        raise NotImplementedError


class MinIOBlobStore(AbstractBlobStore):
    """MinIO implementation of the blob store."""

    def __init__(self, client: Optional[Minio] = None, public_base_url: Optional[str] = None):
        minio_config = config.get_minio_config()
        self.client = client or Minio(
            endpoint=minio_config["endpoint"],
            access_key=minio_config["access_key"],
            secret_key=minio_config["secret_key"],
            secure=minio_config["secure"],
        )
        self.public_base_url = (public_base_url or minio_config["public_base_url"]).rstrip("/")
        self._known_buckets = set()  # type: Set[str]

    def _ensure_bucket_exists(self, bucket: str):
        """Ensure the bucket exists, create if it doesn't."""
        if bucket in self._known_buckets:
            return
        if not self.client.bucket_exists(bucket):
            self.client.make_bucket(bucket)
            logger.info(f"Created MinIO bucket: {bucket}")
        self._known_buckets.add(bucket)

    def put(self, bucket: str, key: str, content: bytes, content_type: str) -> str:
        try:
            self._ensure_bucket_exists(bucket)
            self.client.put_object(
                bucket_name=bucket,
                object_name=key,
                data=BytesIO(content),
                length=len(content),
                content_type=content_type,
            )
        except (S3Error, TransportError) as e:
            logger.error(f"Failed to store {bucket}/{key}: {e}")
            raise StorageError(f"Failed to store {key}: {e}") from e

        logger.info(f"Stored {len(content)} bytes at {bucket}/{key}")
        return key

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{bucket}/{key}"
