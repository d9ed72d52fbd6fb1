"""
Storage abstraction for S3-compatible buckets and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.config import Config


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...

    def delete(self, path: str) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        self.stored_objects[path] = bytes(data)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def delete(self, path: str) -> None:
        self.stored_objects.pop(path, None)


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS, MinIO, Supabase storage S3 endpoint).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str = ""

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def upload_bytes(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type or "application/octet-stream",
        )

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.amazonaws.com/{path}"

    def delete(self, path: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=path)
