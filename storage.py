# storage.py
"""Durable storage for uploaded payment receipts.

Two backends: local disk (served back through the ``/uploads`` static mount)
and an S3 bucket. Both return a stable URL that the Payment row keeps.
"""
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import Settings, get_settings
from errors import StorageError

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    key: str
    url: str


class ReceiptStorage(Protocol):
    def save(self, data: bytes, content_type: str | None, filename: str | None) -> StoredFile: ...

    def delete(self, key: str) -> None: ...


# только типы чеков, иначе .bin
RECEIPT_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}
ALLOWED_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp", ".pdf"}


def build_key(folder: str, content_type: str | None, filename: str | None) -> str:
    suffix = Path(filename).suffix.lower() if filename else ""
    if suffix not in ALLOWED_SUFFIXES:
        suffix = RECEIPT_SUFFIXES.get((content_type or "").lower(), ".bin")
    return f"{folder}/{uuid.uuid4().hex}{suffix}"


class LocalReceiptStorage:
    def __init__(self, root: str, folder: str, base_url: str):
        self.root = Path(root)
        self.folder = folder
        self.base_url = base_url.rstrip("/")

    def save(self, data: bytes, content_type: str | None, filename: str | None) -> StoredFile:
        key = build_key(self.folder, content_type, filename)
        path = self.root / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.exception("Could not write receipt to %s", path)
            raise StorageError() from e
        return StoredFile(key=key, url=f"{self.base_url}/uploads/{key}")

    def delete(self, key: str) -> None:
        (self.root / key).unlink(missing_ok=True)


class S3ReceiptStorage:
    def __init__(self, bucket: str, folder: str, region: str, public_url: str = "", client=None):
        self.bucket = bucket
        self.folder = folder
        self.public_url = (public_url or f"https://{bucket}.s3.{region}.amazonaws.com").rstrip("/")
        self.client = client or boto3.client("s3", region_name=region)

    def save(self, data: bytes, content_type: str | None, filename: str | None) -> StoredFile:
        key = build_key(self.folder, content_type, filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception("S3 upload failed for bucket %s", self.bucket)
            raise StorageError() from e
        return StoredFile(key=key, url=f"{self.public_url}/{key}")

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)


def build_storage(settings: Settings) -> ReceiptStorage:
    if settings.storage_backend == "s3":
        return S3ReceiptStorage(
            bucket=settings.s3_bucket,
            folder=settings.upload_folder,
            region=settings.s3_region,
            public_url=settings.s3_public_url,
        )
    return LocalReceiptStorage(settings.upload_dir, settings.upload_folder, settings.public_base_url)


_storage: ReceiptStorage | None = None


def get_storage() -> ReceiptStorage:
    global _storage
    if _storage is None:
        _storage = build_storage(get_settings())
    return _storage
