"""
Attachment storage: downloads message media and writes it to a backend.

- AttachmentBackend: protocol for write/exists/delete of named blobs.
- LocalDirectoryBackend: flat directory on the local filesystem (default).
- S3CompatibleBackend: MinIO / AWS S3 / any S3-compatible (optional boto3).
- AttachmentStore: download + name + write for one message.

File naming convention:
  {epoch_millis}_{message_id}{ext}
Two attachments of the same message saved within the same millisecond collide.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Protocol

from loguru import logger

from telegram_archive.config import ArchiveSettings
from telegram_archive.errors import AttachmentError
from telegram_archive.events import AttachmentRef, MessagingClient

MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
    "video/x-matroska": ".mkv",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "application/pdf": ".pdf",
    "application/zip": ".zip",
    "application/x-rar-compressed": ".rar",
    "text/plain": ".txt",
}

PHOTO_EXTENSION = ".jpg"


def extension_from_mime(mime_type: str | None) -> str:
    """Return the known extension for mime_type, or "" if unknown."""
    if not mime_type:
        return ""
    return MIME_EXTENSIONS.get(mime_type, "")


def resolve_extension(ref: AttachmentRef) -> str:
    """
    Pick the file extension for an attachment.

    Declared MIME type first, then ".jpg" for photos, then the extension of
    the first filename attribute; "" when nothing matches.
    """
    if ref.mime_type:
        ext = extension_from_mime(ref.mime_type)
    elif ref.is_photo:
        ext = PHOTO_EXTENSION
    else:
        ext = ""
    if not ext and ref.file_names:
        ext = Path(ref.file_names[0]).suffix
    return ext


def attachment_filename(message_id: int, ext: str, now_ms: int | None = None) -> str:
    """Return the target name, e.g. 1700000000000_42.jpg."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{now_ms}_{message_id}{ext}"


class AttachmentBackend(Protocol):
    """Protocol for attachment blob storage; paths returned by write() are stored on records."""

    def write(self, name: str, data: bytes) -> str:
        """Store data under name; return the path to record."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def delete(self, path: str) -> None:
        """Delete by path; a missing path is not an error."""
        ...


class LocalDirectoryBackend:
    """Flat directory of attachment files. Paths are `directory/name`."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def write(self, name: str, data: bytes) -> str:
        path = self.directory / name
        path.write_bytes(data)
        return str(path)

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def delete(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)


class S3CompatibleBackend:
    """
    S3-compatible backend (MinIO, AWS S3, etc.). Paths are object keys under `prefix`.

    Requires: pip install boto3 (or pip install -e ".[s3]").
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "media/",
        endpoint_url: str | None = None,
        region_name: str = "us-east-1",
        access_key: str | None = None,
        secret_key: str | None = None,
    ):
        """
        Args:
            bucket: Bucket name.
            prefix: Key prefix for attachment objects.
            endpoint_url: Optional endpoint (e.g. http://localhost:9000 for MinIO).
            region_name: AWS region when using AWS S3.
            access_key: Access key (optional if using env/instance profile).
            secret_key: Secret key (optional if using env/instance profile).
        """
        self.bucket = bucket
        self.prefix = prefix
        self._endpoint_url = endpoint_url
        self._region_name = region_name
        self._access_key = access_key
        self._secret_key = secret_key
        self._client = None

    def _get_client(self):
        import boto3
        from botocore.config import Config

        if self._client is None:
            kwargs = {
                "service_name": "s3",
                "region_name": self._region_name,
                "config": Config(signature_version="s3v4"),
            }
            if self._endpoint_url:
                kwargs["endpoint_url"] = self._endpoint_url
            if self._access_key and self._secret_key:
                kwargs["aws_access_key_id"] = self._access_key
                kwargs["aws_secret_access_key"] = self._secret_key
            self._client = boto3.client(**kwargs)
        return self._client

    def write(self, name: str, data: bytes) -> str:
        key = f"{self.prefix}{name}"
        self._get_client().put_object(Bucket=self.bucket, Key=key, Body=data)
        return key

    def exists(self, path: str) -> bool:
        client = self._get_client()
        from botocore.exceptions import ClientError

        try:
            client.head_object(Bucket=self.bucket, Key=path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def delete(self, path: str) -> None:
        self._get_client().delete_object(Bucket=self.bucket, Key=path)


def create_attachment_backend(settings: ArchiveSettings) -> AttachmentBackend:
    """
    Create the attachment backend named by settings.attachment_backend.

    "s3" requires S3_BUCKET; anything else uses the local media directory.
    """
    if settings.attachment_backend == "s3":
        if not settings.s3_bucket:
            raise ValueError("ATTACHMENT_BACKEND=s3 requires S3_BUCKET")
        return S3CompatibleBackend(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint_url,
            region_name=settings.s3_region,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
        )
    return LocalDirectoryBackend(settings.media_dir)


class AttachmentStore:
    """Downloads attachments through the messaging client and writes them to a backend."""

    def __init__(self, client: MessagingClient, backend: AttachmentBackend) -> None:
        self._client = client
        self.backend = backend

    async def save(self, message_id: int, ref: AttachmentRef) -> str:
        """
        Download and persist one attachment; return its path.

        Raises AttachmentError when the download or the write fails.
        """
        try:
            data = await self._client.download_attachment(ref)
        except Exception as exc:
            raise AttachmentError(message_id, f"download failed: {exc}") from exc
        name = attachment_filename(message_id, resolve_extension(ref))
        try:
            path = await asyncio.to_thread(self.backend.write, name, data)
        except Exception as exc:
            raise AttachmentError(message_id, f"write of {name} failed: {exc}") from exc
        logger.debug(f"Saved attachment {path}")
        return path
