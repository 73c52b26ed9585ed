"""
Binary object storage for memory photos.

Blobs are addressed by a path string that the caller generates; the
path is what a memory record persists.  Read access is granted through
time‑limited signed URLs computed on demand, so the persisted record
never holds an expiring credential.

Implementations
---------------
``InMemoryBlobStore``
    Dict‑backed, used by tests.  Requesting a signed URL for an unknown
    path raises ``StorageError``.
``LocalBlobStore``
    Files under ``<root>/<bucket>/``.  URLs point at the API's
    ``/blobs/{path}`` route and are signed with HMAC (see
    ``core.security``).
``S3BlobStore``
    An S3 bucket accessed through ``boto3``; URLs are presigned
    ``get_object`` requests.

Uploads never overwrite: writing to an existing path raises
``BlobExistsError``.  ``remove`` is idempotent.  Apart from the
in‑memory store, ``create_signed_url`` does not check that the object
exists; a missing object only shows up as a 404 when the URL is
fetched.
"""

from __future__ import annotations

import logging
import mimetypes
import secrets
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import quote, urlencode

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import BlobExistsError, StorageError
from .security import sign_blob_path


logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Abstract binary object store with signed read URLs."""

    bucket: str

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store ``data`` at ``path``.  Raises ``BlobExistsError`` if taken."""

    @abstractmethod
    def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        """Return a URL granting read access to ``path`` for ``ttl_seconds``."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete the object at ``path``.  Missing objects are ignored."""

    def ensure_bucket(self) -> None:
        """Create the backing bucket if it does not exist yet."""


class InMemoryBlobStore(BlobStore):
    """Blob store keeping objects in a dict."""

    def __init__(self, bucket: str = "memories") -> None:
        self.bucket = bucket
        self.objects: Dict[str, Tuple[bytes, str]] = {}

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        if path in self.objects:
            raise BlobExistsError(f"Object {path} already exists")
        self.objects[path] = (bytes(data), content_type)

    def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        if path not in self.objects:
            raise StorageError(f"Object {path} not found")
        expires = int(time.time()) + ttl_seconds
        token = secrets.token_urlsafe(16)
        return f"memory://{self.bucket}/{quote(path)}?{urlencode({'expires': expires, 'token': token})}"

    def remove(self, path: str) -> None:
        self.objects.pop(path, None)


class LocalBlobStore(BlobStore):
    """Blob store writing files below a local directory.

    Parameters
    ----------
    root : str
        Base directory; objects live in ``<root>/<bucket>/<path>``.
    bucket : str
        Name of the private bucket (a sub‑directory of ``root``).
    base_url : str
        Absolute URL prefix of the ``/blobs`` route, e.g.
        ``http://localhost:8000/api/v1/blobs``.
    secret : str
        HMAC secret used to sign URLs.
    """

    def __init__(self, root: str, bucket: str, base_url: str, secret: str) -> None:
        self.root = Path(root)
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.secret = secret

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def _object_path(self, path: str) -> Path:
        """Map a blob path to a file, refusing paths that escape the bucket."""
        if not path or path.startswith("/") or ".." in Path(path).parts:
            raise StorageError(f"Invalid blob path: {path!r}")
        return self.bucket_dir / path

    def ensure_bucket(self) -> None:
        if not self.bucket_dir.exists():
            self.bucket_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created storage bucket: %s", self.bucket_dir)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        target = self._object_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            raise BlobExistsError(f"Object {path} already exists") from exc
        except OSError as exc:
            raise StorageError(f"Blob upload failed for {path}: {exc}") from exc
        logger.debug("Stored blob %s (%s, %d bytes)", path, content_type, len(data))

    def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        self._object_path(path)
        expires = int(time.time()) + ttl_seconds
        signature = sign_blob_path(path, expires, self.secret)
        query = urlencode({"expires": expires, "signature": signature})
        return f"{self.base_url}/{quote(path)}?{query}"

    def remove(self, path: str) -> None:
        target = self._object_path(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Blob removal failed for {path}: {exc}") from exc

    def read(self, path: str) -> Optional[Tuple[bytes, str]]:
        """Return ``(bytes, content_type)`` for ``path`` or ``None``."""
        try:
            target = self._object_path(path)
        except StorageError:
            return None
        if not target.is_file():
            return None
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        return target.read_bytes(), content_type


class S3BlobStore(BlobStore):
    """Blob store backed by an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: str = "",
        access_key_id: str = "",
        secret_access_key: str = "",
        client=None,
    ) -> None:
        self.bucket = bucket
        if client is None:
            client_kwargs = {}
            if region:
                client_kwargs["region_name"] = region
            if access_key_id and secret_access_key:
                client_kwargs["aws_access_key_id"] = access_key_id
                client_kwargs["aws_secret_access_key"] = secret_access_key
            client = boto3.client("s3", **client_kwargs)
        self.client = client

    def ensure_bucket(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in {"404", "NoSuchBucket", "NotFound"}:
                raise StorageError(f"HeadBucket failed for {self.bucket}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"HeadBucket failed for {self.bucket}: {exc}") from exc
        try:
            self.client.create_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"CreateBucket failed for {self.bucket}: {exc}") from exc
        logger.info("Created storage bucket: %s", self.bucket)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                IfNoneMatch="*",
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in {"PreconditionFailed", "412"}:
                raise BlobExistsError(f"Object {path} already exists") from exc
            raise StorageError(f"Failed to upload to s3://{self.bucket}/{path}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Failed to upload to s3://{self.bucket}/{path}: {exc}") from exc

    def create_signed_url(self, path: str, ttl_seconds: int) -> str:
        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to generate presigned URL for {path}: {exc}") from exc

    def remove(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete s3://{self.bucket}/{path}: {exc}") from exc
