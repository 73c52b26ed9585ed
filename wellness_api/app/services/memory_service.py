"""
Service for the photo journal.

A memory is a caption, a photo, or both.  Photos arrive as base64
data URLs, are decoded and written to the blob store under a freshly
generated path, and only that path is persisted in the memory
document.  Listing memories signs a read URL for every photo; a photo
whose URL cannot be signed is returned without ``photoUrl`` instead of
failing the list.

Deleting a memory removes its photo first.  If that removal fails the
error is logged and the document is deleted anyway; the orphaned
object is not retried.
"""

import base64
import binascii
import logging
import secrets
import string
import time
from typing import Callable, List, Optional

from pydantic import ValidationError as SchemaError

from wellness_api.app.core.blob_store import BlobStore
from wellness_api.app.core.errors import StorageError, UploadError, ValidationError
from wellness_api.app.core.kv_store import KVStore
from wellness_api.app.schemas.memory import MemoryCreate, MemoryRecord, MemoryView
from wellness_api.app.services import record_key

MEMORY_PREFIX = "memory:"
PHOTO_CONTENT_TYPE = "image/jpeg"
DEFAULT_SIGNED_URL_TTL = 3600

_BASE36 = string.digits + string.ascii_lowercase


def _now_ms() -> int:
    return int(time.time() * 1000)


def decode_data_url(value: str) -> bytes:
    """Decode a ``data:<mime>;base64,<payload>`` string to raw bytes.

    A value without a comma is treated as bare base64.  Whitespace
    inside the payload is ignored and missing ``=`` padding is restored.

    Raises
    ------
    ValidationError
        If the payload is empty or not valid base64.
    """
    payload = value.split(",", 1)[1] if "," in value else value
    payload = "".join(payload.split())
    if not payload:
        raise ValidationError("photoBase64: empty image payload")
    try:
        return base64.b64decode(payload + "=" * (-len(payload) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"photoBase64: invalid base64 data ({exc})") from exc


def generate_photo_path(now_ms: int) -> str:
    """Return ``<epoch-ms>-<7 random base36 chars>.jpg``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{now_ms}-{suffix}.jpg"


class MemoryService:
    """Create, list and delete photo memories.

    Parameters
    ----------
    kv : KVStore
        Store holding the ``memory:`` documents.
    blobs : BlobStore
        Store holding the photo bytes.
    signed_url_ttl : int
        Validity of generated photo URLs in seconds.
    clock : Callable[[], int], optional
        Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        kv: KVStore,
        blobs: BlobStore,
        signed_url_ttl: int = DEFAULT_SIGNED_URL_TTL,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.kv = kv
        self.blobs = blobs
        self.signed_url_ttl = signed_url_ttl
        self.clock = clock or _now_ms

    def _view(self, record: MemoryRecord) -> MemoryView:
        if not record.photo_path:
            return MemoryView(record=record)
        try:
            url = self.blobs.create_signed_url(record.photo_path, self.signed_url_ttl)
        except StorageError as exc:
            logging.getLogger(__name__).warning(
                "Could not sign URL for photo %s: %s", record.photo_path, exc
            )
            return MemoryView(record=record)
        return MemoryView(record=record, photo_url=url)

    async def list_memories(self) -> List[MemoryView]:
        """Return all memories, newest first, with signed photo URLs."""
        logger = logging.getLogger(__name__)
        records: List[MemoryRecord] = []
        for doc in self.kv.scan_by_prefix(MEMORY_PREFIX):
            try:
                records.append(MemoryRecord.model_validate(doc))
            except SchemaError as exc:
                logger.warning("Skipping malformed memory document %r: %s", doc, exc)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return [self._view(record) for record in records]

    async def create_memory(self, data: MemoryCreate) -> str:
        """Store a memory, uploading its photo first, and return its key.

        Raises
        ------
        ValidationError
            If neither a caption nor a photo is supplied, or the photo
            is not valid base64.
        UploadError
            If the photo cannot be written.  Nothing is persisted.
        """
        logger = logging.getLogger(__name__)
        if not data.caption and not data.photo_base64:
            raise ValidationError("Caption or photo is required")

        timestamp = data.timestamp or self.clock()
        memory_id = f"{MEMORY_PREFIX}{timestamp}"
        photo_path: Optional[str] = None

        if data.photo_base64:
            photo = decode_data_url(data.photo_base64)
            photo_path = generate_photo_path(self.clock())
            try:
                self.blobs.upload(photo_path, photo, PHOTO_CONTENT_TYPE)
            except StorageError as exc:
                logger.error("Error uploading photo %s: %s", photo_path, exc)
                raise UploadError("Failed to upload photo") from exc
            logger.info("Uploaded photo %s (%d bytes)", photo_path, len(photo))

        record = MemoryRecord(caption=data.caption, photo_path=photo_path, timestamp=timestamp)
        self.kv.set(memory_id, record.to_document())
        logger.info("Memory %s created", memory_id)
        return memory_id

    async def delete_memory(self, memory_id: str) -> None:
        """Delete a memory and, best effort, its photo.  Idempotent."""
        logger = logging.getLogger(__name__)
        key = record_key(MEMORY_PREFIX, memory_id)
        existing = self.kv.get(key)
        photo_path = existing.get("photoPath") if isinstance(existing, dict) else None
        if photo_path:
            try:
                self.blobs.remove(photo_path)
            except StorageError as exc:
                logger.warning("Failed to remove photo %s of %s: %s", photo_path, key, exc)
        self.kv.delete(key)
        logger.info("Memory %s deleted", key)
