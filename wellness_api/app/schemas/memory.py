"""
Pydantic schemas for photo journal memories.

``MemoryRecord`` is the persisted document: an optional caption, the
storage path of an optional photo and a timestamp.  ``MemoryView`` is
what the API returns: the record plus a freshly signed ``photoUrl``.
The URL expires and changes between requests, so a view must never
be written back to the store; ``MemoryView.record`` gives the
storable part.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class MemoryCreate(BaseModel):
    """Body of ``POST /memories``.

    ``photoBase64`` is a data URL (``data:image/...;base64,<payload>``).
    At least one of ``caption`` and ``photoBase64`` must be non‑empty;
    the service enforces this.  ``timestamp`` defaults to the server
    time.
    """

    model_config = ConfigDict(populate_by_name=True)

    caption: Optional[str] = None
    photo_base64: Optional[str] = Field(None, alias="photoBase64")
    timestamp: Optional[int] = Field(None, gt=0)


class MemoryRecord(BaseModel):
    """A memory as stored under ``memory:<timestamp>``."""

    model_config = ConfigDict(populate_by_name=True)

    caption: Optional[str] = None
    photo_path: Optional[str] = Field(None, alias="photoPath")
    timestamp: int

    def to_document(self) -> Dict[str, Any]:
        """Return the stored shape.  A missing caption is left out; ``photoPath`` is always present."""
        return self.model_dump(by_alias=True, exclude={"caption"} if self.caption is None else None)


class MemoryView(BaseModel):
    """A memory as returned to clients, with a short‑lived photo URL."""

    record: MemoryRecord
    photo_url: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """Serialise the record, adding ``photoUrl`` only when one was signed."""
        data = self.record.to_document()
        if self.photo_url:
            data["photoUrl"] = self.photo_url
        return data
