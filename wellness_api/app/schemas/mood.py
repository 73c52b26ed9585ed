"""
Pydantic schemas for mood log entries.

A mood entry records an emoji, an optional note and the client's
epoch‑millisecond timestamp.  The timestamp doubles as the record's
key discriminator (``mood:<timestamp>``), so two entries logged in the
same millisecond overwrite each other.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MoodCreate(BaseModel):
    """Body of ``POST /moods``."""

    emoji: str = Field(..., description="Emoji describing the mood")
    note: Optional[str] = Field(None, description="Free‑text note")
    timestamp: int = Field(..., gt=0, description="Client time in epoch milliseconds")

    @field_validator("emoji")
    @classmethod
    def emoji_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Emoji is required")
        return v


class MoodRead(BaseModel):
    """A stored mood entry."""

    emoji: str
    note: Optional[str] = None
    timestamp: int
