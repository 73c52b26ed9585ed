"""
Pydantic schemas for reminders.

A reminder fires every day at a local wall‑clock ``HH:MM`` while it is
enabled.  ``type`` distinguishes medicine from ordinary tasks and only
affects how the notification is presented.  Reminders are keyed by
their server‑assigned creation time (``reminder:<createdAt>``).
"""

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ReminderType = Literal["medicine", "task"]

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_title(v: str) -> str:
    if not v.strip():
        raise ValueError("Title is required")
    return v


def _check_time(v: str) -> str:
    if not TIME_PATTERN.match(v):
        raise ValueError("Time must be a 24-hour HH:MM string")
    return v


class ReminderCreate(BaseModel):
    """Body of ``POST /reminders``.

    ``type`` defaults to ``"task"`` and ``enabled`` to ``True``; an
    explicit ``null`` for either is treated as omitted.
    """

    title: str
    time: str = Field(..., description="Local wall‑clock time, HH:MM")
    type: Optional[ReminderType] = None
    enabled: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("time")
    @classmethod
    def time_format(cls, v: str) -> str:
        return _check_time(v)


class ReminderUpdate(BaseModel):
    """Body of ``PUT /reminders/{id}``.

    Every field is optional.  Only fields present and non‑null in the
    request are merged over the stored reminder; unknown fields are
    dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    time: Optional[str] = None
    type: Optional[ReminderType] = None
    enabled: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_title(v)

    @field_validator("time")
    @classmethod
    def time_format(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_time(v)

    def changes(self) -> dict:
        """Return the supplied, non‑null fields."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class ReminderRead(BaseModel):
    """A stored reminder."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    time: str
    type: ReminderType = "task"
    enabled: bool = True
    created_at: int = Field(..., alias="createdAt")
