"""
Service for daily reminders.

Reminders are keyed by the server's creation time in epoch
milliseconds.  Updates follow merge‑patch semantics: the supplied
fields are overlaid on the stored document and everything else is
kept.  Deleting is idempotent.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as SchemaError

from wellness_api.app.core.errors import NotFoundError
from wellness_api.app.core.kv_store import KVStore
from wellness_api.app.schemas.reminder import ReminderCreate, ReminderRead, ReminderUpdate
from wellness_api.app.services import record_key

REMINDER_PREFIX = "reminder:"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReminderService:
    """Create, list, update and delete reminders.

    Parameters
    ----------
    kv : KVStore
        Store holding the ``reminder:`` documents.
    clock : Callable[[], int], optional
        Returns the current time in epoch milliseconds.  Used for
        ``createdAt``; injectable for tests.
    """

    def __init__(self, kv: KVStore, clock: Optional[Callable[[], int]] = None) -> None:
        self.kv = kv
        self.clock = clock or _now_ms

    async def list_reminders(self) -> List[ReminderRead]:
        """Return all reminders ordered by time of day, then creation."""
        logger = logging.getLogger(__name__)
        reminders: List[ReminderRead] = []
        for doc in self.kv.scan_by_prefix(REMINDER_PREFIX):
            try:
                reminders.append(ReminderRead.model_validate(doc))
            except SchemaError as exc:
                logger.warning("Skipping malformed reminder document %r: %s", doc, exc)
        reminders.sort(key=lambda r: (r.time, r.created_at))
        return reminders

    async def create_reminder(self, data: ReminderCreate) -> str:
        """Store a new reminder and return its key.

        ``type`` defaults to ``"task"``; ``enabled`` defaults to
        ``True`` unless explicitly ``False``.
        """
        logger = logging.getLogger(__name__)
        created_at = self.clock()
        # Step past keys already taken within the same millisecond.
        while self.kv.get(f"{REMINDER_PREFIX}{created_at}") is not None:
            created_at += 1
        reminder_id = f"{REMINDER_PREFIX}{created_at}"
        reminder = ReminderRead(
            title=data.title,
            time=data.time,
            type=data.type or "task",
            enabled=data.enabled is not False,
            created_at=created_at,
        )
        self.kv.set(reminder_id, reminder.model_dump(by_alias=True))
        logger.info("Reminder %s created for %s", reminder_id, reminder.time)
        return reminder_id

    async def update_reminder(self, reminder_id: str, data: ReminderUpdate) -> Dict[str, Any]:
        """Merge the supplied fields over an existing reminder.

        Raises
        ------
        NotFoundError
            If no reminder is stored under ``reminder_id``.
        """
        logger = logging.getLogger(__name__)
        key = record_key(REMINDER_PREFIX, reminder_id)
        existing = self.kv.get(key)
        if existing is None:
            raise NotFoundError("Reminder not found")
        merged = {**existing, **data.changes()}
        self.kv.set(key, merged)
        logger.info("Reminder %s updated: %s", key, sorted(data.changes()))
        return merged

    async def delete_reminder(self, reminder_id: str) -> None:
        logger = logging.getLogger(__name__)
        key = record_key(REMINDER_PREFIX, reminder_id)
        self.kv.delete(key)
        logger.info("Reminder %s deleted", key)
