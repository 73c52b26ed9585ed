"""
Service for the mood log.

Moods are append‑only: there is no update or delete operation.  The
key is derived from the client's timestamp, so logging two moods in
the same millisecond keeps only the later one.
"""

import logging
from typing import List

from pydantic import ValidationError as SchemaError

from wellness_api.app.core.kv_store import KVStore
from wellness_api.app.schemas.mood import MoodCreate, MoodRead

MOOD_PREFIX = "mood:"


class MoodService:
    """Create and list mood entries."""

    def __init__(self, kv: KVStore) -> None:
        self.kv = kv

    async def list_moods(self) -> List[MoodRead]:
        """Return all mood entries, newest first.

        Documents that do not match the mood schema are skipped with a
        warning rather than failing the whole list.
        """
        logger = logging.getLogger(__name__)
        moods: List[MoodRead] = []
        for doc in self.kv.scan_by_prefix(MOOD_PREFIX):
            try:
                moods.append(MoodRead.model_validate(doc))
            except SchemaError as exc:
                logger.warning("Skipping malformed mood document %r: %s", doc, exc)
        moods.sort(key=lambda m: m.timestamp, reverse=True)
        return moods

    async def create_mood(self, data: MoodCreate) -> str:
        """Store a mood entry and return its key."""
        logger = logging.getLogger(__name__)
        mood_id = f"{MOOD_PREFIX}{data.timestamp}"
        self.kv.set(mood_id, MoodRead(**data.model_dump()).model_dump(exclude_none=True))
        logger.info("Mood %s logged", mood_id)
        return mood_id
