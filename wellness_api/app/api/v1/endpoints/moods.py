"""
Mood log endpoints.

``GET /moods`` lists all entries newest first; ``POST /moods`` logs a
new entry and returns its key as ``moodId``.  There are no update or
delete routes.
"""

from fastapi import APIRouter, Depends

from wellness_api.app.api.deps import get_mood_service
from wellness_api.app.schemas.common import envelope
from wellness_api.app.schemas.mood import MoodCreate
from wellness_api.app.services.mood_service import MoodService

router = APIRouter()


@router.get("")
async def list_moods(service: MoodService = Depends(get_mood_service)) -> dict:
    moods = await service.list_moods()
    return envelope(moods=[m.model_dump(exclude_none=True) for m in moods])


@router.post("")
async def create_mood(
    mood_in: MoodCreate,
    service: MoodService = Depends(get_mood_service),
) -> dict:
    """Log a mood.  ``emoji`` and ``timestamp`` are required."""
    mood_id = await service.create_mood(mood_in)
    return envelope(moodId=mood_id)
