"""
Reminder endpoints.

Reminder ids are the store keys returned as ``reminderId``
(``reminder:<createdAt>``); clients usually URL‑encode them.  The bare
numeric part is accepted as well.

``PUT`` merges the supplied fields over the stored reminder and
answers 404 for an unknown id.  ``DELETE`` succeeds whether or not
the reminder exists.
"""

from fastapi import APIRouter, Depends

from wellness_api.app.api.deps import get_reminder_service
from wellness_api.app.schemas.common import envelope
from wellness_api.app.schemas.reminder import ReminderCreate, ReminderUpdate
from wellness_api.app.services.reminder_service import ReminderService

router = APIRouter()


@router.get("")
async def list_reminders(service: ReminderService = Depends(get_reminder_service)) -> dict:
    reminders = await service.list_reminders()
    return envelope(reminders=[r.model_dump(by_alias=True) for r in reminders])


@router.post("")
async def create_reminder(
    reminder_in: ReminderCreate,
    service: ReminderService = Depends(get_reminder_service),
) -> dict:
    """Create a reminder.  ``title`` and ``time`` (HH:MM) are required."""
    reminder_id = await service.create_reminder(reminder_in)
    return envelope(reminderId=reminder_id)


@router.put("/{reminder_id}")
async def update_reminder(
    reminder_id: str,
    reminder_in: ReminderUpdate,
    service: ReminderService = Depends(get_reminder_service),
) -> dict:
    await service.update_reminder(reminder_id, reminder_in)
    return envelope()


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
) -> dict:
    await service.delete_reminder(reminder_id)
    return envelope()
