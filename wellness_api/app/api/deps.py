"""
FastAPI dependencies wiring stores into services.

Stores are created once by ``create_app`` and kept on ``app.state``;
handlers never construct a store client themselves.
"""

from fastapi import Request

from wellness_api.app.core.blob_store import BlobStore
from wellness_api.app.core.kv_store import KVStore
from wellness_api.app.services.memory_service import MemoryService
from wellness_api.app.services.mood_service import MoodService
from wellness_api.app.services.reminder_service import ReminderService


def get_kv(request: Request) -> KVStore:
    return request.app.state.kv


def get_blobs(request: Request) -> BlobStore:
    return request.app.state.blobs


def get_mood_service(request: Request) -> MoodService:
    return MoodService(get_kv(request))


def get_reminder_service(request: Request) -> ReminderService:
    return ReminderService(get_kv(request))


def get_memory_service(request: Request) -> MemoryService:
    return MemoryService(
        get_kv(request),
        get_blobs(request),
        signed_url_ttl=request.app.state.settings.signed_url_ttl,
    )
