"""
Top‑level router for version 1 of the API.

All resource routers require the static bearer token.  The blob
download route is the exception: its URLs are self‑authenticating
through their signature.
"""

from fastapi import APIRouter, Depends

from wellness_api.app.core.security import require_token
from .endpoints import blobs, health, memories, moods, reminders

router = APIRouter()

_authenticated = [Depends(require_token)]

router.include_router(health.router, tags=["health"], dependencies=_authenticated)
router.include_router(moods.router, prefix="/moods", tags=["moods"], dependencies=_authenticated)
router.include_router(reminders.router, prefix="/reminders", tags=["reminders"], dependencies=_authenticated)
router.include_router(memories.router, prefix="/memories", tags=["memories"], dependencies=_authenticated)
router.include_router(blobs.router, prefix="/blobs", tags=["blobs"])
