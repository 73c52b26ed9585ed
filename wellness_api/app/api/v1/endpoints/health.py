"""Liveness probe."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Return ``{"status": "ok"}`` while the service is up."""
    return {"status": "ok"}
