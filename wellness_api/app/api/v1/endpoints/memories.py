"""
Photo journal endpoints.

``GET /memories`` returns every memory with a ``photoUrl`` valid for
the configured TTL (one hour by default).  The URL is re‑signed on
each request and must not be cached as an identifier; ``photoPath`` is
the stable reference.

``POST /memories`` accepts a caption, a base64 data‑URL photo, or both.
The server does not re‑check photo size; clients cap uploads at 5 MB.
"""

from fastapi import APIRouter, Depends

from wellness_api.app.api.deps import get_memory_service
from wellness_api.app.schemas.common import envelope
from wellness_api.app.schemas.memory import MemoryCreate
from wellness_api.app.services.memory_service import MemoryService

router = APIRouter()


@router.get("")
async def list_memories(service: MemoryService = Depends(get_memory_service)) -> dict:
    views = await service.list_memories()
    return envelope(memories=[v.to_response() for v in views])


@router.post("")
async def create_memory(
    memory_in: MemoryCreate,
    service: MemoryService = Depends(get_memory_service),
) -> dict:
    memory_id = await service.create_memory(memory_in)
    return envelope(memoryId=memory_id)


@router.delete("/{memory_id}")
async def delete_memory(
    memory_id: str,
    service: MemoryService = Depends(get_memory_service),
) -> dict:
    """Delete a memory and its photo.  Unknown ids succeed."""
    await service.delete_memory(memory_id)
    return envelope()
