"""
Signed photo downloads for the local blob backend.

URLs produced by ``LocalBlobStore.create_signed_url`` point here.  The
``expires``/``signature`` pair is the only credential; no bearer token
is required so that the URL can be used directly in an ``<img>`` tag.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from wellness_api.app.api.deps import get_blobs
from wellness_api.app.core.blob_store import BlobStore, LocalBlobStore
from wellness_api.app.core.security import verify_blob_signature

router = APIRouter()


@router.get("/{path:path}")
async def download_blob(
    path: str,
    expires: int = Query(...),
    signature: str = Query(...),
    blobs: BlobStore = Depends(get_blobs),
) -> Response:
    if not isinstance(blobs, LocalBlobStore):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    if not verify_blob_signature(path, expires, signature, blobs.secret):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired signature")
    found = blobs.read(path)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    data, content_type = found
    return Response(content=data, media_type=content_type)
