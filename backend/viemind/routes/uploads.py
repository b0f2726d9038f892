from __future__ import annotations
from fastapi import APIRouter, Depends, Response
from viemind.services.errors import NotFound
from viemind.services.uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/uploads", tags=["uploads"])

@router.get("/{key:path}")
def get_upload(key: str, uploads: UploadStore = Depends(get_upload_store)):
    try:
        data, content_type = uploads.get_bytes(key)
    except FileNotFoundError:
        raise NotFound("File not found")
    return Response(content=data, media_type=content_type)
