from fastapi import APIRouter, Depends, File, UploadFile
from app.modules.media.schemas import UploadedMedia
from app.modules.media.storage import ThumbnailStorage
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client

router = APIRouter(prefix="/media", tags=["media"])


def get_thumbnail_storage(supabase: Client = Depends(get_caller_client)) -> ThumbnailStorage:
    return ThumbnailStorage(supabase)


@router.post("/thumbnails", response_model=UploadedMedia, status_code=201)
async def upload_thumbnail(
    file: UploadFile = File(...),
    caller: Caller = Depends(get_current_caller),
    storage: ThumbnailStorage = Depends(get_thumbnail_storage)
):
    """Upload a thumbnail image (max 5MB) into the caller's folder"""
    return await storage.upload_thumbnail_file(caller, file)
