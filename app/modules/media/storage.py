"""Supabase Storage for tutorial thumbnails.

Objects live in the public `tutorial-media` bucket under `<owner_id>/<epoch_millis>.<ext>`;
storage policies only let the identity named by the first path segment write them.
"""
import logging
import time
from typing import Optional

from fastapi import UploadFile, status
from supabase import Client

from app.config import settings
from app.core import policy
from app.core.errors import UploadError
from app.core.session import Caller
from app.modules.media.schemas import UploadedMedia

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}


def build_object_path(owner_id: str, content_type: str, now_ms: Optional[int] = None) -> str:
    """`<owner_id>/<epoch_millis>.<ext>`; ext comes from the validated content type, never the client filename."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{owner_id}/{now_ms}.{ALLOWED_CONTENT_TYPES[content_type]}"


def validate_thumbnail(content: bytes, content_type: Optional[str]) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadError(
            detail="Thumbnail must be a PNG, JPEG, GIF or WebP image",
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )
    if not content:
        raise UploadError(detail="Thumbnail file is empty", status_code=status.HTTP_400_BAD_REQUEST)
    if len(content) > settings.max_thumbnail_bytes:
        limit_mb = settings.max_thumbnail_bytes // (1024 * 1024)
        raise UploadError(
            detail=f"Image must be less than {limit_mb}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )


class ThumbnailStorage:
    def __init__(self, supabase: Client, bucket_name: Optional[str] = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.media_bucket

    def _bucket(self):
        return self.supabase.storage.from_(self.bucket_name)

    def upload_thumbnail(
        self,
        caller: Caller,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> UploadedMedia:
        """Upload a thumbnail into the caller's folder and return its public URL."""
        validate_thumbnail(content, content_type)
        object_path = build_object_path(caller.user_id, content_type)
        policy.authorize_object_path(caller, object_path)
        try:
            self._bucket().upload(object_path, content, {"content-type": content_type})
            public_url = self._bucket().get_public_url(object_path)
        except Exception as e:
            logger.error(f"Thumbnail upload failed ({object_path}): {e}")
            raise UploadError(detail="Failed to upload thumbnail")
        logger.info(f"Uploaded thumbnail {filename or '<unnamed>'} as {object_path} ({len(content)} bytes)")
        return UploadedMedia(path=object_path, public_url=public_url)

    async def upload_thumbnail_file(self, caller: Caller, file: UploadFile) -> UploadedMedia:
        # Read one byte past the limit so oversized files are rejected without buffering them whole
        content = await file.read(settings.max_thumbnail_bytes + 1)
        return self.upload_thumbnail(caller, content, file.filename, file.content_type)

    def object_path_from_url(self, url: Optional[str]) -> Optional[str]:
        """Object path for a public URL in this bucket, or None for external URLs."""
        if not url:
            return None
        marker = f"/storage/v1/object/public/{self.bucket_name}/"
        if marker not in url:
            return None
        return url.split(marker, 1)[1].split("?", 1)[0] or None

    def delete_object(self, caller: Caller, object_path: str) -> bool:
        """Delete one of the caller's objects; failures are logged, not raised."""
        policy.authorize_object_path(caller, object_path)
        try:
            self._bucket().remove([object_path])
            logger.info(f"Deleted thumbnail {object_path}")
            return True
        except Exception as e:
            logger.warning(f"Failed to delete thumbnail ({object_path}): {e}")
            return False
