from supabase import Client
from app.config import settings
from app.core import policy
from app.core.errors import AuthenticationRequired, to_http_exception
from app.core.session import Caller
from app.modules.media.storage import ThumbnailStorage
from app.modules.tutorials.models import TABLE, TUTORIAL_WITH_AUTHOR, COUNTER_COLUMNS
from app.modules.tutorials.schemas import (
    TutorialCreate, TutorialUpdate, TutorialResponse, TutorialWithAuthor,
    TutorialCounters, Category, Difficulty, BrowseSort, SORT_COLUMNS
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException, UploadFile
import logging

logger = logging.getLogger(__name__)


def search_filter(term: str) -> str:
    """PostgREST `or` filter matching term case-insensitively in title or description."""
    # Values are double-quoted so commas and parentheses in the term stay literal
    escaped = term.strip().replace("\\", "\\\\").replace('"', '\\"')
    return f'title.ilike."%{escaped}%",description.ilike."%{escaped}%"'


def clamp_page(limit: Optional[int], offset: Optional[int]) -> tuple:
    limit = settings.default_page_size if not limit or limit < 1 else min(limit, settings.max_page_size)
    offset = max(offset or 0, 0)
    return limit, offset


class TutorialService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_tutorials(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        search: Optional[str] = None,
        sort: BrowseSort = BrowseSort.newest,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[TutorialWithAuthor]:
        """Browse tutorials with optional category/difficulty filters, text search and sort order"""
        try:
            limit, offset = clamp_page(limit, offset)
            query = self.supabase.table(TABLE).select(TUTORIAL_WITH_AUTHOR)
            if category:
                query = query.eq("category", category.value)
            if difficulty:
                query = query.eq("difficulty", difficulty.value)
            if search and search.strip():
                query = query.or_(search_filter(search))
            result = query.order(SORT_COLUMNS[sort], desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [TutorialWithAuthor(**t) for t in result.data]
        except Exception as e:
            raise to_http_exception(e)

    def list_featured(self, limit: Optional[int] = None) -> List[TutorialWithAuthor]:
        """Most liked tutorials, for the home page"""
        try:
            result = self.supabase.table(TABLE)\
                .select(TUTORIAL_WITH_AUTHOR)\
                .order("likes_count", desc=True)\
                .limit(limit or settings.featured_limit)\
                .execute()
            return [TutorialWithAuthor(**t) for t in result.data]
        except Exception as e:
            raise to_http_exception(e)

    def list_by_owner(self, caller: Caller) -> List[TutorialResponse]:
        """Tutorials authored by the caller, newest first"""
        if not caller.is_authenticated:
            raise AuthenticationRequired()
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .eq("user_id", caller.user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [TutorialResponse(**t) for t in result.data]
        except Exception as e:
            raise to_http_exception(e)

    def _fetch(self, tutorial_id: str, columns: str) -> Dict[str, Any]:
        result = self.supabase.table(TABLE)\
            .select(columns)\
            .eq("id", tutorial_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Tutorial not found")
        return result.data[0]

    def get_tutorial(self, tutorial_id: str) -> TutorialWithAuthor:
        """Get tutorial by ID with its author profile"""
        try:
            return TutorialWithAuthor(**self._fetch(tutorial_id, TUTORIAL_WITH_AUTHOR))
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def get_counters(self, tutorial_id: str) -> TutorialCounters:
        """Current trigger-maintained counters; 404 when the tutorial does not exist"""
        try:
            return TutorialCounters(**self._fetch(tutorial_id, "id, " + ", ".join(COUNTER_COLUMNS)))
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def get_owner_id(self, tutorial_id: str) -> str:
        try:
            return str(self._fetch(tutorial_id, "user_id")["user_id"])
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def create_tutorial(self, caller: Caller, tutorial_data: TutorialCreate) -> TutorialResponse:
        """Create a tutorial owned by the caller; counters start at zero"""
        policy.authorize(caller, TABLE, "create", row_owner_id=caller.user_id)
        try:
            result = self.supabase.table(TABLE).insert({
                "user_id": caller.user_id,
                "title": tutorial_data.title,
                "description": tutorial_data.description,
                "category": tutorial_data.category.value,
                "difficulty": tutorial_data.difficulty.value,
                "video_url": tutorial_data.video_url,
                "thumbnail_url": tutorial_data.thumbnail_url,
                "resources": [r.model_dump(mode="json") for r in tutorial_data.resources],
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create tutorial")

            tutorial = TutorialResponse(**result.data[0])
            logger.info(f"Tutorial {tutorial.id} created by {caller.user_id}")
            return tutorial
        except Exception as e:
            raise to_http_exception(e)

    async def create_tutorial_with_thumbnail(
        self,
        caller: Caller,
        tutorial_data: TutorialCreate,
        thumbnail: UploadFile,
        storage: ThumbnailStorage
    ) -> TutorialResponse:
        """Upload the thumbnail, then insert the row. An upload failure writes nothing."""
        policy.authorize(caller, TABLE, "create", row_owner_id=caller.user_id)
        uploaded = await storage.upload_thumbnail_file(caller, thumbnail)
        tutorial_data = tutorial_data.model_copy(update={"thumbnail_url": uploaded.public_url})
        try:
            return self.create_tutorial(caller, tutorial_data)
        except HTTPException:
            # Do not leave an orphaned object behind a failed insert
            storage.delete_object(caller, uploaded.path)
            raise

    def update_tutorial(self, caller: Caller, tutorial_id: str, tutorial_data: TutorialUpdate) -> TutorialResponse:
        """Update an owned tutorial; updated_at is set by the database trigger"""
        owner_id = self.get_owner_id(tutorial_id)
        policy.authorize(caller, TABLE, "update", row_owner_id=owner_id)
        try:
            update_data = tutorial_data.model_dump(mode="json", exclude_unset=True)
            for required in ("title", "description", "category", "difficulty", "resources"):
                if required in update_data and update_data[required] is None:
                    del update_data[required]
            if not update_data:
                return TutorialResponse(**self._fetch(tutorial_id, "*"))

            result = self.supabase.table(TABLE)\
                .update(update_data)\
                .eq("id", tutorial_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Tutorial not found")

            logger.info(f"Tutorial {tutorial_id} updated by {caller.user_id}: {sorted(update_data)}")
            return TutorialResponse(**result.data[0])
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def delete_tutorial(self, caller: Caller, tutorial_id: str, storage: Optional[ThumbnailStorage] = None) -> bool:
        """Delete an owned tutorial (likes, comments and enrollments cascade) and its stored thumbnail"""
        try:
            row = self._fetch(tutorial_id, "user_id, thumbnail_url")
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")
        policy.authorize(caller, TABLE, "delete", row_owner_id=row["user_id"])
        try:
            result = self.supabase.table(TABLE)\
                .delete()\
                .eq("id", tutorial_id)\
                .execute()
            deleted = len(result.data) > 0
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")
        if not deleted:
            raise HTTPException(status_code=404, detail="Tutorial not found")
        logger.info(f"Tutorial {tutorial_id} deleted by {caller.user_id}")

        if storage is not None:
            object_path = storage.object_path_from_url(row.get("thumbnail_url"))
            if object_path and policy.owns_object_path(caller, object_path):
                storage.delete_object(caller, object_path)
        return True
