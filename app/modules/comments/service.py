from supabase import Client
from app.core import policy
from app.core.errors import to_http_exception
from app.core.session import Caller
from app.modules.comments.models import TABLE, COMMENT_WITH_AUTHOR
from app.modules.comments.schemas import CommentCreate, CommentResponse, CommentPosted, CommentRemoved
from app.modules.tutorials.counters import relation_for
from app.modules.tutorials.service import TutorialService
from typing import List, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

COUNTER = relation_for(TABLE).counter_column


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tutorials = TutorialService(supabase)

    def _comments_count(self, tutorial_id: str) -> int:
        return getattr(self.tutorials.get_counters(tutorial_id), COUNTER)

    def _fetch(self, comment_id: str, columns: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(TABLE)\
                .select(columns)\
                .eq("id", comment_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise to_http_exception(e, "Comment not found")
        if not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return result.data[0]

    def list_comments(self, tutorial_id: str) -> List[CommentResponse]:
        """Comments on a tutorial with their authors, newest first"""
        try:
            result = self.supabase.table(TABLE)\
                .select(COMMENT_WITH_AUTHOR)\
                .eq("tutorial_id", tutorial_id)\
                .order("created_at", desc=True)\
                .execute()
            return [CommentResponse(**c) for c in result.data]
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def add_comment(self, caller: Caller, tutorial_id: str, comment_data: CommentCreate) -> CommentPosted:
        """Post a comment as the caller; returned with its author, like the listing"""
        policy.authorize(caller, TABLE, "create", row_owner_id=caller.user_id)
        self.tutorials.get_counters(tutorial_id)
        try:
            result = self.supabase.table(TABLE).insert({
                "tutorial_id": tutorial_id,
                "user_id": caller.user_id,
                "content": comment_data.content
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to post comment")
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

        comment_id = result.data[0]["id"]
        logger.info(f"Comment {comment_id} posted on {tutorial_id} by {caller.user_id}")
        # The insert result carries no profiles(*) embed
        comment = self._fetch(comment_id, COMMENT_WITH_AUTHOR)
        return CommentPosted(**comment, comments_count=self._comments_count(tutorial_id))

    def delete_comment(self, caller: Caller, comment_id: str) -> CommentRemoved:
        """Delete a comment; only its author may"""
        row = self._fetch(comment_id, "user_id, tutorial_id")
        policy.authorize(caller, TABLE, "delete", row_owner_id=row["user_id"])
        try:
            result = self.supabase.table(TABLE)\
                .delete()\
                .eq("id", comment_id)\
                .execute()
        except Exception as e:
            raise to_http_exception(e, "Comment not found")
        deleted = len(result.data) > 0
        if deleted:
            logger.info(f"Comment {comment_id} deleted by {caller.user_id}")
        tutorial_id = str(row["tutorial_id"])
        return CommentRemoved(
            comment_id=comment_id,
            tutorial_id=tutorial_id,
            deleted=deleted,
            comments_count=self._comments_count(tutorial_id),
        )
