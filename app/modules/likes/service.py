from supabase import Client
from app.core import policy
from app.core.errors import is_unique_violation, to_http_exception
from app.core.session import Caller
from app.modules.likes.models import TABLE
from app.modules.likes.schemas import LikeState
from app.modules.tutorials.counters import relation_for
from app.modules.tutorials.service import TutorialService
import logging

logger = logging.getLogger(__name__)

COUNTER = relation_for(TABLE).counter_column


class LikeService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tutorials = TutorialService(supabase)

    def _likes_count(self, tutorial_id: str) -> int:
        return getattr(self.tutorials.get_counters(tutorial_id), COUNTER)

    def is_liked(self, caller: Caller, tutorial_id: str) -> bool:
        if not caller.is_authenticated:
            return False
        try:
            result = self.supabase.table(TABLE)\
                .select("id")\
                .eq("tutorial_id", tutorial_id)\
                .eq("user_id", caller.user_id)\
                .limit(1)\
                .execute()
            return bool(result.data)
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")

    def like(self, caller: Caller, tutorial_id: str) -> LikeState:
        """Like a tutorial. A repeated like is a no-op reported with created=False."""
        policy.authorize(caller, TABLE, "create", row_owner_id=caller.user_id)
        # 404 before insert so a missing tutorial is not reported as a foreign-key error
        self.tutorials.get_counters(tutorial_id)
        created = True
        try:
            self.supabase.table(TABLE).insert({
                "tutorial_id": tutorial_id,
                "user_id": caller.user_id
            }).execute()
        except Exception as e:
            if not is_unique_violation(e):
                raise to_http_exception(e, "Tutorial not found")
            logger.info(f"Duplicate like on {tutorial_id} by {caller.user_id} ignored")
            created = False
        return LikeState(
            tutorial_id=tutorial_id,
            liked=True,
            likes_count=self._likes_count(tutorial_id),
            created=created,
        )

    def unlike(self, caller: Caller, tutorial_id: str) -> LikeState:
        """Remove the caller's like. Removing an absent like is a no-op."""
        policy.authorize(caller, TABLE, "delete", row_owner_id=caller.user_id)
        try:
            result = self.supabase.table(TABLE)\
                .delete()\
                .eq("tutorial_id", tutorial_id)\
                .eq("user_id", caller.user_id)\
                .execute()
            if result.data:
                logger.info(f"Like on {tutorial_id} removed by {caller.user_id}")
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")
        return LikeState(
            tutorial_id=tutorial_id,
            liked=False,
            likes_count=self._likes_count(tutorial_id),
        )
