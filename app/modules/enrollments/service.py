from supabase import Client
from app.core import policy
from app.core.errors import is_unique_violation, to_http_exception
from app.core.session import Caller
from app.modules.enrollments.models import TABLE, ENROLLMENT_WITH_TUTORIAL
from app.modules.enrollments.schemas import EnrollmentState, EnrollmentWithTutorial
from app.modules.tutorials.counters import relation_for
from app.modules.tutorials.service import TutorialService
from typing import List
import logging

logger = logging.getLogger(__name__)

COUNTER = relation_for(TABLE).counter_column


class EnrollmentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tutorials = TutorialService(supabase)

    def _enrollments_count(self, tutorial_id: str) -> int:
        return getattr(self.tutorials.get_counters(tutorial_id), COUNTER)

    def is_enrolled(self, caller: Caller, tutorial_id: str) -> bool:
        if not caller.is_authenticated:
            return False
        policy.authorize(caller, TABLE, "read", row_owner_id=caller.user_id)
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

    def enroll(self, caller: Caller, tutorial_id: str) -> EnrollmentState:
        """Enroll the caller. A repeated enrollment is a no-op reported with created=False."""
        policy.authorize(caller, TABLE, "create", row_owner_id=caller.user_id)
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
            logger.info(f"Duplicate enrollment in {tutorial_id} by {caller.user_id} ignored")
            created = False
        if created:
            logger.info(f"{caller.user_id} enrolled in {tutorial_id}")
        return EnrollmentState(
            tutorial_id=tutorial_id,
            enrolled=True,
            enrollments_count=self._enrollments_count(tutorial_id),
            created=created,
        )

    def unenroll(self, caller: Caller, tutorial_id: str) -> EnrollmentState:
        """Remove the caller's enrollment. Removing an absent enrollment is a no-op."""
        policy.authorize(caller, TABLE, "delete", row_owner_id=caller.user_id)
        try:
            result = self.supabase.table(TABLE)\
                .delete()\
                .eq("tutorial_id", tutorial_id)\
                .eq("user_id", caller.user_id)\
                .execute()
            if result.data:
                logger.info(f"{caller.user_id} unenrolled from {tutorial_id}")
        except Exception as e:
            raise to_http_exception(e, "Tutorial not found")
        return EnrollmentState(
            tutorial_id=tutorial_id,
            enrolled=False,
            enrollments_count=self._enrollments_count(tutorial_id),
        )

    def list_my_enrollments(self, caller: Caller) -> List[EnrollmentWithTutorial]:
        """Caller's enrollments with tutorial and author, most recent first"""
        policy.authorize(caller, TABLE, "read", row_owner_id=caller.user_id)
        try:
            result = self.supabase.table(TABLE)\
                .select(ENROLLMENT_WITH_TUTORIAL)\
                .eq("user_id", caller.user_id)\
                .order("enrolled_at", desc=True)\
                .execute()
            return [EnrollmentWithTutorial(**e) for e in result.data]
        except Exception as e:
            raise to_http_exception(e)
