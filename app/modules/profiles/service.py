from supabase import Client
from app.core import policy
from app.core.errors import to_http_exception
from app.core.session import Caller
from app.modules.profiles.models import TABLE
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile for user_id, or None when it does not exist"""
        try:
            result = self.supabase.table(TABLE)\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            raise to_http_exception(e, "Profile not found")

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get a public profile by user ID"""
        profile = self.find_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def update_profile(self, caller: Caller, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile; updated_at is set by the database trigger"""
        policy.authorize(caller, TABLE, "update", row_owner_id=user_id)
        try:
            update_data = profile_data.model_dump(exclude_unset=True)
            if "full_name" in update_data and update_data["full_name"] is None:
                del update_data["full_name"]
            if not update_data:
                return self.get_profile(user_id)

            result = self.supabase.table(TABLE)\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            logger.info(f"Updated profile {user_id}: {sorted(update_data)}")
            return ProfileResponse(**result.data[0])
        except Exception as e:
            raise to_http_exception(e, "Profile not found")
