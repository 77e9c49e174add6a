from fastapi import APIRouter, Depends
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_caller_client)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    service: ProfileService = Depends(get_profile_service)
):
    """Get a public profile"""
    return service.get_profile(user_id)


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_profile(
    user_id: str,
    profile_data: ProfileUpdate,
    caller: Caller = Depends(get_current_caller),
    service: ProfileService = Depends(get_profile_service)
):
    """Update own profile"""
    return service.update_profile(caller, user_id, profile_data)
