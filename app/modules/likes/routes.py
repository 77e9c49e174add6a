from fastapi import APIRouter, Depends, Response, status
from app.modules.likes.schemas import LikeState
from app.modules.likes.service import LikeService
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/tutorials/{tutorial_id}/likes", tags=["likes"])


def get_like_service(supabase: Client = Depends(get_caller_client)) -> LikeService:
    return LikeService(supabase)


@router.post("", response_model=LikeState, status_code=201)
async def like_tutorial(
    tutorial_id: str,
    response: Response,
    caller: Caller = Depends(get_current_caller),
    service: LikeService = Depends(get_like_service)
):
    """Like a tutorial (200 with created=false if already liked)"""
    state = service.like(caller, tutorial_id)
    if not state.created:
        response.status_code = status.HTTP_200_OK
    return state


@router.delete("", response_model=LikeState)
async def unlike_tutorial(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    service: LikeService = Depends(get_like_service)
):
    """Remove the caller's like"""
    return service.unlike(caller, tutorial_id)


@router.get("/me", response_model=Dict[str, bool])
async def get_like_status(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    service: LikeService = Depends(get_like_service)
):
    """Whether the caller likes this tutorial"""
    return {"liked": service.is_liked(caller, tutorial_id)}
