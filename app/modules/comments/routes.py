from fastapi import APIRouter, Depends
from app.modules.comments.schemas import CommentCreate, CommentResponse, CommentPosted, CommentRemoved
from app.modules.comments.service import CommentService
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client
from typing import List

router = APIRouter(tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_caller_client)) -> CommentService:
    return CommentService(supabase)


@router.get("/tutorials/{tutorial_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    tutorial_id: str,
    service: CommentService = Depends(get_comment_service)
):
    """List comments on a tutorial"""
    return service.list_comments(tutorial_id)


@router.post("/tutorials/{tutorial_id}/comments", response_model=CommentPosted, status_code=201)
async def add_comment(
    tutorial_id: str,
    comment_data: CommentCreate,
    caller: Caller = Depends(get_current_caller),
    service: CommentService = Depends(get_comment_service)
):
    """Post a comment; the response carries the updated comments_count"""
    return service.add_comment(caller, tutorial_id, comment_data)


@router.delete("/comments/{comment_id}", response_model=CommentRemoved)
async def delete_comment(
    comment_id: str,
    caller: Caller = Depends(get_current_caller),
    service: CommentService = Depends(get_comment_service)
):
    """Delete own comment; the response carries the updated comments_count"""
    return service.delete_comment(caller, comment_id)
