from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from app.modules.tutorials.schemas import (
    TutorialCreate, TutorialUpdate, TutorialResponse, TutorialWithAuthor,
    TutorialStatus, Category, Difficulty, BrowseSort
)
from app.modules.tutorials.service import TutorialService
from app.modules.likes.service import LikeService
from app.modules.enrollments.service import EnrollmentService
from app.modules.media.storage import ThumbnailStorage
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client
from typing import List, Optional
from enum import Enum
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tutorials", tags=["tutorials"])

ALL = "all"


def get_tutorial_service(supabase: Client = Depends(get_caller_client)) -> TutorialService:
    return TutorialService(supabase)


def get_thumbnail_storage(supabase: Client = Depends(get_caller_client)) -> ThumbnailStorage:
    return ThumbnailStorage(supabase)


def parse_choice(enum_cls: type, value: Optional[str], name: str) -> Optional[Enum]:
    """Enum member for a query value; None for missing or "all"."""
    if value is None or value == "" or value == ALL:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join([ALL] + [m.value for m in enum_cls])
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {name} '{value}'. Expected one of: {allowed}"
        )


def _validation_detail(exc: ValidationError) -> list:
    return [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in exc.errors()]


@router.get("", response_model=List[TutorialWithAuthor])
async def browse_tutorials(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    sort: BrowseSort = BrowseSort.newest,
    limit: Optional[int] = None,
    offset: int = 0,
    service: TutorialService = Depends(get_tutorial_service)
):
    """Browse tutorials: filter by category/difficulty, search title and description, sort by newest/popular/enrolled"""
    return service.list_tutorials(
        category=parse_choice(Category, category, "category"),
        difficulty=parse_choice(Difficulty, difficulty, "difficulty"),
        search=search,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.get("/featured", response_model=List[TutorialWithAuthor])
async def featured_tutorials(
    service: TutorialService = Depends(get_tutorial_service)
):
    """Most liked tutorials (home page)"""
    return service.list_featured()


@router.get("/mine", response_model=List[TutorialResponse])
async def my_tutorials(
    caller: Caller = Depends(get_current_caller),
    service: TutorialService = Depends(get_tutorial_service)
):
    """Tutorials created by the caller (dashboard)"""
    return service.list_by_owner(caller)


@router.post("", response_model=TutorialResponse, status_code=201)
async def create_tutorial(
    tutorial_data: TutorialCreate,
    caller: Caller = Depends(get_current_caller),
    service: TutorialService = Depends(get_tutorial_service)
):
    """Create a tutorial owned by the caller"""
    return service.create_tutorial(caller, tutorial_data)


@router.post("/with-thumbnail", response_model=TutorialResponse, status_code=201)
async def create_tutorial_with_thumbnail(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    difficulty: str = Form(...),
    video_url: Optional[str] = Form(None),
    resources: Optional[str] = Form(None),
    thumbnail: UploadFile = File(...),
    caller: Caller = Depends(get_current_caller),
    service: TutorialService = Depends(get_tutorial_service),
    storage: ThumbnailStorage = Depends(get_thumbnail_storage)
):
    """Create a tutorial from a multipart form; the thumbnail is uploaded before the row is written"""
    try:
        tutorial_data = TutorialCreate(
            title=title,
            description=description,
            category=category,
            difficulty=difficulty,
            video_url=video_url,
            resources=json.loads(resources) if resources else [],
        )
    except json.JSONDecodeError:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="resources must be a JSON array")
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=_validation_detail(e))
    return await service.create_tutorial_with_thumbnail(caller, tutorial_data, thumbnail, storage)


@router.get("/{tutorial_id}", response_model=TutorialWithAuthor)
async def get_tutorial(
    tutorial_id: str,
    service: TutorialService = Depends(get_tutorial_service)
):
    """Get tutorial with author profile"""
    return service.get_tutorial(tutorial_id)


@router.get("/{tutorial_id}/status", response_model=TutorialStatus)
async def get_tutorial_status(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    supabase: Client = Depends(get_caller_client)
):
    """Whether the caller likes and is enrolled in this tutorial"""
    return TutorialStatus(
        tutorial_id=tutorial_id,
        liked=LikeService(supabase).is_liked(caller, tutorial_id),
        enrolled=EnrollmentService(supabase).is_enrolled(caller, tutorial_id),
    )


@router.put("/{tutorial_id}", response_model=TutorialResponse)
async def update_tutorial(
    tutorial_id: str,
    tutorial_data: TutorialUpdate,
    caller: Caller = Depends(get_current_caller),
    service: TutorialService = Depends(get_tutorial_service)
):
    """Update own tutorial"""
    return service.update_tutorial(caller, tutorial_id, tutorial_data)


@router.delete("/{tutorial_id}", status_code=204)
async def delete_tutorial(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    service: TutorialService = Depends(get_tutorial_service),
    storage: ThumbnailStorage = Depends(get_thumbnail_storage)
):
    """Delete own tutorial; its likes, comments and enrollments are removed by cascade"""
    service.delete_tutorial(caller, tutorial_id, storage)
    return None
