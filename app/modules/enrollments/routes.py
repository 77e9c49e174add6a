from fastapi import APIRouter, Depends, Response, status
from app.modules.enrollments.schemas import EnrollmentState, EnrollmentWithTutorial
from app.modules.enrollments.service import EnrollmentService
from app.core.dependencies import get_current_caller, get_caller_client
from app.core.session import Caller
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["enrollments"])


def get_enrollment_service(supabase: Client = Depends(get_caller_client)) -> EnrollmentService:
    return EnrollmentService(supabase)


@router.post("/tutorials/{tutorial_id}/enrollment", response_model=EnrollmentState, status_code=201)
async def enroll(
    tutorial_id: str,
    response: Response,
    caller: Caller = Depends(get_current_caller),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Enroll in a tutorial (200 with created=false if already enrolled)"""
    state = service.enroll(caller, tutorial_id)
    if not state.created:
        response.status_code = status.HTTP_200_OK
    return state


@router.delete("/tutorials/{tutorial_id}/enrollment", response_model=EnrollmentState)
async def unenroll(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Unenroll from a tutorial"""
    return service.unenroll(caller, tutorial_id)


@router.get("/tutorials/{tutorial_id}/enrollment", response_model=Dict[str, bool])
async def get_enrollment_status(
    tutorial_id: str,
    caller: Caller = Depends(get_current_caller),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Whether the caller is enrolled in this tutorial"""
    return {"enrolled": service.is_enrolled(caller, tutorial_id)}


@router.get("/enrollments/mine", response_model=List[EnrollmentWithTutorial])
async def list_my_enrollments(
    caller: Caller = Depends(get_current_caller),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Tutorials the caller is enrolled in (dashboard)"""
    return service.list_my_enrollments(caller)
