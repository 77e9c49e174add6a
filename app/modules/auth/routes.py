from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from app.database.supabase_client import get_session_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    MeResponse, PermissionMatrixResponse
)
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_caller, get_caller_client, security
from app.core.errors import AuthenticationRequired
from app.core.session import Caller
from app.config.permissions_config import get_permission_matrix
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def get_session_auth_service(supabase: Client = Depends(get_session_supabase)) -> AuthService:
    """AuthService on a throwaway client: sign-in stores a session on the client it runs on"""
    return AuthService(supabase)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_session_auth_service)
):
    """Register a new user (profile is created by the signup trigger)"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_session_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    service: AuthService = Depends(get_session_auth_service)
):
    """Logout and invalidate token"""
    if credentials is None:
        raise AuthenticationRequired()
    service.logout(credentials.credentials)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    caller: Caller = Depends(get_current_caller),
    supabase: Client = Depends(get_caller_client),
):
    """Get current authenticated user and their profile"""
    profile = ProfileService(supabase).find_profile(caller.user_id)
    return MeResponse(
        id=caller.user_id,
        email=caller.email,
        user_metadata=caller.user_metadata,
        profile=profile,
    )


@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permissions():
    """Row access matrix, for clients that want to hide actions the caller cannot perform"""
    return get_permission_matrix()
