"""
Core dependencies for resolving the caller and the Supabase client used on their behalf
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.errors import AuthenticationRequired
from app.core.session import Caller
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Generator, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so public endpoints can resolve an anonymous caller
security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Caller:
    """Caller for the bearer token, or an anonymous caller when no token is sent"""
    if credentials is None:
        return Caller.anonymous()
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return Caller.from_user_data(user_data, token)


def get_current_caller(caller: Caller = Depends(get_optional_caller)) -> Caller:
    """Caller for the bearer token; 401 when the request is anonymous"""
    if not caller.is_authenticated:
        raise AuthenticationRequired()
    return caller


def get_caller_client(caller: Caller = Depends(get_optional_caller)) -> Generator[Client, None, None]:
    """Supabase client scoped to the caller so RLS sees auth.uid(); anonymous client otherwise.

    A caller-scoped client is built per request and closed once the response is sent.
    """
    if not caller.is_authenticated:
        yield get_supabase()
        return
    client = SupabaseClient.for_access_token(caller.access_token)
    try:
        yield client
    finally:
        SupabaseClient.close(client)
