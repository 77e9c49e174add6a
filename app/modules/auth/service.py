import hashlib
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException, status
from typing import Dict, Any, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class TokenCache:
    """Short-lived map of access token -> resolved user, so parallel requests with one token hit Supabase Auth once."""

    def __init__(self, ttl_seconds: float = 60, max_size: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Dict[str, Any], float]] = {}

    @staticmethod
    def _key(token: str) -> str:
        # Never keep raw bearer tokens in memory as dict keys
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        key = self._key(token)
        entry = self._entries.get(key)
        if entry is None:
            return None
        user_data, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return user_data

    def put(self, token: str, user_data: Dict[str, Any]) -> None:
        if len(self._entries) >= self.max_size:
            return
        self._entries[self._key(token)] = (user_data, time.monotonic() + self.ttl_seconds)

    def forget(self, token: str) -> None:
        self._entries.pop(self._key(token), None)

    def clear(self) -> None:
        self._entries.clear()


_token_cache = TokenCache()


def clear_auth_cache() -> None:
    _token_cache.clear()


def _mentions(error: Exception, *phrases: str) -> bool:
    message = str(error).lower()
    return any(phrase in message for phrase in phrases)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up with Supabase Auth.

        Only the trimmed display name goes into user_metadata; the profile row
        itself is written by the on_auth_user_created trigger.
        """
        metadata = {}
        full_name = (register_data.full_name or "").strip()
        if full_name:
            metadata["full_name"] = full_name

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": metadata}
            })
        except Exception as e:
            if _mentions(e, "already registered", "already exists"):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
            logger.error(f"Sign-up failed for {register_data.email}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Registration failed: {e}")

        user = auth_response.user
        if not user:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to register user")

        logger.info(f"Registered user {user.id}")
        return RegisterResponse(
            user_id=str(user.id),
            email=user.email or register_data.email,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Password sign-in; returns the Supabase access token to send as a bearer token"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            if _mentions(e, "invalid", "credentials"):
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
            logger.error(f"Sign-in failed for {login_data.email}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Login failed: {e}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=str(auth_response.user.id),
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the Supabase user, served from TokenCache when fresh"""
        cached = _token_cache.get(token)
        if cached is not None:
            return cached

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            if _mentions(e, "jwt", "expired", "invalid"):
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
            logger.warning(f"Token verification failed: {e}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication failed")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
            "created_at": user.created_at,
            "updated_at": user.updated_at
        }
        _token_cache.put(token, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        """Drop the cached identity for token and end the Supabase session"""
        _token_cache.forget(token)
        try:
            # Access tokens are stateless JWTs and stay valid until they expire
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False
