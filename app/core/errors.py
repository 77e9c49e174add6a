"""
Error types and PostgREST error translation shared by all services
"""

from fastapi import HTTPException, status
from supabase import PostgrestAPIError
import logging

logger = logging.getLogger(__name__)

# Postgres / PostgREST error codes we react to
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_TEXT_REPRESENTATION = "22P02"
INSUFFICIENT_PRIVILEGE = "42501"
NO_ROWS_FOR_SINGLE = "PGRST116"


class AuthenticationRequired(HTTPException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AccessDenied(HTTPException):
    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UploadError(HTTPException):
    def __init__(self, detail: str = "Failed to upload file", status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(status_code=status_code, detail=detail)


def error_code(exc: Exception) -> str:
    """Return the Postgres/PostgREST code of an APIError, or "" for anything else."""
    if isinstance(exc, PostgrestAPIError):
        return str(exc.code or "")
    return ""


def is_unique_violation(exc: Exception) -> bool:
    return error_code(exc) == UNIQUE_VIOLATION


def to_http_exception(exc: Exception, not_found_detail: str = "Not found") -> HTTPException:
    """Map a data-access exception onto the HTTP error the caller should see."""
    if isinstance(exc, HTTPException):
        return exc
    code = error_code(exc)
    if code == INSUFFICIENT_PRIVILEGE:
        return AccessDenied()
    if code in (NO_ROWS_FOR_SINGLE, FOREIGN_KEY_VIOLATION, INVALID_TEXT_REPRESENTATION):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
    if code == UNIQUE_VIOLATION:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already exists")
    logger.error(f"Unexpected data-access error: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
