"""
Row access policy evaluation.

Single entry point for the rules in app.config.permissions_config. Services call
authorize() before every read or write; Postgres row-level security enforces the
same rules again on the database side.
"""

from typing import Optional
import logging

from app.config.permissions_config import RESOURCES, ANYONE, OWNER
from app.core.errors import AccessDenied, AuthenticationRequired
from app.core.session import Caller

logger = logging.getLogger(__name__)


def get_rule(resource: str, action: str) -> str:
    try:
        return RESOURCES[resource]["rules"][action]
    except KeyError:
        raise ValueError(f"Unknown access rule {resource}:{action}")


def is_allowed(caller_id: Optional[str], resource: str, action: str, row_owner_id: Optional[str] = None) -> bool:
    """True if caller_id may perform action on a row of resource owned by row_owner_id."""
    rule = get_rule(resource, action)
    if rule == ANYONE:
        return True
    if rule == OWNER:
        if not caller_id or not row_owner_id:
            return False
        return str(caller_id) == str(row_owner_id)
    # system / cascade: never allowed from a client
    return False


def authorize(caller: Caller, resource: str, action: str, row_owner_id: Optional[str] = None) -> None:
    """Raise AuthenticationRequired/AccessDenied unless the caller may perform action."""
    if is_allowed(caller.user_id if caller.is_authenticated else None, resource, action, row_owner_id):
        return
    rule = get_rule(resource, action)
    if rule == OWNER and not caller.is_authenticated:
        raise AuthenticationRequired()
    logger.warning(
        f"Denied {resource}:{action} for caller {caller.user_id or 'anonymous'} (row owner {row_owner_id})"
    )
    raise AccessDenied(f"Not allowed to {action} this {resource.rstrip('s').replace('_', ' ')}")


def owns_object_path(caller: Caller, object_path: str) -> bool:
    """Storage objects are namespaced by owner: the first path segment is the owner's id."""
    if not caller.is_authenticated or not object_path:
        return False
    first_segment = object_path.lstrip("/").split("/", 1)[0]
    return first_segment == str(caller.user_id)


def authorize_object_path(caller: Caller, object_path: str) -> None:
    if not caller.is_authenticated:
        raise AuthenticationRequired()
    if not owns_object_path(caller, object_path):
        logger.warning(f"Denied storage write on {object_path} for caller {caller.user_id}")
        raise AccessDenied("Not allowed to modify this file")
