"""
Per-request session context.

A Caller is built from the bearer token on each request and passed explicitly
into every service call; there is no process-wide session object.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Caller:
    user_id: Optional[str] = None
    access_token: Optional[str] = None
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.access_token)

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls()

    @classmethod
    def from_user_data(cls, user_data: Dict[str, Any], access_token: str) -> "Caller":
        return cls(
            user_id=str(user_data["id"]),
            access_token=access_token,
            email=user_data.get("email"),
            user_metadata=user_data.get("user_metadata") or {},
        )
