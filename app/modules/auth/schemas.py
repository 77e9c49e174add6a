from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any

from app.modules.profiles.schemas import ProfileResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = Field(default=None, max_length=100)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    profile: Optional[ProfileResponse] = None


class PermissionRule(BaseModel):
    name: str
    resource: str
    action: str
    rule: str
    description: str


class PermissionMatrixResponse(BaseModel):
    permissions: List[PermissionRule]
