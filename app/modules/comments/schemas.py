from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from app.modules.profiles.schemas import ProfileResponse


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return value.strip() if isinstance(value, str) else value


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    tutorial_id: str
    user_id: str
    content: str
    created_at: datetime
    author: Optional[ProfileResponse] = Field(default=None, validation_alias="profiles")


class CommentPosted(CommentResponse):
    """New comment with the tutorial's comments_count read back after the insert"""
    comments_count: int


class CommentRemoved(BaseModel):
    comment_id: str
    tutorial_id: str
    deleted: bool
    comments_count: int
