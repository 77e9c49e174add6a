from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from app.modules.profiles.schemas import ProfileResponse


class Category(str, Enum):
    programming = "programming"
    design = "design"
    music = "music"
    art = "art"
    cooking = "cooking"
    photography = "photography"
    business = "business"
    fitness = "fitness"
    languages = "languages"
    other = "other"


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class BrowseSort(str, Enum):
    newest = "newest"
    popular = "popular"
    enrolled = "enrolled"


SORT_COLUMNS = {
    BrowseSort.newest: "created_at",
    BrowseSort.popular: "likes_count",
    BrowseSort.enrolled: "enrollments_count",
}


class ResourceKind(str, Enum):
    link = "link"
    video = "video"
    document = "document"
    code = "code"


class ResourceItem(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, max_length=2000)
    kind: ResourceKind = ResourceKind.link


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TutorialCreate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=2000)
    category: Category
    difficulty: Difficulty
    video_url: Optional[str] = Field(default=None, max_length=2000)
    thumbnail_url: Optional[str] = Field(default=None, max_length=2000)
    resources: List[ResourceItem] = []

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("video_url", "thumbnail_url", mode="before")
    @classmethod
    def blank_urls(cls, value):
        return _blank_to_none(value)


class TutorialUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=2000)
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    video_url: Optional[str] = Field(default=None, max_length=2000)
    thumbnail_url: Optional[str] = Field(default=None, max_length=2000)
    resources: Optional[List[ResourceItem]] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("video_url", "thumbnail_url", mode="before")
    @classmethod
    def blank_urls(cls, value):
        return _blank_to_none(value)


class TutorialResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    category: Category
    difficulty: Difficulty
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    resources: List[ResourceItem] = []
    likes_count: int = 0
    comments_count: int = 0
    enrollments_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("resources", mode="before")
    @classmethod
    def null_resources(cls, value):
        return value or []

    class Config:
        from_attributes = True


class TutorialWithAuthor(TutorialResponse):
    """Tutorial row with the embedded `profiles(*)` join exposed as `author`"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    author: Optional[ProfileResponse] = Field(default=None, validation_alias="profiles")


class TutorialCounters(BaseModel):
    id: str
    likes_count: int = 0
    comments_count: int = 0
    enrollments_count: int = 0


class TutorialStatus(BaseModel):
    tutorial_id: str
    liked: bool
    enrolled: bool
