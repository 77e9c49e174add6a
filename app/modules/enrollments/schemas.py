from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.modules.tutorials.schemas import TutorialWithAuthor


class EnrollmentState(BaseModel):
    tutorial_id: str
    enrolled: bool
    enrollments_count: int
    created: bool = False


class EnrollmentWithTutorial(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    tutorial_id: str
    user_id: str
    enrolled_at: datetime
    tutorial: Optional[TutorialWithAuthor] = Field(default=None, validation_alias="tutorials")
