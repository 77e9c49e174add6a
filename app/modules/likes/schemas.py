from pydantic import BaseModel


class LikeState(BaseModel):
    tutorial_id: str
    liked: bool
    likes_count: int
    created: bool = False
