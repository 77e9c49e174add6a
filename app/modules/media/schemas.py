from pydantic import BaseModel


class UploadedMedia(BaseModel):
    path: str
    public_url: str
