from typing import Optional
from pydantic import BaseModel


class PendingImageOut(BaseModel):
    filename: str
    content_type: str
    size: int


class CaptureStateOut(BaseModel):
    state: str
    has_preview: bool
    pending_image: Optional[PendingImageOut] = None
