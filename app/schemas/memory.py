from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class MemoryCreate(BaseModel):
    title: str
    description: str
    image_url: Optional[str] = None


class MemoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MemoryCardOut(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    created_label: str


class MemoryGridOut(BaseModel):
    loading: bool = False
    empty: bool
    heading: Optional[str] = None
    subheading: Optional[str] = None
    empty_title: Optional[str] = None
    empty_message: Optional[str] = None
    cards: list[MemoryCardOut] = []
