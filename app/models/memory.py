from typing import Optional

from sqlmodel import Field, SQLModel

from app.models.base import IDModel, TimestampModel


class Memory(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'memories'

    title: str
    description: str
    image_url: Optional[str] = Field(default=None)
