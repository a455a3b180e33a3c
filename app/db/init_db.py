from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from app.core.config import settings
from app.db.session import engine as default_engine
from app.models import memory  # noqa: F401


def init_db(drop_all: bool = False, engine: Optional[Engine] = None) -> None:
    target = engine or default_engine
    if settings.STORE_BACKEND != 'sql':
        return
    if drop_all:
        SQLModel.metadata.drop_all(target)
    SQLModel.metadata.create_all(target)
