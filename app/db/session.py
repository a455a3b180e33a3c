from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from app.core.config import settings


def build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith('sqlite'):
        connect_args['check_same_thread'] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)
