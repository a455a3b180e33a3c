from app.models.base import IDModel, TimestampModel
from app.models.memory import Memory

__all__ = [
    'IDModel',
    'TimestampModel',
    'Memory',
]
