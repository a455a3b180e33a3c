from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable

from loguru import logger

from app.schemas.memory import MemoryCardOut, MemoryGridOut, MemoryOut
from app.services.record_store import RecordStore, RecordStoreError

EMPTY_TITLE = 'No shared memories yet'
EMPTY_MESSAGE = 'Be the first to share a precious moment with the world!'
GRID_HEADING = 'Community Memories'
GRID_SUBHEADING = 'Beautiful moments shared by everyone'
MONTH_NAMES = (
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
)


def format_memory_date(value: datetime) -> str:
    """Render e.g. ``October 17, 2026 at 03:04 PM``.

    Month names and AM/PM are fixed English; the process locale is ignored.
    """
    hour = value.hour % 12 or 12
    meridiem = 'AM' if value.hour < 12 else 'PM'
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year} at {hour:02d}:{value.minute:02d} {meridiem}"


class RefreshSignal:
    def __init__(self) -> None:
        self.count = 0
        self._subscribers: list[Callable[[int], None]] = []

    def subscribe(self, callback: Callable[[int], None]) -> None:
        self._subscribers.append(callback)

    def notify(self) -> None:
        self.count += 1
        for callback in list(self._subscribers):
            callback(self.count)


class MemoryGrid:
    def __init__(self, records: RecordStore) -> None:
        self._records = records
        self._lock = threading.Lock()
        self.memories: list[MemoryOut] = []
        self.loading = True

    def fetch_all(self) -> list[MemoryOut]:
        with self._lock:
            self.loading = True
            try:
                self.memories = self._records.select_all()
            except RecordStoreError as exc:
                # keep showing the previous list
                logger.error('memories.fetch_failed', error=str(exc))
            finally:
                self.loading = False
            return list(self.memories)

    def handle_refresh(self, trigger: int) -> None:
        logger.debug('memories.refresh', trigger=trigger)
        self.fetch_all()

    def render(self) -> MemoryGridOut:
        if self.loading:
            return MemoryGridOut(loading=True, empty=False)
        if not self.memories:
            return MemoryGridOut(empty=True, empty_title=EMPTY_TITLE, empty_message=EMPTY_MESSAGE)
        return MemoryGridOut(
            empty=False,
            heading=GRID_HEADING,
            subheading=GRID_SUBHEADING,
            cards=[
                MemoryCardOut(
                    id=memory.id,
                    title=memory.title,
                    description=memory.description,
                    image_url=memory.image_url,
                    created_label=format_memory_date(memory.created_at),
                )
                for memory in self.memories
            ],
        )
