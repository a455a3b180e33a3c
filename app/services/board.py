from __future__ import annotations

from app.services.listing_service import MemoryGrid, RefreshSignal
from app.services.object_storage import ObjectStorage
from app.services.record_store import RecordStore
from app.services.submission_service import MemoryForm


class MemoryBoard:
    """Wires submission forms to the listing through one refresh signal."""

    def __init__(self, records: RecordStore, storage: ObjectStorage) -> None:
        self.records = records
        self.storage = storage
        self.refresh = RefreshSignal()
        self.grid = MemoryGrid(records)
        self.refresh.subscribe(self.grid.handle_refresh)

    def new_form(self) -> MemoryForm:
        return MemoryForm(self.records, self.storage, on_memory_added=self.refresh.notify)
