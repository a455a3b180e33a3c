from __future__ import annotations

import time
from typing import Callable, Optional

from loguru import logger

from app.schemas.memory import MemoryCreate, MemoryOut
from app.services.capture_service import CaptureSession
from app.services.media_types import ImageResource
from app.services.object_storage import ObjectStorage, upload_image
from app.services.record_store import RecordStore, RecordStoreError

UPLOAD_FAILED_MESSAGE = 'Failed to upload image'


class SubmissionError(RuntimeError):
    pass


class UploadFailedError(SubmissionError):
    def __init__(self, message: str = UPLOAD_FAILED_MESSAGE) -> None:
        super().__init__(message)


class MemoryForm:
    """Form state for sharing one memory.

    ``submit`` uploads the selected image (if any) before inserting the
    record, and only clears the fields once both steps succeed. A failed
    insert after a successful upload leaves the uploaded object behind.
    """

    def __init__(
        self,
        records: RecordStore,
        storage: ObjectStorage,
        on_memory_added: Callable[[], None],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._records = records
        self._storage = storage
        self._on_memory_added = on_memory_added
        self._clock = clock
        self.title = ''
        self.description = ''
        self.selected_image: Optional[ImageResource] = None
        self.image_preview: Optional[str] = None
        self.show_camera = False
        self.loading = False
        self.error: Optional[str] = None

    @property
    def can_submit(self) -> bool:
        return not self.loading and bool(self.title.strip()) and bool(self.description.strip())

    def handle_image_capture(self, resource: ImageResource) -> None:
        self.selected_image = resource
        self.image_preview = resource.to_data_url()
        self.show_camera = False

    def remove_image(self) -> None:
        self.selected_image = None
        self.image_preview = None

    def open_camera(self, **kwargs) -> CaptureSession:
        self.show_camera = True
        return CaptureSession(
            on_image_capture=self.handle_image_capture,
            on_close=self._close_camera,
            **kwargs,
        )

    def _close_camera(self) -> None:
        self.show_camera = False

    def submit(self) -> Optional[MemoryOut]:
        if not self.can_submit:
            return None

        self.loading = True
        self.error = None
        try:
            image_url: Optional[str] = None
            if self.selected_image is not None:
                image_url = upload_image(self._storage, self.selected_image, clock=self._clock)
                if not image_url:
                    raise UploadFailedError()

            record = self._records.insert(
                MemoryCreate(
                    title=self.title.strip(),
                    description=self.description.strip(),
                    image_url=image_url,
                )
            )
        except (SubmissionError, RecordStoreError) as exc:
            self.error = str(exc)
            logger.warning('memories.submit_failed', error=self.error)
            return None
        finally:
            self.loading = False

        logger.info('memories.created', memory_id=record.id, has_image=record.image_url is not None)
        self._reset()
        self._on_memory_added()
        return record

    def _reset(self) -> None:
        self.title = ''
        self.description = ''
        self.selected_image = None
        self.image_preview = None
