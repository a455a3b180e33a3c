from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np

from app.schemas.memory import MemoryCreate, MemoryOut
from app.services.camera import CameraUnavailableError
from app.services.media_types import ImageResource
from app.services.object_storage import StorageError
from app.services.record_store import RecordStoreError


class FakeCameraStream:
    def __init__(self, frames: Optional[list] = None) -> None:
        self.frames = list(frames) if frames is not None else [make_frame()]
        self.stopped = False
        self.reads = 0

    def read(self):
        self.reads += 1
        if self.stopped or not self.frames:
            return None
        if len(self.frames) == 1:
            return self.frames[0]
        return self.frames.pop(0)

    def stop(self) -> None:
        self.stopped = True


class FakeCamera:
    """Camera opener that records every stream it hands out."""

    def __init__(self, fail: bool = False, frames: Optional[list] = None) -> None:
        self.fail = fail
        self.frames = frames
        self.streams: list[FakeCameraStream] = []
        self.constraints = []

    def __call__(self, constraints):
        self.constraints.append(constraints)
        if self.fail:
            raise CameraUnavailableError("Permission denied")
        stream = FakeCameraStream(self.frames)
        self.streams.append(stream)
        return stream


class FakeStorage:
    bucket = "memories"

    def __init__(self, fail: bool = False, calls: Optional[list] = None) -> None:
        self.fail = fail
        self.calls = calls if calls is not None else []
        self.objects: dict[str, bytes] = {}

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        self.calls.append(("upload", path))
        if self.fail:
            raise StorageError("network error")
        self.objects[path] = content

    def get_public_url(self, path: str) -> str:
        return f"https://cdn.example.com/{self.bucket}/{path}"


class FakeRecordStore:
    def __init__(self, fail_insert: bool = False, fail_select: bool = False, calls: Optional[list] = None) -> None:
        self.fail_insert = fail_insert
        self.fail_select = fail_select
        self.calls = calls if calls is not None else []
        self.rows: list[MemoryOut] = []

    def insert(self, payload: MemoryCreate) -> MemoryOut:
        self.calls.append(("insert", payload))
        if self.fail_insert:
            raise RecordStoreError('new row violates row-level security policy for table "memories"')
        created = datetime(2026, 10, 17, 15, 4, tzinfo=timezone.utc) + timedelta(minutes=len(self.rows))
        record = MemoryOut(
            id=f"memory-{len(self.rows) + 1}",
            title=payload.title,
            description=payload.description,
            image_url=payload.image_url,
            created_at=created,
            updated_at=created,
        )
        self.rows.append(record)
        return record

    def select_all(self) -> list[MemoryOut]:
        self.calls.append(("select_all", None))
        if self.fail_select:
            raise RecordStoreError("connection refused")
        return sorted(self.rows, key=lambda row: row.created_at, reverse=True)


def make_frame(width: int = 64, height: int = 48, color=(0, 128, 255)) -> np.ndarray:
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = color
    return frame


def make_image(filename: str = "photo.png", content_type: str = "image/png") -> ImageResource:
    return ImageResource(content=b"\x89PNG\r\n\x1a\nfake", filename=filename, content_type=content_type)

