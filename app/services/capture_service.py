from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

from loguru import logger
from PIL import Image

from app.core.config import settings
from app.services.camera import (
    CameraConstraints,
    CameraOpener,
    CameraStream,
    CameraUnavailableError,
    encode_jpeg,
    frame_to_image,
    open_camera,
)
from app.services.media_types import ImageResource

CAPTURE_CONTENT_TYPE = 'image/jpeg'


class CaptureState(str, Enum):
    idle = 'idle'
    requesting_stream = 'requesting_stream'
    streaming = 'streaming'
    empty = 'empty'
    frozen = 'frozen'
    closed = 'closed'


class CaptureStateError(RuntimeError):
    pass


def capture_filename(now: float) -> str:
    return f"memory-{int(now * 1000)}.jpg"


class CaptureSession:
    """One camera capture: live preview, frozen review, then hand-off.

    The session owns at most one camera stream at a time and stops it on
    freeze, cancel, file selection and context-manager exit. Camera failures
    never raise out of ``start``; the session just stays ``empty``.
    """

    def __init__(
        self,
        on_image_capture: Callable[[ImageResource], None],
        on_close: Optional[Callable[[], None]] = None,
        open_stream: CameraOpener = open_camera,
        constraints: Optional[CameraConstraints] = None,
        quality: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._on_image_capture = on_image_capture
        self._on_close = on_close
        self._open_stream = open_stream
        self._constraints = constraints or CameraConstraints.from_settings()
        self._quality = quality if quality is not None else settings.CAPTURE_JPEG_QUALITY
        self._clock = clock
        self._stream: Optional[CameraStream] = None
        self._frozen: Optional[Image.Image] = None
        self._frozen_jpeg: Optional[bytes] = None
        self.state = CaptureState.idle

    def __enter__(self) -> 'CaptureSession':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.state != CaptureState.closed:
            self.cancel()

    @property
    def closed(self) -> bool:
        return self.state == CaptureState.closed

    @property
    def captured_image(self) -> Optional[bytes]:
        return self._frozen_jpeg

    def start(self) -> None:
        self._require_open()
        self._release_stream()
        self.state = CaptureState.requesting_stream
        try:
            self._stream = self._open_stream(self._constraints)
        except (CameraUnavailableError, OSError) as exc:
            logger.error(
                'capture.camera_unavailable',
                device=self._constraints.device_index,
                error=str(exc),
            )
            self.state = CaptureState.empty
            return
        self.state = CaptureState.streaming

    def preview(self) -> Optional[bytes]:
        if self.state == CaptureState.frozen:
            return self._frozen_jpeg
        if self.state != CaptureState.streaming or self._stream is None:
            return None
        frame = self._stream.read()
        if frame is None:
            return None
        return encode_jpeg(frame_to_image(frame), self._quality)

    def freeze(self) -> Optional[bytes]:
        if self.state != CaptureState.streaming or self._stream is None:
            raise CaptureStateError(f"Cannot capture a frame while {self.state.value}")
        frame = self._stream.read()
        if frame is None:
            logger.warning('capture.frame_unavailable', device=self._constraints.device_index)
            return None
        image = frame_to_image(frame)
        self._frozen = image
        self._frozen_jpeg = encode_jpeg(image, self._quality)
        self._release_stream()
        self.state = CaptureState.frozen
        return self._frozen_jpeg

    def confirm(self) -> ImageResource:
        if self.state != CaptureState.frozen or self._frozen is None:
            raise CaptureStateError(f"Nothing to confirm while {self.state.value}")
        resource = ImageResource(
            content=encode_jpeg(self._frozen, self._quality),
            filename=capture_filename(self._clock()),
            content_type=CAPTURE_CONTENT_TYPE,
        )
        self._on_image_capture(resource)
        self._close()
        return resource

    def retake(self) -> None:
        if self.state != CaptureState.frozen:
            raise CaptureStateError(f"Nothing to retake while {self.state.value}")
        self._frozen = None
        self._frozen_jpeg = None
        self.start()

    def select_file(self, resource: ImageResource) -> bool:
        self._require_open()
        if not resource.is_image:
            logger.debug('capture.file_ignored', filename=resource.filename, content_type=resource.content_type)
            return False
        self._release_stream()
        self._on_image_capture(resource)
        self._close()
        return True

    def cancel(self) -> None:
        if self.state == CaptureState.closed:
            return
        self._close()

    def _require_open(self) -> None:
        if self.state == CaptureState.closed:
            raise CaptureStateError('Capture session is closed')

    def _release_stream(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _close(self) -> None:
        self._release_stream()
        self._frozen = None
        self._frozen_jpeg = None
        self.state = CaptureState.closed
        if self._on_close is not None:
            self._on_close()
