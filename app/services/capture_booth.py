from __future__ import annotations

import threading
from typing import Callable, Optional

from app.services.camera import CameraConstraints, CameraOpener, open_camera
from app.services.capture_service import CaptureSession, CaptureState, CaptureStateError
from app.services.media_types import ImageResource


class CaptureBooth:
    """Holds the single camera session of this process and its last result."""

    def __init__(
        self,
        open_stream: CameraOpener = open_camera,
        constraints: Optional[CameraConstraints] = None,
        session_factory: Optional[Callable[..., CaptureSession]] = None,
    ) -> None:
        self._open_stream = open_stream
        self._constraints = constraints
        self._session_factory = session_factory or CaptureSession
        self._session: Optional[CaptureSession] = None
        self._pending: Optional[ImageResource] = None
        self._lock = threading.Lock()

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    @property
    def pending_image(self) -> Optional[ImageResource]:
        return self._pending

    @property
    def state(self) -> CaptureState:
        if self._session is None:
            return CaptureState.idle
        return self._session.state

    def start(self) -> CaptureSession:
        with self._lock:
            if self._session is not None:
                self._session.cancel()
            session = self._session_factory(
                on_image_capture=self._store_pending,
                open_stream=self._open_stream,
                constraints=self._constraints,
            )
            self._session = session
            session.start()
            return session

    def active_session(self) -> CaptureSession:
        session = self._session
        if session is None or session.closed:
            raise CaptureStateError('No active capture session')
        return session

    def freeze(self) -> Optional[bytes]:
        with self._lock:
            return self.active_session().freeze()

    def retake(self) -> None:
        with self._lock:
            self.active_session().retake()

    def confirm(self) -> ImageResource:
        with self._lock:
            return self.active_session().confirm()

    def preview(self) -> Optional[bytes]:
        with self._lock:
            if self._session is None:
                return None
            return self._session.preview()

    def select_file(self, resource: ImageResource) -> bool:
        with self._lock:
            session = self._session
            if session is None or session.closed:
                # a file can be picked without ever opening the camera
                session = self._session_factory(
                    on_image_capture=self._store_pending,
                    open_stream=self._open_stream,
                    constraints=self._constraints,
                )
                self._session = session
            return session.select_file(resource)

    def cancel(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.cancel()

    def clear_pending(self, expected: Optional[ImageResource] = None) -> None:
        # a newer capture may have replaced the one a submission used
        with self._lock:
            if expected is None or self._pending is expected:
                self._pending = None

    def shutdown(self) -> None:
        self.cancel()
        self._session = None

    def _store_pending(self, resource: ImageResource) -> None:
        # called from session callbacks while the booth lock is held
        self._pending = resource
