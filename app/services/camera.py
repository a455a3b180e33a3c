from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import cv2
import numpy as np
from PIL import Image

from app.core.config import settings


class CameraUnavailableError(RuntimeError):
    pass


@dataclass(frozen=True)
class CameraConstraints:
    width: int = 1280
    height: int = 720
    device_index: int = 0

    @classmethod
    def from_settings(cls) -> 'CameraConstraints':
        return cls(
            width=settings.CAMERA_WIDTH,
            height=settings.CAMERA_HEIGHT,
            device_index=settings.CAMERA_DEVICE_INDEX,
        )


class CameraStream(Protocol):
    def read(self) -> Optional[np.ndarray]: ...

    def stop(self) -> None: ...


CameraOpener = Callable[[CameraConstraints], CameraStream]


class OpenCVCameraStream:
    """Live video stream backed by ``cv2.VideoCapture``.

    The requested resolution is a preference; the driver may pick the closest
    mode it supports.
    """

    def __init__(self, constraints: CameraConstraints) -> None:
        capture = cv2.VideoCapture(constraints.device_index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Camera {constraints.device_index} could not be opened")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
        self._capture: Optional[cv2.VideoCapture] = capture

    @property
    def active(self) -> bool:
        return self._capture is not None

    def read(self) -> Optional[np.ndarray]:
        if self._capture is None:
            return None
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        return frame

    def stop(self) -> None:
        if self._capture is None:
            return
        self._capture.release()
        self._capture = None


def open_camera(constraints: CameraConstraints) -> CameraStream:
    try:
        return OpenCVCameraStream(constraints)
    except cv2.error as exc:
        raise CameraUnavailableError(str(exc)) from exc


def frame_to_image(frame: np.ndarray) -> Image.Image:
    """Convert an OpenCV BGR frame into an RGB PIL image."""
    rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.convert('RGB').save(buffer, format='JPEG', quality=quality)
    return buffer.getvalue()
