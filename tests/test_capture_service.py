import io

import pytest
from PIL import Image

from app.services.camera import CameraConstraints
from app.services.capture_service import CaptureSession, CaptureState, CaptureStateError
from tests.fakes import FakeCamera, make_frame, make_image


def _session(camera, emitted, closed=None, clock=lambda: 1760713440.125):
    return CaptureSession(
        on_image_capture=emitted.append,
        on_close=(lambda: closed.append(True)) if closed is not None else None,
        open_stream=camera,
        constraints=CameraConstraints(width=1280, height=720, device_index=0),
        quality=80,
        clock=clock,
    )


def test_start_requests_preferred_resolution(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    assert session.state == CaptureState.streaming
    assert fake_camera.constraints[0].width == 1280
    assert fake_camera.constraints[0].height == 720


def test_camera_denied_leaves_session_empty():
    camera = FakeCamera(fail=True)
    session = _session(camera, [])
    session.start()
    assert session.state == CaptureState.empty
    assert session.preview() is None
    with pytest.raises(CaptureStateError):
        session.freeze()


def test_preview_returns_jpeg_while_streaming(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    preview = session.preview()
    assert preview is not None
    assert Image.open(io.BytesIO(preview)).format == "JPEG"


def test_freeze_stops_stream_and_keeps_frozen_image(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    frozen = session.freeze()
    assert session.state == CaptureState.frozen
    assert fake_camera.streams[0].stopped is True
    assert frozen is not None
    assert session.preview() == frozen


def test_freeze_without_frame_stays_streaming():
    camera = FakeCamera(frames=[])
    session = _session(camera, [])
    session.start()
    assert session.freeze() is None
    assert session.state == CaptureState.streaming
    assert camera.streams[0].stopped is False


def test_confirm_emits_single_jpeg_named_by_timestamp(fake_camera):
    emitted, closed = [], []
    session = _session(fake_camera, emitted, closed)
    session.start()
    session.freeze()
    resource = session.confirm()

    assert emitted == [resource]
    assert resource.filename == "memory-1760713440125.jpg"
    assert resource.content_type == "image/jpeg"
    image = Image.open(io.BytesIO(resource.content))
    assert image.format == "JPEG"
    assert image.size == (64, 48)
    assert session.state == CaptureState.closed
    assert closed == [True]


def test_retake_discards_frozen_image_and_restarts(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    session.freeze()
    session.retake()
    assert session.state == CaptureState.streaming
    assert session.captured_image is None
    assert len(fake_camera.streams) == 2
    assert fake_camera.streams[0].stopped is True
    assert fake_camera.streams[1].stopped is False


def test_confirm_and_retake_require_frozen_state(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    with pytest.raises(CaptureStateError):
        session.confirm()
    with pytest.raises(CaptureStateError):
        session.retake()


def test_select_file_emits_image_unchanged(fake_camera):
    emitted, closed = [], []
    session = _session(fake_camera, emitted, closed)
    session.start()
    resource = make_image()
    assert session.select_file(resource) is True
    assert emitted == [resource]
    assert fake_camera.streams[0].stopped is True
    assert session.state == CaptureState.closed
    assert closed == [True]


def test_select_file_ignores_non_images(fake_camera):
    emitted = []
    session = _session(fake_camera, emitted)
    session.start()
    assert session.select_file(make_image("notes.txt", "text/plain")) is False
    assert emitted == []
    assert session.state == CaptureState.streaming


def test_cancel_stops_stream_without_emitting(fake_camera):
    emitted, closed = [], []
    session = _session(fake_camera, emitted, closed)
    session.start()
    session.cancel()
    session.cancel()
    assert emitted == []
    assert closed == [True]
    assert fake_camera.streams[0].stopped is True
    with pytest.raises(CaptureStateError):
        session.start()


def test_context_manager_releases_stream_on_error(fake_camera):
    with pytest.raises(ValueError):
        with _session(fake_camera, []) as session:
            assert session.state == CaptureState.streaming
            raise ValueError("boom")
    assert fake_camera.streams[0].stopped is True
    assert session.state == CaptureState.closed


def test_restart_releases_previous_stream(fake_camera):
    session = _session(fake_camera, [])
    session.start()
    session.start()
    assert fake_camera.streams[0].stopped is True
    assert len(fake_camera.streams) == 2


def test_frame_colors_survive_bgr_conversion():
    camera = FakeCamera(frames=[make_frame(color=(255, 0, 0))])
    emitted = []
    session = _session(camera, emitted)
    session.start()
    session.freeze()
    resource = session.confirm()
    red, green, blue = Image.open(io.BytesIO(resource.content)).convert("RGB").getpixel((10, 10))
    assert blue > 200 and red < 60
