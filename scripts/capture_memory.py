#!/usr/bin/env python3
import argparse
import mimetypes
import sys
import time
from pathlib import Path
from typing import Optional

from app.core.backends import get_object_storage, get_record_store
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.init_db import init_db
from app.services.board import MemoryBoard
from app.services.camera import CameraOpener, open_camera
from app.services.capture_service import CaptureState
from app.services.media_types import ImageResource
from app.services.submission_service import MemoryForm


def _read_image_file(path: Path) -> ImageResource:
    content_type, _ = mimetypes.guess_type(path.name)
    return ImageResource(
        content=path.read_bytes(),
        filename=path.name,
        content_type=content_type or 'application/octet-stream',
    )


def _attach_file(form: MemoryForm, path: Path) -> bool:
    # select_file never touches the camera device
    camera = form.open_camera()
    accepted = camera.select_file(_read_image_file(path))
    if not accepted:
        camera.cancel()
        print(f"Not an image file: {path}", file=sys.stderr)
    return accepted


def _attach_camera_frame(form: MemoryForm, warmup: float, open_stream: CameraOpener) -> bool:
    with form.open_camera(open_stream=open_stream) as camera:
        if camera.state != CaptureState.streaming:
            print('Camera unavailable', file=sys.stderr)
            return False
        time.sleep(warmup)
        if camera.freeze() is None:
            print('Camera returned no frame', file=sys.stderr)
            return False
        camera.confirm()
    return form.selected_image is not None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Share a memory from this machine.')
    parser.add_argument('--title', required=True)
    parser.add_argument('--description', required=True)
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--file', type=Path, help='attach an image file')
    source.add_argument('--camera', action='store_true', help='attach a frame from the camera')
    parser.add_argument('--warmup', type=float, default=1.0, help='seconds to let the camera settle')
    return parser


def main(argv: Optional[list[str]] = None, open_stream: CameraOpener = open_camera) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL)
    init_db()

    board = MemoryBoard(get_record_store(), get_object_storage())
    form = board.new_form()
    form.title = args.title
    form.description = args.description

    if args.file is not None and not _attach_file(form, args.file):
        return 2
    if args.camera and not _attach_camera_frame(form, args.warmup, open_stream):
        return 2

    if not form.can_submit:
        print('Title and description are required', file=sys.stderr)
        return 2

    record = form.submit()
    if record is None:
        print(form.error, file=sys.stderr)
        return 1
    print(record.id)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
