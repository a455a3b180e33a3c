import pytest

from app.services.object_storage import (
    LocalObjectStorage,
    StorageError,
    build_upload_path,
    upload_image,
)
from tests.fakes import FakeStorage, make_image


def test_build_upload_path_uses_time_and_extension():
    assert build_upload_path(make_image("memory-1.jpg"), 1760713440123) == "public/1760713440123.jpg"
    assert build_upload_path(make_image("scan.final.PNG"), 5) == "public/5.PNG"
    assert build_upload_path(make_image("photo.png"), 5, prefix="") == "5.png"


def test_local_storage_writes_object_and_public_url(tmp_path):
    storage = LocalObjectStorage(tmp_path, "memories", "http://testserver/storage/")
    storage.upload("public/1.png", b"data", "image/png")
    assert (tmp_path / "memories" / "public" / "1.png").read_bytes() == b"data"
    assert storage.get_public_url("public/1.png") == "http://testserver/storage/memories/public/1.png"


def test_local_storage_refuses_overwrite(tmp_path):
    storage = LocalObjectStorage(tmp_path, "memories", "http://testserver/storage")
    storage.upload("public/1.png", b"first", "image/png")
    with pytest.raises(StorageError):
        storage.upload("public/1.png", b"second", "image/png")
    assert (tmp_path / "memories" / "public" / "1.png").read_bytes() == b"first"


@pytest.mark.parametrize("path", ["../escape.png", "public/../../escape.png", ""])
def test_local_storage_rejects_paths_outside_bucket(tmp_path, path):
    storage = LocalObjectStorage(tmp_path, "memories", "http://testserver/storage")
    with pytest.raises(StorageError):
        storage.upload(path, b"data", "image/png")


def test_upload_image_returns_public_url():
    storage = FakeStorage()
    url = upload_image(storage, make_image("photo.png"), clock=lambda: 2.5)
    assert url == "https://cdn.example.com/memories/public/2500.png"
    assert storage.objects["public/2500.png"].startswith(b"\x89PNG")


def test_upload_image_returns_none_on_failure():
    assert upload_image(FakeStorage(fail=True), make_image(), clock=lambda: 1.0) is None
