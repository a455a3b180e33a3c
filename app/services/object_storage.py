from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional, Protocol
from urllib.parse import quote

import httpx
from loguru import logger

from app.core.config import settings
from app.services.media_types import ImageResource


class StorageError(RuntimeError):
    pass


class ObjectStorage(Protocol):
    bucket: str

    def upload(self, path: str, content: bytes, content_type: str) -> None: ...

    def get_public_url(self, path: str) -> str: ...


class LocalObjectStorage:
    """Public bucket kept on disk and served by the app's static mount."""

    def __init__(self, root: Path, bucket: str, public_base_url: str) -> None:
        self.root = Path(root)
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip('/')

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def _resolve(self, path: str) -> Path:
        bucket_dir = self.bucket_dir.resolve()
        target = (bucket_dir / path).resolve()
        if target == bucket_dir or bucket_dir not in target.parents:
            raise StorageError(f"Invalid object path: {path}")
        return target

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        target = self._resolve(path)
        if target.exists():
            raise StorageError('The resource already exists')
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open('xb') as handle:
                handle.write(content)
        except FileExistsError as exc:
            raise StorageError('The resource already exists') from exc
        except OSError as exc:
            raise StorageError(str(exc)) from exc

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{quote(path)}"


class SupabaseObjectStorage:
    """Storage API of a hosted Supabase project."""

    def __init__(self, client: httpx.Client, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        try:
            response = self._client.post(
                f"/storage/v1/object/{self.bucket}/{quote(path)}",
                content=content,
                headers={'content-type': content_type, 'x-upsert': 'false'},
            )
        except httpx.HTTPError as exc:
            raise StorageError(str(exc)) from exc
        if response.is_error:
            raise StorageError(_error_message(response))

    def get_public_url(self, path: str) -> str:
        base = str(self._client.base_url).rstrip('/')
        return f"{base}/storage/v1/object/public/{self.bucket}/{quote(path)}"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ('message', 'error', 'msg'):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Storage request failed with status {response.status_code}"


def build_upload_path(resource: ImageResource, now_ms: int, prefix: Optional[str] = None) -> str:
    folder = settings.UPLOAD_PREFIX if prefix is None else prefix
    name = f"{now_ms}.{resource.extension}"
    return f"{folder}/{name}" if folder else name


def upload_image(
    storage: ObjectStorage,
    resource: ImageResource,
    clock: Callable[[], float] = time.time,
) -> Optional[str]:
    path = build_upload_path(resource, int(clock() * 1000))
    try:
        storage.upload(path, resource.content, resource.content_type)
    except StorageError as exc:
        logger.error('storage.upload_failed', bucket=storage.bucket, path=path, error=str(exc))
        return None
    return storage.get_public_url(path)
