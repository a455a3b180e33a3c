from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import httpx

from app.core.config import settings
from app.db.session import engine
from app.services.object_storage import LocalObjectStorage, ObjectStorage, SupabaseObjectStorage
from app.services.record_store import RecordStore, SqlRecordStore, SupabaseRecordStore


def build_supabase_client() -> httpx.Client:
    url = (settings.SUPABASE_URL or '').strip()
    key = (settings.SUPABASE_ANON_KEY or '').strip()
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY are required for the supabase backend")
    return httpx.Client(
        base_url=url.rstrip('/'),
        headers={'apikey': key, 'Authorization': f"Bearer {key}"},
        timeout=httpx.Timeout(settings.SUPABASE_TIMEOUT_SECONDS),
    )


@lru_cache(maxsize=1)
def _supabase_client() -> httpx.Client:
    return build_supabase_client()


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    if settings.STORE_BACKEND == 'supabase':
        return SupabaseRecordStore(_supabase_client(), settings.MEMORIES_TABLE)
    return SqlRecordStore(engine)


@lru_cache(maxsize=1)
def get_object_storage() -> ObjectStorage:
    if settings.STORE_BACKEND == 'supabase':
        return SupabaseObjectStorage(_supabase_client(), settings.MEMORIES_BUCKET)
    return LocalObjectStorage(
        root=Path(settings.STORAGE_DIR),
        bucket=settings.MEMORIES_BUCKET,
        public_base_url=settings.STORAGE_PUBLIC_URL,
    )


def reset_backends() -> None:
    if _supabase_client.cache_info().currsize:
        _supabase_client().close()
    _supabase_client.cache_clear()
    get_record_store.cache_clear()
    get_object_storage.cache_clear()
