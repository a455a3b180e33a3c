from __future__ import annotations

from typing import Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.memory import Memory
from app.schemas.memory import MemoryCreate, MemoryOut


class RecordStoreError(RuntimeError):
    pass


def _db_error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, 'orig', None)
    return str(orig) if orig is not None else str(exc)


class RecordStore(Protocol):
    def insert(self, payload: MemoryCreate) -> MemoryOut: ...

    def select_all(self) -> list[MemoryOut]: ...


class SqlRecordStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def insert(self, payload: MemoryCreate) -> MemoryOut:
        record = Memory(
            title=payload.title,
            description=payload.description,
            image_url=payload.image_url,
        )
        try:
            with Session(self._engine) as session:
                session.add(record)
                session.commit()
                session.refresh(record)
                return MemoryOut.model_validate(record)
        except SQLAlchemyError as exc:
            raise RecordStoreError(_db_error_message(exc)) from exc

    def select_all(self) -> list[MemoryOut]:
        statement = select(Memory).order_by(Memory.created_at.desc())
        try:
            with Session(self._engine) as session:
                return [MemoryOut.model_validate(record) for record in session.exec(statement).all()]
        except SQLAlchemyError as exc:
            raise RecordStoreError(_db_error_message(exc)) from exc


class SupabaseRecordStore:
    """Rows of a Supabase table through its PostgREST endpoint."""

    def __init__(self, client: httpx.Client, table: str) -> None:
        self._client = client
        self._table = table

    def insert(self, payload: MemoryCreate) -> MemoryOut:
        response = self._request(
            'POST',
            json=payload.model_dump(),
            headers={'Prefer': 'return=representation'},
        )
        rows = self._rows(response)
        if not rows:
            raise RecordStoreError('Insert returned no rows')
        return rows[0]

    def select_all(self) -> list[MemoryOut]:
        response = self._request('GET', params={'select': '*', 'order': 'created_at.desc'})
        return self._rows(response)

    def _request(self, method: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, f"/rest/v1/{self._table}", **kwargs)
        except httpx.HTTPError as exc:
            raise RecordStoreError(str(exc)) from exc
        if response.is_error:
            raise RecordStoreError(_error_message(response))
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> list[MemoryOut]:
        try:
            payload = response.json()
            return [MemoryOut.model_validate(item) for item in payload]
        except (ValueError, TypeError, ValidationError) as exc:
            raise RecordStoreError(f"Unexpected response from record store: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get('message')
        if isinstance(message, str) and message:
            return message
    return f"Record store request failed with status {response.status_code}"
