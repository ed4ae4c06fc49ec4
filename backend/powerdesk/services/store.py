from __future__ import annotations
"""Document store adapter mirroring the realtime database the dashboard talks to.

Paths are slash separated (``invoices/INV-0001``, ``notifications/{uid}/{key}``).
Each document is a JSON object. Reading a path with no document of its own returns
the mapping of its direct children, which is how collections (``users``, ``shops``)
are listed. Writes are last-write-wins; there is no cross-document transaction.
"""
import copy
import secrets
import time
from typing import Any, Callable, Dict, Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.exc import SQLAlchemyError

from powerdesk.models.document import Document

PERMISSION_DENIED = 'PERMISSION_DENIED'
NOT_FOUND = 'NOT_FOUND'
UNAVAILABLE = 'UNAVAILABLE'
INVALID_ARGUMENT = 'INVALID_ARGUMENT'

PERMISSION_DENIED_MESSAGE = 'Permission denied. Please check your access rights.'


class StoreError(Exception):
    """Store read/write failure carrying a realtime-database style error code."""

    def __init__(self, code: str, message: str = ''):
        super().__init__(message or code)
        self.code = code
        self.message = message


def describe_store_error(exc: BaseException, fallback: str) -> str:
    """Human readable banner text for a failed store call."""
    code = getattr(exc, 'code', None)
    if code == PERMISSION_DENIED:
        return PERMISSION_DENIED_MESSAGE
    message = getattr(exc, 'message', None) if isinstance(exc, StoreError) else str(exc)
    if message:
        return f'Error: {message}'
    return fallback


def store_error_status(code: Optional[str]) -> int:
    """HTTP status reported for a store failure code."""
    return {PERMISSION_DENIED: 403, NOT_FOUND: 404, INVALID_ARGUMENT: 400}.get(code, 502)


def generate_push_key() -> str:
    """Chronologically sortable unique key, like the realtime database's push ids."""
    return f"{int(time.time() * 1000):013d}{secrets.token_hex(4)}"


def split_path(path: str):
    parts = [p for p in (path or '').split('/') if p]
    if not parts:
        raise StoreError(INVALID_ARGUMENT, 'Path must not be empty')
    return '/'.join(parts), '/'.join(parts[:-1]), parts[-1]


class DocumentStore:
    """Operations the dashboard performs against the shared store."""

    def get(self, path: str) -> Optional[Any]:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        return self.get(path) is not None

    def set(self, path: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def update(self, path: str, partial: Dict[str, Any]) -> None:
        raise NotImplementedError

    def push(self, path: str, value: Dict[str, Any]) -> str:
        key = generate_push_key()
        self.set(f'{path}/{key}', value)
        return key

    def remove(self, path: str) -> None:
        raise NotImplementedError


class SqlDocumentStore(DocumentStore):
    """DocumentStore persisted through SQLAlchemy (``documents`` table)."""

    def __init__(self, session_factory: Callable[[], Any]):
        self._session_factory = session_factory

    def _run(self, fn):
        session = self._session_factory()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(UNAVAILABLE, str(e)) from e

    def get(self, path: str) -> Optional[Any]:
        full, _, _ = split_path(path)

        def op(session):
            doc = session.get(Document, full)
            if doc is not None:
                return copy.deepcopy(doc.data)
            children = session.execute(
                select(Document).where(Document.parent == full).order_by(Document.key.asc())
            ).scalars().all()
            if children:
                return {c.key: copy.deepcopy(c.data) for c in children}
            return None
        return self._run(op)

    def set(self, path: str, value: Dict[str, Any]) -> None:
        full, parent, key = split_path(path)
        if not isinstance(value, dict):
            raise StoreError(INVALID_ARGUMENT, 'Documents must be JSON objects')

        def op(session):
            doc = session.get(Document, full)
            if doc is None:
                doc = Document(path=full, parent=parent, key=key, data=copy.deepcopy(value))
                session.add(doc)
            else:
                doc.data = copy.deepcopy(value)
            session.commit()
        self._run(op)

    def update(self, path: str, partial: Dict[str, Any]) -> None:
        full, parent, key = split_path(path)
        if not isinstance(partial, dict):
            raise StoreError(INVALID_ARGUMENT, 'Updates must be JSON objects')

        def op(session):
            doc = session.get(Document, full)
            if doc is None:
                session.add(Document(path=full, parent=parent, key=key, data=copy.deepcopy(partial)))
            else:
                merged = dict(doc.data or {})
                merged.update(copy.deepcopy(partial))
                # JSON columns are not mutation tracked; assign a new object
                doc.data = merged
            session.commit()
        self._run(op)

    def remove(self, path: str) -> None:
        full, _, _ = split_path(path)

        def op(session):
            session.execute(delete(Document).where(or_(Document.path == full, Document.path.startswith(f'{full}/', autoescape=True))))
            session.commit()
        self._run(op)


__all__ = [
    'DocumentStore', 'SqlDocumentStore', 'StoreError', 'describe_store_error', 'store_error_status', 'generate_push_key',
    'PERMISSION_DENIED', 'NOT_FOUND', 'UNAVAILABLE', 'INVALID_ARGUMENT', 'PERMISSION_DENIED_MESSAGE',
]
