"""Key-value persistence for the lead collection, saved views and password.

Writes replace the whole value of a key. Failures are logged and reported to
the caller as ``False``/``None``; nothing here raises on a storage fault.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from leadtracker.database.db import session_scope
from leadtracker.database.models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> bool:
        ...

    def delete(self, key: str) -> bool:
        ...


class SqlKeyValueStore:
    """``KeyValueStore`` backed by the ``kv_entries`` table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with session_scope(self._session_factory) as session:
            try:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
            except SQLAlchemyError:
                logger.exception("kv.read_failed", extra={"event": "kv.read_failed", "key": key})
                return None

    def set(self, key: str, value: str) -> bool:
        with session_scope(self._session_factory) as session:
            try:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                session.commit()
                return True
            except SQLAlchemyError:
                session.rollback()
                logger.exception("kv.write_failed", extra={"event": "kv.write_failed", "key": key})
                return False

    def delete(self, key: str) -> bool:
        with session_scope(self._session_factory) as session:
            try:
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
                return True
            except SQLAlchemyError:
                session.rollback()
                logger.exception("kv.delete_failed", extra={"event": "kv.delete_failed", "key": key})
                return False


def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read and decode a JSON value, falling back to ``default`` when absent or corrupt."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("kv.decode_failed", extra={"event": "kv.decode_failed", "key": key})
        return default


def save_json(store: KeyValueStore, key: str, value: Any) -> bool:
    return store.set(key, json.dumps(value, ensure_ascii=False))
