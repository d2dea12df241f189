"""Durable key/value storage backing the client-state stores.

Every backend stores opaque strings. Failures surface as `StorageError` so the
stores can log and carry on with their in-memory state.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront.app.models import StoredState
from storefront.errors import ParseError, StorageError

RECORD_VERSION = 1


class Storage:
    """Interface: read/write/delete one string value per key."""

    def read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class DatabaseStorage(Storage):
    """Rows of `StoredState` owned by a single visitor."""

    def __init__(self, session, owner: str):
        self.session = session
        self.owner = owner

    def _row(self, key: str):
        return self.session.query(StoredState).filter_by(owner=self.owner, key=key).first()

    def read(self, key: str) -> Optional[str]:
        try:
            row = self._row(key)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Could not read {key!r}", {"owner": self.owner}) from exc
        return row.payload if row else None

    def write(self, key: str, value: str) -> None:
        try:
            row = self._row(key)
            if row:
                row.payload = value
            else:
                self.session.add(StoredState(owner=self.owner, key=key, payload=value))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Could not write {key!r}", {"owner": self.owner}) from exc

    def delete(self, key: str) -> None:
        try:
            self.session.query(StoredState).filter_by(owner=self.owner, key=key).delete()
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Could not delete {key!r}", {"owner": self.owner}) from exc


def dump_record(data: Dict[str, Any]) -> str:
    return json.dumps({"version": RECORD_VERSION, "data": data}, separators=(",", ":"))


def parse_record(raw: str) -> Dict[str, Any]:
    """Unwrap a stored record, raising ParseError on anything unexpected."""
    try:
        record = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ParseError("Stored record is not valid JSON") from exc

    if not isinstance(record, dict) or record.get("version") != RECORD_VERSION:
        raise ParseError("Stored record has an unknown version")
    data = record.get("data")
    if not isinstance(data, dict):
        raise ParseError("Stored record has no data object")
    return data
