"""Base class for session-scoped state kept in sync with durable storage.

A store holds one immutable state value. Mutators compute a new value, write
it to storage and then notify subscribers. Storage problems are logged and
swallowed: the in-memory value stays authoritative for the session.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, TypeVar

from storefront.errors import ParseError, StorageError
from storefront.state.storage import Storage, dump_record, parse_record

logger = logging.getLogger(__name__)

S = TypeVar("S")
Listener = Callable[[Any], None]


class PersistentStore(Generic[S]):
    storage_key: str = ""

    def __init__(self, storage: Storage):
        self._storage = storage
        self._state: S = self.empty()
        self._listeners: List[Listener] = []
        self._closed = False

    # --- hooks for subclasses ---
    def empty(self) -> S:
        raise NotImplementedError

    def encode(self, state: S) -> Dict[str, Any]:
        raise NotImplementedError

    def decode(self, data: Dict[str, Any]) -> S:
        """Build a state from a stored record; raise ParseError on bad shapes."""
        raise NotImplementedError

    # --- lifecycle ---
    def load(self):
        try:
            raw = self._storage.read(self.storage_key)
        except StorageError as exc:
            logger.warning("Reading %s failed, starting empty: %s", self.storage_key, exc)
            raw = None

        state = self.empty()
        if raw is not None:
            try:
                state = self.decode(parse_record(raw))
            except ParseError as exc:
                logger.warning("Discarding unreadable %s record: %s", self.storage_key, exc)
        self._state = state
        return self

    def close(self) -> None:
        self._listeners.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def snapshot(self) -> S:
        return self._state

    # --- observers ---
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Listener on %s failed", self.storage_key)

    # --- mutation ---
    def _commit(self, state: S) -> S:
        if state == self._state:
            return state
        self._state = state
        self._persist(state)
        self._notify()
        return state

    def _replace_transient(self, state: S) -> S:
        """Swap in a state that differs only in fields never written to storage."""
        if state != self._state:
            self._state = state
            self._notify()
        return state

    def _persist(self, state: S) -> None:
        try:
            self._storage.write(self.storage_key, dump_record(self.encode(state)))
        except StorageError as exc:
            logger.warning("Persisting %s failed, keeping in-memory state: %s", self.storage_key, exc)
