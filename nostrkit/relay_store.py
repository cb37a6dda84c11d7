"""Stores that accept and answer events, and a store that fans out to many."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .event import Event
from .filter import Filter


class RelayStore(ABC):
    """Something events can be published to and queried from."""

    @abstractmethod
    def publish(self, event: Event) -> None:
        """Store or forward ``event``; raise on failure."""

    @abstractmethod
    def query_sync(self, filter: Filter) -> list[Event]:
        """Return the events matching ``filter``; raise on failure."""


class MultiStore(RelayStore):
    """Publishes to and queries every store it holds, in order."""

    def __init__(self, stores: Iterable[RelayStore] = ()) -> None:
        self.stores: list[RelayStore] = list(stores)

    def add(self, store: RelayStore) -> None:
        """Add a store to the end of the list."""
        self.stores.append(store)

    def publish(self, event: Event) -> None:
        """Publish to every store; if any failed, raise the last error after trying all."""
        error: Exception | None = None
        for store in self.stores:
            try:
                store.publish(event)
            except Exception as exc:
                error = exc
        if error is not None:
            raise error

    def query_sync(self, filter: Filter) -> list[Event]:
        """Return the stores' results concatenated in order.

        Every store is queried; if any failed, the last error is raised after all.
        """
        events: list[Event] = []
        error: Exception | None = None
        for store in self.stores:
            try:
                events.extend(store.query_sync(filter))
            except Exception as exc:
                error = exc
        if error is not None:
            raise error
        return events