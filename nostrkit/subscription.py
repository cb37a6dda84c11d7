"""A subscription to a relay: its filters, its state and its event queue."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from .envelope import CloseEnvelope, CountEnvelope, ReqEnvelope
from .errors import ErrorCode, NostrError
from .event import Event
from .filter import Filter, Filters


class _RelayLike(Protocol):
    connection: Any
    subscriptions: dict[int, Subscription]

    def is_connected(self) -> bool: ...

    def write(self, message: str) -> Any: ...


class Subscription:
    """A set of filters sent to one relay under one id.

    Events arrive on ``events``; ``None`` is queued there once the
    subscription ends. ``end_of_stored_events`` is set on EOSE and a CLOSED
    reason is put on ``closed_reason``. ``done`` is set once unsubscribed.
    The relay's ``write`` is expected to raise NostrError on failure.
    """

    def __init__(
        self,
        relay: _RelayLike,
        filters: Iterable[Filter],
        counter: int = 0,
        label: str = "",
    ) -> None:
        self.relay = relay
        self.filters = filters if isinstance(filters, Filters) else Filters(filters)
        self.counter = counter
        self.label = label
        self.id = f"{counter}:{label}"
        self.events: queue.Queue[Event | None] = queue.Queue()
        self.end_of_stored_events = threading.Event()
        self.closed_reason: queue.Queue[str] = queue.Queue(maxsize=1)
        self.done = threading.Event()
        self.count_result: queue.Queue[int] | None = None
        self.match: Callable[[Event], bool] = self.filters.match
        self._lock = threading.Lock()
        self._live = False
        self._eosed = False
        self._closed = False
        self._events_ended = False

    @property
    def live(self) -> bool:
        """Whether the request has been sent and not yet withdrawn."""
        return self._live

    @property
    def eosed(self) -> bool:
        """Whether the relay has signalled the end of stored events."""
        return self._eosed

    @property
    def closed(self) -> bool:
        """Whether the relay has closed the subscription."""
        return self._closed

    def _swap(self, name: str, value: bool) -> bool:
        with self._lock:
            old = getattr(self, name)
            setattr(self, name, value)
            return old

    def get_id(self) -> str:
        """Return the subscription id sent to the relay."""
        return self.id

    def unsub(self) -> None:
        """Withdraw the subscription, telling the relay if it was live."""
        self.done.set()
        try:
            if self._swap("_live", False):
                self.close()
        finally:
            self.relay.subscriptions.pop(self.counter, None)
            with self._lock:
                if not self._events_ended:
                    self._events_ended = True
                    self.events.put(None)

    def close(self) -> None:
        """Send a CLOSE for this subscription if the relay is connected."""
        if self.relay is None:
            raise NostrError(ErrorCode.SUBSCRIPTION_CLOSE_FAILED, "subscription has no relay")
        if self.relay.is_connected():
            self.relay.write(CloseEnvelope(self.id).to_json())

    def sub(self, filters: Iterable[Filter]) -> None:
        """Replace the filters and send the request again."""
        self.filters = filters if isinstance(filters, Filters) else Filters(filters)
        self.match = (
            self.filters.match_ignoring_timestamp if self._eosed else self.filters.match
        )
        try:
            self.fire()
        except NostrError as exc:
            raise NostrError(
                ErrorCode.SUBSCRIPTION_INIT_FAILED, "failed to fire subscription"
            ) from exc

    def fire(self) -> None:
        """Send the REQ (or COUNT, when a count is awaited) and mark the subscription live."""
        if self.relay is None or getattr(self.relay, "connection", None) is None:
            raise NostrError(
                ErrorCode.SUBSCRIPTION_INIT_FAILED, "subscription or connection is missing"
            )
        if self.count_result is not None:
            message = CountEnvelope(self.id, self.filters).to_json()
        else:
            message = ReqEnvelope(self.id, self.filters).to_json()
        self.relay.write(message)
        with self._lock:
            self._live = True

    def dispatch_event(self, event: Event | None) -> None:
        """Queue an incoming event if the subscription is live."""
        if event is None:
            return
        with self._lock:
            if self._live:
                self.events.put(event)

    def dispatch_eose(self) -> None:
        """Record the end of stored events; only the first call has an effect."""
        if not self._swap("_eosed", True):
            self.match = self.filters.match_ignoring_timestamp
            self.end_of_stored_events.set()

    def dispatch_closed(self, reason: str | None) -> None:
        """Record the relay's reason for closing; only the first call has an effect."""
        if reason is None:
            return
        if not self._swap("_closed", True):
            self.closed_reason.put(reason)