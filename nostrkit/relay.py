"""A client for a single relay: connecting, subscribing, querying and publishing."""

from __future__ import annotations

import itertools
import queue
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import suppress
from typing import Any

from .connection import Connection
from .envelope import (
    AuthEnvelope,
    AuthEnvelope as _AuthEnvelope,
    ClosedEnvelope,
    CountEnvelope,
    EOSEEnvelope,
    EventEnvelope,
    NoticeEnvelope,
    OKEnvelope,
    parse_message,
)
from .errors import ErrorCode, NostrError
from .event import Event
from .filter import Filter, Filters
from .kinds import Kind
from .subscription import Subscription
from .tags import Tags
from .timestamp import now
from .utils import sub_id_to_serial

_POLL_INTERVAL = 0.05

ConnectionFactory = Callable[[str], Any]
OkCallback = Callable[[bool, str], None]


class Relay:
    """A connection to one relay and the subscriptions opened on it.

    ``connection_factory`` is called with the URL and must return an object
    with ``write_message``, ``read_message`` and ``close``, like Connection.
    Incoming EVENT messages are checked for a valid signature unless
    ``assume_valid`` is set. ``ok_callbacks`` maps event ids to callables
    receiving the relay's OK answer.
    """

    def __init__(
        self,
        url: str,
        *,
        connection_factory: ConnectionFactory | None = None,
        assume_valid: bool = False,
        notice_handler: Callable[[str], None] | None = None,
        custom_handler: Callable[[str], None] | None = None,
    ) -> None:
        if not url:
            raise NostrError(ErrorCode.RELAY_INVALID_URL, "invalid relay URL")
        self.url = url
        self.connection: Any = None
        self.connection_error: NostrError | None = None
        self.subscriptions: dict[int, Subscription] = {}
        self.assume_valid = assume_valid
        self.challenge: str | None = None
        self.notice_handler = notice_handler
        self.custom_handler = custom_handler
        self.ok_callbacks: dict[str, OkCallback] = {}
        self._connection_factory: ConnectionFactory = connection_factory or Connection
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self._cancel.set()
        self._reader: threading.Thread | None = None

    def __enter__(self) -> Relay:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    def connect(self) -> None:
        """Open the connection and start reading messages; do nothing if already connected."""
        with self._lock:
            if self.connection is not None and not self._cancel.is_set():
                return
            try:
                connection = self._connection_factory(self.url)
            except NostrError:
                raise
            except Exception as exc:
                raise NostrError(
                    ErrorCode.RELAY_CONNECTION_FAILED,
                    f"error opening websocket to '{self.url}'",
                ) from exc
            self.connection = connection
            self.connection_error = None
            cancel = threading.Event()
            self._cancel = cancel
            self._reader = threading.Thread(
                target=self._message_loop, args=(connection, cancel), daemon=True
            )
            self._reader.start()

    def disconnect(self) -> None:
        """Close the connection if there is one."""
        with suppress(NostrError):
            self.close()

    def is_connected(self) -> bool:
        """Report whether the connection is open."""
        return self.connection is not None and not self._cancel.is_set()

    def _message_loop(self, connection: Any, cancel: threading.Event) -> None:
        while not cancel.is_set():
            try:
                message = connection.read_message()
            except NostrError as exc:
                if not cancel.is_set():
                    self.connection_error = exc
                    self.disconnect()
                return
            self.handle_message(message)

    def handle_message(self, message: str) -> None:
        """Dispatch one incoming message to handlers and subscriptions."""
        envelope = parse_message(message)
        if envelope is None:
            if self.custom_handler is not None:
                self.custom_handler(message)
            return

        match envelope:
            case NoticeEnvelope():
                if self.notice_handler is not None:
                    self.notice_handler(envelope.message)
            case _AuthEnvelope():
                if envelope.challenge is not None:
                    self.challenge = envelope.challenge
            case EventEnvelope():
                sub = self.subscriptions.get(sub_id_to_serial(envelope.subscription_id))
                if sub is not None and (self.assume_valid or envelope.event.check_signature()):
                    sub.dispatch_event(envelope.event)
            case EOSEEnvelope():
                sub = self.subscriptions.get(sub_id_to_serial(envelope.subscription_id))
                if sub is not None:
                    sub.dispatch_eose()
            case ClosedEnvelope():
                sub = self.subscriptions.get(sub_id_to_serial(envelope.subscription_id))
                if sub is not None:
                    sub.dispatch_closed(envelope.reason)
            case CountEnvelope():
                sub = self.subscriptions.get(sub_id_to_serial(envelope.subscription_id))
                if sub is not None and sub.count_result is not None and envelope.count is not None:
                    with suppress(queue.Full):
                        sub.count_result.put_nowait(envelope.count)
            case OKEnvelope():
                callback = self.ok_callbacks.get(envelope.event_id)
                if callback is not None:
                    callback(envelope.ok, envelope.reason)

    def subscribe(self, filters: Iterable[Filter]) -> Subscription:
        """Open a subscription with ``filters`` and send its request."""
        if self.connection is None:
            raise NostrError(ErrorCode.RELAY_SUBSCRIBE_FAILED, f"not connected to {self.url}")
        subscription = self.prepare_subscription(filters)
        subscription.fire()
        return subscription

    def prepare_subscription(self, filters: Iterable[Filter]) -> Subscription:
        """Register a subscription under a fresh serial without sending anything."""
        subscription = Subscription(self, filters, next(self._counter))
        self.subscriptions[subscription.counter] = subscription
        return subscription

    def _require_connection(self) -> None:
        if self.connection is None:
            raise NostrError(ErrorCode.RELAY_CONNECTION_FAILED, "not connected to relay")

    def _start_query(self, filter: Filter) -> Subscription:
        self._require_connection()
        subscription = self.prepare_subscription(Filters([filter]))
        try:
            subscription.fire()
        except NostrError as exc:
            self.subscriptions.pop(subscription.counter, None)
            raise NostrError(
                ErrorCode.RELAY_SUBSCRIBE_FAILED, "couldn't subscribe to filter at relay"
            ) from exc
        return subscription

    @staticmethod
    def _finish(subscription: Subscription) -> None:
        if not subscription.done.is_set():
            with suppress(NostrError):
                subscription.unsub()

    def query_events(self, filter: Filter) -> Iterator[Event]:
        """Subscribe with ``filter`` and return an iterator over incoming events.

        The iterator ends when the subscription ends; closing it unsubscribes.
        """
        subscription = self._start_query(filter)
        return self._iter_events(subscription)

    def _iter_events(self, subscription: Subscription) -> Iterator[Event]:
        try:
            while (event := subscription.events.get()) is not None:
                yield event
        finally:
            self._finish(subscription)

    def query_sync(self, filter: Filter, timeout: float | None = None) -> list[Event]:
        """Return the stored events matching ``filter``, collected until EOSE."""
        subscription = self._start_query(filter)
        deadline = None if timeout is None else time.monotonic() + timeout
        events: list[Event] = []
        try:
            while True:
                if subscription.end_of_stored_events.is_set():
                    events.extend(self._drain(subscription))
                    return events
                if not self.is_connected():
                    raise NostrError(
                        ErrorCode.RELAY_CONNECTION_FAILED,
                        "relay connection closed while querying events",
                    )
                if subscription.done.is_set():
                    raise NostrError(
                        ErrorCode.SUBSCRIPTION_CLOSE_FAILED,
                        "subscription ended while querying events",
                    )
                wait = self._wait_time(deadline)
                try:
                    item = subscription.events.get(timeout=wait)
                except queue.Empty:
                    continue
                if item is not None:
                    events.append(item)
        finally:
            self._finish(subscription)

    @staticmethod
    def _wait_time(deadline: float | None) -> float:
        if deadline is None:
            return _POLL_INTERVAL
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise NostrError(ErrorCode.CONTEXT_TIMEOUT, "timed out waiting for the relay")
        return min(_POLL_INTERVAL, remaining)

    @staticmethod
    def _drain(subscription: Subscription) -> list[Event]:
        events: list[Event] = []
        while True:
            try:
                item = subscription.events.get_nowait()
            except queue.Empty:
                return events
            if item is not None:
                events.append(item)

    def count(self, filter: Filter, timeout: float | None = None) -> int:
        """Ask the relay how many events match ``filter``."""
        self._require_connection()
        subscription = self.prepare_subscription(Filters([filter]))
        subscription.count_result = queue.Queue(maxsize=1)
        try:
            try:
                subscription.fire()
            except NostrError as exc:
                raise NostrError(
                    ErrorCode.RELAY_SUBSCRIBE_FAILED, "failed to send subscription request"
                ) from exc
            deadline = None if timeout is None else time.monotonic() + timeout
            while True:
                if not self.is_connected():
                    raise NostrError(
                        ErrorCode.RELAY_CONNECTION_FAILED,
                        "relay connection closed while counting events",
                    )
                try:
                    return subscription.count_result.get(timeout=self._wait_time(deadline))
                except queue.Empty:
                    continue
        finally:
            self.subscriptions.pop(subscription.counter, None)

    def close(self) -> None:
        """Close the connection and end every subscription."""
        with self._lock:
            connection = self.connection
            if connection is None:
                raise NostrError(ErrorCode.RELAY_CLOSE_FAILED, "relay not connected")
            self.connection = None
            self._cancel.set()
        connection.close()
        for subscription in list(self.subscriptions.values()):
            self._finish(subscription)

    def unsubscribe(self, subscription_id: int) -> None:
        """End the subscription with the given serial, if it exists."""
        subscription = self.subscriptions.get(subscription_id)
        if subscription is not None:
            subscription.unsub()

    def write(self, message: str) -> None:
        """Send a raw message; raise NostrError if it cannot be sent."""
        connection = self.connection
        if connection is None or self._cancel.is_set():
            raise NostrError(ErrorCode.WEBSOCKET_CLOSED, "connection closed")
        connection.write_message(message)

    def publish(self, event: Event) -> None:
        """Send an EVENT message carrying ``event``."""
        self.write(EventEnvelope(event=event).to_json())

    def auth(self, sign: Callable[[Event], None]) -> Event:
        """Build, sign with ``sign`` and send an authentication event; return it."""
        event = Event(
            created_at=now(),
            kind=int(Kind.CLIENT_AUTHENTICATION),
            tags=Tags([["relay", self.url], ["challenge", self.challenge or ""]]),
            content="",
        )
        sign(event)
        self.write(AuthEnvelope(event=event).to_json())
        return event