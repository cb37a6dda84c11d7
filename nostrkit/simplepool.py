"""A pool of relays that can be subscribed to and queried together."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from .errors import NostrError
from .event import Event
from .filter import Filter, Filters
from .relay import Relay
from .subscription import Subscription

SEEN_ALREADY_DROP_TICK = 60.0


@dataclass
class IncomingEvent:
    """An event together with the relay it came from."""

    event: Event
    relay: Relay


@dataclass
class DirectedFilters:
    """Filters meant for one particular relay."""

    filters: Filters = field(default_factory=Filters)
    relay_url: str = ""


class SimplePool:
    """Relays keyed by URL, connected on demand.

    ``auth_handler`` signs authentication events for relays that sent a
    challenge; ``event_middleware`` sees every event yielded;
    ``signature_checker`` can reject events. Event ids already seen by
    unique subscriptions are forgotten every ``drop_tick`` seconds while the
    pool is running.
    """

    def __init__(
        self,
        *,
        relay_factory: Callable[[str], Relay] | None = None,
        query_timeout: float | None = None,
        drop_tick: float = SEEN_ALREADY_DROP_TICK,
    ) -> None:
        self.relays: dict[str, Relay] = {}
        self.auth_handler: Callable[[Event], None] | None = None
        self.event_middleware: Callable[[IncomingEvent], None] | None = None
        self.signature_checker: Callable[[Event], bool] | None = None
        self.running = False
        self.thread: threading.Thread | None = None
        self.query_timeout = query_timeout
        self._relay_factory: Callable[[str], Relay] = relay_factory or Relay
        self._drop_tick = drop_tick
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._seen_lock = threading.Lock()
        self._stop = threading.Event()

    def __enter__(self) -> SimplePool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def ensure_relay(self, url: str) -> Relay:
        """Return the relay for ``url``, connecting or reconnecting it as needed."""
        with self._lock:
            relay = self.relays.get(url)
            if relay is not None:
                if not relay.is_connected():
                    relay.disconnect()
                    relay.connect()
                return relay
            relay = self._relay_factory(url)
            self.relays[url] = relay
            relay.connect()
            return relay

    def _run(self) -> None:
        while not self._stop.wait(self._drop_tick):
            with self._seen_lock:
                self._seen.clear()

    def start(self) -> None:
        """Start the background thread that forgets seen event ids."""
        if self.running:
            return
        self.running = True
        self._stop.clear()
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        """Stop the background thread and wait for it."""
        self.running = False
        self._stop.set()
        if self.thread is not None:
            self.thread.join()
            self.thread = None

    def _authenticate(self, relay: Relay) -> None:
        if self.auth_handler is not None and relay.challenge:
            relay.auth(self.auth_handler)

    def _accept(self, event: Event, unique: bool) -> bool:
        if self.signature_checker is not None and not self.signature_checker(event):
            return False
        if unique and event.id is not None:
            with self._seen_lock:
                if event.id in self._seen:
                    return False
                self._seen.add(event.id)
        return True

    def _deliver(self, event: Event, relay: Relay) -> IncomingEvent:
        incoming = IncomingEvent(event, relay)
        if self.event_middleware is not None:
            self.event_middleware(incoming)
        return incoming

    @staticmethod
    def _forward(relay: Relay, subscription: Subscription, out: queue.Queue[Any]) -> None:
        while True:
            event = subscription.events.get()
            out.put((relay, event))
            if event is None:
                return

    def subscribe(
        self, urls: Iterable[str], filters: Iterable[Filter], unique: bool = False
    ) -> Iterator[IncomingEvent]:
        """Subscribe on every relay in ``urls`` and return an iterator over their events.

        With ``unique``, an event id is yielded only once. The iterator ends
        when every subscription has ended; closing it unsubscribes.
        """
        wanted = filters if isinstance(filters, Filters) else Filters(filters)
        targets = [self.ensure_relay(url) for url in dict.fromkeys(urls)]
        out: queue.Queue[Any] = queue.Queue()
        subscriptions: list[Subscription] = []
        try:
            for relay in targets:
                self._authenticate(relay)
                subscriptions.append(relay.subscribe(wanted))
        except BaseException:
            self._end(subscriptions)
            raise
        for relay, subscription in zip(targets, subscriptions):
            threading.Thread(
                target=self._forward, args=(relay, subscription, out), daemon=True
            ).start()
        return self._stream(subscriptions, out, unique)

    @staticmethod
    def _end(subscriptions: Iterable[Subscription]) -> None:
        for subscription in subscriptions:
            if not subscription.done.is_set():
                with suppress(NostrError):
                    subscription.unsub()

    def _stream(
        self, subscriptions: list[Subscription], out: queue.Queue[Any], unique: bool
    ) -> Iterator[IncomingEvent]:
        remaining = len(subscriptions)
        try:
            while remaining:
                relay, event = out.get()
                if event is None:
                    remaining -= 1
                    continue
                if self._accept(event, unique):
                    yield self._deliver(event, relay)
        finally:
            self._end(subscriptions)

    def query_single(self, urls: Iterable[str], filter: Filter) -> IncomingEvent | None:
        """Return the first matching stored event from the relays in ``urls``, or None."""
        targets = [self.ensure_relay(url) for url in dict.fromkeys(urls)]
        for relay in targets:
            try:
                self._authenticate(relay)
                events = relay.query_sync(filter, self.query_timeout)
            except NostrError:
                continue
            for event in events:
                if self.signature_checker is None or self.signature_checker(event):
                    return self._deliver(event, relay)
        return None

    def close(self) -> None:
        """Stop the pool and disconnect every relay."""
        self.stop()
        with self._lock:
            relays = list(self.relays.values())
            self.relays.clear()
        for relay in relays:
            relay.disconnect()