"""A websocket connection to a relay with a background reader."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any, Protocol

import websocket

from .errors import ErrorCode, NostrError

USER_AGENT = "nostrkit/1.0"
RETRY_DELAYS = (1.0, 2.0, 3.0)

_CLOSED = object()


class _Socket(Protocol):
    def send(self, data: str) -> Any: ...

    def recv(self) -> str | bytes: ...

    def close(self) -> Any: ...


SocketFactory = Callable[[str, list[str]], _Socket]


def _default_factory(url: str, header: list[str]) -> _Socket:
    return websocket.create_connection(url, header=header)


class Connection:
    """An open websocket; incoming messages are queued by a reader thread.

    ``socket_factory`` is called as ``factory(url, header)`` and must return an
    object with ``send``, ``recv`` and ``close``. Opening is retried after
    each of ``retry_delays`` seconds before giving up.
    """

    def __init__(
        self,
        url: str,
        *,
        socket_factory: SocketFactory | None = None,
        retry_delays: Iterable[float] = RETRY_DELAYS,
    ) -> None:
        if not url:
            raise NostrError(ErrorCode.RELAY_INVALID_URL, "invalid relay URL")
        self.url = url
        factory = socket_factory or _default_factory
        header = [f"User-Agent: {USER_AGENT}"]

        last_error: Exception | None = None
        socket: _Socket | None = None
        for delay in (0.0, *retry_delays):
            if delay:
                time.sleep(delay)
            try:
                socket = factory(url, header)
                break
            except Exception as exc:
                last_error = exc
        if socket is None:
            raise NostrError(
                ErrorCode.WEBSOCKET_CONNECTION_FAILED,
                f"error opening websocket to '{url}'",
            ) from last_error

        self._socket = socket
        self._incoming: queue.Queue[Any] = queue.Queue()
        self._write_lock = threading.Lock()
        self._closed = threading.Event()
        self._reader = threading.Thread(target=self._read_loop, daemon=True)
        self._reader.start()

    def _read_loop(self) -> None:
        while not self._closed.is_set():
            try:
                message = self._socket.recv()
            except Exception:
                break
            if message in ("", b"") and not getattr(self._socket, "connected", True):
                break
            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            self._incoming.put(message)
        self._incoming.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed.is_set()

    def write_message(self, message: str) -> None:
        """Send a text message; raise NostrError if it cannot be sent."""
        if not message:
            raise NostrError(ErrorCode.INVALID_ARGUMENT, "invalid connection or message")
        if self._closed.is_set():
            raise NostrError(ErrorCode.WEBSOCKET_CLOSED, "connection closed")
        with self._write_lock:
            try:
                self._socket.send(message)
            except Exception as exc:
                raise NostrError(
                    ErrorCode.WEBSOCKET_WRITE_FAILED, "error writing websocket message"
                ) from exc

    def read_message(self, timeout: float | None = None) -> str:
        """Return the next received message, waiting up to ``timeout`` seconds."""
        try:
            message = self._incoming.get(timeout=timeout)
        except queue.Empty:
            raise NostrError(
                ErrorCode.CONTEXT_TIMEOUT, "timed out waiting for a message"
            ) from None
        if message is _CLOSED:
            self._incoming.put(_CLOSED)
            raise NostrError(ErrorCode.WEBSOCKET_CLOSED, "failed to receive message")
        return message

    def close(self) -> None:
        """Close the socket; further calls do nothing."""
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            self._socket.close()
        except Exception:
            pass
        if self._reader is not threading.current_thread():
            self._reader.join(timeout=1.0)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()