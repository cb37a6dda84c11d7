"""String, URL and locking helpers shared across the package."""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

MAX_LOCKS = 50

_MASK64 = (1 << 64) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_named_mutex_pool = tuple(threading.Lock() for _ in range(MAX_LOCKS))

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}

_HEX_RE = re.compile(r"[0-9a-fA-F]*")
_SERIAL_RE = re.compile(r"\s*[+-]?\d+")


def normalize_url(u: str | None) -> str:
    """Normalize a relay URL, mapping http(s) schemes to ws(s)."""
    if not u:
        return ""

    url = u.strip().lower()

    if url.startswith("localhost"):
        url = "ws://" + url
    elif not url.startswith("http") and not url.startswith("ws"):
        url = "wss://" + url

    scheme, sep, rest = url.partition("://")
    if sep:
        scheme = {"http": "ws", "https": "wss"}.get(scheme, scheme)
        url = scheme + sep + rest

    slash = url.find("/")
    if slash != -1:
        url = url[: slash + 1] + url[slash + 1 :].rstrip("/")

    return url


def normalize_ok_message(reason: str | None, prefix: str) -> str:
    """Prefix a reason for an OK or CLOSED message unless it already carries one."""
    if not reason:
        return prefix

    colon = reason.find(": ")
    space = reason.find(" ")
    if colon == -1 or space < colon:
        return f"{prefix}: {reason}"
    return reason


def memhash(data: str | bytes) -> int:
    """Return the 64-bit djb2 hash of the given text or bytes."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    value = 5381
    for byte in raw:
        signed = byte - 256 if byte >= 128 else byte
        value = ((value << 5) + value + signed) & _MASK64
    return value


@contextmanager
def named_lock(name: str) -> Iterator[threading.Lock]:
    """Hold the pooled lock that the given name hashes to."""
    lock = _named_mutex_pool[memhash(name) % MAX_LOCKS]
    with lock:
        yield lock


def similar(as_: Iterable[int], bs: Iterable[int]) -> bool:
    """Report whether both sequences have equal length and every item of the first is in the second."""
    first = list(as_)
    second = list(bs)
    if len(first) != len(second):
        return False
    return all(item in second for item in first)


def escape_string(s: str) -> str:
    """Return ``s`` as a quoted JSON string literal."""
    parts = ['"']
    for char in s:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(char)
    parts.append('"')
    return "".join(parts)


def sub_id_to_serial(sub_id: str | None) -> int:
    """Extract the numeric serial before the colon of a subscription id, or -1."""
    if sub_id is None:
        return -1

    colon = sub_id.find(":")
    if colon == -1:
        return -1

    head = sub_id[:colon]
    if head == "":
        return 0
    if not _SERIAL_RE.fullmatch(head):
        return -1
    return max(_INT64_MIN, min(_INT64_MAX, int(head)))


def hex_to_bytes(hex_str: str, length: int) -> bytes:
    """Decode a hex string that must encode exactly ``length`` bytes."""
    if len(hex_str) != length * 2:
        raise ValueError(
            f"expected {length * 2} hex characters, got {len(hex_str)}"
        )
    if not _HEX_RE.fullmatch(hex_str):
        raise ValueError("string contains non-hexadecimal characters")
    return bytes.fromhex(hex_str)