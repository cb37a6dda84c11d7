"""Events: the signed records exchanged with relays."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any

from . import kinds
from .errors import ErrorCode, NostrError
from .keys import schnorr_sign, schnorr_verify
from .tags import Tags
from .timestamp import Timestamp
from .utils import escape_string, hex_to_bytes


@dataclass
class Event:
    """An event with its id, author, timestamp, kind, tags, content and signature.

    ``extra`` holds fields outside the specification, keyed by name.
    """

    id: str | None = None
    pubkey: str | None = None
    created_at: Timestamp = 0
    kind: int = 0
    tags: Tags = field(default_factory=Tags)
    content: str | None = ""
    sig: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.tags, Tags):
            self.tags = Tags(self.tags)

    def serialize(self) -> str:
        """Return the canonical array form whose hash is the event id."""
        if self.pubkey is None or self.content is None:
            raise NostrError(
                ErrorCode.EVENT_SERIALIZATION_FAILED,
                "event needs a pubkey and content to be serialized",
            )
        return (
            f'[0,"{self.pubkey}",{self.created_at},{self.kind},'
            f"{self.tags.to_json()},{escape_string(self.content)}]"
        )

    def _digest(self) -> bytes:
        return hashlib.sha256(self.serialize().encode("utf-8")).digest()

    def get_id(self) -> str:
        """Return the hex SHA-256 of the serialized event."""
        return self._digest().hex()

    def check_signature(self) -> bool:
        """Verify ``sig`` against ``pubkey`` and the serialized event."""
        try:
            pubkey = hex_to_bytes(self.pubkey or "", 32)
            signature = hex_to_bytes(self.sig or "", 64)
            digest = self._digest()
        except (ValueError, NostrError):
            return False
        return schnorr_verify(digest, pubkey, signature)

    def sign(self, private_key: str) -> None:
        """Sign the event with a hex private key, setting ``sig`` and ``id``.

        Raises NostrError if the event cannot be serialized and ValueError if
        the key is not a valid 32-byte secp256k1 secret.
        """
        digest = self._digest()
        key = hex_to_bytes(private_key, 32)
        self.sig = schnorr_sign(digest, key).hex()
        self.id = self.get_id()

    def is_regular(self) -> bool:
        """Report whether the event's kind is a regular one."""
        return kinds.is_regular(self.kind)

    def is_replaceable(self) -> bool:
        """Report whether the event's kind is replaceable."""
        return kinds.is_replaceable(self.kind)

    def is_ephemeral(self) -> bool:
        """Report whether the event's kind is ephemeral."""
        return kinds.is_ephemeral(self.kind)

    def is_addressable(self) -> bool:
        """Report whether the event's kind is addressable."""
        return kinds.is_addressable(self.kind)

    def set_extra(self, key: str, value: Any) -> None:
        """Store an out-of-spec value under ``key``."""
        self.extra[key] = value

    def remove_extra(self, key: str) -> None:
        """Drop the out-of-spec value under ``key``, if any."""
        self.extra.pop(key, None)

    def get_extra(self, key: str) -> Any:
        """Return the out-of-spec value under ``key``, or None."""
        return self.extra.get(key)

    def get_extra_string(self, key: str) -> str:
        """Return the value under ``key`` if it is a string, else an empty string."""
        value = self.extra.get(key)
        return value if isinstance(value, str) else ""

    def get_extra_number(self, key: str) -> float:
        """Return the value under ``key`` as a float if it is a number, else 0.0."""
        value = self.extra.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return float(value)

    def get_extra_boolean(self, key: str) -> bool:
        """Return the value under ``key`` if it is a boolean, else False."""
        value = self.extra.get(key)
        return value if isinstance(value, bool) else False