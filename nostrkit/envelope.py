"""Protocol messages exchanged between clients and relays."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .codec import event_from_dict, event_to_dict, filter_from_dict, filter_to_dict
from .errors import ErrorCode, NostrError
from .event import Event
from .filter import Filters


class EnvelopeType(Enum):
    """Message labels."""

    EVENT = "EVENT"
    REQ = "REQ"
    COUNT = "COUNT"
    NOTICE = "NOTICE"
    EOSE = "EOSE"
    CLOSE = "CLOSE"
    CLOSED = "CLOSED"
    OK = "OK"
    AUTH = "AUTH"
    UNKNOWN = "UNKNOWN"


def _require(condition: bool, what: str) -> None:
    if not condition:
        raise ValueError(f"malformed message: {what}")


@dataclass
class Envelope:
    """Base of all messages: a label followed by its payload."""

    type: ClassVar[EnvelopeType] = EnvelopeType.UNKNOWN

    def _payload(self) -> list[Any]:
        return []

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> Envelope:
        raise ValueError(f"cannot parse a {cls.type.value} message")

    def to_json(self) -> str:
        """Encode the message as a JSON array."""
        return json.dumps(
            [self.type.value, *self._payload()], separators=(",", ":"), ensure_ascii=False
        )


@dataclass
class EventEnvelope(Envelope):
    """An event, with the subscription id when sent by a relay."""

    type: ClassVar[EnvelopeType] = EnvelopeType.EVENT
    subscription_id: str | None = None
    event: Event = field(default_factory=Event)

    def _payload(self) -> list[Any]:
        head = [] if self.subscription_id is None else [self.subscription_id]
        return [*head, event_to_dict(self.event)]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> EventEnvelope:
        if len(items) == 1:
            return cls(event=event_from_dict(items[0]))
        _require(len(items) == 2 and isinstance(items[0], str), "EVENT")
        return cls(subscription_id=items[0], event=event_from_dict(items[1]))


@dataclass
class ReqEnvelope(Envelope):
    """A subscription request carrying filters."""

    type: ClassVar[EnvelopeType] = EnvelopeType.REQ
    subscription_id: str = ""
    filters: Filters = field(default_factory=Filters)

    def _payload(self) -> list[Any]:
        return [self.subscription_id, *(filter_to_dict(f) for f in self.filters)]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> ReqEnvelope:
        _require(len(items) >= 1 and isinstance(items[0], str), "REQ")
        return cls(items[0], Filters(filter_from_dict(item) for item in items[1:]))


@dataclass
class CountEnvelope(Envelope):
    """A count request with filters, or a count answer when ``count`` is set."""

    type: ClassVar[EnvelopeType] = EnvelopeType.COUNT
    subscription_id: str = ""
    filters: Filters = field(default_factory=Filters)
    count: int | None = None

    def _payload(self) -> list[Any]:
        if self.count is not None:
            return [self.subscription_id, {"count": self.count}]
        return [self.subscription_id, *(filter_to_dict(f) for f in self.filters)]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> CountEnvelope:
        _require(len(items) >= 1 and isinstance(items[0], str), "COUNT")
        rest = items[1:]
        if len(rest) == 1 and isinstance(rest[0], dict) and "count" in rest[0]:
            count = rest[0]["count"]
            _require(isinstance(count, int) and not isinstance(count, bool), "COUNT")
            return cls(items[0], count=count)
        return cls(items[0], Filters(filter_from_dict(item) for item in rest))


@dataclass
class NoticeEnvelope(Envelope):
    """A human-readable message from a relay."""

    type: ClassVar[EnvelopeType] = EnvelopeType.NOTICE
    message: str = ""

    def _payload(self) -> list[Any]:
        return [self.message]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> NoticeEnvelope:
        _require(len(items) == 1 and isinstance(items[0], str), "NOTICE")
        return cls(items[0])


@dataclass
class EOSEEnvelope(Envelope):
    """The end of stored events for a subscription."""

    type: ClassVar[EnvelopeType] = EnvelopeType.EOSE
    subscription_id: str = ""

    def _payload(self) -> list[Any]:
        return [self.subscription_id]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> EOSEEnvelope:
        _require(len(items) == 1 and isinstance(items[0], str), "EOSE")
        return cls(items[0])


@dataclass
class CloseEnvelope(Envelope):
    """A client's request to end a subscription."""

    type: ClassVar[EnvelopeType] = EnvelopeType.CLOSE
    subscription_id: str = ""

    def _payload(self) -> list[Any]:
        return [self.subscription_id]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> CloseEnvelope:
        _require(len(items) == 1 and isinstance(items[0], str), "CLOSE")
        return cls(items[0])


@dataclass
class ClosedEnvelope(Envelope):
    """A relay's notice that it ended a subscription."""

    type: ClassVar[EnvelopeType] = EnvelopeType.CLOSED
    subscription_id: str = ""
    reason: str = ""

    def _payload(self) -> list[Any]:
        return [self.subscription_id, self.reason]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> ClosedEnvelope:
        _require(len(items) == 2 and all(isinstance(i, str) for i in items), "CLOSED")
        return cls(items[0], items[1])


@dataclass
class OKEnvelope(Envelope):
    """A relay's answer to a published event."""

    type: ClassVar[EnvelopeType] = EnvelopeType.OK
    event_id: str = ""
    ok: bool = False
    reason: str = ""

    def _payload(self) -> list[Any]:
        return [self.event_id, self.ok, self.reason]

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> OKEnvelope:
        _require(
            len(items) in (2, 3) and isinstance(items[0], str) and isinstance(items[1], bool),
            "OK",
        )
        reason = items[2] if len(items) == 3 else ""
        _require(isinstance(reason, str), "OK")
        return cls(items[0], items[1], reason)


@dataclass
class AuthEnvelope(Envelope):
    """An authentication challenge from a relay, or a signed reply from a client."""

    type: ClassVar[EnvelopeType] = EnvelopeType.AUTH
    challenge: str | None = None
    event: Event | None = None

    def _payload(self) -> list[Any]:
        if self.challenge is not None:
            return [self.challenge]
        if self.event is not None:
            return [event_to_dict(self.event)]
        raise NostrError(
            ErrorCode.JSON_SERIALIZATION_FAILED, "AUTH message needs a challenge or an event"
        )

    @classmethod
    def _from_items(cls, items: Sequence[Any]) -> AuthEnvelope:
        _require(len(items) == 1, "AUTH")
        if isinstance(items[0], str):
            return cls(challenge=items[0])
        return cls(event=event_from_dict(items[0]))


_ENVELOPES: dict[str, type[Envelope]] = {
    cls.type.value: cls
    for cls in (
        EventEnvelope,
        ReqEnvelope,
        CountEnvelope,
        NoticeEnvelope,
        EOSEEnvelope,
        CloseEnvelope,
        ClosedEnvelope,
        OKEnvelope,
        AuthEnvelope,
    )
}


def parse_message(message: str | bytes | None) -> Envelope | None:
    """Parse a protocol message; return None if it is not a well-formed known message."""
    if message is None:
        return None
    try:
        items = json.loads(message)
    except (ValueError, TypeError):
        return None
    if not isinstance(items, list) or not items or not isinstance(items[0], str):
        return None
    cls = _ENVELOPES.get(items[0])
    if cls is None:
        return None
    try:
        return cls._from_items(items[1:])
    except (ValueError, NostrError):
        return None