"""JSON encoding and decoding of events and filters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .errors import ErrorCode, NostrError
from .event import Event
from .filter import Filter
from .tags import Tag, Tags

_EVENT_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _loads(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError) as exc:
        raise NostrError(ErrorCode.JSON_PARSE_FAILED, f"invalid JSON: {exc}") from exc


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_int_list(value: Any) -> bool:
    return isinstance(value, list) and all(_is_int(item) for item in value)


def event_to_dict(event: Event) -> dict[str, Any]:
    """Return the JSON object form of an event, extra fields included."""
    data: dict[str, Any] = {}
    if event.id is not None:
        data["id"] = event.id
    if event.pubkey is not None:
        data["pubkey"] = event.pubkey
    data["created_at"] = int(event.created_at)
    data["kind"] = int(event.kind)
    data["tags"] = [list(tag) for tag in event.tags]
    data["content"] = event.content if event.content is not None else ""
    if event.sig is not None:
        data["sig"] = event.sig
    for key, value in event.extra.items():
        if key not in _EVENT_FIELDS:
            data[key] = value
    return data


def event_from_dict(data: Mapping[str, Any]) -> Event:
    """Build an event from its JSON object form; unknown keys become extras."""
    code = ErrorCode.EVENT_DESERIALIZATION_FAILED
    if not isinstance(data, Mapping):
        raise NostrError(code, "event must be a JSON object")

    def check(key: str, valid: bool, expected: str) -> None:
        if key in data and not valid:
            raise NostrError(code, f"event field {key!r} must be {expected}")

    check("id", isinstance(data.get("id"), str), "a string")
    check("pubkey", isinstance(data.get("pubkey"), str), "a string")
    check("created_at", _is_int(data.get("created_at")), "an integer")
    check("kind", _is_int(data.get("kind")), "an integer")
    check(
        "tags",
        isinstance(data.get("tags"), list) and all(_is_str_list(t) for t in data.get("tags", [])),
        "a list of string lists",
    )
    check("content", isinstance(data.get("content"), str), "a string")
    check("sig", isinstance(data.get("sig"), str), "a string")

    return Event(
        id=data.get("id"),
        pubkey=data.get("pubkey"),
        created_at=data.get("created_at", 0),
        kind=data.get("kind", 0),
        tags=Tags(data.get("tags", [])),
        content=data.get("content", ""),
        sig=data.get("sig"),
        extra={key: value for key, value in data.items() if key not in _EVENT_FIELDS},
    )


def serialize_event(event: Event) -> str:
    """Encode an event as a JSON object."""
    return _dumps(event_to_dict(event))


def deserialize_event(text: str | bytes) -> Event:
    """Decode an event from a JSON object."""
    return event_from_dict(_loads(text))


def filter_to_dict(filter: Filter) -> dict[str, Any]:
    """Return the JSON object form of a filter, leaving out empty fields."""
    data: dict[str, Any] = {}
    if filter.ids:
        data["ids"] = list(filter.ids)
    if filter.kinds:
        data["kinds"] = [int(kind) for kind in filter.kinds]
    if filter.authors:
        data["authors"] = list(filter.authors)
    for condition in filter.tags:
        if not condition:
            continue
        name, *values = condition
        data.setdefault(f"#{name}", []).extend(values)
    if filter.since:
        data["since"] = int(filter.since)
    if filter.until:
        data["until"] = int(filter.until)
    if filter.limit > 0:
        data["limit"] = filter.limit
    elif filter.limit_zero:
        data["limit"] = 0
    if filter.search is not None:
        data["search"] = filter.search
    return data


def filter_from_dict(data: Mapping[str, Any]) -> Filter:
    """Build a filter from its JSON object form; unknown keys are ignored."""
    code = ErrorCode.FILTER_DESERIALIZATION_FAILED
    if not isinstance(data, Mapping):
        raise NostrError(code, "filter must be a JSON object")

    def check(key: str, valid: bool, expected: str) -> None:
        if key in data and not valid:
            raise NostrError(code, f"filter field {key!r} must be {expected}")

    check("ids", _is_str_list(data.get("ids")), "a list of strings")
    check("kinds", _is_int_list(data.get("kinds")), "a list of integers")
    check("authors", _is_str_list(data.get("authors")), "a list of strings")
    check("since", _is_int(data.get("since")), "an integer")
    check("until", _is_int(data.get("until")), "an integer")
    check("limit", _is_int(data.get("limit")), "an integer")
    check("search", isinstance(data.get("search"), str), "a string")

    tags = Tags()
    for key, value in data.items():
        if isinstance(key, str) and key.startswith("#") and len(key) > 1:
            if not _is_str_list(value):
                raise NostrError(code, f"filter field {key!r} must be a list of strings")
            tags.append(Tag([key[1:], *value]))

    limit = data.get("limit", 0)
    return Filter(
        ids=data.get("ids", []),
        kinds=data.get("kinds", []),
        authors=data.get("authors", []),
        tags=tags,
        since=data.get("since", 0),
        until=data.get("until", 0),
        limit=limit,
        search=data.get("search"),
        limit_zero="limit" in data and limit == 0,
    )


def serialize_filter(filter: Filter) -> str:
    """Encode a filter as a JSON object."""
    return _dumps(filter_to_dict(filter))


def deserialize_filter(text: str | bytes) -> Filter:
    """Decode a filter from a JSON object."""
    return filter_from_dict(_loads(text))