"""Filters that select events by id, kind, author, tag and time."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .event import Event
from .tags import Tags
from .timestamp import Timestamp


@dataclass
class Filter:
    """A single subscription filter; empty fields and zero times match anything."""

    ids: list[str] = field(default_factory=list)
    kinds: list[int] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    tags: Tags = field(default_factory=Tags)
    since: Timestamp = 0
    until: Timestamp = 0
    limit: int = 0
    search: str | None = None
    limit_zero: bool = False

    def __post_init__(self) -> None:
        self.ids = list(self.ids)
        self.kinds = list(self.kinds)
        self.authors = list(self.authors)
        if not isinstance(self.tags, Tags):
            self.tags = Tags(self.tags)

    def matches(self, event: Event | None) -> bool:
        """Report whether the event passes every condition, including time bounds."""
        if event is None or not self.matches_ignoring_timestamp(event):
            return False
        if self.since and event.created_at < self.since:
            return False
        if self.until and event.created_at > self.until:
            return False
        return True

    def matches_ignoring_timestamp(self, event: Event | None) -> bool:
        """Report whether the event passes every condition except the time bounds.

        Each filter tag ``[name, value, ...]`` requires the event to carry a
        tag named ``name`` whose value is one of the listed values.
        """
        if event is None:
            return False
        if self.ids and event.id not in self.ids:
            return False
        if self.kinds and event.kind not in self.kinds:
            return False
        if self.authors and event.pubkey not in self.authors:
            return False
        for condition in self.tags:
            if not condition:
                continue
            name, *values = condition
            if not event.tags.contains_any(name, values):
                return False
        return True


class Filters(list):
    """A list of filters; an event matches if any one filter matches it."""

    def __init__(self, items: Iterable[Filter] = ()) -> None:
        super().__init__(items)

    def match(self, event: Event | None) -> bool:
        """Report whether any filter matches the event."""
        if event is None:
            return False
        return any(f.matches(event) for f in self)

    def match_ignoring_timestamp(self, event: Event | None) -> bool:
        """Report whether any filter matches the event, ignoring time bounds."""
        if event is None:
            return False
        return any(f.matches_ignoring_timestamp(event) for f in self)