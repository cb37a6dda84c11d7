"""References to profiles, events and addressable entities."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ProfilePointer:
    """Points to a profile by public key, with relay hints."""

    public_key: str | None = None
    relays: list[str] = field(default_factory=list)


@dataclass
class EventPointer:
    """Points to an event by id, with relay hints and optional author and kind."""

    id: str | None = None
    relays: list[str] = field(default_factory=list)
    author: str | None = None
    kind: int = 0


@dataclass
class EntityPointer:
    """Points to an addressable entity by author, kind and identifier."""

    public_key: str | None = None
    kind: int = 0
    identifier: str | None = None
    relays: list[str] = field(default_factory=list)