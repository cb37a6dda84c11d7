"""Event tags: ordered lists of strings, and collections of them."""

from __future__ import annotations

from collections.abc import Iterable

from .utils import escape_string


class Tag(list):
    """A single tag such as ``["e", "<id>", "<relay>"]``."""

    def starts_with(self, prefix: Iterable[str]) -> bool:
        """Report whether this tag begins with ``prefix``.

        All prefix items but the last must match exactly; the last one only
        needs to be a prefix of the corresponding item.
        """
        wanted = list(prefix)
        if len(wanted) > len(self):
            return False
        if not wanted:
            return True
        *head, last = wanted
        if any(mine != theirs for mine, theirs in zip(self, head)):
            return False
        return self[len(wanted) - 1].startswith(last)

    def key(self) -> str | None:
        """Return the tag name, or None for an empty tag."""
        return self[0] if self else None

    def value(self) -> str | None:
        """Return the second item, or None if there is none."""
        return self[1] if len(self) > 1 else None

    def relay(self) -> str | None:
        """Return the relay hint of an ``e`` or ``p`` tag, or None."""
        if len(self) > 2 and self[0] in ("e", "p"):
            return self[2]
        return None

    def to_json(self) -> str:
        """Encode the tag as a JSON array of strings."""
        return "[" + ",".join(escape_string(item) for item in self) + "]"


class Tags(list):
    """An ordered collection of tags."""

    def __init__(self, items: Iterable[Iterable[str]] = ()) -> None:
        super().__init__(item if isinstance(item, Tag) else Tag(item) for item in items)

    def get_d(self) -> str | None:
        """Return the value of the first ``d`` tag, or None."""
        tag = self.get_first(["d", ""])
        return tag[1] if tag is not None else None

    def get_first(self, prefix: Iterable[str]) -> Tag | None:
        """Return the first tag starting with ``prefix``, or None."""
        wanted = list(prefix)
        return next((tag for tag in self if tag.starts_with(wanted)), None)

    def get_last(self, prefix: Iterable[str]) -> Tag | None:
        """Return the last tag starting with ``prefix``, or None."""
        wanted = list(prefix)
        return next((tag for tag in reversed(self) if tag.starts_with(wanted)), None)

    def get_all(self, prefix: Iterable[str]) -> Tags:
        """Return every tag starting with ``prefix``."""
        wanted = list(prefix)
        return Tags(tag for tag in self if tag.starts_with(wanted))

    def filter_out(self, prefix: Iterable[str]) -> Tags:
        """Return every tag that does not start with ``prefix``."""
        wanted = list(prefix)
        return Tags(tag for tag in self if not tag.starts_with(wanted))

    def append_unique(self, tag: Iterable[str]) -> Tags:
        """Return these tags with ``tag`` added, unless a tag already starts with it."""
        candidate = tag if isinstance(tag, Tag) else Tag(tag)
        if any(existing.starts_with(candidate) for existing in self):
            return self
        return Tags([*self, candidate])

    def contains_any(self, tag_name: str, values: Iterable[str]) -> bool:
        """Report whether a tag named ``tag_name`` has one of ``values`` as its value."""
        wanted = set(values)
        return any(
            len(tag) >= 2 and tag[0] == tag_name and tag[1] in wanted for tag in self
        )

    def to_json(self) -> str:
        """Encode the tags as a JSON array of arrays."""
        return "[" + ",".join(tag.to_json() for tag in self) + "]"