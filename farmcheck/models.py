"""Data model for diagnostic findings."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Iterator

from farmcheck.errors import ValidationError


class Severity(Enum):
    DEFAULT = "Default"
    INFORMATIONAL = "Informational"
    WARNING = "Warning"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return {
            Severity.CRITICAL: 4,
            Severity.WARNING: 2,
            Severity.INFORMATIONAL: 1,
            Severity.DEFAULT: 0,
        }[self]

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Look up a severity by its display name, ignoring case."""
        if isinstance(value, cls):
            return value
        for sev in cls:
            if sev.value.lower() == str(value).strip().lower():
                return sev
        raise ValueError(f"Unknown severity '{value}', expected one of {[s.value for s in cls]}")

    def __ge__(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "Severity") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "Severity") -> bool:
        return self.rank <= other.rank

    def __lt__(self, other: "Severity") -> bool:
        return self.rank < other.rank


class DisplayFormat(Enum):
    TABLE = "Table"
    LIST = "List"

    @classmethod
    def parse(cls, value: "str | DisplayFormat") -> "DisplayFormat":
        if isinstance(value, cls):
            return value
        for fmt in cls:
            if fmt.value.lower() == str(value).strip().lower():
                return fmt
        raise ValueError(f"Unknown display format '{value}', expected Table or List")


def escalate(current: Severity, incoming: Severity) -> Severity:
    """Return the higher of two severities."""
    return incoming if incoming > current else current


class ChildList(list):
    """Child sequence of a Finding.

    ``None`` entries are dropped on insertion and every child is owned by
    exactly one parent. Removing a child releases it so it can be attached
    elsewhere.
    """

    def __init__(self, owner: "Finding", children: Iterable["Finding | None"] = ()):
        super().__init__()
        self._owner = owner
        self.extend(children)

    def _check(self, child: "Finding") -> None:
        if not isinstance(child, Finding):
            raise ValidationError(f"Children must be findings, got {type(child).__name__}")
        node: Finding | None = self._owner
        while node is not None:
            if node is child:
                raise ValidationError(f"Finding '{child.name}' cannot be its own descendant")
            node = node.parent
        if child.parent is not None:
            raise ValidationError(
                f"Finding '{child.name}' already belongs to '{child.parent.name}'"
            )

    def _check_all(self, children: Iterable["Finding | None"]) -> list["Finding"]:
        """Validate a batch before any of it is adopted."""
        batch = [c for c in children if c is not None]
        seen: set[int] = set()
        for child in batch:
            self._check(child)
            if id(child) in seen:
                raise ValidationError(f"Finding '{child.name}' appears twice in the same children list")
            seen.add(id(child))
        return batch

    def _adopt(self, child: "Finding") -> None:
        child._parent = self._owner

    @staticmethod
    def _release(child: "Finding") -> None:
        child._parent = None

    def append(self, child: "Finding | None") -> None:
        if child is None:
            return
        self._check(child)
        self._adopt(child)
        super().append(child)

    def insert(self, index: int, child: "Finding | None") -> None:
        if child is None:
            return
        self._check(child)
        self._adopt(child)
        super().insert(index, child)

    def extend(self, children: Iterable["Finding | None"]) -> None:
        batch = self._check_all(children)
        for child in batch:
            self._adopt(child)
        super().extend(batch)

    def __iadd__(self, children: Iterable["Finding | None"]) -> "ChildList":
        self.extend(children)
        return self

    def __imul__(self, n: int) -> "ChildList":
        raise ValidationError("Children cannot be repeated")

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            raise ValidationError("Slice assignment is not supported on children")
        if value is None:
            return
        current = self[index]
        if value is current:
            return
        self._check(value)
        self._release(current)
        self._adopt(value)
        super().__setitem__(index, value)

    def __delitem__(self, index) -> None:
        removed = self[index] if isinstance(index, slice) else [self[index]]
        super().__delitem__(index)
        for child in removed:
            self._release(child)

    def pop(self, index: int = -1) -> "Finding":
        child = super().pop(index)
        self._release(child)
        return child

    def remove(self, child: "Finding") -> None:
        super().remove(child)
        self._release(child)

    def clear(self) -> None:
        for child in self:
            self._release(child)
        super().clear()


class Finding:
    """A node in the report tree.

    Severity only ever goes up: assigning a lower value than the current one
    leaves it unchanged. Use :func:`farmcheck.factory.create_finding` to build
    instances so the construction rules are checked.
    """

    def __init__(
        self,
        name: str,
        severity: Severity = Severity.DEFAULT,
        description: list[str] | None = None,
        warning_messages: list[str] | None = None,
        reference_links: list[str] | None = None,
        payload: Any = None,
        format: DisplayFormat = DisplayFormat.TABLE,
        expand: bool = False,
        children: Iterable["Finding | None"] | None = None,
    ):
        self.name = name
        self._severity = Severity.DEFAULT
        self.severity = severity
        self.description = list(description or [])
        self.warning_messages = list(warning_messages or [])
        self.reference_links = list(reference_links or [])
        self.payload = payload
        self.format = format
        self.expand = expand
        self._parent: Finding | None = None
        self._children = ChildList(self, children or ())

    def __repr__(self) -> str:
        return f"Finding(name={self.name!r}, severity={self.severity.value})"

    @property
    def severity(self) -> Severity:
        return self._severity

    @severity.setter
    def severity(self, value: Severity) -> None:
        self._severity = escalate(self._severity, Severity.parse(value))

    @property
    def parent(self) -> "Finding | None":
        return self._parent

    @property
    def children(self) -> ChildList:
        return self._children

    def add_child(self, child: "Finding | None") -> None:
        self._children.append(child)

    def add_description(self, line: str) -> None:
        self.description.append(line)

    def add_warning(self, message: str, severity: Severity | None = None) -> None:
        """Append a warning message, optionally raising severity with it."""
        self.warning_messages.append(message)
        if severity is not None:
            self.severity = severity

    def add_reference(self, link: str) -> None:
        self.reference_links.append(link)

    def walk(self) -> Iterator["Finding"]:
        """Yield this finding and its descendants in pre-order."""
        yield self
        for child in self._children:
            yield from child.walk()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "severity": self.severity.value,
            "description": list(self.description),
            "warning_messages": list(self.warning_messages),
            "reference_links": list(self.reference_links),
            "payload": _payload_to_data(self.payload),
            "format": self.format.value,
            "expand": self.expand,
            "children": [c.to_dict() for c in self._children],
        }


def _payload_to_data(value: Any) -> Any:
    """Reduce a payload to JSON-friendly data for export."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _payload_to_data(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_payload_to_data(v) for v in value]

    from farmcheck.formatters.payload import describe, is_primitive

    if is_primitive(value):
        return str(value)
    return {name: _payload_to_data(v) for name, v in describe(value)}
