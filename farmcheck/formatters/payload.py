"""Render finding payloads (objects, collections, mappings) as HTML tables."""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Iterable, Protocol, runtime_checkable

from markupsafe import escape

from farmcheck.models import DisplayFormat

PRIMITIVE_TYPES = (str, bytes, int, float, bool, Decimal, date, datetime, time, Enum, PurePath)


@runtime_checkable
class Describable(Protocol):
    """A payload that lists its own display properties."""

    def properties(self) -> Iterable[tuple[str, Any]]:
        ...


def is_primitive(value: Any) -> bool:
    return isinstance(value, PRIMITIVE_TYPES)


def _is_describable(value: Any) -> bool:
    # runtime_checkable only checks that the attribute exists.
    return isinstance(value, Describable) and callable(getattr(value, "properties", None))


def is_collection(value: Any) -> bool:
    if isinstance(value, (Mapping, str, bytes)) or is_primitive(value):
        return False
    if _is_describable(value) or dataclasses.is_dataclass(value):
        return False
    return isinstance(value, Iterable)


def describe(value: Any) -> list[tuple[str, Any]]:
    """Return the ordered (name, value) display properties of one object."""
    if is_primitive(value):
        return [("Value", value)]
    if _is_describable(value):
        return list(value.properties())
    if isinstance(value, Mapping):
        return [(str(k), v) for k, v in value.items()]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value) if not f.name.startswith("_")]
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return list(value._asdict().items())

    props: list[tuple[str, Any]] = []
    seen: set[str] = set()
    for name, attr in vars(value).items() if hasattr(value, "__dict__") else ():
        if not name.startswith("_"):
            props.append((name, attr))
            seen.add(name)
    for name, member in inspect.getmembers(type(value), lambda m: isinstance(m, property)):
        if not name.startswith("_") and name not in seen:
            props.append((name, getattr(value, name)))
    if not props:
        return [("Value", value)]
    return props


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    elif isinstance(value, (list, tuple, set)):
        value = ", ".join(str(v) for v in value)
    return str(escape(value))


def _table(headers: list[str], rows: list[list[Any]]) -> str:
    parts = ['<table class="payload">', "<tr>"]
    parts.extend(f"<th>{escape(h)}</th>" for h in headers)
    parts.append("</tr>")
    for row in rows:
        parts.append("<tr>" + "".join(f"<td>{_cell(v)}</td>" for v in row) + "</tr>")
    parts.append("</table>")
    return "".join(parts)


def _list_block(props: list[tuple[str, Any]]) -> str:
    rows = "".join(f"<tr><th>{escape(name)}:</th><td>{_cell(v)}</td></tr>" for name, v in props)
    return f'<table class="payload list">{rows}</table>'


def format_mapping(value: Mapping) -> str:
    return _table(["Key", "Value"], [[k, v] for k, v in value.items()])


def format_payload(value: Any, fmt: DisplayFormat = DisplayFormat.TABLE) -> str:
    """Render a payload according to ``fmt``.

    Mappings are always shown as a Key/Value table. When the objects expose a
    single property, only that column is rendered, with its header.
    """
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return format_mapping(value)

    items = list(value) if is_collection(value) else [value]
    if not items:
        return ""

    described = [describe(item) for item in items]
    columns = [name for name, _ in described[0]]

    if len(columns) == 1 or fmt == DisplayFormat.TABLE:
        rows = []
        for props in described:
            lookup = dict(props)
            rows.append([lookup.get(c) for c in columns])
        return _table(columns, rows)

    return "".join(_list_block(props) for props in described)
