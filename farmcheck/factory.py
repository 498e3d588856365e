"""Validated construction of findings, and loading of exported findings documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from farmcheck.errors import ValidationError
from farmcheck.models import DisplayFormat, Finding, Severity

logger = logging.getLogger(__name__)

EXPLAINED_SEVERITIES = (Severity.WARNING, Severity.CRITICAL)


def create_finding(
    name: str,
    description: list[str] | None = None,
    severity: Severity = Severity.DEFAULT,
    warning_messages: list[str] | None = None,
    reference_links: list[str] | None = None,
    payload: Any = None,
    expand: bool = False,
    format: DisplayFormat | None = None,
    children: Iterable[Finding | None] | None = None,
) -> Finding:
    """Create a finding, enforcing the construction rules.

    A Warning or Critical finding must carry at least one non-empty warning
    message, and a payload must come with a display format. A shell finding
    (no payload) defaults to the Table format.
    """
    if not name or not str(name).strip():
        raise ValidationError("Finding name must not be empty")

    severity = Severity.parse(severity)
    if severity in EXPLAINED_SEVERITIES and not any(
        m and str(m).strip() for m in (warning_messages or [])
    ):
        raise ValidationError(
            f"Finding '{name}' has severity {severity.value} but no warning message"
        )

    if payload is not None and format is None:
        raise ValidationError(f"Finding '{name}' has a payload but no display format")

    logger.debug("Creating finding: %s", name)
    return Finding(
        name=name,
        severity=severity,
        description=description,
        warning_messages=warning_messages,
        reference_links=reference_links,
        payload=payload,
        format=DisplayFormat.parse(format) if format is not None else DisplayFormat.TABLE,
        expand=expand,
        children=children,
    )


def _as_str_list(raw: dict, key: str) -> list[str] | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list of strings")
    return [str(v) for v in value]


def finding_from_dict(raw: dict) -> Finding:
    """Build a finding tree from the shape produced by ``Finding.to_dict``."""
    if not isinstance(raw, dict):
        raise ValidationError(f"Finding entry must be a mapping, got {type(raw).__name__}")

    children_raw = raw.get("children") or []
    if not isinstance(children_raw, list):
        raise ValidationError("'children' must be a list")

    try:
        severity = Severity.parse(raw.get("severity", Severity.DEFAULT))
        fmt = DisplayFormat.parse(raw["format"]) if raw.get("format") else None
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    payload = raw.get("payload")
    if payload is not None and fmt is None:
        # Exported documents always carry a format; hand-written ones may not.
        fmt = DisplayFormat.TABLE if isinstance(payload, (list, dict)) else DisplayFormat.LIST

    return create_finding(
        name=raw.get("name", ""),
        description=_as_str_list(raw, "description"),
        severity=severity,
        warning_messages=_as_str_list(raw, "warning_messages"),
        reference_links=_as_str_list(raw, "reference_links"),
        payload=payload,
        expand=bool(raw.get("expand", False)),
        format=fmt,
        children=[finding_from_dict(c) if c is not None else None for c in children_raw],
    )


def load_findings(path: str) -> list[Finding | None]:
    """Load a findings document (YAML or JSON) into a forest.

    The document is either a list of findings or a mapping with a
    ``findings`` list, which is what ``render_json`` writes.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Findings file not found: {path}")

    text = p.read_text()
    try:
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Invalid findings document {p}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("findings")
    if not isinstance(data, list):
        raise ValueError(f"Findings document {p} must contain a list of findings")

    return [finding_from_dict(entry) if entry is not None else None for entry in data]
