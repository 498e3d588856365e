"""Severity-based collection over a forest of findings."""

from __future__ import annotations

import logging
from typing import Iterable

from farmcheck.models import Finding, Severity

logger = logging.getLogger(__name__)


def collect_by_severity(roots: Iterable[Finding | None], target: Severity) -> list[Finding]:
    """Collect every finding whose severity is exactly ``target``.

    The walk is pre-order over the whole forest and never stops at a
    non-matching node. ``None`` entries are skipped.
    """
    matches: list[Finding] = []
    for root in roots:
        if root is None:
            continue
        try:
            _collect(root, target, matches)
        except (AttributeError, TypeError) as exc:
            logger.warning("Skipping malformed branch while collecting %s findings: %s", target.value, exc)
    return matches


def _collect(node: Finding | None, target: Severity, matches: list[Finding]) -> None:
    if node is None:
        return
    if node.severity == target:
        matches.append(node)
    for child in node.children:
        _collect(child, target, matches)


def count_by_severity(roots: Iterable[Finding | None]) -> dict[Severity, int]:
    """Count findings at every depth, per severity.

    A malformed root is logged and counts as nothing.
    """
    counts = {s: 0 for s in Severity}
    for root in roots:
        if root is None:
            continue
        try:
            branch = [node.severity for node in root.walk()]
        except (AttributeError, TypeError) as exc:
            logger.warning("Skipping malformed branch while counting findings: %s", exc)
            continue
        for severity in branch:
            counts[severity] += 1
    return counts
