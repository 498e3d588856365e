"""Report generation - rich terminal summary and JSON export."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Iterable

from rich.console import Console
from rich.table import Table

from farmcheck.filtering import collect_by_severity, count_by_severity
from farmcheck.models import Finding, Severity

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFORMATIONAL: "cyan",
    Severity.DEFAULT: "dim",
}


def has_review_items(roots: Iterable[Finding | None]) -> bool:
    """True when any finding at any depth is Warning or Critical."""
    counts = count_by_severity(roots)
    return counts[Severity.CRITICAL] > 0 or counts[Severity.WARNING] > 0


def render_json(roots: Iterable[Finding | None]) -> str:
    roots = [r for r in roots if r is not None]
    counts = count_by_severity(roots)
    output = {
        "$schema": "farmcheck-v1",
        "generated_at": datetime.now().isoformat(),
        "summary": {
            "total": sum(counts.values()),
            "by_severity": {s.value: n for s, n in counts.items()},
        },
        "findings": [r.to_dict() for r in roots],
    }
    return json.dumps(output, indent=2)


def _path(finding: Finding) -> str:
    names = []
    node: Finding | None = finding
    while node is not None:
        names.append(node.name)
        node = node.parent
    return " / ".join(reversed(names))


def print_summary(roots: Iterable[Finding | None], console: Console | None = None) -> None:
    """Print the Critical and Warning findings and per-severity counts."""
    console = console or Console()
    roots = list(roots)
    promoted = collect_by_severity(roots, Severity.CRITICAL) + collect_by_severity(roots, Severity.WARNING)

    if not promoted:
        console.print("\n[bold green]No critical or review items found.[/]")
    else:
        table = Table(title="Farm Health Findings", show_lines=True)
        table.add_column("Severity", width=10)
        table.add_column("Finding", width=50)
        table.add_column("Warning", width=60)
        for f in promoted:
            color = SEVERITY_COLORS[f.severity]
            table.add_row(
                f"[{color}]{f.severity.value}[/]",
                _path(f),
                "\n".join(f.warning_messages),
            )
        console.print()
        console.print(table)

    counts = count_by_severity(roots)
    parts = []
    for sev in (Severity.CRITICAL, Severity.WARNING, Severity.INFORMATIONAL):
        if counts[sev] > 0:
            parts.append(f"[{SEVERITY_COLORS[sev]}]{sev.value}: {counts[sev]}[/]")
    total = sum(counts.values())
    console.print(f"\n[bold]Summary:[/] {total} finding(s) | {' | '.join(parts) if parts else 'Clean'}\n")
