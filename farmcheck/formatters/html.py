"""Self-contained HTML report: promoted Critical/Warning sections followed by the full finding tree."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from jinja2 import Environment
from markupsafe import Markup, escape

from farmcheck.errors import RenderError
from farmcheck.filtering import collect_by_severity, count_by_severity
from farmcheck.formatters.payload import format_payload
from farmcheck.models import Finding, Severity

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Farm Health Report"

SEVERITY_CLASSES = {
    Severity.CRITICAL: "error",
    Severity.WARNING: "warning",
}

STYLESHEET = """
:root { --bg: #f8f9fa; --card: #fff; --text: #212529; --border: #dee2e6; --muted: #6c757d;
        --accent: #0d6efd; --danger: #dc3545; --warn: #e67e22; }
* { box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
       background: var(--bg); color: var(--text); line-height: 1.5; padding: 2rem; max-width: 1200px; margin: auto; }
h1 { color: var(--accent); border-bottom: 3px solid var(--accent); padding-bottom: 0.5rem; }
h2 { color: #495057; border-bottom: 1px solid var(--border); padding-bottom: 0.3rem; margin-top: 2rem; }
.generated { color: var(--muted); }
.banner span { margin-right: 1rem; }
.banner .critical { color: var(--danger); font-weight: bold; }
.banner .review { color: var(--warn); font-weight: bold; }
details.finding { background: var(--card); border: 1px solid var(--border); border-left: 4px solid var(--border);
                  border-radius: 4px; margin: 0.4rem 0; padding: 0.3rem 0.8rem; }
details.finding > summary { cursor: pointer; font-weight: 600; }
details.finding.error { border-left-color: var(--danger); }
details.finding.error > summary { color: var(--danger); }
details.finding.warning { border-left-color: var(--warn); }
details.finding.warning > summary { color: var(--warn); }
.warning-message { color: var(--danger); font-weight: bold; }
.description { margin: 0.3rem 0; }
.references a { display: block; color: var(--accent); }
table.payload { border-collapse: collapse; margin: 0.5rem 0; }
table.payload th, table.payload td { text-align: left; padding: 0.25rem 0.6rem; border-bottom: 1px solid var(--border); }
table.payload th { color: var(--muted); font-weight: 500; }
button.toggle-all { background: var(--card); border: 1px solid var(--accent); color: var(--accent);
                    border-radius: 6px; padding: 0.35rem 0.75rem; cursor: pointer; }
@media print { body { padding: 0; } }
"""

SCRIPT = """
document.getElementById("toggle-all").addEventListener("click", function () {
  var blocks = document.querySelectorAll("details.finding");
  var open = this.dataset.state !== "open";
  blocks.forEach(function (d) { d.open = open; });
  this.dataset.state = open ? "open" : "closed";
  this.textContent = open ? "Collapse all" : "Expand all";
});
"""

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<style>{{ stylesheet }}</style>
</head>
<body>
<h1>{{ title }}</h1>
<p class="generated">Generated {{ generated_at }}</p>
<div class="banner">
  <span class="critical">Critical: {{ counts.critical }}</span>
  <span class="review">Warning: {{ counts.warning }}</span>
  <span>Informational: {{ counts.informational }}</span>
  <button type="button" class="toggle-all" id="toggle-all" data-state="closed">Expand all</button>
</div>
{% for section in sections %}
<section class="promoted {{ section.css }}">
<h2>{{ section.heading }}</h2>
{% for fragment in section.fragments %}{{ fragment }}
{% endfor %}
</section>
{% endfor %}
<section class="findings">
<h2>All Findings</h2>
{% for fragment in body %}{{ fragment }}
{% endfor %}
</section>
<script>{{ script }}</script>
</body>
</html>
"""

_env = Environment(autoescape=True)
_document = _env.from_string(DOCUMENT_TEMPLATE)


def render_fragment(
    finding: Finding | None,
    include_children: bool = True,
    force_expand: bool = False,
) -> str:
    """Render one finding as a collapsible block.

    Description and warning lines are emitted verbatim since probes author
    them as HTML. Children are rendered recursively after the payload unless
    ``include_children`` is False; a child that fails to render is left out
    and does not take its parent down with it.

    Raises RenderError when the finding's own content cannot be rendered.
    """
    if finding is None:
        return ""

    try:
        css = " ".join(["finding", SEVERITY_CLASSES.get(finding.severity, "")]).strip()
        is_open = " open" if (force_expand or finding.expand) else ""
        parts = [
            f'<details class="{css}"{is_open}>',
            f"<summary>{escape(finding.name)}</summary>",
        ]
        for message in finding.warning_messages:
            parts.append(f'<p class="warning-message">{message}</p>')
        for line in finding.description:
            parts.append(f'<p class="description">{line}</p>')
        if finding.reference_links:
            parts.append('<div class="references">')
            for link in finding.reference_links:
                parts.append(f'<a href="{escape(link)}" target="_blank" rel="noopener">{escape(link)}</a>')
            parts.append("</div>")
        if finding.payload is not None:
            parts.append(format_payload(finding.payload, finding.format))
    except Exception as exc:
        raise RenderError(getattr(finding, "name", repr(finding)), exc) from exc

    if include_children:
        for child in finding.children:
            html = _safe_fragment(child)
            if html:
                parts.append(html)
    parts.append("</details>")
    return "\n".join(parts)


def _safe_fragment(finding: Finding | None, include_children: bool = True, force_expand: bool = False) -> str | None:
    """Render a fragment, returning None when the finding cannot be rendered."""
    try:
        return render_fragment(finding, include_children=include_children, force_expand=force_expand)
    except RenderError as exc:
        logger.warning("%s", exc)
        return None


def _render_all(findings: Iterable[Finding | None], **kwargs) -> list[Markup]:
    fragments = []
    for finding in findings:
        if finding is None:
            continue
        html = _safe_fragment(finding, **kwargs)
        if html:
            fragments.append(Markup(html))
    return fragments


def render_html(
    roots: Iterable[Finding | None],
    title: str = DEFAULT_TITLE,
    include_informational: bool = False,
    generated_at: datetime | None = None,
) -> str:
    """Render a forest of findings as a single HTML document.

    Critical findings are promoted to a "Critical Findings" section (forced
    open) and Warning findings to "Review Items", each without children. The
    full tree follows in original order. Sections with no matches are
    omitted.
    """
    roots = list(roots)
    generated_at = generated_at or datetime.now()

    promoted = [
        ("Critical Findings", "critical", Severity.CRITICAL, True),
        ("Review Items", "review", Severity.WARNING, False),
    ]
    if include_informational:
        promoted.append(("Informational Items", "informational", Severity.INFORMATIONAL, False))

    sections = []
    for heading, css, severity, force_expand in promoted:
        matches = collect_by_severity(roots, severity)
        if not matches:
            continue
        fragments = _render_all(matches, include_children=False, force_expand=force_expand)
        sections.append({"heading": heading, "css": css, "fragments": fragments})

    counts = count_by_severity(roots)
    return _document.render(
        title=title,
        generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        stylesheet=Markup(STYLESHEET),
        script=Markup(SCRIPT),
        counts={
            "critical": counts[Severity.CRITICAL],
            "warning": counts[Severity.WARNING],
            "informational": counts[Severity.INFORMATIONAL],
        },
        sections=sections,
        body=_render_all(roots),
    )
