"""Shared fixtures for farmcheck tests."""

import textwrap
from pathlib import Path

import pytest

from farmcheck.factory import create_finding
from farmcheck.models import Severity


@pytest.fixture
def findings_file(tmp_path: Path):
    """Create a findings document with the given content."""

    def _create(content: str, filename: str = "findings.yml") -> Path:
        f = tmp_path / filename
        f.write_text(textwrap.dedent(content))
        return f

    return _create


@pytest.fixture
def farm_tree():
    """A small farm with one critical server under a shell finding."""
    server = create_finding(
        "Server APP01",
        severity=Severity.CRITICAL,
        warning_messages=["Disk C: has 2% free space"],
        payload={"Role": "Application", "FreeSpace": "2%"},
        format="Table",
        children=[
            create_finding("Services", description=["All services running."]),
            create_finding("Patches", description=["Patch level is current."]),
        ],
    )
    farm = create_finding("Farm topology", children=[server])
    search = create_finding(
        "Search",
        severity=Severity.WARNING,
        warning_messages=["Crawl has not completed in 7 days"],
    )
    return [farm, None, search]
