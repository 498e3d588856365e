"""Run probes in a fixed order and assemble the findings forest."""

from __future__ import annotations

import logging
from typing import Iterable

from farmcheck.config import Config
from farmcheck.errors import ValidationError
from farmcheck.models import Finding
from farmcheck.probes import PROBES, HeaderProbe, Probe, TLSProbe

logger = logging.getLogger(__name__)


def build_probes(targets: Iterable[str], config: Config) -> list[Probe]:
    """Instantiate every enabled probe for every target, targets first."""
    probes: list[Probe] = []
    for target in targets:
        for name in config.enabled_probes:
            probe_cls = PROBES[name]
            if probe_cls is TLSProbe:
                probes.append(TLSProbe(target, warning_days=config.cert_expiry_warning_days, timeout=config.request_timeout))
            elif probe_cls is HeaderProbe:
                probes.append(HeaderProbe(target, timeout=config.request_timeout))
            else:
                probes.append(probe_cls(target))
    return probes


def collect(probes: Iterable[Probe]) -> list[Finding | None]:
    """Run each probe and return its result, ``None`` included.

    A probe that raises contributes ``None``; the rest still run. Construction
    errors from the factory are programming errors and propagate.
    """
    roots: list[Finding | None] = []
    for probe in probes:
        try:
            finding = probe._timed_probe()
        except ValidationError:
            raise
        except Exception as exc:
            logger.warning("%s probe failed for %s: %s", probe.name, getattr(probe, "target", "?"), exc)
            roots.append(None)
            continue
        if finding is None:
            logger.info("%s probe reported nothing", probe.name)
        roots.append(finding)
    return roots
