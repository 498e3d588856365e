"""Probe registry for farmcheck."""

from farmcheck.probes.base import Probe
from farmcheck.probes.headers import HeaderProbe
from farmcheck.probes.tls import TLSProbe

PROBES: dict[str, type[Probe]] = {
    "tls": TLSProbe,
    "headers": HeaderProbe,
}

__all__ = [
    "Probe",
    "TLSProbe",
    "HeaderProbe",
    "PROBES",
]
