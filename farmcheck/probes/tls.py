"""TLS certificate and configuration probe."""

import socket
import ssl
from dataclasses import dataclass
from datetime import datetime, timezone

from farmcheck.factory import create_finding
from farmcheck.models import DisplayFormat, Finding, Severity
from farmcheck.probes.base import Probe

WEAK_PROTOCOLS = ("SSLv2", "SSLv3", "TLSv1", "TLSv1.1")
WEAK_CIPHERS = ("RC4", "DES", "3DES", "NULL", "EXPORT", "MD5")
TLS_GUIDELINES = "https://ssl-config.mozilla.org/"


@dataclass
class CertificateInfo:
    host: str
    port: int
    subject: str
    issuer: str
    expires: str
    days_left: int | None
    protocol: str | None
    cipher: str | None


def parse_target(target: str) -> tuple[str, int]:
    hostname = target.replace("https://", "").replace("http://", "").split("/")[0]
    port = 443
    if ":" in hostname:
        hostname, port_str = hostname.rsplit(":", 1)
        port = int(port_str)
    return hostname, port


def _name(rdns) -> str:
    """Flatten a certificate subject/issuer into 'key=value, ...'."""
    if not rdns:
        return ""
    return ", ".join(f"{k}={v}" for rdn in rdns for k, v in rdn)


def _days_left(not_after: str | None) -> int | None:
    if not not_after:
        return None
    expiry = datetime.strptime(not_after, "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)
    return (expiry - datetime.now(timezone.utc)).days


class TLSProbe(Probe):
    name = "tls"

    def __init__(self, target: str, warning_days: int = 30, timeout: float = 10):
        self.target = target
        self.warning_days = warning_days
        self.timeout = timeout

    def probe(self) -> Finding:
        hostname, port = parse_target(self.target)
        title = f"TLS: {hostname}:{port}"

        ctx = ssl.create_default_context()
        try:
            with socket.create_connection((hostname, port), timeout=self.timeout) as sock:
                with ctx.wrap_socket(sock, server_hostname=hostname) as ssock:
                    cert = ssock.getpeercert()
                    protocol_version = ssock.version()
                    cipher = ssock.cipher()
        except ssl.SSLCertVerificationError as exc:
            return create_finding(
                title,
                severity=Severity.CRITICAL,
                warning_messages=[f"Certificate verification failed: {exc}"],
                description=["Install a valid certificate from a trusted CA."],
                expand=True,
            )
        except (socket.timeout, socket.gaierror, OSError) as exc:
            return create_finding(
                title,
                severity=Severity.WARNING,
                warning_messages=[f"Could not establish TLS connection to {hostname}:{port}: {exc}"],
                description=["Verify the hostname and ensure TLS is enabled on the server."],
            )

        cert = cert or {}
        info = CertificateInfo(
            host=hostname,
            port=port,
            subject=_name(cert.get("subject")),
            issuer=_name(cert.get("issuer")),
            expires=cert.get("notAfter", ""),
            days_left=_days_left(cert.get("notAfter")),
            protocol=protocol_version,
            cipher=cipher[0] if cipher else None,
        )
        finding = create_finding(
            title,
            description=[f"Negotiated {info.protocol or 'unknown protocol'} with {hostname}."],
            payload=info,
            format=DisplayFormat.LIST,
        )
        finding.add_child(self._check_expiry(info))
        finding.add_child(self._check_protocol(info))
        finding.add_child(self._check_cipher(info))
        return finding

    def _check_expiry(self, info: CertificateInfo) -> Finding | None:
        if info.days_left is None:
            return None
        if info.days_left < 0:
            return create_finding(
                "Certificate expired",
                severity=Severity.CRITICAL,
                warning_messages=[f"Certificate expired {abs(info.days_left)} days ago on {info.expires}."],
                description=["Renew the TLS certificate immediately."],
            )
        if info.days_left < self.warning_days:
            return create_finding(
                "Certificate expiring soon",
                severity=Severity.WARNING,
                warning_messages=[f"Certificate expires in {info.days_left} days on {info.expires}."],
                description=["Renew the TLS certificate before expiration."],
            )
        return None

    def _check_protocol(self, info: CertificateInfo) -> Finding | None:
        if info.protocol not in WEAK_PROTOCOLS:
            return None
        return create_finding(
            f"Weak TLS protocol: {info.protocol}",
            severity=Severity.WARNING,
            warning_messages=[f"Server negotiated {info.protocol}, which is deprecated and insecure."],
            description=["Configure the server to use TLS 1.2 or higher."],
            reference_links=[TLS_GUIDELINES],
        )

    def _check_cipher(self, info: CertificateInfo) -> Finding | None:
        if not info.cipher:
            return None
        for weak in WEAK_CIPHERS:
            if weak in info.cipher.upper():
                return create_finding(
                    f"Weak cipher suite: {info.cipher}",
                    severity=Severity.WARNING,
                    warning_messages=[f"Server uses weak cipher {info.cipher}."],
                    description=["Disable weak cipher suites and use AES-GCM or ChaCha20."],
                    reference_links=[TLS_GUIDELINES],
                )
        return None
