"""HTTP security header probe."""

import requests

from farmcheck.factory import create_finding
from farmcheck.models import DisplayFormat, Finding, Severity
from farmcheck.probes.base import Probe

MDN_HEADERS = "https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/"

EXPECTED_HEADERS: dict[str, dict] = {
    "Strict-Transport-Security": {
        "severity": Severity.WARNING,
        "description": "HSTS header is missing. Browsers may connect over insecure HTTP.",
        "remediation": "Add 'Strict-Transport-Security: max-age=31536000; includeSubDomains' header.",
    },
    "Content-Security-Policy": {
        "severity": Severity.WARNING,
        "description": "CSP header is missing. The site is more vulnerable to XSS attacks.",
        "remediation": "Implement a Content-Security-Policy header with restrictive directives.",
    },
    "X-Content-Type-Options": {
        "severity": Severity.INFORMATIONAL,
        "description": "X-Content-Type-Options header is missing. Browsers may MIME-sniff responses.",
        "remediation": "Add 'X-Content-Type-Options: nosniff' header.",
    },
    "X-Frame-Options": {
        "severity": Severity.INFORMATIONAL,
        "description": "X-Frame-Options header is missing. The site may be vulnerable to clickjacking.",
        "remediation": "Add 'X-Frame-Options: DENY' or 'SAMEORIGIN' header.",
    },
    "Referrer-Policy": {
        "severity": Severity.INFORMATIONAL,
        "description": "Referrer-Policy header is missing. Full URLs may leak in Referer headers.",
        "remediation": "Add 'Referrer-Policy: strict-origin-when-cross-origin' header.",
    },
}

INSECURE_VALUES = {
    "X-Content-Type-Options": lambda v: v.lower() != "nosniff",
    "X-Frame-Options": lambda v: v.upper() not in ("DENY", "SAMEORIGIN"),
    "Content-Security-Policy": lambda v: "unsafe-inline" in v and "unsafe-eval" in v,
}


class HeaderProbe(Probe):
    name = "headers"

    def __init__(self, target: str, session: requests.Session | None = None, timeout: float = 10):
        self.target = target
        self.session = session or requests.Session()
        self.timeout = timeout

    def probe(self) -> Finding:
        title = f"HTTP headers: {self.target}"
        try:
            resp = self.session.get(self.target, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            return create_finding(
                title,
                severity=Severity.WARNING,
                warning_messages=[f"Could not connect to {self.target}: {exc}"],
                description=["Verify the URL is correct and the server is reachable."],
            )

        # resp.headers is case-insensitive; a plain dict copy is only the payload.
        headers = resp.headers
        finding = create_finding(
            title,
            description=[f"Response status {resp.status_code}."],
            payload=dict(headers),
            format=DisplayFormat.TABLE,
        )

        for header_name, info in EXPECTED_HEADERS.items():
            value = headers.get(header_name)
            if value is None:
                finding.add_child(self._header_finding(f"Missing {header_name} header", header_name, info, info["description"]))
            elif header_name in INSECURE_VALUES and INSECURE_VALUES[header_name](value):
                message = f"{header_name} has a weak value: {value}"
                finding.add_child(self._header_finding(f"Misconfigured {header_name} header", header_name, info, message))

        if "Server" in headers:
            finding.add_child(
                create_finding(
                    "Server header exposes technology",
                    severity=Severity.INFORMATIONAL,
                    description=[f"Server header reveals: {headers['Server']}", "Remove or obfuscate the Server header."],
                )
            )

        return finding

    def _header_finding(self, title: str, header_name: str, info: dict, message: str) -> Finding:
        # Informational findings carry their explanation as description, not as a warning.
        if info["severity"] in (Severity.WARNING, Severity.CRITICAL):
            return create_finding(
                title,
                severity=info["severity"],
                warning_messages=[message],
                description=[info["remediation"]],
                reference_links=[MDN_HEADERS + header_name],
            )
        return create_finding(
            title,
            severity=info["severity"],
            description=[message, info["remediation"]],
            reference_links=[MDN_HEADERS + header_name],
        )
