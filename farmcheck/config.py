"""Configuration file support for farmcheck (.farmcheck.yml)."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_CONFIG_NAME = ".farmcheck.yml"
KNOWN_PROBES = ("tls", "headers")


@dataclass
class Config:
    """farmcheck configuration loaded from .farmcheck.yml."""

    enabled_probes: list[str] = field(default_factory=lambda: list(KNOWN_PROBES))
    report_title: str = "Farm Health Report"
    include_informational: bool = False
    cert_expiry_warning_days: int = 30
    request_timeout: float = 10.0


def load_config(config_path: str | None = None, project_root: str | None = None) -> Config:
    """Load configuration from a YAML file.

    Priority: explicit --config path > .farmcheck.yml in project root > defaults.
    """
    path = None

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    elif project_root:
        candidate = Path(project_root) / DEFAULT_CONFIG_NAME
        if candidate.exists():
            path = candidate

    if path is None:
        return Config()

    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must be a YAML mapping, got {type(raw).__name__}")

    return _parse_config(raw)


def _parse_config(raw: dict) -> Config:
    """Parse and validate raw YAML dict into a Config object."""
    config = Config()

    if "enabled_probes" in raw:
        probes = raw["enabled_probes"]
        if not isinstance(probes, list):
            raise ValueError("enabled_probes must be a list")
        unknown = [p for p in probes if p not in KNOWN_PROBES]
        if unknown:
            raise ValueError(f"enabled_probes contains unknown probes: {unknown}")
        config.enabled_probes = probes

    if "report_title" in raw:
        title = raw["report_title"]
        if not isinstance(title, str) or not title.strip():
            raise ValueError("report_title must be a non-empty string")
        config.report_title = title

    if "include_informational" in raw:
        val = raw["include_informational"]
        if not isinstance(val, bool):
            raise ValueError("include_informational must be true or false")
        config.include_informational = val

    if "cert_expiry_warning_days" in raw:
        val = raw["cert_expiry_warning_days"]
        if not isinstance(val, int) or isinstance(val, bool) or val < 0:
            raise ValueError("cert_expiry_warning_days must be a non-negative integer")
        config.cert_expiry_warning_days = val

    if "request_timeout" in raw:
        val = raw["request_timeout"]
        if not isinstance(val, (int, float)) or isinstance(val, bool) or val <= 0:
            raise ValueError("request_timeout must be a positive number")
        config.request_timeout = float(val)

    return config
