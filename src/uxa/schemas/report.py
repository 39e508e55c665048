"""Run input, accessibility findings and the persisted report."""

from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uxa.schemas.audit import AuditResult, _WireModel

_ALLOWED_SCHEMES = ("http", "https")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def check_url(url: str) -> str:
    """Return ``url`` unchanged if it is an absolute http(s) URL, else raise ValueError."""
    if not url or not url.strip():
        raise ValueError("URL is required")
    if url != url.strip() or any(ch.isspace() for ch in url):
        raise ValueError(f"URL must not contain whitespace: {url!r}")
    parts = urlsplit(url)
    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValueError(f"URL must start with http:// or https://, got {url!r}")
    if not parts.hostname:
        raise ValueError(f"URL has no host: {url!r}")
    return url


class AuditRequest(BaseModel):
    """Immutable input to one run."""

    model_config = ConfigDict(frozen=True)

    url: str
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("url")
    @classmethod
    def url_is_absolute(cls, v: str) -> str:
        return check_url(v)


class ElementLocator(BaseModel):
    """Minimal locator for an offending element, e.g. ``["IMG"]``."""

    target: list[str]


class AccessibilityFinding(BaseModel):
    """One aggregated accessibility defect class."""

    id: str  # "image-alt", "label"
    description: str
    nodes: list[ElementLocator] = []

    @property
    def occurrences(self) -> int:
        return len(self.nodes)


class AuditReport(_WireModel):
    """The artifact written to ``report.json`` at the end of a successful run."""

    model_config = ConfigDict(frozen=True)

    url: str
    timestamp: str = Field(default_factory=lambda: iso_timestamp(utc_now()))
    audit_result: AuditResult
    # to_camel would produce "a11YViolations"
    a11y_violations: list[AccessibilityFinding] = Field(default=[], alias="a11yViolations")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
