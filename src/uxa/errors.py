"""Error taxonomy for an audit run.

Every fatal failure of a run is one of these.  Inspection problems are not
here on purpose: they are logged and degrade to an empty finding list.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for all fatal audit errors.

    ``stage`` is the pipeline stage the error was detected in, filled in
    by the orchestrator when it is not known at raise time.
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidInput(AuditError):
    """The target URL is missing or not a well-formed absolute URL."""


class MissingConfiguration(AuditError):
    """One or more required settings are absent at startup."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}"
        )
        self.missing = list(missing)


class CaptureFailed(AuditError):
    """Screenshot rendering failed."""


class EvaluationUnavailable(AuditError):
    """The language model call itself failed (network, auth, quota, timeout)."""


class MalformedResponse(AuditError):
    """The model answered, but not with a JSON object."""


class SchemaViolation(AuditError):
    """The model's JSON did not satisfy the audit result schema."""

    def __init__(self, fields: list[str], detail: str = "") -> None:
        message = f"Audit result failed validation on: {', '.join(fields)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)
        self.fields = list(fields)


class PersistenceFailed(AuditError):
    """Writing run artifacts to disk failed."""
