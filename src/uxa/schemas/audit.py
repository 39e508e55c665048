"""Pydantic models for the model-evaluated audit result.

``AuditResult`` is the only definition of the result shape.  It is rendered
two ways: ``validate`` checks a decoded payload against it, and
``response_format`` turns it into the JSON Schema document the model is
constrained with.  Add fields here and both follow.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)
from pydantic.alias_generators import to_camel

from uxa.errors import SchemaViolation

RESPONSE_SCHEMA_NAME = "ux_audit_result"


def _keep_given_number(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    checked = handler(value)
    # An integer score stays an integer in the report
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return checked


# JSON numbers only: ints and floats pass, numeric strings and booleans do not.
Score = Annotated[
    float,
    Field(ge=0, le=100, strict=True, allow_inf_nan=False),
    WrapValidator(_keep_given_number),
    PlainSerializer(lambda v: v, return_type=Any),
]

Priority = Literal["high", "medium", "low"]


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreBreakdown(_WireModel):
    """The five UX dimensions, each scored 0-100."""

    accessibility: Score
    content_clarity: Score
    navigation: Score
    visual_design: Score
    mobile_friendliness: Score


class Improvement(_WireModel):
    """A single prioritized recommendation."""

    title: str
    why: str
    how: str
    priority: Priority


class AuditSummary(_WireModel):
    executive: str
    developer_todo: list[str]


class AuditResult(_WireModel):
    """Full output of the UX evaluator."""

    overall: Score
    breakdown: ScoreBreakdown
    improvements: list[Improvement]
    summary: AuditSummary


def _violated_fields(exc: ValidationError) -> list[str]:
    """Dotted wire paths of every failing field, in error order, deduplicated."""
    fields: list[str] = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "<root>"
        if path not in fields:
            fields.append(path)
    return fields


def validate(candidate: Any) -> AuditResult:
    """Validate a decoded JSON payload as an ``AuditResult``.

    Raises ``SchemaViolation`` naming every violated field.
    """
    try:
        return AuditResult.model_validate(candidate)
    except ValidationError as exc:
        raise SchemaViolation(_violated_fields(exc), detail=str(exc)) from exc


def result_json_schema() -> dict[str, Any]:
    """JSON Schema rendering of ``AuditResult`` using wire (camelCase) names."""
    return AuditResult.model_json_schema(by_alias=True, mode="validation")


def response_format() -> dict[str, Any]:
    """The ``response_format`` argument for a schema-constrained completion."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": RESPONSE_SCHEMA_NAME,
            "schema": result_json_schema(),
        },
    }
