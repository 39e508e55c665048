"""UX Evaluator — turns accessibility findings into a validated audit result."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

import openai

from uxa.agents.ux_evaluator.prompts import NO_VIOLATIONS, SYSTEM_PROMPT, USER_PROMPT_TEMPLATE
from uxa.errors import EvaluationUnavailable, MalformedResponse
from uxa.schemas.audit import AuditResult, response_format, validate
from uxa.schemas.report import AccessibilityFinding
from uxa.shared.llm_client import TokensCallback

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        response_format: dict[str, Any],
        on_tokens: TokensCallback | None = None,
    ) -> str: ...


def format_findings(findings: Sequence[AccessibilityFinding]) -> str:
    """One ``<id>: <description> (<count> occurrences)`` line per finding, in order."""
    if not findings:
        return NO_VIOLATIONS
    return "\n".join(
        f"{f.id}: {f.description} ({f.occurrences} occurrences)" for f in findings
    )


def build_prompt(url: str, findings: Sequence[AccessibilityFinding]) -> str:
    return USER_PROMPT_TEMPLATE.format(url=url, violations=format_findings(findings))


def extract_json(text: str) -> Any:
    """Extract the JSON value from text that may contain markdown fences.

    Schema-constrained responses are normally bare JSON; fences are
    tolerated because some deployments still wrap them.  Whatever JSON a
    fence holds is returned as is, object or not.
    """
    text = text.strip()

    # 1. Clean JSON response
    if text.startswith("{"):
        try:
            obj, _ = json.JSONDecoder().raw_decode(text)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(obj, dict):
                return obj

    # 2. ```json ... ``` or ``` ... ``` fenced block
    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if match:
        return json.loads(match.group(1).strip())

    raise ValueError(
        f"Could not extract JSON from model response (length={len(text)}). "
        f"First 300 chars: {text[:300]!r}"
    )


class UXEvaluatorAgent:
    """Scores a page from its URL and accessibility findings.

    Makes exactly one completion per ``evaluate`` call and never retries.
    """

    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    @property
    def name(self) -> str:
        return "UX Evaluator"

    def get_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def parse_output(self, raw_text: str) -> AuditResult:
        """Decode and validate the model's answer.

        Raises ``MalformedResponse`` when there is no JSON object and
        ``SchemaViolation`` when the object does not fit the schema.
        """
        if not raw_text.strip():
            raise MalformedResponse("Model returned an empty response")
        try:
            data: Any = json.loads(raw_text)
        except json.JSONDecodeError:
            try:
                data = extract_json(raw_text)
            except ValueError as exc:
                raise MalformedResponse(str(exc)) from exc
        # Well-formed JSON of the wrong shape (e.g. a list) is a schema problem
        return validate(data)

    async def evaluate(
        self,
        url: str,
        findings: Sequence[AccessibilityFinding],
        *,
        on_tokens: TokensCallback | None = None,
    ) -> AuditResult:
        prompt = build_prompt(url, findings)
        logger.debug("Evaluation prompt:\n%s", prompt)

        try:
            raw = await self.client.structured_completion(
                system=self.get_system_prompt(),
                user_message=prompt,
                response_format=response_format(),
                on_tokens=on_tokens,
            )
        except openai.APIError as exc:
            raise EvaluationUnavailable(f"Evaluation call failed: {exc}") from exc
        except ValueError as exc:
            # Refusals surface as ValueError from the client
            raise MalformedResponse(str(exc)) from exc

        logger.debug("%s raw output:\n%s", self.name, raw[:500])
        return self.parse_output(raw)
