"""Async Azure OpenAI wrapper for schema-constrained completions.

One request per call.  SDK-level retries are disabled: a run makes a single
evaluation attempt and retrying is the caller's decision.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from openai import AsyncAzureOpenAI

from uxa.schemas.config import EvaluatorSettings

logger = logging.getLogger(__name__)

MAX_TOKENS = 4_096

TokensCallback = Callable[[int, int], None]
"""Called with (input_tokens, output_tokens) when a completion finishes."""


class LLMClient:
    """Thin async wrapper around the OpenAI SDK pointed at an Azure deployment."""

    def __init__(self, settings: EvaluatorSettings, *, timeout: float = 120.0) -> None:
        self._model = settings.deployment
        self._client = AsyncAzureOpenAI(
            azure_endpoint=settings.endpoint,
            api_key=settings.api_key,
            api_version=settings.api_version,
            azure_deployment=settings.deployment,
            max_retries=0,
            timeout=timeout,
        )

    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        response_format: dict[str, Any],
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Single request/response constrained by ``response_format``.

        Returns the raw message content ("" when the model sent none).
        A refusal raises ``ValueError``.  SDK errors (``openai.APIError``
        and subclasses) propagate unchanged.
        """
        response = await self._client.chat.completions.create(
            model=self._model,
            max_tokens=MAX_TOKENS,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user_message},
            ],
            response_format=response_format,
        )
        usage = getattr(response, "usage", None)
        if usage:
            inp = getattr(usage, "prompt_tokens", 0)
            out = getattr(usage, "completion_tokens", 0)
            logger.debug("Completion used %d input / %d output tokens", inp, out)
            if on_tokens:
                on_tokens(inp, out)

        message = response.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise ValueError(f"Model refused to answer: {refusal}")
        return message.content or ""


# ======================================================================
# Dry-run mock client — zero API calls
# ======================================================================

_DRY_RUN_RESULT: dict[str, Any] = {
    "overall": 74,
    "breakdown": {
        "accessibility": 62,
        "contentClarity": 80,
        "navigation": 77,
        "visualDesign": 75,
        "mobileFriendliness": 71,
    },
    "improvements": [
        {
            "title": "Add alternate text to images",
            "why": "Screen reader users cannot perceive unlabeled images.",
            "how": "Give every meaningful <img> a descriptive alt attribute and decorative ones alt=\"\".",
            "priority": "high",
        },
        {
            "title": "Label form inputs",
            "why": "Inputs without an accessible name are ambiguous for assistive technology.",
            "how": "Associate each input with a <label> or add aria-label.",
            "priority": "medium",
        },
    ],
    "summary": {
        "executive": "Dry-run result. The page is usable but has accessibility gaps.",
        "developerTodo": ["Add alt text to images", "Label all form inputs"],
    },
}


class DryRunClient:
    """Drop-in replacement for LLMClient that makes zero API calls."""

    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        response_format: dict[str, Any],
        on_tokens: TokensCallback | None = None,
    ) -> str:
        logger.info("[dry-run] Returning canned audit result")
        return json.dumps(_DRY_RUN_RESULT)
