"""Tests for the UX Evaluator agent."""

from __future__ import annotations

import json

import httpx
import openai
import pytest

from uxa.agents.ux_evaluator.agent import UXEvaluatorAgent, build_prompt, extract_json, format_findings
from uxa.errors import EvaluationUnavailable, MalformedResponse, SchemaViolation
from uxa.schemas.audit import AuditResult, response_format
from uxa.schemas.report import AccessibilityFinding, ElementLocator

_REQUEST = httpx.Request("POST", "https://example-resource.openai.azure.com/openai/deployments/gpt-4o/chat/completions")


class TestPrompt:
    def test_empty_findings_say_none_found(self) -> None:
        prompt = build_prompt("https://example.com", [])
        assert "Analyze the UX of website: https://example.com" in prompt
        assert "no accessibility violations found" in prompt.lower()

    def test_each_finding_listed_once_in_order(self, findings) -> None:
        prompt = build_prompt("https://example.com", findings)
        first = "image-alt: Images must have alternate text (2 occurrences)"
        second = "label: Form elements must have labels (1 occurrences)"
        assert prompt.count(first) == 1
        assert prompt.count(second) == 1
        assert prompt.index(first) < prompt.index(second)
        assert "no accessibility violations found" not in prompt.lower()

    def test_order_follows_input(self, findings) -> None:
        lines = format_findings(list(reversed(findings))).splitlines()
        assert [line.split(":")[0] for line in lines] == ["label", "image-alt"]

    def test_finding_with_no_nodes(self) -> None:
        text = format_findings([AccessibilityFinding(id="x", description="d")])
        assert text == "x: d (0 occurrences)"

    def test_asks_for_every_dimension(self) -> None:
        prompt = build_prompt("https://example.com", []).lower()
        for phrase in ("overall", "accessibility", "content clarity", "navigation",
                       "visual design", "mobile-friendliness", "priority",
                       "executive summary", "developer action items"):
            assert phrase in prompt


class TestExtractJson:
    def test_fenced_block(self) -> None:
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_trailing_text(self) -> None:
        assert extract_json('{"a": 1} trailing') == {"a": 1}

    def test_no_json(self) -> None:
        with pytest.raises(ValueError, match="Could not extract"):
            extract_json("sorry, I cannot")


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_success(self, fake_client_cls, valid_result, findings) -> None:
        client = fake_client_cls(valid_result)
        agent = UXEvaluatorAgent(client)

        result = await agent.evaluate("https://example.com", findings)

        assert isinstance(result, AuditResult)
        assert result.overall == 82
        assert len(client.calls) == 1
        call = client.calls[0]
        assert call["response_format"] == response_format()
        assert "image-alt: Images must have alternate text (2 occurrences)" in call["user_message"]
        assert call["system"] == agent.get_system_prompt()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            openai.APIConnectionError(request=_REQUEST),
            openai.APITimeoutError(request=_REQUEST),
            openai.AuthenticationError(
                "bad key", response=httpx.Response(401, request=_REQUEST), body=None,
            ),
            openai.RateLimitError(
                "quota", response=httpx.Response(429, request=_REQUEST), body=None,
            ),
        ],
    )
    async def test_call_failure_is_unavailable(self, fake_client_cls, error) -> None:
        client = fake_client_cls(error=error)
        with pytest.raises(EvaluationUnavailable):
            await UXEvaluatorAgent(client).evaluate("https://example.com", [])
        assert len(client.calls) == 1  # no retry

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["", "   ", "Here is my audit: great site!", "{not json"])
    async def test_unparseable_is_malformed(self, fake_client_cls, raw: str) -> None:
        with pytest.raises(MalformedResponse):
            await UXEvaluatorAgent(fake_client_cls(raw)).evaluate("https://example.com", [])

    @pytest.mark.asyncio
    async def test_refusal_is_malformed(self, fake_client_cls) -> None:
        client = fake_client_cls(error=ValueError("Model refused to answer: no"))
        with pytest.raises(MalformedResponse, match="refused"):
            await UXEvaluatorAgent(client).evaluate("https://example.com", [])

    @pytest.mark.asyncio
    async def test_missing_developer_todo_is_schema_violation(self, fake_client_cls, valid_result) -> None:
        del valid_result["summary"]["developerTodo"]
        with pytest.raises(SchemaViolation) as info:
            await UXEvaluatorAgent(fake_client_cls(valid_result)).evaluate("https://example.com", [])
        assert info.value.fields == ["summary.developerTodo"]

    @pytest.mark.asyncio
    async def test_json_array_is_schema_violation(self, fake_client_cls) -> None:
        with pytest.raises(SchemaViolation):
            await UXEvaluatorAgent(fake_client_cls("[1, 2, 3]")).evaluate("https://example.com", [])

    @pytest.mark.asyncio
    async def test_fenced_response_accepted(self, fake_client_cls, valid_result) -> None:
        raw = f"```json\n{json.dumps(valid_result)}\n```"
        result = await UXEvaluatorAgent(fake_client_cls(raw)).evaluate("https://example.com", [])
        assert result.breakdown.mobile_friendliness == 90


class TestUXEvaluatorAgent:
    def test_name(self, fake_client_cls) -> None:
        assert UXEvaluatorAgent(fake_client_cls()).name == "UX Evaluator"

    def test_parse_output(self, fake_client_cls, valid_result) -> None:
        agent = UXEvaluatorAgent(fake_client_cls())
        output = agent.parse_output(json.dumps(valid_result))
        assert output.improvements[0].title == "Add a skip-to-content link"

    def test_element_locator_count(self) -> None:
        finding = AccessibilityFinding(
            id="image-alt", description="Images must have alternate text",
            nodes=[ElementLocator(target=["IMG"])] * 4,
        )
        assert "(4 occurrences)" in format_findings([finding])


class TestNonObjectJson:
    @pytest.mark.parametrize("raw", ["[1, 2]", "```json\n[1, 2]\n```", "```\n\"just a string\"\n```"])
    def test_bare_or_fenced_non_object_is_schema_violation(self, fake_client_cls, raw: str) -> None:
        with pytest.raises(SchemaViolation) as info:
            UXEvaluatorAgent(fake_client_cls()).parse_output(raw)
        assert info.value.fields == ["<root>"]

    def test_extract_json_returns_fenced_array(self) -> None:
        assert extract_json("```json\n[1, 2]\n```") == [1, 2]
