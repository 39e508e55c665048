"""Audit Orchestrator — runs capture → inspect → evaluate → persist for one URL."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from uxa.agents.ux_evaluator.agent import CompletionClient, UXEvaluatorAgent
from uxa.errors import (
    AuditError,
    CaptureFailed,
    EvaluationUnavailable,
    InvalidInput,
    PersistenceFailed,
)
from uxa.output.report_writer import write_report
from uxa.schemas.config import AuditOptions
from uxa.schemas.pipeline import PipelineState, Stage
from uxa.schemas.report import AccessibilityFinding, AuditReport, AuditRequest
from uxa.shared.capture import capture_screenshots
from uxa.shared.inspection import inspect_accessibility
from uxa.shared.progress import PipelineProgress

logger = logging.getLogger(__name__)

T = TypeVar("T")

CaptureFn = Callable[..., Awaitable[None]]
"""Signature: async (url, output_dir, *, navigation_timeout_ms) -> None."""

InspectFn = Callable[..., Awaitable[list[AccessibilityFinding]]]
"""Signature: async (url, *, navigation_timeout_ms) -> findings."""

WriterFn = Callable[[AuditReport, Path], Path]

_LABELS = {
    Stage.CAPTURING: "Capturing screenshots",
    Stage.INSPECTING: "Accessibility checks",
    Stage.EVALUATING: "AI evaluation",
    Stage.PERSISTING: "Writing report",
}

# Sortable, filesystem-safe, microsecond granularity
_RUN_DIR_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"


def allocate_run_dir(root: Path, created_at: datetime) -> Path:
    """Create a fresh, uniquely named run directory under ``root``.

    The name is the UTC creation time; a numeric suffix is added if another
    run already claimed it.
    """
    root.mkdir(parents=True, exist_ok=True)
    base = created_at.strftime(_RUN_DIR_FORMAT)
    candidate = root / base
    suffix = 0
    while True:
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            suffix += 1
            candidate = root / f"{base}-{suffix}"


class AuditOrchestrator:
    """Coordinates a single audit run.

    Pipeline flow (strictly sequential, each stage exactly once):
        init → capturing → inspecting → evaluating → persisting → done

    Any fatal error moves the run to ``failed``; ``run`` reports it through
    the returned ``PipelineState`` instead of raising.  Inspection can never
    fail the run.  Cancellation also marks the run failed (kind
    ``Cancelled``) before the ``CancelledError`` is re-raised; the state is
    kept on ``self.state``.
    """

    def __init__(
        self,
        client: CompletionClient,
        options: AuditOptions | None = None,
        *,
        capture: CaptureFn | None = None,
        inspect: InspectFn | None = None,
        writer: WriterFn | None = None,
    ) -> None:
        self.options = options or AuditOptions()
        self.evaluator = UXEvaluatorAgent(client)
        self._capture = capture or capture_screenshots
        self._inspect = inspect or inspect_accessibility
        self._writer = writer or write_report
        self.state: PipelineState | None = None

    async def run(self, url: str | None) -> PipelineState:
        """Execute the pipeline for ``url`` and return the final state."""
        state = PipelineState(url=url or "")
        self.state = state

        with PipelineProgress() as progress:
            try:
                await self._run_stages(state, progress)
            except asyncio.CancelledError:
                logger.error("Audit cancelled during %s", state.stage.value)
                label = _LABELS.get(state.stage)
                if label:
                    progress.fail_stage(label, "Cancelled")
                state.fail("Cancelled", f"Run cancelled during {state.stage.value}")
                raise
            except AuditError as exc:
                exc.stage = exc.stage or state.stage.value
                logger.error("Audit failed during %s: %s", exc.stage, exc.message)
                label = _LABELS.get(state.stage)
                if label:
                    progress.fail_stage(label, exc.kind)
                state.fail(exc.kind, exc.message)

        return state

    async def _run_stages(self, state: PipelineState, progress: PipelineProgress) -> None:
        request = self._validate_request(state.url)
        out_dir = self._allocate(request)
        state.output_dir = str(out_dir)
        progress.log_event("Output", f"[dim]{out_dir}[/]")

        # ── Capture ───────────────────────────────────────────────
        self._enter(state, progress, Stage.CAPTURING)
        await self._bounded(
            self._capture(
                request.url, out_dir,
                navigation_timeout_ms=self.options.navigation_timeout_ms,
            ),
            self.options.capture_timeout,
            CaptureFailed,
            "Screenshot capture",
        )
        progress.finish_stage(_LABELS[Stage.CAPTURING])

        # ── Inspect (never fatal) ─────────────────────────────────
        self._enter(state, progress, Stage.INSPECTING)
        state.findings = await self._run_inspection(request.url)
        progress.finish_stage(
            _LABELS[Stage.INSPECTING], f"{len(state.findings)} violation type(s)"
        )

        # ── Evaluate ──────────────────────────────────────────────
        self._enter(state, progress, Stage.EVALUATING)

        def on_tokens(inp: int, out: int) -> None:
            progress.log_event(_LABELS[Stage.EVALUATING], f"{inp} input / {out} output tokens")

        state.result = await self._bounded(
            self.evaluator.evaluate(request.url, state.findings, on_tokens=on_tokens),
            self.options.evaluate_timeout,
            EvaluationUnavailable,
            "Evaluation",
        )
        progress.finish_stage(_LABELS[Stage.EVALUATING])

        # ── Persist ───────────────────────────────────────────────
        self._enter(state, progress, Stage.PERSISTING)
        report = AuditReport(
            url=request.url,
            audit_result=state.result,
            a11y_violations=state.findings,
        )
        path = self._persist(report, out_dir)
        state.report_path = str(path)
        progress.finish_stage(_LABELS[Stage.PERSISTING])

        state.advance(Stage.DONE)
        logger.info("Audit of %s complete: %s", request.url, path)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_request(url: str) -> AuditRequest:
        try:
            return AuditRequest(url=url)
        except ValidationError as exc:
            reason = exc.errors()[0]["msg"] if exc.errors() else str(exc)
            raise InvalidInput(f"Invalid target URL: {reason}") from exc

    def _allocate(self, request: AuditRequest) -> Path:
        root = Path(self.options.output_directory)
        try:
            return allocate_run_dir(root, request.created_at)
        except OSError as exc:
            raise PersistenceFailed(f"Could not create run directory under {root}: {exc}") from exc

    @staticmethod
    def _enter(state: PipelineState, progress: PipelineProgress, stage: Stage) -> None:
        state.advance(stage)
        logger.info("Stage: %s", stage.value)
        progress.start_stage(_LABELS[stage])

    @staticmethod
    async def _bounded(
        awaitable: Awaitable[T],
        timeout: float,
        error_cls: type[AuditError],
        what: str,
    ) -> T:
        """Await with a deadline, mapping timeouts and foreign errors to ``error_cls``.

        ``AuditError`` subclasses raised inside pass through unchanged.
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except AuditError:
            raise
        except asyncio.TimeoutError as exc:
            raise error_cls(f"{what} timed out after {timeout:g}s") from exc
        except Exception as exc:
            raise error_cls(f"{what} failed: {exc}") from exc

    def _persist(self, report: AuditReport, out_dir: Path) -> Path:
        # Local write, done inline: a write that outlived a timeout could
        # still land a report.json for a run already marked failed.
        try:
            return self._writer(report, out_dir)
        except AuditError:
            raise
        except Exception as exc:
            raise PersistenceFailed(f"Report write failed: {exc}") from exc

    async def _run_inspection(self, url: str) -> list[AccessibilityFinding]:
        try:
            return await asyncio.wait_for(
                self._inspect(url, navigation_timeout_ms=self.options.navigation_timeout_ms),
                timeout=self.options.inspect_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Accessibility audit timed out after %gs, continuing without findings",
                self.options.inspect_timeout,
            )
        except Exception as exc:
            logger.warning("Accessibility audit failed, continuing without findings: %s", exc)
        return []
