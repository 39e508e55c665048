"""Pipeline state — the tagged outcome of a single audit run."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from uxa.schemas.audit import AuditResult
from uxa.schemas.report import AccessibilityFinding


class Stage(str, Enum):
    INIT = "init"
    CAPTURING = "capturing"
    INSPECTING = "inspecting"
    EVALUATING = "evaluating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


# Linear order; FAILED is reachable from any non-terminal stage.
STAGE_ORDER: tuple[Stage, ...] = (
    Stage.INIT,
    Stage.CAPTURING,
    Stage.INSPECTING,
    Stage.EVALUATING,
    Stage.PERSISTING,
    Stage.DONE,
)

TERMINAL_STAGES = frozenset({Stage.DONE, Stage.FAILED})


class PipelineState(BaseModel):
    """Tracks where a run is and what it has produced so far."""

    url: str
    stage: Stage = Stage.INIT
    history: list[Stage] = [Stage.INIT]
    output_dir: str = ""
    findings: list[AccessibilityFinding] = []
    result: AuditResult | None = None
    report_path: str = ""

    # Set only when stage == FAILED
    failed_stage: Stage | None = None
    error_kind: str = ""
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.stage is Stage.DONE

    @property
    def failed(self) -> bool:
        return self.stage is Stage.FAILED

    def advance(self, stage: Stage) -> None:
        """Move to the next stage in order.  Skipping or going back is a bug."""
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"Run already finished in stage {self.stage.value!r}")
        expected = STAGE_ORDER[STAGE_ORDER.index(self.stage) + 1]
        if stage is not expected:
            raise RuntimeError(
                f"Illegal transition {self.stage.value!r} -> {stage.value!r} "
                f"(expected {expected.value!r})"
            )
        self.stage = stage
        self.history.append(stage)

    def fail(self, kind: str, message: str) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"Run already finished in stage {self.stage.value!r}")
        self.failed_stage = self.stage
        self.error_kind = kind
        self.error = message
        self.stage = Stage.FAILED
        self.history.append(Stage.FAILED)
