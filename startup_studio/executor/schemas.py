"""Executor-side schemas for run lifecycle, steps, and per-run settings.

PipelineStep and WorkflowExecution are written only by the orchestrator
that owns the run.
"""

import os
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from startup_studio.enrichment.schemas import EnrichmentDepth
from startup_studio.llm.client import GENERATION_MODEL
from startup_studio.scoring.schemas import ScoringDimension

# Defaults, overridable from the environment
DEFAULT_BATCH_CONCURRENCY = int(os.environ.get("STUDIO_BATCH_CONCURRENCY", "5"))
DEFAULT_MAX_PARALLEL_STEPS = int(os.environ.get("STUDIO_MAX_PARALLEL_STEPS", "2"))
DEFAULT_CALL_TIMEOUT = float(os.environ.get("STUDIO_CALL_TIMEOUT", "120"))

ValueT = TypeVar("ValueT")


class Phase(str, Enum):
    """Workflow phase labels. Informational only; scheduling ignores them."""
    ENRICHMENT = "enrichment"
    GENERATION = "generation"
    SCORING = "scoring"
    BRANDING = "branding"
    PRODUCTIZATION = "productization"
    DEPLOYMENT = "deployment"
    EXPERIMENTATION = "experimentation"
    ANALYSIS = "analysis"


class StepStatus(str, Enum):
    """Step execution states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


TERMINAL_STEP_STATUSES = {StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED}


class RunStatus(str, Enum):
    """Run lifecycle states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ItemResult(BaseModel, Generic[ValueT]):
    """Outcome of one item in a batch: a value or an error, never both."""

    value: Optional[ValueT] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PipelineStep(BaseModel):
    """One node of a workflow DAG."""

    id: str
    name: str = ""
    phase: Phase
    operation: str = Field(description="Operation name, resolved through the operation registry")
    input: dict[str, Any] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)
    status: StepStatus = StepStatus.PENDING
    error: Optional[str] = None
    output: Any = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STEP_STATUSES


class WorkflowExecution(BaseModel):
    """Full state of one run. Never reused across runs."""

    id: str = Field(default_factory=lambda: f"run-{uuid.uuid4().hex[:12]}")
    strategy_id: str = ""
    steps: list[PipelineStep] = Field(default_factory=list)
    status: RunStatus = RunStatus.PENDING
    progress: float = Field(default=0, ge=0, le=100)
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    results: dict[str, Any] = Field(
        default_factory=dict,
        description="Step id -> output of each completed step",
    )

    def get_step(self, step_id: str) -> Optional[PipelineStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


class RunConfig(BaseModel):
    """Per-run settings."""

    concurrency: int = Field(
        default=DEFAULT_BATCH_CONCURRENCY,
        ge=1,
        description="Batch chunk size for fan-out steps",
    )
    max_parallel_steps: int = Field(default=DEFAULT_MAX_PARALLEL_STEPS, ge=1)
    timeout: Optional[float] = Field(
        default=DEFAULT_CALL_TIMEOUT,
        gt=0,
        description="Seconds allowed per generator call; None for no bound",
    )
    model: str = GENERATION_MODEL
    enrich: bool = Field(default=False, description="Research enabled industries, occupations, processes and tasks first")
    enrichment_depth: EnrichmentDepth = EnrichmentDepth.STANDARD
    top_n: Optional[int] = Field(default=None, ge=0, description="Keep only the best N at ranking")
    brand_top_n: int = Field(default=0, ge=0, description="Generate brands for the best N")
    weight_overrides: Optional[dict[ScoringDimension, float]] = None


class StartRunRequest(BaseModel):
    """Request to start a generation run."""

    strategy_id: str
    config: RunConfig = Field(default_factory=RunConfig)


class RunStatusResponse(BaseModel):
    """Response for run status polling."""

    run_id: str
    strategy_id: str
    status: RunStatus
    progress: float
    step_statuses: dict[str, StepStatus] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict, description="Step id -> error")
    created_at: str
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
