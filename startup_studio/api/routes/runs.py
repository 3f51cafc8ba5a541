"""Run API routes: start, poll, cancel, and read results of generation runs.

Endpoints:
    POST /v1/runs                      Start a run for a strategy
    GET  /v1/runs                      List runs
    GET  /v1/runs/{run_id}             Poll status + progress
    GET  /v1/runs/{run_id}/results     Ranked concepts and per-step errors
    POST /v1/runs/{run_id}/cancel      Cancel a running run
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from startup_studio.catalog.filters import FilterError
from startup_studio.catalog.registry import get_dimension_catalog
from startup_studio.executor import run_manager
from startup_studio.executor.schemas import (
    RunConfig,
    RunStatus,
    RunStatusResponse,
    StartRunRequest,
)
from startup_studio.llm.factory import get_generator
from startup_studio.llm.generator import ContentGenerator
from startup_studio.scoring.ranker import RankedConcept
from startup_studio.strategies.registry import get_strategy_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/runs", tags=["runs"])

GeneratorProvider = Callable[[RunConfig], ContentGenerator]


def get_generator_provider() -> GeneratorProvider:
    """Builds the content generator for a run's model."""
    return lambda config: get_generator(config.model)


class RunResultsResponse(BaseModel):
    run_id: str
    status: RunStatus
    ranked: list[RankedConcept] = Field(default_factory=list)
    branded: list[dict] = Field(default_factory=list, description="Concepts with brands")
    item_errors: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Step id -> item key -> error",
    )
    step_errors: dict[str, str] = Field(default_factory=dict)


@router.post("", response_model=RunStatusResponse)
async def start_run(
    request: StartRunRequest,
    provider: GeneratorProvider = Depends(get_generator_provider),
) -> RunStatusResponse:
    """Start a generation run and return its id for polling."""
    strategy = get_strategy_registry().get(request.strategy_id)
    if strategy is None:
        raise HTTPException(status_code=404, detail=f"Strategy not found: {request.strategy_id}")

    try:
        generator = provider(request.config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        execution = run_manager.start_run(
            strategy, request.config, get_dimension_catalog(), generator
        )
    except FilterError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return run_manager.run_status(execution)


@router.get("", response_model=list[RunStatusResponse])
async def list_runs(
    strategy_id: Optional[str] = Query(None, description="Filter by strategy"),
) -> list[RunStatusResponse]:
    """List runs, newest first."""
    return [run_manager.run_status(r) for r in run_manager.list_runs(strategy_id)]


@router.get("/{run_id}", response_model=RunStatusResponse)
async def get_run_status(run_id: str) -> RunStatusResponse:
    """Poll run status and progress."""
    execution = run_manager.get_run(run_id)
    if execution is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return run_manager.run_status(execution)


@router.get("/{run_id}/results", response_model=RunResultsResponse)
async def get_run_results(run_id: str) -> RunResultsResponse:
    """Ranked concepts so far, plus every recorded error."""
    execution = run_manager.get_run(run_id)
    if execution is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")

    response = RunResultsResponse(run_id=execution.id, status=execution.status)
    ranking = execution.results.get("rank-concepts")
    if ranking is not None:
        response.ranked = ranking.ranked
    branding = execution.results.get("brand-concepts")
    if branding is not None:
        response.branded = [c.model_dump(mode="json") for c in branding["concepts"]]

    for step in execution.steps:
        if step.error:
            response.step_errors[step.id] = step.error
        output = execution.results.get(step.id)
        if isinstance(output, dict) and output.get("errors"):
            response.item_errors[step.id] = {str(k): v for k, v in output["errors"].items()}
    return response


@router.post("/{run_id}/cancel")
async def cancel_run(run_id: str) -> dict:
    """Stop launching new steps. Running steps finish; pending ones are skipped."""
    execution = run_manager.get_run(run_id)
    if execution is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    if not run_manager.request_cancellation(run_id):
        raise HTTPException(
            status_code=409,
            detail=f"Run {run_id} is not active (status: {execution.status.value})",
        )
    return {"run_id": run_id, "cancellation_requested": True}
