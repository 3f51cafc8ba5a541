"""Run lifecycle management for the HTTP surface.

Handles:
- Run creation (filters validated up front, execution built as pending)
- Background execution as an asyncio task on the running event loop
- Cancellation (one asyncio.Event per run, checked by the orchestrator)
- Status queries

State is in-process only; nothing is persisted, and runs are lost on restart.
"""

import asyncio
import logging
from typing import Optional

from startup_studio.catalog.registry import DimensionCatalog
from startup_studio.executor.schemas import RunConfig, RunStatus, RunStatusResponse, WorkflowExecution
from startup_studio.executor.studio_workflow import execute_workflow, prepare_workflow
from startup_studio.llm.generator import ContentGenerator
from startup_studio.strategies.schemas import StrategyConfig

logger = logging.getLogger(__name__)

_runs: dict[str, WorkflowExecution] = {}
_tasks: dict[str, asyncio.Task] = {}
_cancel_events: dict[str, asyncio.Event] = {}


def start_run(
    strategy: StrategyConfig,
    config: RunConfig,
    catalog: DimensionCatalog,
    generator: ContentGenerator,
) -> WorkflowExecution:
    """Create a run and schedule it on the current event loop.

    Must be called from within a running loop.

    Raises:
        FilterError: If a filter is malformed; no run is created
    """
    execution = prepare_workflow(strategy, config)
    cancel_event = asyncio.Event()
    _runs[execution.id] = execution
    _cancel_events[execution.id] = cancel_event

    task = asyncio.create_task(
        execute_workflow(
            strategy,
            config,
            catalog,
            generator,
            cancel_event=cancel_event,
            execution=execution,
        ),
        name=f"run-{execution.id}",
    )
    task.add_done_callback(lambda t, run_id=execution.id: _on_done(run_id, t))
    _tasks[execution.id] = task

    logger.info(f"Created run {execution.id} for strategy {strategy.id}")
    return execution


def _on_done(run_id: str, task: asyncio.Task) -> None:
    _tasks.pop(run_id, None)
    _cancel_events.pop(run_id, None)
    if task.cancelled():
        execution = _runs.get(run_id)
        if execution is not None:
            execution.status = RunStatus.CANCELLED
        logger.warning(f"Run {run_id} task was cancelled")
        return
    error = task.exception()
    if error is not None:
        execution = _runs.get(run_id)
        if execution is not None:
            execution.status = RunStatus.FAILED
        logger.error(f"Run {run_id} crashed: {error}", exc_info=error)


def get_run(run_id: str) -> Optional[WorkflowExecution]:
    """Get a run by id."""
    return _runs.get(run_id)


def list_runs(strategy_id: Optional[str] = None) -> list[WorkflowExecution]:
    """Runs, newest first, optionally for one strategy."""
    runs = [r for r in _runs.values() if strategy_id is None or r.strategy_id == strategy_id]
    return sorted(runs, key=lambda r: r.created_at, reverse=True)


def request_cancellation(run_id: str) -> bool:
    """Request cancellation of a pending or running run.

    Returns True if the run was active and is now being cancelled.
    """
    execution = _runs.get(run_id)
    if execution is None:
        return False

    if execution.status not in (RunStatus.PENDING, RunStatus.RUNNING):
        logger.warning(f"Cannot cancel run {run_id}: status is {execution.status.value}")
        return False

    event = _cancel_events.get(run_id)
    if event is None:
        return False
    event.set()
    logger.info(f"Cancellation requested for run {run_id}")
    return True


def run_status(execution: WorkflowExecution) -> RunStatusResponse:
    """Polling view of a run."""
    return RunStatusResponse(
        run_id=execution.id,
        strategy_id=execution.strategy_id,
        status=execution.status,
        progress=execution.progress,
        step_statuses={s.id: s.status for s in execution.steps},
        errors={s.id: s.error for s in execution.steps if s.error},
        created_at=execution.created_at,
        started_at=execution.started_at,
        completed_at=execution.completed_at,
    )


def clear_runs() -> None:
    """Forget every finished run. Active runs are kept."""
    for run_id in [r for r in _runs if r not in _tasks]:
        _runs.pop(run_id, None)
