"""Pipeline orchestration: runs a DAG of steps in dependency order.

The orchestrator:

1. Validates the DAG (unique ids, known dependencies and operations, no cycles)
2. Repeatedly scans for steps whose dependencies have all completed
3. Launches up to `max_parallel_steps` of them as asyncio tasks, handing
   fan-out operations to the batch runner
4. Records each finished step as completed (with output) or failed (with error)
5. Marks dependents of failed or skipped steps as skipped, without touching
   unrelated branches
6. Recomputes progress after every transition

Step and run status are written only by the `run` coroutine. Launched tasks
compute and return; they never touch the execution record.

Steps are never retried. A run whose step failed must be started again.
On cancellation, running steps finish, nothing new launches, and pending
steps are marked skipped. A run that saw the cancel event ends cancelled,
even if nothing was pending by then.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from startup_studio.executor.batch_runner import run_batch
from startup_studio.executor.operations import Operation, OperationRegistry, RunContext
from startup_studio.executor.schemas import (
    DEFAULT_BATCH_CONCURRENCY,
    DEFAULT_MAX_PARALLEL_STEPS,
    PipelineStep,
    RunStatus,
    StepStatus,
    WorkflowExecution,
)

logger = logging.getLogger(__name__)

CANCELLED_NOTE = "Cancelled before start"


class StepFailed(RuntimeError):
    """A step's operation failed as a whole."""


def build_execution_order(steps: list[PipelineStep]) -> list[list[str]]:
    """Group step ids into dependency levels (Kahn's algorithm).

    Steps within a group have all their dependencies in earlier groups.

    Raises:
        ValueError: On a dependency cycle
    """
    deps = {s.id: set(s.depends_on) for s in steps}
    order = [s.id for s in steps]
    remaining = set(order)
    groups: list[list[str]] = []

    while remaining:
        ready = [sid for sid in order if sid in remaining and not (deps[sid] & remaining)]
        if not ready:
            raise ValueError(f"Dependency cycle among steps: {sorted(remaining)}")
        groups.append(ready)
        remaining -= set(ready)

    return groups


def validate_steps(steps: list[PipelineStep], operations: OperationRegistry) -> list[list[str]]:
    """Check a DAG before running it.

    Returns:
        The execution order groups

    Raises:
        ValueError: On duplicate ids, unknown dependencies or operations, or a cycle
    """
    ids: set[str] = set()
    for step in steps:
        if step.id in ids:
            raise ValueError(f"Duplicate step id: {step.id}")
        ids.add(step.id)

    for step in steps:
        unknown = [d for d in step.depends_on if d not in ids]
        if unknown:
            raise ValueError(f"Step '{step.id}' depends on unknown step(s): {unknown}")
        if step.operation not in operations:
            raise ValueError(f"Step '{step.id}' uses unknown operation: {step.operation}")

    return build_execution_order(steps)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PipelineOrchestrator:
    """Executes WorkflowExecutions against an operation registry."""

    def __init__(
        self,
        operations: OperationRegistry,
        max_parallel_steps: int = DEFAULT_MAX_PARALLEL_STEPS,
        batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY,
        item_timeout: Optional[float] = None,
    ):
        if max_parallel_steps < 1:
            raise ValueError(f"max_parallel_steps must be >= 1, got {max_parallel_steps}")
        if batch_concurrency < 1:
            raise ValueError(f"batch_concurrency must be >= 1, got {batch_concurrency}")
        self.operations = operations
        self.max_parallel_steps = max_parallel_steps
        self.batch_concurrency = batch_concurrency
        self.item_timeout = item_timeout

    async def run(
        self,
        execution: WorkflowExecution,
        context: RunContext,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> WorkflowExecution:
        """Run every step of an execution to a terminal state.

        Raises:
            ValueError: If the DAG is invalid; nothing runs in that case
        """
        groups = validate_steps(execution.steps, self.operations)
        steps = {s.id: s for s in execution.steps}
        context.execution = execution

        execution.status = RunStatus.RUNNING
        execution.started_at = _now()
        logger.info(
            f"Run {execution.id}: {len(steps)} step(s), execution order "
            + " -> ".join("[" + ", ".join(g) + "]" for g in groups)
        )
        self._update_progress(execution)

        running: dict[asyncio.Task, PipelineStep] = {}
        cancel_requested = False

        while True:
            self._propagate_skips(execution, steps)

            if not cancel_requested and cancel_event is not None and cancel_event.is_set():
                cancel_requested = True
                self._cancel_pending(execution)

            if not cancel_requested:
                for step in self._eligible(execution, steps):
                    if len(running) >= self.max_parallel_steps:
                        break
                    step.status = StepStatus.RUNNING
                    step.started_at = _now()
                    logger.info(f"Run {execution.id}: step '{step.id}' started ({step.phase.value})")
                    task = asyncio.create_task(self._execute_step(step, context))
                    running[task] = step

            if not running:
                break

            done, _ = await asyncio.wait(set(running), return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                step = running.pop(task)
                self._record(execution, step, task)
            self._update_progress(execution)

        if cancel_requested:
            execution.status = RunStatus.CANCELLED
        elif any(s.status == StepStatus.FAILED for s in execution.steps):
            execution.status = RunStatus.FAILED
        else:
            execution.status = RunStatus.COMPLETED
        execution.completed_at = _now()
        self._update_progress(execution)

        counts = {st.value: 0 for st in StepStatus}
        for s in execution.steps:
            counts[s.status.value] += 1
        logger.info(
            f"Run {execution.id} finished: status={execution.status.value}, "
            + ", ".join(f"{k}={v}" for k, v in counts.items() if v)
        )
        return execution

    def _eligible(self, execution: WorkflowExecution, steps: dict[str, PipelineStep]) -> list[PipelineStep]:
        return [
            s for s in execution.steps
            if s.status == StepStatus.PENDING
            and all(steps[d].status == StepStatus.COMPLETED for d in s.depends_on)
        ]

    def _propagate_skips(self, execution: WorkflowExecution, steps: dict[str, PipelineStep]) -> None:
        changed = True
        while changed:
            changed = False
            for step in execution.steps:
                if step.status != StepStatus.PENDING:
                    continue
                blocked = [
                    d for d in step.depends_on
                    if steps[d].status in (StepStatus.FAILED, StepStatus.SKIPPED)
                ]
                if blocked:
                    dep = steps[blocked[0]]
                    step.status = StepStatus.SKIPPED
                    step.error = f"Dependency '{dep.id}' {dep.status.value}"
                    step.completed_at = _now()
                    logger.warning(f"Run {execution.id}: step '{step.id}' skipped: {step.error}")
                    changed = True
        self._update_progress(execution)

    def _cancel_pending(self, execution: WorkflowExecution) -> None:
        """Skip every pending step; running steps are left to finish."""
        pending = [s for s in execution.steps if s.status == StepStatus.PENDING]
        for step in pending:
            step.status = StepStatus.SKIPPED
            step.error = CANCELLED_NOTE
            step.completed_at = _now()
        logger.info(
            f"Run {execution.id} cancelled: {len(pending)} pending step(s) skipped, "
            f"running steps allowed to finish"
        )
        self._update_progress(execution)

    def _record(self, execution: WorkflowExecution, step: PipelineStep, task: asyncio.Task) -> None:
        step.completed_at = _now()
        try:
            output = task.result()
        except Exception as e:
            step.status = StepStatus.FAILED
            step.error = str(e) if isinstance(e, StepFailed) else f"{type(e).__name__}: {e}"
            logger.error(f"Run {execution.id}: step '{step.id}' failed: {step.error}")
            return
        step.status = StepStatus.COMPLETED
        step.output = output
        execution.results[step.id] = output
        logger.info(f"Run {execution.id}: step '{step.id}' completed")

    async def _execute_step(self, step: PipelineStep, context: RunContext) -> Any:
        operation: Operation = self.operations.get(step.operation)
        if not operation.fan_out:
            return await operation.run(step, context)

        items = operation.items(step, context)

        async def work(item):
            return await operation.work(item, step, context)

        key = operation.key or (lambda item: item)
        results = await run_batch(
            items,
            work,
            concurrency=self.batch_concurrency,
            key=key,
            timeout=self.item_timeout,
            label=step.id,
        )
        failures = [r.error for r in results.values() if not r.ok]
        if results and len(failures) == len(results):
            raise StepFailed(f"All {len(results)} item(s) failed; first error: {failures[0]}")
        return operation.collect(step, context, results)

    @staticmethod
    def _update_progress(execution: WorkflowExecution) -> None:
        total = len(execution.steps)
        if total == 0:
            execution.progress = 100.0
            return
        terminal = sum(1 for s in execution.steps if s.is_terminal)
        execution.progress = round(100 * terminal / total, 1)
