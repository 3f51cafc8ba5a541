"""Operation registry: named units of work that pipeline steps refer to.

A step names its operation; the orchestrator resolves the name here. An
operation is either a single call (`run`) or a fan-out over items
(`items` + `work`, optionally `key` and `collect`), which the orchestrator
hands to the batch runner.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Optional

from startup_studio.executor.schemas import ItemResult, PipelineStep, WorkflowExecution

logger = logging.getLogger(__name__)


class RunContext:
    """What operations see while a run executes.

    The orchestrator attaches the execution before the first step starts,
    so operations can read earlier step outputs through `output()`.
    """

    def __init__(self):
        self.execution: Optional[WorkflowExecution] = None

    def output(self, step_id: str, default: Any = None) -> Any:
        """Output of a completed step, or default."""
        if self.execution is None:
            return default
        return self.execution.results.get(step_id, default)


StepCall = Callable[[PipelineStep, RunContext], Awaitable[Any]]
ItemsCall = Callable[[PipelineStep, RunContext], list]
WorkCall = Callable[[Any, PipelineStep, RunContext], Awaitable[Any]]
CollectCall = Callable[[PipelineStep, RunContext, dict], Any]


def collect_values(step: PipelineStep, context: RunContext, results: dict[Hashable, ItemResult]) -> dict:
    """Default fan-out output: successful values and per-item errors."""
    return {
        "values": {k: r.value for k, r in results.items() if r.ok},
        "errors": {k: r.error for k, r in results.items() if not r.ok},
    }


@dataclass
class Operation:
    name: str
    run: Optional[StepCall] = None
    items: Optional[ItemsCall] = None
    work: Optional[WorkCall] = None
    key: Optional[Callable[[Any], Hashable]] = None
    collect: CollectCall = collect_values
    description: str = ""

    def __post_init__(self):
        if self.run is None and (self.items is None or self.work is None):
            raise ValueError(f"Operation '{self.name}' needs either run, or items and work")
        if self.run is not None and self.items is not None:
            raise ValueError(f"Operation '{self.name}' cannot be both single and fan-out")

    @property
    def fan_out(self) -> bool:
        return self.items is not None


class OperationRegistry:
    """Registry of operations keyed by name."""

    def __init__(self):
        self._operations: dict[str, Operation] = {}

    def register(self, operation: Operation) -> Operation:
        if operation.name in self._operations:
            logger.warning(f"Replacing operation '{operation.name}'")
        self._operations[operation.name] = operation
        return operation

    def get(self, name: str) -> Optional[Operation]:
        return self._operations.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._operations
