import asyncio

import pytest

from startup_studio.executor.operations import Operation, OperationRegistry, RunContext
from startup_studio.executor.schemas import Phase, PipelineStep, RunStatus, StepStatus, WorkflowExecution
from startup_studio.executor.workflow_runner import (
    CANCELLED_NOTE,
    PipelineOrchestrator,
    build_execution_order,
)


async def _ok(step, context):
    await asyncio.sleep(0)
    return f"{step.id} done"


async def _fail(step, context):
    raise RuntimeError(f"{step.id} exploded")


def _items(step, context):
    return step.input["items"]


async def _work(item, step, context):
    if item in step.input.get("bad", []):
        raise ValueError(f"bad {item}")
    return item * 2


def registry() -> OperationRegistry:
    ops = OperationRegistry()
    ops.register(Operation(name="ok", run=_ok))
    ops.register(Operation(name="fail", run=_fail))
    ops.register(Operation(name="fan", items=_items, work=_work))
    return ops


def step(step_id, operation="ok", depends_on=(), **input):
    return PipelineStep(
        id=step_id,
        phase=Phase.GENERATION,
        operation=operation,
        depends_on=list(depends_on),
        input=input,
    )


def run(steps, cancel_event=None, max_parallel_steps=2):
    execution = WorkflowExecution(strategy_id="s", steps=steps)
    orchestrator = PipelineOrchestrator(registry(), max_parallel_steps=max_parallel_steps)
    return asyncio.run(orchestrator.run(execution, RunContext(), cancel_event=cancel_event))


def statuses(execution):
    return {s.id: s.status for s in execution.steps}


def test_diamond_with_failing_root_skips_everything_downstream():
    execution = run([
        step("A", "fail"),
        step("B", depends_on=["A"]),
        step("C", depends_on=["A"]),
        step("D", depends_on=["B", "C"]),
    ])

    assert statuses(execution) == {
        "A": StepStatus.FAILED,
        "B": StepStatus.SKIPPED,
        "C": StepStatus.SKIPPED,
        "D": StepStatus.SKIPPED,
    }
    assert execution.status == RunStatus.FAILED
    assert execution.progress == 100
    assert "A exploded" in execution.get_step("A").error
    assert "Dependency 'A'" in execution.get_step("B").error


def test_independent_branch_still_completes():
    execution = run([
        step("A", "fail"),
        step("B", depends_on=["A"]),
        step("C"),
        step("E", depends_on=["C"]),
    ])

    assert execution.get_step("B").status == StepStatus.SKIPPED
    assert execution.get_step("C").status == StepStatus.COMPLETED
    assert execution.get_step("E").status == StepStatus.COMPLETED
    assert execution.results["E"] == "E done"
    assert execution.status == RunStatus.FAILED


def test_all_completed():
    execution = run([step("A"), step("B", depends_on=["A"])])
    assert execution.status == RunStatus.COMPLETED
    assert execution.progress == 100
    assert execution.results == {"A": "A done", "B": "B done"}
    assert execution.started_at and execution.completed_at
    assert execution.created_at.endswith("+00:00")
    assert execution.completed_at.endswith("+00:00")


def test_fan_out_partial_failure_completes_step():
    execution = run([step("F", "fan", items=[1, 2, 3], bad=[2])])
    f = execution.get_step("F")
    assert f.status == StepStatus.COMPLETED
    assert f.output["values"] == {1: 2, 3: 6}
    assert "bad 2" in f.output["errors"][2]


def test_fan_out_total_failure_fails_step():
    execution = run([
        step("F", "fan", items=[1, 2], bad=[1, 2]),
        step("G", depends_on=["F"]),
    ])
    assert execution.get_step("F").status == StepStatus.FAILED
    assert "All 2 item(s) failed" in execution.get_step("F").error
    assert execution.get_step("G").status == StepStatus.SKIPPED


def test_fan_out_over_nothing_completes():
    execution = run([step("F", "fan", items=[])])
    assert execution.get_step("F").status == StepStatus.COMPLETED


def test_parallel_steps_are_bounded():
    in_flight = {"now": 0, "max": 0}

    async def tracked(step, context):
        in_flight["now"] += 1
        in_flight["max"] = max(in_flight["max"], in_flight["now"])
        await asyncio.sleep(0.01)
        in_flight["now"] -= 1

    ops = registry()
    ops.register(Operation(name="tracked", run=tracked))
    execution = WorkflowExecution(steps=[step(f"s{i}", "tracked") for i in range(5)])
    asyncio.run(PipelineOrchestrator(ops, max_parallel_steps=2).run(execution, RunContext()))

    assert in_flight["max"] == 2
    assert execution.status == RunStatus.COMPLETED


def test_cancellation_before_start_skips_all():
    event = asyncio.Event()
    event.set()
    execution = run([step("A"), step("B", depends_on=["A"])], cancel_event=event)

    assert execution.status == RunStatus.CANCELLED
    assert all(s.status == StepStatus.SKIPPED for s in execution.steps)
    assert execution.get_step("A").error == CANCELLED_NOTE
    assert execution.progress == 100


def test_cancellation_lets_running_step_finish():
    async def scenario():
        event = asyncio.Event()

        async def cancelling(step, context):
            event.set()
            await asyncio.sleep(0.01)
            return "finished anyway"

        ops = registry()
        ops.register(Operation(name="cancelling", run=cancelling))
        execution = WorkflowExecution(steps=[
            step("A", "cancelling"),
            step("B", depends_on=["A"]),
        ])
        return await PipelineOrchestrator(ops).run(execution, RunContext(), cancel_event=event)

    execution = asyncio.run(scenario())
    assert execution.get_step("A").status == StepStatus.COMPLETED
    assert execution.results["A"] == "finished anyway"
    assert execution.get_step("B").status == StepStatus.SKIPPED
    assert execution.status == RunStatus.CANCELLED


def test_cancelling_during_the_last_step_still_cancels_the_run():
    async def scenario():
        event = asyncio.Event()

        async def cancelling(step, context):
            event.set()
            await asyncio.sleep(0.01)
            return "finished anyway"

        ops = registry()
        ops.register(Operation(name="cancelling", run=cancelling))
        execution = WorkflowExecution(steps=[step("A", "cancelling")])
        return await PipelineOrchestrator(ops).run(execution, RunContext(), cancel_event=event)

    execution = asyncio.run(scenario())
    assert execution.get_step("A").status == StepStatus.COMPLETED
    assert execution.status == RunStatus.CANCELLED
    assert execution.progress == 100


def test_context_exposes_earlier_outputs():
    seen = {}

    async def reader(step, context):
        seen["A"] = context.output("A")
        return None

    ops = registry()
    ops.register(Operation(name="reader", run=reader))
    execution = WorkflowExecution(steps=[step("A"), step("R", "reader", depends_on=["A"])])
    asyncio.run(PipelineOrchestrator(ops).run(execution, RunContext()))
    assert seen["A"] == "A done"


@pytest.mark.parametrize(
    "steps,message",
    [
        ([step("A"), step("A")], "Duplicate"),
        ([step("A", depends_on=["Z"])], "unknown step"),
        ([step("A", "nope")], "unknown operation"),
        ([step("A", depends_on=["B"]), step("B", depends_on=["A"])], "cycle"),
    ],
)
def test_invalid_dag_raises_before_running(steps, message):
    with pytest.raises(ValueError, match=message):
        run(steps)
    assert all(s.status == StepStatus.PENDING for s in steps)


def test_execution_order_groups():
    steps = [
        step("A"),
        step("B", depends_on=["A"]),
        step("C", depends_on=["A"]),
        step("D", depends_on=["B", "C"]),
    ]
    assert build_execution_order(steps) == [["A"], ["B", "C"], ["D"]]


def test_operation_needs_a_body():
    with pytest.raises(ValueError):
        Operation(name="empty")
