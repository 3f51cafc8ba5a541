"""Execution engine for strategy runs.

Architecture (bottom-up):
- batch_runner: Bounded, chunked fan-out with per-item failure isolation
- operations: Named operations that pipeline steps refer to
- workflow_runner: DAG execution respecting step dependencies
- studio_workflow: The standard filter -> seed -> synthesize -> score -> rank DAG
- run_manager: Run lifecycle, status polling, cancellation
"""
