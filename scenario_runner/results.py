"""Collect outcomes of the workers of a run."""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from scenario_runner.models.result import WorkerResult
from scenario_runner.models.worker import WorkerHandle
from scenario_runner.outcome import classify
from scenario_runner.runtimes.base import WorkerRuntime

log = logging.getLogger(__name__)


async def collect_result(
    runtime: WorkerRuntime, handle: WorkerHandle, tail_lines: int
) -> tuple[WorkerResult, str]:
    """Inspect one worker and classify it from the tail of its output.

    Returns:
        The result and the output tail it was classified from

    """
    metadata = await runtime.inspect(handle)
    output = await runtime.tail_output(handle, tail_lines)
    result = WorkerResult(
        scenario=handle.scenario,
        worker_name=handle.name,
        outcome=classify(output, metadata.exit_code),
        exit_code=metadata.exit_code,
        duration=metadata.duration,
        started_at=metadata.started_at,
        finished_at=metadata.finished_at,
    )
    return result, output


async def collect_results(
    runtime: WorkerRuntime, run_id: str, tail_lines: int
) -> tuple[Sequence[WorkerResult], Mapping[str, str]]:
    """Collect results for every worker of a run, sorted by scenario.

    Args:
        runtime: Runtime hosting the workers
        run_id: Run identifier the workers were spawned with
        tail_lines: How many trailing output lines to classify

    Returns:
        Results, and output tails keyed by scenario

    """
    handles = await runtime.list_workers(run_id)
    log.info("Collecting results for %d worker(s) of run %s", len(handles), run_id)

    collected = await asyncio.gather(
        *(collect_result(runtime, handle, tail_lines) for handle in handles)
    )
    collected = sorted(collected, key=lambda item: item[0].scenario)

    results = [result for result, _ in collected]
    outputs = {result.scenario: output for result, output in collected}
    return results, outputs


def count_outcomes(results: Sequence[WorkerResult]) -> Mapping[str, int]:
    """Count results by outcome."""
    return {
        "total": len(results),
        "passed": sum(1 for r in results if r.outcome == "success"),
        "failed": sum(1 for r in results if r.outcome == "failure"),
        "indeterminate": sum(1 for r in results if r.outcome == "indeterminate"),
    }
