"""Progress of a run as seen by its runtime."""

from dataclasses import dataclass

from scenario_runner.runtimes.base import WorkerRuntime


@dataclass(frozen=True, kw_only=True)
class Progress:
    """How far a run has come."""

    total: int
    running: int
    finished: int

    @property
    def percent(self) -> float:
        """Finished workers as a percentage of the total."""
        if self.total <= 0:
            return 0.0
        return self.finished / self.total * 100

    def describe(self) -> str:
        """One-line progress text."""
        return (
            f"{self.finished}/{self.total} finished ({self.percent:.1f}%), "
            f"{self.running} running"
        )


async def get_progress(runtime: WorkerRuntime, run_id: str, total: int) -> Progress:
    """Count running and exited workers of a run."""
    running = await runtime.running_count(run_id)
    finished = await runtime.finished_count(run_id)
    return Progress(total=total, running=running, finished=finished)
