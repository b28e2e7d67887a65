"""Bounded launcher for running scenarios as external workers."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from scenario_runner.context import RunContext
from scenario_runner.models.result import WorkerExit
from scenario_runner.models.worker import WorkerHandle, WorkerSpec
from scenario_runner.runtimes.base import WorkerRuntime

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class BoundedLauncher:
    """Launches one worker per scenario with at most ``concurrency`` alive.

    A slot is taken before each spawn and given back when the worker exits,
    so the launcher never has to re-count running workers. Spawns happen one
    at a time in input order.
    """

    runtime: WorkerRuntime
    image: str
    command_for: Callable[[str], Sequence[str]]
    concurrency: int
    poll_interval: float = 5

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    async def launch_all(
        self, context: RunContext, scenarios: Sequence[str]
    ) -> Sequence[WorkerExit]:
        """Launch every scenario and return once all workers have exited.

        Args:
            context: Run the workers belong to
            scenarios: Scenario names, launched in this order

        Returns:
            One exit record per scenario, in input order

        """
        if not scenarios:
            log.info("No scenarios to launch")
            return []

        slots = asyncio.Semaphore(self.concurrency)
        pending: list[asyncio.Future[WorkerExit]] = []

        log.info(
            "Launching %d scenario(s) for run %s with concurrency %d",
            len(scenarios),
            context.run_id,
            self.concurrency,
        )
        for index, scenario in enumerate(scenarios, start=1):
            await slots.acquire()
            try:
                spec = WorkerSpec(
                    name=context.worker_name(scenario),
                    image=self.image,
                    command=list(self.command_for(scenario)),
                    scenario=scenario,
                    run_id=context.run_id,
                )
                handle = await self.runtime.spawn(spec)
            except Exception as exc:
                slots.release()
                log.error("Failed to launch %s: %s", scenario, exc)
                pending.append(_completed(WorkerExit(scenario=scenario, error=str(exc))))
                continue

            log.info("Launched %s (%d/%d)", scenario, index, len(scenarios))
            pending.append(asyncio.create_task(self._wait_and_release(handle, slots)))

        log.info("All scenarios launched, waiting for workers to exit...")
        exits = await asyncio.gather(*pending)
        log.info("All workers exited")
        return exits

    async def launch_one(self, context: RunContext, scenario: str) -> WorkerExit:
        """Launch a single scenario and wait for it to exit."""
        (worker_exit,) = await self.launch_all(context, [scenario])
        return worker_exit

    async def _wait_and_release(
        self, handle: WorkerHandle, slots: asyncio.Semaphore
    ) -> WorkerExit:
        """Wait for a worker to exit, then free its slot."""
        try:
            exit_code = await self.runtime.wait(handle, poll_interval=self.poll_interval)
        except Exception as exc:
            log.error("Lost track of %s: %s", handle.name, exc)
            return WorkerExit(scenario=handle.scenario, handle=handle, error=str(exc))
        finally:
            slots.release()

        log.info("Worker %s exited with code %d", handle.name, exit_code)
        return WorkerExit(scenario=handle.scenario, handle=handle, exit_code=exit_code)


def _completed(worker_exit: WorkerExit) -> asyncio.Future[WorkerExit]:
    future: asyncio.Future[WorkerExit] = asyncio.get_running_loop().create_future()
    future.set_result(worker_exit)
    return future
