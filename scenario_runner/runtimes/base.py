"""Abstract base class for worker runtimes."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from scenario_runner.models.worker import WorkerHandle, WorkerMetadata, WorkerSpec


@dataclass(frozen=True, kw_only=True)
class WorkerRuntime(ABC):
    """Abstract base for the process managers that host workers.

    A runtime spawns one external process per scenario and answers
    point-in-time questions about it. Workers are found again through the
    run ID they were labelled with at spawn time.
    """

    @abstractmethod
    async def spawn(self, spec: WorkerSpec) -> WorkerHandle:
        """Start a worker in the background and return its handle.

        Args:
            spec: Name, image, command and identity of the worker

        Returns:
            Handle addressing the new worker

        """

    @abstractmethod
    async def list_workers(
        self, run_id: str, *, running_only: bool = False
    ) -> Sequence[WorkerHandle]:
        """List workers labelled with ``run_id``.

        Args:
            run_id: Run identifier the workers were spawned with
            running_only: Only return workers that are still running

        Returns:
            Handles of the matching workers

        """

    @abstractmethod
    async def inspect(self, handle: WorkerHandle) -> WorkerMetadata:
        """Get the status, timestamps and exit code of a worker."""

    @abstractmethod
    async def tail_output(self, handle: WorkerHandle, max_lines: int) -> str:
        """Get the last ``max_lines`` lines of a worker's output."""

    @abstractmethod
    async def remove(self, handle: WorkerHandle) -> None:
        """Stop a worker if needed and remove it."""

    async def poll_exit(self, handle: WorkerHandle) -> int | None:
        """Return the exit code if the worker has exited, None otherwise."""
        metadata = await self.inspect(handle)
        if metadata.status != "exited":
            return None
        return metadata.exit_code if metadata.exit_code is not None else -1

    async def wait(
        self,
        handle: WorkerHandle,
        poll_interval: float = 5,
        timeout: float | None = None,
    ) -> int:
        """Wait for a worker to exit and return its exit code.

        Args:
            handle: Worker to wait for
            poll_interval: Seconds between polls (default: 5)
            timeout: Maximum wait time in seconds, None to wait forever

        Returns:
            Exit code of the worker

        Raises:
            TimeoutError: If the worker does not exit within timeout

        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            if (exit_code := await self.poll_exit(handle)) is not None:
                return exit_code

            if deadline is not None and loop.time() >= deadline:
                raise TimeoutError(
                    f"Worker {handle.name} did not exit within {timeout} seconds"
                )

            await asyncio.sleep(poll_interval)

    async def running_count(self, run_id: str) -> int:
        """Number of workers of the run that are currently running."""
        return len(await self.list_workers(run_id, running_only=True))

    async def finished_count(self, run_id: str) -> int:
        """Number of workers of the run that have exited."""
        handles = await self.list_workers(run_id)
        metadata = await asyncio.gather(*(self.inspect(h) for h in handles))
        return sum(1 for m in metadata if m.status == "exited")
