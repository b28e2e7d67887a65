"""Docker runtime implementation."""

import json
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from pydantic import TypeAdapter

from scenario_runner.models.worker import (
    WorkerHandle,
    WorkerMetadata,
    WorkerSpec,
    WorkerStatus,
)
from scenario_runner.process import CommandError, run_command, run_command_output
from scenario_runner.runtimes.base import WorkerRuntime
from scenario_runner.runtimes.docker.config import DockerConfig
from scenario_runner.runtimes.docker.models import (
    ContainerInspect,
    ContainerStatus,
    ContainerSummary,
)

log = logging.getLogger(__name__)

SCENARIO_LABEL = "scenario"
RUN_ID_LABEL = "run-id"

STATUS_TO_WORKER: Mapping[ContainerStatus, WorkerStatus] = {
    "created": "pending",
    "running": "running",
    "paused": "running",
    "restarting": "running",
    "removing": "exited",
    "exited": "exited",
    "dead": "exited",
}

ACTIVE_STATUSES: tuple[ContainerStatus, ...] = (
    "created",
    "running",
    "paused",
    "restarting",
)
FINISHED_STATUSES: tuple[ContainerStatus, ...] = ("exited", "dead")

_inspect_adapter = TypeAdapter(list[ContainerInspect])


@dataclass(frozen=True, kw_only=True)
class DockerRuntime(WorkerRuntime):
    """Runs each worker as a detached docker container."""

    config: DockerConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: DockerConfig
    ) -> AsyncGenerator["DockerRuntime", None]:
        """Create runtime from configuration."""
        yield cls(config=config)

    async def _docker(self, *args: str) -> str:
        return await run_command(self.config.binary, *args)

    async def spawn(self, spec: WorkerSpec) -> WorkerHandle:
        """Start a detached container labelled with scenario and run ID."""
        container_id = await self._docker(
            "run",
            "--detach",
            "--name",
            spec.name,
            "--label",
            f"{SCENARIO_LABEL}={spec.scenario}",
            "--label",
            f"{RUN_ID_LABEL}={spec.run_id}",
            spec.image,
            *spec.command,
        )
        log.info("Started container %s (%s)", spec.name, container_id[:12])
        return WorkerHandle(
            worker_id=container_id,
            name=spec.name,
            scenario=spec.scenario,
            run_id=spec.run_id,
        )

    async def list_workers(
        self, run_id: str, *, running_only: bool = False
    ) -> Sequence[WorkerHandle]:
        """List containers of a run; running means not yet exited."""
        return await self._ps(run_id, ACTIVE_STATUSES if running_only else ())

    async def finished_count(self, run_id: str) -> int:
        """Count exited and dead containers of a run."""
        return len(await self._ps(run_id, FINISHED_STATUSES))

    async def _ps(
        self, run_id: str, statuses: Sequence[ContainerStatus]
    ) -> Sequence[WorkerHandle]:
        """List containers of a run via ``docker ps``, any of ``statuses``."""
        filters = ["--filter", f"label={RUN_ID_LABEL}={run_id}"]
        for status in statuses:
            filters += ["--filter", f"status={status}"]

        output = await self._docker(
            "ps", "--all", "--no-trunc", *filters, "--format", "{{json .}}"
        )

        handles = []
        for line in output.splitlines():
            if not line.strip():
                continue
            summary = ContainerSummary.model_validate(json.loads(line))
            labels = summary.label_map()
            handles.append(
                WorkerHandle(
                    worker_id=summary.id,
                    name=summary.names,
                    scenario=labels.get(SCENARIO_LABEL, summary.names),
                    run_id=labels.get(RUN_ID_LABEL, run_id),
                )
            )
        return handles

    async def inspect(self, handle: WorkerHandle) -> WorkerMetadata:
        """Read container state via ``docker inspect``."""
        output = await self._docker("inspect", handle.worker_id)
        containers = _inspect_adapter.validate_json(output)
        if not containers:
            raise RuntimeError(f"Container {handle.name} not found")

        container = containers[0]
        status = STATUS_TO_WORKER.get(container.state.status, "unknown")
        return WorkerMetadata(
            name=container.name,
            status=status,
            started_at=container.state.started_at,
            finished_at=container.state.finished_at if status == "exited" else None,
            exit_code=container.state.exit_code if status == "exited" else None,
        )

    async def tail_output(self, handle: WorkerHandle, max_lines: int) -> str:
        """Read the last lines of container output, both streams."""
        returncode, output = await run_command_output(
            self.config.binary, "logs", "--tail", str(max_lines), handle.worker_id
        )
        if returncode != 0:
            raise CommandError(
                (self.config.binary, "logs", handle.worker_id),
                returncode,
                output.strip(),
            )
        return output

    async def remove(self, handle: WorkerHandle) -> None:
        """Force-remove the container, stopping it first if running."""
        await self._docker("rm", "--force", handle.worker_id)
        log.info("Removed container %s", handle.name)

    async def wait(
        self,
        handle: WorkerHandle,
        poll_interval: float = 5,
        timeout: float | None = None,
    ) -> int:
        """Block on ``docker wait`` instead of polling.

        Falls back to polling when a timeout is requested.
        """
        if timeout is not None:
            return await super().wait(handle, poll_interval, timeout)

        output = await self._docker("wait", handle.worker_id)
        return int(output.splitlines()[-1])
