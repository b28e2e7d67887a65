"""Kubernetes runtime implementation."""

import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from scenario_runner.context import scenario_slug
from scenario_runner.models.worker import (
    WorkerHandle,
    WorkerMetadata,
    WorkerSpec,
    WorkerStatus,
)
from scenario_runner.process import CommandError, run_command, run_command_output
from scenario_runner.runtimes.base import WorkerRuntime
from scenario_runner.runtimes.kubernetes.config import KubernetesConfig
from scenario_runner.runtimes.kubernetes.models import (
    NodeList,
    Pod,
    PodList,
    PodPhase,
)

log = logging.getLogger(__name__)

SCENARIO_LABEL = "scenario"
RUN_ID_LABEL = "run-id"
SCENARIO_ANNOTATION = "scenario-runner/scenario"

ACTIVE_PHASES: frozenset[PodPhase] = frozenset(["Pending", "Running"])
FINISHED_PHASES: frozenset[PodPhase] = frozenset(["Succeeded", "Failed"])

PHASE_TO_STATUS: Mapping[PodPhase, WorkerStatus] = {
    "Pending": "pending",
    "Running": "running",
    "Succeeded": "exited",
    "Failed": "exited",
    "Unknown": "unknown",
}


def pod_metadata(pod: Pod) -> WorkerMetadata:
    """Translate a pod into worker metadata.

    The first container carries the scenario, so its state decides times
    and exit code. A failed pod without a terminated container (evicted,
    image pull failure) exits with -1.
    """
    status = PHASE_TO_STATUS[pod.status.phase]
    started_at = pod.status.start_time
    finished_at = None
    exit_code = None

    if pod.status.container_statuses:
        state = pod.status.container_statuses[0].state
        if state.terminated is not None:
            started_at = state.terminated.started_at or started_at
            finished_at = state.terminated.finished_at
            exit_code = state.terminated.exit_code
        elif state.running is not None:
            started_at = state.running.started_at or started_at

    if status == "exited" and exit_code is None:
        exit_code = 0 if pod.status.phase == "Succeeded" else -1

    return WorkerMetadata(
        name=pod.metadata.name,
        status=status,
        started_at=started_at,
        finished_at=finished_at,
        exit_code=exit_code,
    )


def pod_scenario(pod: Pod) -> str:
    """Raw scenario name of a pod.

    Label values are limited to 63 name-safe characters, so the label holds a
    slug and the annotation holds the name as given.
    """
    metadata = pod.metadata
    return metadata.annotations.get(
        SCENARIO_ANNOTATION, metadata.labels.get(SCENARIO_LABEL, metadata.name)
    )


@dataclass(frozen=True, kw_only=True)
class KubernetesRuntime(WorkerRuntime):
    """Runs each worker as a bare pod that is never restarted.

    Exit is detected by polling the pod phase.
    """

    config: KubernetesConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: KubernetesConfig
    ) -> AsyncGenerator["KubernetesRuntime", None]:
        """Create runtime from configuration."""
        yield cls(config=config)

    def _base_args(self) -> list[str]:
        args = [self.config.binary]
        if self.config.context:
            args += ["--context", self.config.context]
        return args

    async def _kubectl(self, *args: str) -> str:
        return await run_command(*self._base_args(), *args)

    async def spawn(self, spec: WorkerSpec) -> WorkerHandle:
        """Create a pod running the worker command."""
        await self._kubectl(
            "run",
            spec.name,
            "--namespace",
            self.config.namespace,
            "--image",
            spec.image,
            "--restart=Never",
            "--labels",
            f"{SCENARIO_LABEL}={scenario_slug(spec.scenario)},"
            f"{RUN_ID_LABEL}={spec.run_id}",
            "--annotations",
            f"{SCENARIO_ANNOTATION}={spec.scenario}",
            "--command",
            "--",
            *spec.command,
        )
        log.info("Created pod %s in namespace %s", spec.name, self.config.namespace)
        return WorkerHandle(
            worker_id=spec.name,
            name=spec.name,
            scenario=spec.scenario,
            run_id=spec.run_id,
        )

    async def _get_pods(self, *selectors: str) -> PodList:
        output = await self._kubectl(
            "get", "pods", "--namespace", self.config.namespace, *selectors, "-o", "json"
        )
        return PodList.model_validate_json(output)

    async def list_workers(
        self, run_id: str, *, running_only: bool = False
    ) -> Sequence[WorkerHandle]:
        """List pods of a run; running means pending or running."""
        pods = await self._get_pods("--selector", f"{RUN_ID_LABEL}={run_id}")
        return [
            WorkerHandle(
                worker_id=pod.metadata.name,
                name=pod.metadata.name,
                scenario=pod_scenario(pod),
                run_id=run_id,
            )
            for pod in pods.items
            if not running_only or pod.status.phase in ACTIVE_PHASES
        ]

    async def finished_count(self, run_id: str) -> int:
        """Count succeeded and failed pods of a run."""
        pods = await self._get_pods("--selector", f"{RUN_ID_LABEL}={run_id}")
        return sum(1 for pod in pods.items if pod.status.phase in FINISHED_PHASES)

    async def inspect(self, handle: WorkerHandle) -> WorkerMetadata:
        """Read pod state via ``kubectl get pod``."""
        output = await self._kubectl(
            "get",
            "pod",
            handle.worker_id,
            "--namespace",
            self.config.namespace,
            "-o",
            "json",
        )
        return pod_metadata(Pod.model_validate_json(output))

    async def tail_output(self, handle: WorkerHandle, max_lines: int) -> str:
        """Read the last lines of pod logs."""
        args = [
            *self._base_args(),
            "logs",
            handle.worker_id,
            "--namespace",
            self.config.namespace,
            f"--tail={max_lines}",
        ]
        returncode, output = await run_command_output(*args)
        if returncode != 0:
            raise CommandError(args, returncode, output.strip())
        return output

    async def remove(self, handle: WorkerHandle) -> None:
        """Delete the pod without waiting for termination."""
        await self._kubectl(
            "delete",
            "pod",
            handle.worker_id,
            "--namespace",
            self.config.namespace,
            "--ignore-not-found",
            "--wait=false",
        )
        log.info("Deleted pod %s", handle.name)

    async def list_pods(self, namespace: str | None = None) -> Sequence[str]:
        """Names of all pods in a namespace (default: configured namespace)."""
        output = await self._kubectl(
            "get",
            "pods",
            "--namespace",
            namespace or self.config.namespace,
            "-o",
            "json",
        )
        return [pod.metadata.name for pod in PodList.model_validate_json(output).items]

    async def list_nodes(self) -> Sequence[str]:
        """Names of all cluster nodes."""
        output = await self._kubectl("get", "nodes", "-o", "json")
        return [
            node.metadata.name for node in NodeList.model_validate_json(output).items
        ]
