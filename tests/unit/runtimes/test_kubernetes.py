"""Tests for the kubernetes runtime."""

import json
import re
from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest

from scenario_runner.models.worker import WorkerHandle, WorkerSpec
from scenario_runner.runtimes.kubernetes import KubernetesConfig, KubernetesRuntime
from scenario_runner.runtimes.kubernetes.models import Pod
from scenario_runner.runtimes.kubernetes.runtime import pod_metadata, pod_scenario
from scenario_runner.testing.kubernetes.payloads import (
    item_list,
    node,
    pending_pod,
    pod,
)

HANDLE = WorkerHandle(
    worker_id="smoke-abc1234-main",
    name="smoke-abc1234-main",
    scenario="smoke",
    run_id="abc1234-main",
)


@pytest.fixture
def runtime() -> KubernetesRuntime:
    """Create runtime for the scenarios namespace."""
    return KubernetesRuntime(
        config=KubernetesConfig(binary="kubectl", namespace="scenarios", context=None)
    )


@pytest.fixture
def run_mock() -> Generator[AsyncMock]:
    """Patch command execution for the kubernetes runtime."""
    with patch(
        "scenario_runner.runtimes.kubernetes.runtime.run_command",
        new_callable=AsyncMock,
    ) as mock:
        yield mock


async def test_spawn_creates_pod(runtime: KubernetesRuntime, run_mock: AsyncMock) -> None:
    """Creates a never-restarting labelled pod."""
    run_mock.return_value = "pod/smoke-abc1234-main created"
    spec = WorkerSpec(
        name="smoke-abc1234-main",
        image="registry.test/scenarios:abc1234",
        command=["python", "-m", "scenarios.run", "smoke"],
        scenario="smoke",
        run_id="abc1234-main",
    )

    handle = await runtime.spawn(spec)

    assert handle == HANDLE
    run_mock.assert_awaited_once_with(
        "kubectl",
        "run",
        "smoke-abc1234-main",
        "--namespace",
        "scenarios",
        "--image",
        "registry.test/scenarios:abc1234",
        "--restart=Never",
        "--labels",
        "scenario=smoke,run-id=abc1234-main",
        "--annotations",
        "scenario-runner/scenario=smoke",
        "--command",
        "--",
        "python",
        "-m",
        "scenarios.run",
        "smoke",
    )


async def test_spawn_labels_long_scenario_with_slug(
    runtime: KubernetesRuntime, run_mock: AsyncMock
) -> None:
    """Label values stay name-safe; the raw name goes into an annotation."""
    scenario = "Reorg_With_PoX_4_Unlock_" + "x" * 60
    spec = WorkerSpec(
        name="reorg-abc1234-main",
        image="img",
        command=[],
        scenario=scenario,
        run_id="abc1234-main",
    )

    await runtime.spawn(spec)

    args = run_mock.await_args.args
    labels = args[args.index("--labels") + 1]
    scenario_label = labels.split(",")[0].removeprefix("scenario=")
    assert len(scenario_label) <= 63
    assert re.fullmatch(r"[a-z0-9]([a-z0-9-]*[a-z0-9])?", scenario_label)
    assert args[args.index("--annotations") + 1] == (
        f"scenario-runner/scenario={scenario}"
    )


def test_pod_scenario_prefers_annotation() -> None:
    """The raw scenario name is read back from the annotation."""
    scenario = "foo_bar_" + "y" * 70

    assert pod_scenario(Pod.model_validate(pod(scenario=scenario))) == scenario
    assert pod_scenario(Pod.model_validate(pending_pod(name="p"))) == "smoke"


async def test_finished_count_uses_terminal_phases(
    runtime: KubernetesRuntime, run_mock: AsyncMock
) -> None:
    """Succeeded and failed pods are finished, pending and running are not."""
    run_mock.return_value = item_list(
        pod(name="done", phase="Succeeded"),
        pod(name="failed", phase="Failed", exit_code=1),
        pod(name="running", phase="Running", exit_code=None),
        pending_pod(name="pending"),
    )

    assert await runtime.finished_count("abc1234-main") == 2


async def test_uses_configured_context(run_mock: AsyncMock) -> None:
    """Passes --context when one is configured."""
    runtime = KubernetesRuntime(
        config=KubernetesConfig(binary="kubectl", namespace="ci", context="staging")
    )
    run_mock.return_value = item_list()

    await runtime.list_nodes()

    run_mock.assert_awaited_once_with(
        "kubectl", "--context", "staging", "get", "nodes", "-o", "json"
    )


class TestListWorkers:
    """Tests for list_workers."""

    async def test_lists_pods_of_run(
        self, runtime: KubernetesRuntime, run_mock: AsyncMock
    ) -> None:
        """Selects pods by run ID label."""
        run_mock.return_value = item_list(
            pod(name="a-abc1234-main", scenario="a"),
            pod(name="b-abc1234-main", scenario="b", phase="Running", exit_code=None),
        )

        handles = await runtime.list_workers("abc1234-main")

        assert [h.scenario for h in handles] == ["a", "b"]
        run_mock.assert_awaited_once_with(
            "kubectl",
            "get",
            "pods",
            "--namespace",
            "scenarios",
            "--selector",
            "run-id=abc1234-main",
            "-o",
            "json",
        )

    async def test_running_means_pending_or_running(
        self, runtime: KubernetesRuntime, run_mock: AsyncMock
    ) -> None:
        """Pending and running pods occupy a slot, finished ones do not."""
        run_mock.return_value = item_list(
            pod(name="done", phase="Succeeded"),
            pod(name="failed", phase="Failed", exit_code=1),
            pod(name="running", phase="Running", exit_code=None),
            pending_pod(name="pending"),
        )

        handles = await runtime.list_workers("abc1234-main", running_only=True)

        assert [h.name for h in handles] == ["running", "pending"]


class TestInspect:
    """Tests for inspect."""

    async def test_succeeded_pod(
        self, runtime: KubernetesRuntime, run_mock: AsyncMock
    ) -> None:
        """Reads times and exit code from the terminated container."""
        run_mock.return_value = json.dumps(pod(exit_code=0))

        metadata = await runtime.inspect(HANDLE)

        assert metadata.status == "exited"
        assert metadata.exit_code == 0
        assert metadata.duration == pytest.approx(60.0)

    async def test_poll_exit_on_running_pod(
        self, runtime: KubernetesRuntime, run_mock: AsyncMock
    ) -> None:
        """Running pods have no exit code yet."""
        run_mock.return_value = json.dumps(
            pod(phase="Running", exit_code=None)
        )

        assert await runtime.poll_exit(HANDLE) is None


class TestPodMetadata:
    """Tests for pod_metadata."""

    def test_failed_pod(self) -> None:
        """Failed pods report the container exit code."""
        metadata = pod_metadata(Pod.model_validate(pod(phase="Failed", exit_code=3)))

        assert metadata.status == "exited"
        assert metadata.exit_code == 3

    def test_failed_pod_without_container(self) -> None:
        """Failed pods without a terminated container exit with -1."""
        payload = pending_pod()
        payload["status"]["phase"] = "Failed"

        metadata = pod_metadata(Pod.model_validate(payload))

        assert metadata.exit_code == -1

    def test_pending_pod(self) -> None:
        """Unscheduled pods are pending with no times."""
        metadata = pod_metadata(Pod.model_validate(pending_pod()))

        assert metadata.status == "pending"
        assert metadata.started_at is None
        assert metadata.exit_code is None

    def test_running_pod_uses_container_start(self) -> None:
        """Running container start time wins over pod start time."""
        metadata = pod_metadata(
            Pod.model_validate(pod(phase="Running", exit_code=None))
        )

        assert metadata.status == "running"
        assert metadata.started_at is not None
        assert metadata.started_at.second == 5
        assert metadata.finished_at is None


async def test_tail_output(runtime: KubernetesRuntime) -> None:
    """Reads pod logs with a tail limit."""
    with patch(
        "scenario_runner.runtimes.kubernetes.runtime.run_command_output",
        new_callable=AsyncMock,
        return_value=(0, "FAILURE smoke\n"),
    ) as output_mock:
        output = await runtime.tail_output(HANDLE, 20)

    assert output == "FAILURE smoke\n"
    output_mock.assert_awaited_once_with(
        "kubectl",
        "logs",
        "smoke-abc1234-main",
        "--namespace",
        "scenarios",
        "--tail=20",
    )


async def test_remove(runtime: KubernetesRuntime, run_mock: AsyncMock) -> None:
    """Deletes the pod without waiting."""
    await runtime.remove(HANDLE)

    run_mock.assert_awaited_once_with(
        "kubectl",
        "delete",
        "pod",
        "smoke-abc1234-main",
        "--namespace",
        "scenarios",
        "--ignore-not-found",
        "--wait=false",
    )


async def test_list_pods(runtime: KubernetesRuntime, run_mock: AsyncMock) -> None:
    """Lists pod names in a namespace."""
    run_mock.return_value = item_list(pod(name="a"), pending_pod(name="b"))

    assert await runtime.list_pods("kube-system") == ["a", "b"]
    assert "kube-system" in run_mock.await_args.args


async def test_list_nodes(runtime: KubernetesRuntime, run_mock: AsyncMock) -> None:
    """Lists node names."""
    run_mock.return_value = item_list(node("worker-1"), node("worker-2"))

    assert await runtime.list_nodes() == ["worker-1", "worker-2"]
