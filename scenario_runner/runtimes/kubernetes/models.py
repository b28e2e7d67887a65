"""Pydantic models for kubectl JSON output."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Literal

from pydantic import Field

from scenario_runner.models.base import Model

type PodPhase = Literal["Pending", "Running", "Succeeded", "Failed", "Unknown"]


class ObjectMeta(Model):
    """Subset of object metadata."""

    name: str
    namespace: str | None = None
    labels: Mapping[str, str] = Field(default_factory=dict)
    annotations: Mapping[str, str] = Field(default_factory=dict)


class RunningState(Model):
    """Running container state."""

    started_at: datetime | None = Field(default=None, alias="startedAt")


class TerminatedState(Model):
    """Terminated container state."""

    exit_code: int = Field(alias="exitCode")
    reason: str | None = None
    started_at: datetime | None = Field(default=None, alias="startedAt")
    finished_at: datetime | None = Field(default=None, alias="finishedAt")


class ContainerState(Model):
    """One of running, terminated or waiting."""

    running: RunningState | None = None
    terminated: TerminatedState | None = None


class ContainerStatus(Model):
    """Status of one container in a pod."""

    name: str
    state: ContainerState = Field(default_factory=ContainerState)


class PodStatus(Model):
    """Pod status block."""

    phase: PodPhase = "Unknown"
    start_time: datetime | None = Field(default=None, alias="startTime")
    container_statuses: Sequence[ContainerStatus] = Field(
        default_factory=list, alias="containerStatuses"
    )


class Pod(Model):
    """A pod from ``kubectl get pod -o json``."""

    metadata: ObjectMeta
    status: PodStatus = Field(default_factory=PodStatus)


class PodList(Model):
    """A pod list from ``kubectl get pods -o json``."""

    items: Sequence[Pod] = Field(default_factory=list)


class Node(Model):
    """A node from ``kubectl get nodes -o json``."""

    metadata: ObjectMeta


class NodeList(Model):
    """A node list from ``kubectl get nodes -o json``."""

    items: Sequence[Node] = Field(default_factory=list)
