"""Models describing workers managed by a runtime."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

type WorkerStatus = Literal["pending", "running", "exited", "unknown"]


@dataclass(frozen=True, kw_only=True)
class WorkerSpec:
    """Everything a runtime needs to spawn one worker."""

    name: str
    image: str
    command: Sequence[str]
    scenario: str
    run_id: str


@dataclass(frozen=True, kw_only=True)
class WorkerHandle:
    """Reference to a spawned worker.

    ``worker_id`` is whatever the runtime uses to address the process
    (container ID for docker, pod name for kubernetes).
    """

    worker_id: str
    name: str
    scenario: str
    run_id: str


@dataclass(frozen=True, kw_only=True)
class WorkerMetadata:
    """Point-in-time state of a worker as reported by its runtime."""

    name: str
    status: WorkerStatus
    started_at: datetime | None = None
    finished_at: datetime | None = None
    exit_code: int | None = None

    @property
    def duration(self) -> float | None:
        """Seconds between start and finish, when both are known."""
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
