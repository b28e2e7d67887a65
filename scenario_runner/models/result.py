"""Models for worker execution results."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from scenario_runner.models.worker import WorkerHandle

type Outcome = Literal["success", "failure", "indeterminate"]


@dataclass(frozen=True, kw_only=True)
class WorkerExit:
    """What the launcher observed for one scenario.

    ``handle`` is None when the worker could not be spawned, in which case
    ``error`` holds the reason.
    """

    scenario: str
    handle: WorkerHandle | None = None
    exit_code: int | None = None
    error: str | None = None


@dataclass(frozen=True, kw_only=True)
class WorkerResult:
    """Outcome of a single scenario, inferred after the fact."""

    scenario: str
    worker_name: str
    outcome: Outcome
    exit_code: int | None = None
    duration: float | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
