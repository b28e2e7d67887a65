"""Pydantic models for docker CLI JSON output."""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from scenario_runner.models.base import Model

type ContainerStatus = Literal[
    "created",
    "running",
    "paused",
    "restarting",
    "removing",
    "exited",
    "dead",
]

_FRACTION = re.compile(r"\.(\d{6})\d+")
ZERO_TIME_PREFIX = "0001-01-01"


def parse_docker_time(value: Any) -> Any:
    """Normalize docker timestamps before validation.

    Docker reports nanoseconds, which datetime cannot hold, and uses
    ``0001-01-01T00:00:00Z`` for "never".
    """
    if not isinstance(value, str):
        return value
    if not value or value.startswith(ZERO_TIME_PREFIX):
        return None
    return _FRACTION.sub(r".\1", value)


def parse_labels(value: str) -> Mapping[str, str]:
    """Parse the ``key=value,key=value`` label string from ``docker ps``."""
    labels: dict[str, str] = {}
    for item in value.split(","):
        key, sep, label_value = item.partition("=")
        if sep:
            labels[key.strip()] = label_value.strip()
    return labels


class ContainerState(Model):
    """State block of ``docker inspect``."""

    status: ContainerStatus = Field(alias="Status")
    exit_code: int = Field(alias="ExitCode")
    started_at: datetime | None = Field(default=None, alias="StartedAt")
    finished_at: datetime | None = Field(default=None, alias="FinishedAt")

    @field_validator("started_at", "finished_at", mode="before")
    @classmethod
    def _normalize_times(cls, value: Any) -> Any:
        return parse_docker_time(value)


class ContainerConfig(Model):
    """Config block of ``docker inspect``."""

    labels: Mapping[str, str] | None = Field(default=None, alias="Labels")


class ContainerInspect(Model):
    """One entry of ``docker inspect`` output."""

    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    state: ContainerState = Field(alias="State")
    config: ContainerConfig = Field(alias="Config")

    @field_validator("name")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.lstrip("/")


class ContainerSummary(Model):
    """One line of ``docker ps --format '{{json .}}'``."""

    id: str = Field(alias="ID")
    names: str = Field(alias="Names")
    labels: str = Field(default="", alias="Labels")
    state: str = Field(default="", alias="State")

    def label_map(self) -> Mapping[str, str]:
        """Labels as a mapping."""
        return parse_labels(self.labels)
