"""Docker runtime module."""

from scenario_runner.runtimes.docker.config import DockerConfig
from scenario_runner.runtimes.docker.manifest import docker_manifest
from scenario_runner.runtimes.docker.runtime import DockerRuntime

__all__ = ["DockerConfig", "DockerRuntime", "docker_manifest"]
