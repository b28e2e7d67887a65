"""Docker runtime manifest."""

from scenario_runner.runtimes.docker.config import DockerConfig
from scenario_runner.runtimes.docker.runtime import DockerRuntime
from scenario_runner.runtimes.manifest import RuntimeManifest

docker_manifest = RuntimeManifest(
    config_cls=DockerConfig,
    runtime_factory=DockerRuntime.from_config,
)
