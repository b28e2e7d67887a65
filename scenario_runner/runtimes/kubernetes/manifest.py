"""Kubernetes runtime manifest."""

from scenario_runner.runtimes.kubernetes.config import KubernetesConfig
from scenario_runner.runtimes.kubernetes.runtime import KubernetesRuntime
from scenario_runner.runtimes.manifest import RuntimeManifest

kubernetes_manifest = RuntimeManifest(
    config_cls=KubernetesConfig,
    runtime_factory=KubernetesRuntime.from_config,
)
