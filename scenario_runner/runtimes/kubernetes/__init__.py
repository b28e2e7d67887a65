"""Kubernetes runtime module."""

from scenario_runner.runtimes.kubernetes.config import KubernetesConfig
from scenario_runner.runtimes.kubernetes.manifest import kubernetes_manifest
from scenario_runner.runtimes.kubernetes.runtime import KubernetesRuntime

__all__ = ["KubernetesConfig", "KubernetesRuntime", "kubernetes_manifest"]
