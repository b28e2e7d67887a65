"""Configuration for the kubernetes runtime."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class KubernetesConfig(BaseSettings):
    """Configuration for the kubernetes runtime, read from SCENARIO_KUBE_*.

    ``context`` selects a kubeconfig context; None uses the current one.
    """

    model_config = SettingsConfigDict(env_prefix="SCENARIO_KUBE_", extra="ignore")

    binary: str = "kubectl"
    namespace: str = "default"
    context: str | None = None
