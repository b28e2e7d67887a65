"""Configuration for the docker runtime."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class DockerConfig(BaseSettings):
    """Configuration for the docker runtime, read from SCENARIO_DOCKER_*."""

    model_config = SettingsConfigDict(env_prefix="SCENARIO_DOCKER_", extra="ignore")

    binary: str = "docker"
