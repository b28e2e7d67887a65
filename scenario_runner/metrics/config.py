"""Configuration for the InfluxDB sink."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from scenario_runner.metrics.line_protocol import Precision


class InfluxConfig(BaseSettings):
    """Connection settings for InfluxDB 1.x, read from SCENARIO_INFLUX_*."""

    model_config = SettingsConfigDict(env_prefix="SCENARIO_INFLUX_", extra="ignore")

    url: str = "http://localhost:8086"
    username: str | None = None
    password: SecretStr | None = None
    database: str = "scenarios"
    precision: Precision = "s"
    measurement: str = "scenario_results"
    batch_size: int = Field(default=5000, ge=1)
