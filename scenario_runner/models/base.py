"""Base model configuration for external tool payloads."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Payloads from docker and kubectl carry many more keys than we read, so
    unknown keys are ignored rather than rejected.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
