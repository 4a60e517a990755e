"""Base model configuration for run configuration."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that rejects unknown option names."""

    model_config = ConfigDict(frozen=True, extra="forbid")
