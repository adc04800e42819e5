"""Base model configuration for configuration and wire data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen model; instances are shared read-only between workers."""

    model_config = ConfigDict(frozen=True)
