"""Base Pydantic models for scenario elements and settings.

This module defines the foundational model classes used by all data
structures of the engine. It enforces immutability and strict schema
validation to guarantee that scenarios, step definitions and results
are deterministic, explicit, and safe to share between components.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all engine data types.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          This ensures a registered definition or a reported result
          cannot change under a running suite.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in provider data.

    All data models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
          This guarantees consistent behavior during a run.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.

    All runtime settings models must inherit from this class.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
