"""Base model for pyulsim value objects.

Every model is frozen: devices, outcomes and notifications are handed to
observers and background tasks, so nobody downstream may mutate them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UlBaseModel(BaseModel):
    """Immutable base for pyulsim models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=False,
    )
