"""Value models for pyulsim."""

from pyulsim.models.command import CommandOutcome
from pyulsim.models.device import (
    BEHAVIORS,
    Device,
    DeviceBehavior,
    DeviceType,
    default_population,
)

__all__ = [
    "BEHAVIORS",
    "CommandOutcome",
    "Device",
    "DeviceBehavior",
    "DeviceType",
    "default_population",
]
