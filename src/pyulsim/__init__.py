"""pyulsim - Async simulator for Ultralight 2.0 dummy IoT devices."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyulsim")
except PackageNotFoundError:
    __version__ = "0+local"

from pyulsim.commands import CommandProcessor
from pyulsim.config import NorthboundProtocol, SimulatorConfig
from pyulsim.exceptions import (
    UlConfigError,
    UlError,
    UlMalformedProtocolError,
    UlNorthboundError,
    UlRegistryError,
    UlUnknownDeviceError,
    UlUnsupportedCommandError,
)
from pyulsim.models import (
    BEHAVIORS,
    CommandOutcome,
    Device,
    DeviceBehavior,
    DeviceType,
    default_population,
)
from pyulsim.reporter import NorthboundReporter
from pyulsim.simulation import PeriodicTask, SimulationScheduler
from pyulsim.simulator import DeviceSimulator
from pyulsim.state import DeviceStateEvent, DeviceStateStore, StateChange, TrafficEvent

__all__ = [
    "__version__",
    "BEHAVIORS",
    "CommandOutcome",
    "CommandProcessor",
    "Device",
    "DeviceBehavior",
    "DeviceSimulator",
    "DeviceStateEvent",
    "DeviceStateStore",
    "DeviceType",
    "NorthboundProtocol",
    "NorthboundReporter",
    "PeriodicTask",
    "SimulationScheduler",
    "SimulatorConfig",
    "StateChange",
    "TrafficEvent",
    "UlConfigError",
    "UlError",
    "UlMalformedProtocolError",
    "UlNorthboundError",
    "UlRegistryError",
    "UlUnknownDeviceError",
    "UlUnsupportedCommandError",
    "default_population",
]
