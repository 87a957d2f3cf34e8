"""State/store layer.

This package owns the in-memory registry of simulated devices. Both the
command path and the simulation scheduler write through it; it is the
only place where "did the state change?" is decided.
"""

from pyulsim.state.events import DeviceStateEvent, StateChange, TrafficEvent
from pyulsim.state.store import DeviceStateStore

__all__ = [
    "DeviceStateEvent",
    "DeviceStateStore",
    "StateChange",
    "TrafficEvent",
]
