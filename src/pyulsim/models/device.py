"""Device identity and per-type behaviour tables."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import Field, field_validator

from pyulsim._constants import (
    BELL_OFF,
    BELL_ON,
    DOOR_CLOSED,
    DOOR_LOCKED,
    DOOR_OPEN,
    INITIAL_COUNT,
    LAMP_OFF,
    LAMP_ON,
)
from pyulsim.exceptions import UlUnknownDeviceError
from pyulsim.models._base import UlBaseModel

#: Width of the zero-padded location number in device ids (``door002``).
LOCATION_WIDTH = 3


class DeviceType(enum.StrEnum):
    """Type tag prefixed to every device id."""

    DOOR = "door"
    BELL = "bell"
    LAMP = "lamp"
    MOTION = "motion"


@dataclass(frozen=True, slots=True)
class DeviceBehavior:
    """Static behaviour shared by every device of one type.

    ``transitions`` maps an accepted command to the encoded state it
    produces. Transitions ignore the prior state.
    """

    is_sensor: bool
    initial_state: str
    transitions: Mapping[str, str] = field(default_factory=dict)

    @property
    def commands(self) -> frozenset[str]:
        return frozenset(self.transitions)

    def supports(self, command: str) -> bool:
        return command in self.transitions

    def transition(self, command: str) -> str:
        return self.transitions[command]


BEHAVIORS: Mapping[DeviceType, DeviceBehavior] = MappingProxyType(
    {
        # The bell is an actuator only; it never reports northbound.
        DeviceType.BELL: DeviceBehavior(
            is_sensor=False,
            initial_state=BELL_OFF,
            transitions=MappingProxyType({"ring": BELL_ON}),
        ),
        # There is no unlocked-but-closed state: unlock behaves like close.
        DeviceType.DOOR: DeviceBehavior(
            is_sensor=True,
            initial_state=DOOR_LOCKED,
            transitions=MappingProxyType(
                {
                    "open": DOOR_OPEN,
                    "close": DOOR_CLOSED,
                    "unlock": DOOR_CLOSED,
                    "lock": DOOR_LOCKED,
                }
            ),
        ),
        DeviceType.LAMP: DeviceBehavior(
            is_sensor=True,
            initial_state=LAMP_OFF,
            transitions=MappingProxyType({"on": LAMP_ON, "off": LAMP_OFF}),
        ),
        DeviceType.MOTION: DeviceBehavior(
            is_sensor=True,
            initial_state=INITIAL_COUNT,
        ),
    }
)


class Device(UlBaseModel):
    """Immutable identity of a simulated device.

    ``location`` is the zero-padded suffix shared by every device of the
    same location group (``door002``, ``lamp002`` ...).
    """

    device_id: str
    device_type: DeviceType
    location: str = Field(..., min_length=1)

    @field_validator("location")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("location must be numeric")
        return value

    @classmethod
    def from_id(cls, device_id: str) -> Device:
        """Recover type and location from an id such as ``motion004``.

        Raises :class:`UlUnknownDeviceError` when the id does not name a
        known device type followed by a location number.
        """
        tag = "".join(ch for ch in device_id if not ch.isdigit())
        location = device_id[len(tag) :]
        try:
            device_type = DeviceType(tag)
        except ValueError as exc:
            raise UlUnknownDeviceError(device_id) from exc
        if not location.isdigit() or not device_id.startswith(tag):
            raise UlUnknownDeviceError(device_id)
        return cls(device_id=device_id, device_type=device_type, location=location)

    @classmethod
    def build(cls, device_type: DeviceType, location: int | str) -> Device:
        suffix = str(location).zfill(LOCATION_WIDTH)
        return cls(device_id=f"{device_type}{suffix}", device_type=device_type, location=suffix)

    @property
    def behavior(self) -> DeviceBehavior:
        return BEHAVIORS[self.device_type]

    def sibling_id(self, device_type: DeviceType) -> str:
        """Id of the co-located device of *device_type*."""
        return f"{device_type}{self.location}"


def default_population(locations: int = 4) -> list[tuple[Device, str]]:
    """One door, bell, lamp and motion sensor per location, with initial states.

    Devices are grouped by type (all doors first) which is also the order
    the scheduler visits them in.
    """
    population: list[tuple[Device, str]] = []
    for device_type in DeviceType:
        for number in range(1, locations + 1):
            device = Device.build(device_type, number)
            population.append((device, device.behavior.initial_state))
    return population
