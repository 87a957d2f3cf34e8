"""Change records and observer notifications.

The store produces a :class:`StateChange` for every write; the reporter
turns it into a :class:`DeviceStateEvent` for live observers and, when
due, a northbound push. :class:`TrafficEvent` mirrors transport activity
for the same observers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from pyulsim.models._base import UlBaseModel


class TrafficTransport(StrEnum):
    HTTP = "http"
    MQTT = "mqtt"


class TrafficDirection(StrEnum):
    NORTHBOUND = "northbound"
    SOUTHBOUND = "southbound"


class StateChange(UlBaseModel):
    """Outcome of one store write."""

    device_id: str
    state: str
    previous: str | None = None
    is_sensor: bool = True
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def changed(self) -> bool:
        return self.state != self.previous


class DeviceStateEvent(UlBaseModel):
    """Live state notification, emitted for every write."""

    device_id: str
    state: str
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TrafficEvent(UlBaseModel):
    """Human readable trace of a message crossing a transport."""

    transport: TrafficTransport
    direction: TrafficDirection
    summary: str
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
