"""In-memory device registry.

Holds ``device id -> encoded Ultralight state`` for the fixed population
created at startup. Every write goes through :meth:`DeviceStateStore.commit`
which compares against the immediately preceding value; that comparison
is the only trigger for northbound reports.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from pyulsim import ultralight
from pyulsim._constants import KEY_STATUS
from pyulsim.exceptions import UlMalformedProtocolError, UlRegistryError, UlUnknownDeviceError
from pyulsim.models.device import Device, DeviceType
from pyulsim.state.events import StateChange

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _DeviceRecord:
    device: Device
    state: str


class DeviceStateStore:
    """Registry of simulated devices and their current encoded state.

    Reads and read-modify-write cycles are serialized on one re-entrant
    lock, so a command racing a tick on the same device never loses an
    update (last write wins).
    """

    def __init__(self) -> None:
        self._records: dict[str, _DeviceRecord] = {}
        self._lock = threading.RLock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, population: Iterable[tuple[Device, str]]) -> None:
        """Populate the registry. May only be called once."""
        with self._lock:
            if self._initialized:
                raise UlRegistryError("Device registry is already initialized")
            records: dict[str, _DeviceRecord] = {}
            for device, state in population:
                if device.device_id in records:
                    raise UlRegistryError(f"Duplicate device id: {device.device_id}")
                records[device.device_id] = _DeviceRecord(device=device, state=state)
            self._records = records
            self._initialized = True
        _logger.debug("Device registry initialized with %d devices", len(records))

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def _record(self, device_id: str) -> _DeviceRecord:
        record = self._records.get(device_id)
        if record is None:
            raise UlUnknownDeviceError(device_id)
        return record

    def device(self, device_id: str) -> Device:
        return self._record(device_id).device

    def list_ids(self) -> list[str]:
        """All device ids, in registration order."""
        with self._lock:
            return list(self._records)

    def get_raw(self, device_id: str) -> str:
        with self._lock:
            return self._record(device_id).state

    def get(self, device_id: str) -> dict[str, str]:
        """Decoded state of *device_id*."""
        return ultralight.decode(self.get_raw(device_id))

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return {device_id: record.state for device_id, record in self._records.items()}

    def commit(self, device_id: str, state: str, *, is_sensor: bool | None = None) -> StateChange:
        """Replace the stored state and describe the write.

        ``is_sensor`` defaults to the device type's sensor flag.
        """
        with self._lock:
            record = self._record(device_id)
            previous = record.state
            record.state = state
        sensor = record.device.behavior.is_sensor if is_sensor is None else is_sensor
        return StateChange(device_id=device_id, state=state, previous=previous, is_sensor=sensor)

    def set(self, device_id: str, state: str, is_sensor: bool | None = None) -> bool:
        """Replace the stored state; return whether the encoded value changed."""
        return self.commit(device_id, state, is_sensor=is_sensor).changed

    def update(
        self,
        device_id: str,
        mutate: Callable[[dict[str, str]], None],
        *,
        is_sensor: bool | None = None,
    ) -> StateChange:
        """Atomically decode, mutate in place, re-encode and store."""
        with self._lock:
            state = self.get(device_id)
            mutate(state)
            return self.commit(device_id, ultralight.encode(state), is_sensor=is_sensor)

    def co_located_status(self, device: Device, device_type: DeviceType, default: str) -> str:
        """Status (``s``) of the device of *device_type* sharing *device*'s location.

        Falls back to *default* when that device is absent or unreadable.
        """
        sibling = device.sibling_id(device_type)
        try:
            status = self.get(sibling).get(KEY_STATUS)
        except UlUnknownDeviceError:
            return default
        except UlMalformedProtocolError:
            _logger.debug("Unreadable state for %s, assuming %s", sibling, default)
            return default
        return status or default
