"""Autonomous device evolution.

Two independent cadences drive the fleet:

* fast tick (default 1 s): bells ring down, motion sensors count people
  passing open doors, lamps brighten or dim depending on their door;
* slow tick (default 5 s): unlocked doors open and close at random, more
  often when the co-located lamp is on.

Every device is updated through :meth:`DeviceStateStore.update`, so a
tick racing a command never loses a write.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable

from pyulsim._constants import STATUS_LOCKED, STATUS_OFF
from pyulsim.exceptions import UlError
from pyulsim.models.device import Device, DeviceType
from pyulsim.reporter import NorthboundReporter
from pyulsim.simulation import rules
from pyulsim.simulation.periodic import PeriodicTask
from pyulsim.simulation.rules import RandomSource
from pyulsim.state.store import DeviceStateStore

_logger = logging.getLogger(__name__)


def _unchanged(_state: dict[str, str]) -> None:
    return None


class SimulationScheduler:
    """Owns the fast and slow :class:`PeriodicTask` of one simulator."""

    def __init__(
        self,
        store: DeviceStateStore,
        reporter: NorthboundReporter,
        *,
        fast_interval: float = 1.0,
        slow_interval: float = 5.0,
        rng: RandomSource | None = None,
    ) -> None:
        self._store = store
        self._reporter = reporter
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self.fast = PeriodicTask("fast", fast_interval, self.fast_tick)
        self.slow = PeriodicTask("slow", slow_interval, self.slow_tick)

    def start(self, *, delay: float = 0.0) -> None:
        self.fast.start(delay=delay)
        self.slow.start(delay=delay)

    async def stop(self) -> None:
        await self.fast.stop()
        await self.slow.stop()

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def fast_tick(self) -> None:
        """Advance bells, motion sensors and lamps by one step; rewrite doors as-is."""
        for device_id in self._store.list_ids():
            self._step(device_id, self._fast_rule)

    def slow_tick(self) -> None:
        """Advance doors by one step."""
        for device_id in self._store.list_ids():
            self._step(device_id, self._slow_rule)

    def _step(
        self,
        device_id: str,
        select: Callable[[Device], Callable[[dict[str, str]], None] | None],
    ) -> None:
        try:
            device = self._store.device(device_id)
            mutate = select(device)
            if mutate is None:
                return
            change = self._store.update(device_id, mutate, is_sensor=device.behavior.is_sensor)
        except UlError as exc:
            _logger.warning("Skipping %s this tick: %s", device_id, exc)
            return
        self._reporter.report_change(change)

    def _fast_rule(self, device: Device) -> Callable[[dict[str, str]], None] | None:
        rng = self._rng
        if device.device_type == DeviceType.BELL:
            return rules.bell_tick
        if device.device_type == DeviceType.MOTION:
            door = self._store.co_located_status(device, DeviceType.DOOR, STATUS_LOCKED)
            return lambda state: rules.motion_tick(state, door, rng)
        if device.device_type == DeviceType.LAMP:
            door = self._store.co_located_status(device, DeviceType.DOOR, STATUS_LOCKED)
            return lambda state: rules.lamp_tick(state, door, rng)
        # Doors only move on the slow tick; the unchanged write still notifies observers.
        return _unchanged

    def _slow_rule(self, device: Device) -> Callable[[dict[str, str]], None] | None:
        if device.device_type != DeviceType.DOOR:
            return None
        lamp = self._store.co_located_status(device, DeviceType.LAMP, STATUS_OFF)
        rng = self._rng
        return lambda state: rules.door_tick(state, lamp, rng)
