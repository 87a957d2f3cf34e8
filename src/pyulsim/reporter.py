"""Northbound reporter.

Owns:
- live state notifications for observers (every write, no guarantees)
- traffic notifications mirroring transport activity
- fire-and-forget northbound pushes for changed sensor states
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyulsim._transport import NorthboundTransport
from pyulsim.exceptions import UlNorthboundError
from pyulsim.state.events import (
    DeviceStateEvent,
    StateChange,
    TrafficDirection,
    TrafficEvent,
    TrafficTransport,
)

_logger = logging.getLogger(__name__)

StateListener = Callable[[DeviceStateEvent], None]
TrafficListener = Callable[[TrafficEvent], None]


class NorthboundReporter:
    """Decide whether a write is reported and dispatch it without blocking.

    Pushes run as background tasks on the running loop; callers (command
    handlers, simulation ticks) never wait for delivery. Delivery failures
    are logged here and go no further.
    """

    def __init__(self, transport: NorthboundTransport) -> None:
        self._transport = transport
        self._state_listeners: list[StateListener] = []
        self._traffic_listeners: list[TrafficListener] = []
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def transport(self) -> NorthboundTransport:
        return self._transport

    @property
    def pending(self) -> int:
        """Number of pushes still in flight."""
        return len(self._pending)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a live state listener; returns an unsubscribe callable."""
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def subscribe_traffic(self, listener: TrafficListener) -> Callable[[], None]:
        """Register a traffic listener; returns an unsubscribe callable."""
        self._traffic_listeners.append(listener)
        return lambda: self._remove(self._traffic_listeners, listener)

    @staticmethod
    def _remove(listeners: list, listener: object) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _notify(self, listeners: list, event: DeviceStateEvent | TrafficEvent) -> None:
        for listener in list(listeners):
            try:
                listener(event)
            except Exception:
                _logger.debug("Listener %r failed", listener, exc_info=True)

    def emit_traffic(self, transport: TrafficTransport, direction: TrafficDirection, summary: str) -> None:
        self._notify(
            self._traffic_listeners,
            TrafficEvent(transport=transport, direction=direction, summary=summary),
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def report_change(self, change: StateChange) -> bool:
        return self.report(change.device_id, change.state, changed=change.changed, is_sensor=change.is_sensor)

    def report(self, device_id: str, state: str, *, changed: bool, is_sensor: bool) -> bool:
        """Notify observers and push northbound when due.

        Returns ``True`` when a northbound push was dispatched.
        """
        dispatched = False
        if is_sensor and changed:
            dispatched = self._dispatch(device_id, state)
        self._notify(self._state_listeners, DeviceStateEvent(device_id=device_id, state=state))
        return dispatched

    def _dispatch(self, device_id: str, state: str) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.warning("No running event loop, dropping northbound report for %s", device_id)
            return False

        task = loop.create_task(self._deliver(device_id, state), name=f"northbound-{device_id}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self.emit_traffic(self._transport.name, TrafficDirection.NORTHBOUND, self._transport.trace(device_id, state))
        return True

    async def _deliver(self, device_id: str, state: str) -> None:
        try:
            await self._transport.send(device_id, state)
        except UlNorthboundError as exc:
            _logger.warning("Northbound report for %s failed: %s", device_id, exc)
        except Exception:
            _logger.exception("Unexpected error reporting %s northbound", device_id)

    async def drain(self) -> None:
        """Wait for every in-flight push to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
