"""Southbound command execution against the per-type behaviour table."""

from __future__ import annotations

import logging

from pyulsim import ultralight
from pyulsim.exceptions import UlUnknownDeviceError, UlUnsupportedCommandError
from pyulsim.models.command import CommandOutcome
from pyulsim.reporter import NorthboundReporter
from pyulsim.state.events import StateChange
from pyulsim.state.store import DeviceStateStore

_logger = logging.getLogger(__name__)


class CommandProcessor:
    """Validate and apply actuation commands.

    Usage::

        processor = CommandProcessor(store, reporter)
        outcome = processor.execute("door001", "door001@open")
        outcome.ack  # 'door001@open| open OK'
    """

    def __init__(self, store: DeviceStateStore, reporter: NorthboundReporter) -> None:
        self._store = store
        self._reporter = reporter

    def actuate(self, device_id: str, command: str) -> StateChange:
        """Apply *command* to *device_id* and report the write.

        Raises
        ------
        UlUnknownDeviceError
            *device_id* is not in the registry.
        UlUnsupportedCommandError
            The device's type does not accept *command*.
        """
        if device_id not in self._store:
            raise UlUnknownDeviceError(device_id)
        behavior = self._store.device(device_id).behavior
        if not behavior.supports(command):
            raise UlUnsupportedCommandError(device_id, command)

        change = self._store.commit(device_id, behavior.transition(command), is_sensor=behavior.is_sensor)
        _logger.debug("Actuated %s with %s -> %s", device_id, command, change.state)
        self._reporter.report_change(change)
        return change

    def execute(self, device_id: str, raw_field: str) -> CommandOutcome:
        """Execute a raw ``value@command`` field; never raises for bad input."""
        _value, command = ultralight.parse_command(raw_field)
        try:
            change = self.actuate(device_id, command)
        except (UlUnknownDeviceError, UlUnsupportedCommandError) as exc:
            _logger.debug("Rejected %r for %s: %s", raw_field, device_id, exc)
            return CommandOutcome(
                device_id=device_id,
                field=raw_field,
                command=command,
                success=False,
                reason=str(exc),
            )
        return CommandOutcome(
            device_id=device_id,
            field=raw_field,
            command=command,
            success=True,
            state=change.state,
        )
