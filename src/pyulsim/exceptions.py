"""Custom exception hierarchy for pyulsim."""

from __future__ import annotations


class UlError(Exception):
    """Base exception for all pyulsim errors."""


class UlConfigError(UlError):
    """Invalid or missing configuration."""


class UlRegistryError(UlError):
    """Device registry used out of order (e.g. initialized twice)."""


class UlMalformedProtocolError(UlError):
    """Ultralight payload does not split into key/value pairs."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message)


class UlUnknownDeviceError(UlError):
    """Device id is not part of the simulated fleet."""

    def __init__(self, device_id: str) -> None:
        self.device_id = device_id
        super().__init__(f"Unknown device: {device_id!r}")


class UlUnsupportedCommandError(UlError):
    """Device exists but does not understand the requested command."""

    def __init__(self, device_id: str, command: str) -> None:
        self.device_id = device_id
        self.command = command
        super().__init__(f"Command {command!r} not supported by {device_id!r}")


class UlNorthboundError(UlError):
    """Northbound delivery failure (network, non-2xx, broker rejected publish).

    Never surfaced to command callers; the reporter logs it and moves on.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
