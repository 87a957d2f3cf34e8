"""Command execution outcome."""

from __future__ import annotations

from pyulsim._constants import ACK_NOT_OK, ACK_OK, PAIR_SEPARATOR
from pyulsim.models._base import UlBaseModel


class CommandOutcome(UlBaseModel):
    """Result of executing one southbound command.

    ``field`` is the raw command field as received (``door001@open``) and
    is echoed back verbatim in the acknowledgement.
    """

    device_id: str
    field: str
    command: str
    success: bool
    state: str | None = None
    reason: str | None = None

    @property
    def ack(self) -> str:
        """Acknowledgement text, e.g. ``door001@open| open OK``."""
        marker = ACK_OK if self.success else ACK_NOT_OK
        return f"{self.field}{PAIR_SEPARATOR} {self.command}{marker}"
