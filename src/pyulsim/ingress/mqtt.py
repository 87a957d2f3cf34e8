"""MQTT command ingress.

Commands arrive on ``/<apiKey>/<deviceId>/cmd``; a successful actuation is
acknowledged on ``/<apiKey>/<deviceId>/cmdexe``. Unknown devices and
unsupported commands get no acknowledgement at all.
"""

from __future__ import annotations

import logging

from pyulsim import ultralight
from pyulsim._constants import TOPIC_COMMAND, TOPIC_COMMAND_EXE
from pyulsim._transport import Publisher
from pyulsim.commands import CommandProcessor
from pyulsim.exceptions import UlNorthboundError
from pyulsim.models.command import CommandOutcome
from pyulsim.reporter import NorthboundReporter
from pyulsim.state.events import TrafficDirection, TrafficTransport

_logger = logging.getLogger(__name__)


class MqttCommandHandler:
    """Turn inbound command messages into actuations and acknowledgements."""

    def __init__(
        self,
        processor: CommandProcessor,
        publisher: Publisher,
        *,
        reporter: NorthboundReporter | None = None,
        broker_url: str = "",
    ) -> None:
        self._processor = processor
        self._publisher = publisher
        self._reporter = reporter
        self._broker_url = broker_url

    def handle(self, topic: str, message: str) -> CommandOutcome | None:
        """Process one message; returns the outcome, or ``None`` when ignored."""
        if self._reporter is not None:
            self._reporter.emit_traffic(
                TrafficTransport.MQTT,
                TrafficDirection.SOUTHBOUND,
                f"{self._broker_url}{topic}  {message}",
            )

        path = topic.split("/")
        if len(path) < 2 or path[-1] != TOPIC_COMMAND:
            return None
        device_id = path[-2]

        outcome = self._processor.execute(device_id, ultralight.command_field(message))
        if not outcome.success:
            _logger.debug("Ignoring MQTT command on %s: %s", topic, outcome.reason)
            return None

        ack_topic = "/".join([*path[:-1], TOPIC_COMMAND_EXE])
        try:
            self._publisher.publish(ack_topic, outcome.ack)
        except UlNorthboundError as exc:
            _logger.warning("Could not acknowledge %s on %s: %s", device_id, ack_topic, exc)
        return outcome
