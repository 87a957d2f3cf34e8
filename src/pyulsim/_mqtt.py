"""Internal MQTT runtime: broker parsing, subscribe and publish helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyulsim._constants import DEFAULT_MQTT_PORT, DEFAULT_MQTTS_PORT, TOPIC_ATTRS, TOPIC_COMMAND
from pyulsim.exceptions import UlConfigError, UlNorthboundError


def parse_broker_url(raw_broker: str) -> tuple[str, int, bool]:
    """Split ``mqtt://host:port`` into ``(host, port, tls)``.

    The port defaults to 1883, or 8883 for ``mqtts://``.
    """
    value = raw_broker.strip()
    if not value:
        raise UlConfigError("Broker URL is empty")

    scheme = "mqtt"
    if "://" in value:
        scheme, value = value.split("://", 1)
        scheme = scheme.lower()
    if "/" in value:
        value = value.split("/", 1)[0]

    tls = scheme in {"mqtts", "ssl", "tls"}
    host, _, maybe_port = value.rpartition(":")
    if host and maybe_port.isdigit():
        return host, int(maybe_port), tls
    if not value:
        raise UlConfigError(f"Broker URL has no host: {raw_broker!r}")
    return value, DEFAULT_MQTTS_PORT if tls else DEFAULT_MQTT_PORT, tls


def attrs_topic(api_key: str, device_id: str) -> str:
    """Topic a device publishes its measures on."""
    return f"/{api_key}/{device_id}/{TOPIC_ATTRS}"


def command_subscription(api_key: str) -> str:
    """Wildcard subscription matching every device's command topic."""
    return f"/{api_key}/+/{TOPIC_COMMAND}"


class UlMqttRuntime:
    """Threaded paho-mqtt runtime that hands inbound messages to an asyncio loop.

    paho runs its own network thread; inbound messages are forwarded with
    ``call_soon_threadsafe`` so every handler executes on the event loop.
    ``publish`` only enqueues and never waits for the broker.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_message: Callable[[str, str], None],
        keepalive: int = 60,
        client_id: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_message = on_message
        self._keepalive = keepalive
        self._client_id = client_id
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._topics: tuple[str, ...] = ()

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def start(self, broker_url: str, topics: Sequence[str]) -> None:
        """Connect (asynchronously) and subscribe to *topics* on every connect."""
        self.stop()
        host, port, tls = parse_broker_url(broker_url)
        self._logger.debug("MQTT runtime start requested host=%s port=%s topics=%s", host, port, list(topics))

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if tls:
            client.tls_set()

        self._topics = tuple(topics)

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            for topic in self._topics:
                self._logger.debug("MQTT subscribing topic=%s", topic)
                c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            text = bytes(msg.payload).decode("utf-8", errors="replace")
            self._logger.debug("Received PUBLISH topic=%s payload=%s", msg.topic, text)
            self._loop.call_soon_threadsafe(self._on_message, msg.topic, text)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        # connect_async lets the network thread keep retrying while the broker is down.
        client.connect_async(host, port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def publish(self, topic: str, payload: str) -> None:
        """Enqueue a QoS 0 publish.

        Raises :class:`UlNorthboundError` when the client is not running or
        paho refuses the message (e.g. not connected).
        """
        client = self._client
        if client is None or not self._running:
            raise UlNorthboundError("MQTT runtime is not running", endpoint=topic)
        info = client.publish(topic, payload, qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise UlNorthboundError(
                f"MQTT publish to {topic} failed: {mqtt.error_string(info.rc)}",
                endpoint=topic,
            )

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        self._topics = ()

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
