from __future__ import annotations

import pytest

from pyulsim.commands import CommandProcessor
from pyulsim.exceptions import UlNorthboundError
from pyulsim.ingress.mqtt import MqttCommandHandler
from pyulsim.models.device import default_population
from pyulsim.reporter import NorthboundReporter
from pyulsim.state.events import TrafficDirection, TrafficEvent, TrafficTransport
from pyulsim.state.store import DeviceStateStore


class _FakePublisher:
    def __init__(self, *, fail: bool = False) -> None:
        self.published: list[tuple[str, str]] = []
        self._fail = fail

    def publish(self, topic: str, payload: str) -> None:
        if self._fail:
            raise UlNorthboundError("MQTT client is not connected")
        self.published.append((topic, payload))


class _RecordingTransport:
    name = TrafficTransport.MQTT

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def trace(self, device_id: str, payload: str) -> str:
        return device_id

    async def send(self, device_id: str, payload: str) -> None:
        self.sent.append((device_id, payload))


def _setup(
    publisher: _FakePublisher | None = None,
) -> tuple[DeviceStateStore, NorthboundReporter, _FakePublisher, MqttCommandHandler]:
    store = DeviceStateStore()
    store.initialize(default_population())
    reporter = NorthboundReporter(_RecordingTransport())
    publisher = publisher or _FakePublisher()
    handler = MqttCommandHandler(
        CommandProcessor(store, reporter),
        publisher,
        reporter=reporter,
        broker_url="mqtt://broker:1883",
    )
    return store, reporter, publisher, handler


@pytest.mark.asyncio
async def test_command_is_applied_and_acknowledged() -> None:
    store, reporter, publisher, handler = _setup()

    outcome = handler.handle("/1234/door001/cmd", "door001@open")
    await reporter.drain()

    assert outcome is not None and outcome.success
    assert store.get("door001") == {"s": "OPEN"}
    assert publisher.published == [("/1234/door001/cmdexe", "door001@open| open OK")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("topic", "message"),
    [
        ("/1234/door999/cmd", "door999@open"),
        ("/1234/lamp001/cmd", "lamp001@ring"),
        ("/1234/motion001/cmd", "motion001@on"),
        ("/1234/door001/attrs", "door001@open"),
        ("cmd", "door001@open"),
    ],
)
async def test_rejected_commands_are_silent(topic: str, message: str) -> None:
    store, reporter, publisher, handler = _setup()
    before = store.snapshot()

    assert handler.handle(topic, message) is None
    await reporter.drain()

    assert publisher.published == []
    assert store.snapshot() == before


@pytest.mark.asyncio
async def test_inbound_message_emits_southbound_traffic() -> None:
    _store, reporter, _publisher, handler = _setup()
    traffic: list[TrafficEvent] = []
    reporter.subscribe_traffic(traffic.append)

    handler.handle("/1234/lamp003/cmd", "lamp003@on")
    await reporter.drain()

    southbound = [event for event in traffic if event.direction == TrafficDirection.SOUTHBOUND]
    assert len(southbound) == 1
    assert southbound[0].transport == TrafficTransport.MQTT
    assert southbound[0].summary == "mqtt://broker:1883/1234/lamp003/cmd  lamp003@on"


@pytest.mark.asyncio
async def test_failed_ack_keeps_the_actuation() -> None:
    store, reporter, publisher, handler = _setup(_FakePublisher(fail=True))

    outcome = handler.handle("/1234/lamp004/cmd", "lamp004@on")
    await reporter.drain()

    assert outcome is not None and outcome.success
    assert store.get("lamp004") == {"s": "ON", "l": "1750"}
    assert publisher.published == []
