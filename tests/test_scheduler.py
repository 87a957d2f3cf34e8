from __future__ import annotations

import random

import pytest

from pyulsim.commands import CommandProcessor
from pyulsim.models.device import default_population
from pyulsim.reporter import NorthboundReporter
from pyulsim.simulation.scheduler import SimulationScheduler
from pyulsim.state.events import TrafficTransport
from pyulsim.state.store import DeviceStateStore


class _RecordingTransport:
    name = TrafficTransport.HTTP

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def trace(self, device_id: str, payload: str) -> str:
        return device_id

    async def send(self, device_id: str, payload: str) -> None:
        self.sent.append((device_id, payload))


class _RecordingReporter(NorthboundReporter):
    def __init__(self, transport: _RecordingTransport) -> None:
        super().__init__(transport)
        self.calls: list[tuple[str, bool]] = []

    def report(self, device_id: str, state: str, *, changed: bool, is_sensor: bool) -> bool:
        self.calls.append((device_id, is_sensor))
        return super().report(device_id, state, changed=changed, is_sensor=is_sensor)


class _ConstantRandom:
    def __init__(self, value: int) -> None:
        self._value = value

    def randint(self, a: int, b: int) -> int:
        return self._value


def _setup(
    rng: object | None = None,
) -> tuple[DeviceStateStore, _RecordingReporter, _RecordingTransport, SimulationScheduler]:
    store = DeviceStateStore()
    store.initialize(default_population())
    transport = _RecordingTransport()
    reporter = _RecordingReporter(transport)
    scheduler = SimulationScheduler(store, reporter, rng=rng or random.Random(1234))  # type: ignore[arg-type]
    return store, reporter, transport, scheduler


@pytest.mark.asyncio
async def test_bell_rings_then_turns_off_without_reporting() -> None:
    store, reporter, transport, scheduler = _setup()
    processor = CommandProcessor(store, reporter)

    assert processor.execute("bell001", "bell001@ring").success
    assert store.get("bell001") == {"s": "ON"}

    scheduler.fast_tick()
    await reporter.drain()

    assert store.get("bell001") == {"s": "OFF"}
    assert all(not device_id.startswith("bell") for device_id, _ in transport.sent)
    assert ("bell001", False) in reporter.calls
    assert ("bell001", True) not in reporter.calls


@pytest.mark.asyncio
async def test_open_door_scenario_reports_motion_not_bell() -> None:
    store, reporter, transport, scheduler = _setup(_ConstantRandom(10))
    store.set("door001", "s|OPEN")
    store.set("lamp001", "s|ON|l|1750")

    scheduler.fast_tick()
    await reporter.drain()

    assert store.get("motion001")["c"] in {"0", "1"}
    assert ("motion001", True) in reporter.calls
    assert ("motion001", "c|1") in transport.sent
    assert not any(device_id == "bell001" for device_id, _ in transport.sent)
    # Lamp brightened: 1750 + 100, then + 30 + 100, capped at 2000.
    assert store.get("lamp001")["l"] == "1980"


@pytest.mark.asyncio
async def test_motion_scenario_with_random_draws() -> None:
    store, reporter, _transport, scheduler = _setup()
    store.set("door001", "s|OPEN")
    store.set("lamp001", "s|ON|l|1750")

    scheduler.fast_tick()
    await reporter.drain()

    assert store.get("motion001")["c"] in {"0", "1"}
    assert ("motion001", True) in reporter.calls
    assert ("bell001", True) not in reporter.calls


@pytest.mark.asyncio
async def test_lamp_off_has_zero_luminosity_after_tick() -> None:
    store, reporter, _transport, scheduler = _setup()
    store.set("lamp002", "s|OFF|l|900")

    scheduler.fast_tick()
    await reporter.drain()

    assert store.get("lamp002") == {"s": "OFF", "l": "0"}


@pytest.mark.asyncio
async def test_luminosity_stays_in_bounds_over_many_ticks() -> None:
    store, reporter, _transport, scheduler = _setup(random.Random(42))
    processor = CommandProcessor(store, reporter)
    for location in ("001", "002", "003", "004"):
        processor.execute(f"lamp{location}", "x@on")
    processor.execute("door001", "x@open")
    processor.execute("door002", "x@unlock")

    for tick in range(400):
        scheduler.fast_tick()
        if tick % 5 == 0:
            scheduler.slow_tick()
        for location in ("001", "002", "003", "004"):
            luminosity = int(store.get(f"lamp{location}")["l"])
            assert 0 <= luminosity <= 2000
    await reporter.drain()


@pytest.mark.asyncio
async def test_slow_tick_only_moves_unlocked_doors() -> None:
    store, reporter, transport, scheduler = _setup(_ConstantRandom(10))
    store.set("door002", "s|CLOSED")
    before = store.snapshot()

    scheduler.slow_tick()
    await reporter.drain()

    assert store.get("door001") == {"s": "LOCKED"}
    assert store.get("door002") == {"s": "OPEN"}
    assert transport.sent == [("door002", "s|OPEN")]
    non_doors = {k: v for k, v in store.snapshot().items() if not k.startswith("door")}
    assert non_doors == {k: v for k, v in before.items() if not k.startswith("door")}


@pytest.mark.asyncio
async def test_slow_tick_uses_co_located_lamp() -> None:
    store, reporter, _transport, scheduler = _setup(_ConstantRandom(5))
    store.set("door001", "s|CLOSED")
    store.set("door002", "s|CLOSED")
    store.set("lamp001", "s|ON|l|1750")

    scheduler.slow_tick()
    await reporter.drain()

    # A draw of 5 beats the lamp-on threshold (3) but not the lamp-off one (6).
    assert store.get("door001") == {"s": "OPEN"}
    assert store.get("door002") == {"s": "CLOSED"}


@pytest.mark.asyncio
async def test_malformed_device_does_not_halt_tick() -> None:
    store, reporter, _transport, scheduler = _setup()
    store.set("bell001", "s|ON")
    store.set("lamp001", "s|ON|l")

    scheduler.fast_tick()
    await reporter.drain()

    assert store.get_raw("lamp001") == "s|ON|l"
    assert store.get("bell001") == {"s": "OFF"}


@pytest.mark.asyncio
async def test_fast_tick_notifies_every_device_without_pushing_doors() -> None:
    store, reporter, transport, scheduler = _setup()
    seen: list[str] = []
    reporter.subscribe(lambda event: seen.append(event.device_id))

    scheduler.fast_tick()
    await reporter.drain()

    assert sorted(seen) == sorted(store.list_ids())
    assert store.get("door001") == {"s": "LOCKED"}
    assert not any(device_id.startswith("door") for device_id, _ in transport.sent)
