from __future__ import annotations

import pytest

from pyulsim.exceptions import UlMalformedProtocolError, UlRegistryError, UlUnknownDeviceError
from pyulsim.models.device import Device, DeviceType, default_population
from pyulsim.state.store import DeviceStateStore


def _store() -> DeviceStateStore:
    store = DeviceStateStore()
    store.initialize(default_population())
    return store


def test_initialize_holds_full_population() -> None:
    store = _store()
    assert len(store) == 16
    assert "door001" in store
    assert "door999" not in store
    assert store.get("door001") == {"s": "LOCKED"}


def test_initialize_only_once() -> None:
    store = _store()
    with pytest.raises(UlRegistryError):
        store.initialize(default_population())
    assert len(store) == 16


def test_duplicate_ids_rejected() -> None:
    door = Device.build(DeviceType.DOOR, 1)
    with pytest.raises(UlRegistryError):
        DeviceStateStore().initialize([(door, "s|LOCKED"), (door, "s|OPEN")])


def test_get_unknown_device() -> None:
    store = _store()
    with pytest.raises(UlUnknownDeviceError) as exc_info:
        store.get("door999")
    assert exc_info.value.device_id == "door999"


def test_set_reports_change_against_previous_value() -> None:
    store = _store()
    assert store.set("door001", "s|OPEN") is True
    assert store.set("door001", "s|OPEN") is False
    assert store.set("door001", "s|LOCKED") is True


def test_commit_uses_type_sensor_flag_by_default() -> None:
    store = _store()
    bell = store.commit("bell001", "s|ON")
    assert bell.is_sensor is False
    assert bell.previous == "s|OFF"
    assert bell.changed is True

    lamp = store.commit("lamp001", "s|OFF|l|0", is_sensor=True)
    assert lamp.is_sensor is True
    assert lamp.changed is False


def test_update_is_read_modify_write() -> None:
    store = _store()

    def _open(state: dict[str, str]) -> None:
        state["s"] = "OPEN"

    change = store.update("door002", _open)
    assert change.previous == "s|LOCKED"
    assert change.state == "s|OPEN"
    assert store.get_raw("door002") == "s|OPEN"


def test_update_on_malformed_state_raises_and_keeps_value() -> None:
    store = _store()
    store.set("lamp001", "s|ON|l")
    with pytest.raises(UlMalformedProtocolError):
        store.update("lamp001", lambda state: None)
    assert store.get_raw("lamp001") == "s|ON|l"


def test_list_ids_is_registration_order() -> None:
    store = _store()
    assert store.list_ids() == [device.device_id for device, _ in default_population()]


def test_co_located_status_defaults() -> None:
    store = DeviceStateStore()
    lamp = Device.build(DeviceType.LAMP, 7)
    store.initialize([(lamp, "s|ON|l|1750"), (Device.build(DeviceType.DOOR, 8), "s|OPEN")])

    assert store.co_located_status(lamp, DeviceType.DOOR, "LOCKED") == "LOCKED"
    door = store.device("door008")
    assert store.co_located_status(door, DeviceType.LAMP, "OFF") == "OFF"
    assert store.co_located_status(store.device("lamp007"), DeviceType.LAMP, "OFF") == "ON"
