"""Simulator configuration for pyulsim."""

from __future__ import annotations

import dataclasses
import enum
import os
from typing import Any

from pyulsim.exceptions import UlConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


class NorthboundProtocol(enum.StrEnum):
    """Transport used to report sensor state northbound."""

    HTTP = "HTTP"
    MQTT = "MQTT"

    @classmethod
    def parse(cls, value: str | NorthboundProtocol) -> NorthboundProtocol:
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise UlConfigError(f"Unsupported northbound transport: {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class SimulatorConfig:
    """Simulator configuration.

    Parameters
    ----------
    api_key : str
        API key of the service group the devices are provisioned under.
        Sent as ``k`` on HTTP pushes and used as the first topic segment.
    northbound_host : str
        Host of the IoT Agent southbound HTTP endpoint.
    northbound_port : int
        Port of the IoT Agent southbound HTTP endpoint.
    northbound_path : str
        Path of the Ultralight measure resource.
    transport : NorthboundProtocol
        ``HTTP`` or ``MQTT``. Fixed for the lifetime of a simulator.
    mqtt_broker_url : str
        Broker address, e.g. ``mqtt://mosquitto:1883``.
    mqtt_enabled : bool
        Connect to the broker and accept commands over MQTT. Always on
        when ``transport`` is ``MQTT``.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    listen_host : str
        Bind address of the HTTP command endpoints.
    listen_port : int
        Bind port of the HTTP command endpoints.
    locations : int
        Number of location groups (door, bell, lamp, motion each).
    fast_tick_interval : float
        Seconds between bell/motion/lamp simulation ticks.
    slow_tick_interval : float
        Seconds between door simulation ticks.
    startup_delay : float
        Seconds between registry initialization and the first tick.
    northbound_timeout : float
        Total timeout for one northbound HTTP push.
    """

    api_key: str = "1234"
    northbound_host: str = "localhost"
    northbound_port: int = 7896
    northbound_path: str = "/iot/d"
    transport: NorthboundProtocol = NorthboundProtocol.HTTP
    mqtt_broker_url: str = "mqtt://localhost:1883"
    mqtt_enabled: bool = False
    mqtt_keepalive: int = 60
    listen_host: str = "0.0.0.0"
    listen_port: int = 3001
    locations: int = 4
    fast_tick_interval: float = 1.0
    slow_tick_interval: float = 5.0
    startup_delay: float = 3.0
    northbound_timeout: float = 10.0

    @property
    def northbound_url(self) -> str:
        return f"http://{self.northbound_host}:{self.northbound_port}{self.northbound_path}"

    @property
    def uses_mqtt(self) -> bool:
        return self.mqtt_enabled or self.transport == NorthboundProtocol.MQTT

    @classmethod
    def from_env(cls, **overrides: Any) -> SimulatorConfig:
        """Create configuration from environment variables.

        Variable names follow the FIWARE dummy-device container
        (``DUMMY_DEVICES_*``, ``IOTA_HTTP_*``, ``MQTT_BROKER_URL``).
        Explicit keyword arguments override environment values.

        Raises
        ------
        UlConfigError
            When a numeric variable cannot be parsed or the transport is
            not recognized.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "DUMMY_DEVICES_API_KEY": "api_key",
            "IOTA_HTTP_HOST": "northbound_host",
            "IOTA_HTTP_PATH": "northbound_path",
            "MQTT_BROKER_URL": "mqtt_broker_url",
            "DUMMY_DEVICES_HOST": "listen_host",
        }
        _ENV_INT_MAP = {
            "IOTA_HTTP_PORT": "northbound_port",
            "MQTT_KEEPALIVE": "mqtt_keepalive",
            "DUMMY_DEVICES_PORT": "listen_port",
            "DUMMY_DEVICES_LOCATIONS": "locations",
        }
        _ENV_FLOAT_MAP = {
            "DUMMY_DEVICES_FAST_TICK": "fast_tick_interval",
            "DUMMY_DEVICES_SLOW_TICK": "slow_tick_interval",
            "DUMMY_DEVICES_STARTUP_DELAY": "startup_delay",
            "IOTA_HTTP_TIMEOUT": "northbound_timeout",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for mapping, convert in ((_ENV_INT_MAP, int), (_ENV_FLOAT_MAP, float)):
            for env_key, field_name in mapping.items():
                val = env.get(env_key)
                if val is None or field_name in overrides:
                    continue
                try:
                    config_kwargs[field_name] = convert(val)
                except ValueError as exc:
                    raise UlConfigError(f"{env_key} must be numeric, got {val!r}") from exc

        transport = NorthboundProtocol.parse(overrides.pop("transport", env.get("DUMMY_DEVICES_TRANSPORT", "HTTP")))
        config_kwargs["transport"] = transport

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(
                env.get("DUMMY_DEVICES_MQTT_ENABLED"),
                transport == NorthboundProtocol.MQTT,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
