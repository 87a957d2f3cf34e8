"""Northbound transports: HTTP POST to the IoT Agent or MQTT publish."""

from __future__ import annotations

import logging
from typing import Protocol

import aiohttp

from pyulsim._mqtt import attrs_topic
from pyulsim.config import NorthboundProtocol, SimulatorConfig
from pyulsim.exceptions import UlConfigError, UlNorthboundError
from pyulsim.state.events import TrafficTransport

_logger = logging.getLogger(__name__)


class NorthboundTransport(Protocol):
    """Structural transport interface used by the reporter.

    Keeping this a protocol lets tests hand the reporter a recording
    double instead of a live HTTP session or broker.
    """

    name: TrafficTransport

    def trace(self, device_id: str, payload: str) -> str:
        ...

    async def send(self, device_id: str, payload: str) -> None:
        ...


class Publisher(Protocol):
    def publish(self, topic: str, payload: str) -> None:
        ...


class HttpNorthbound:
    """POST ``text/plain`` Ultralight measures to ``{url}?k=<apiKey>&i=<deviceId>``."""

    name = TrafficTransport.HTTP

    def __init__(self, config: SimulatorConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.northbound_timeout)

    def trace(self, device_id: str, payload: str) -> str:
        return f"POST {self._config.northbound_url}?i={device_id}&k={self._config.api_key}  {payload}"

    async def send(self, device_id: str, payload: str) -> None:
        url = self._config.northbound_url
        params = {"k": self._config.api_key, "i": device_id}
        headers = {"content-type": "text/plain"}

        _logger.debug("POST %s i=%s", url, device_id)

        try:
            async with self._http.post(
                url,
                params=params,
                data=payload.encode("utf-8"),
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    raise UlNorthboundError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except UlNorthboundError:
            raise
        except TimeoutError as exc:
            raise UlNorthboundError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise UlNorthboundError(f"Request to {url} failed: {exc}", endpoint=url) from exc


class MqttNorthbound:
    """Publish Ultralight measures to ``/{apiKey}/{deviceId}/attrs``."""

    name = TrafficTransport.MQTT

    def __init__(self, config: SimulatorConfig, publisher: Publisher) -> None:
        self._config = config
        self._publisher = publisher

    def trace(self, device_id: str, payload: str) -> str:
        return f"{attrs_topic(self._config.api_key, device_id)}  {payload}"

    async def send(self, device_id: str, payload: str) -> None:
        self._publisher.publish(attrs_topic(self._config.api_key, device_id), payload)


def build_transport(
    config: SimulatorConfig,
    *,
    http_session: aiohttp.ClientSession | None = None,
    publisher: Publisher | None = None,
) -> NorthboundTransport:
    """Pick the transport named by ``config.transport``."""
    if config.transport == NorthboundProtocol.HTTP:
        if http_session is None:
            raise UlConfigError("HTTP transport requires an aiohttp session")
        return HttpNorthbound(config, http_session)
    if publisher is None:
        raise UlConfigError("MQTT transport requires a running MQTT publisher")
    return MqttNorthbound(config, publisher)
