"""Process root wiring the registry, reporter, scheduler and ingress adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from aiohttp import web

from pyulsim._mqtt import UlMqttRuntime, command_subscription
from pyulsim._transport import NorthboundTransport, build_transport
from pyulsim.commands import CommandProcessor
from pyulsim.config import NorthboundProtocol, SimulatorConfig
from pyulsim.exceptions import UlError
from pyulsim.ingress.http import build_app
from pyulsim.ingress.mqtt import MqttCommandHandler
from pyulsim.models.device import default_population
from pyulsim.reporter import NorthboundReporter
from pyulsim.simulation.rules import RandomSource
from pyulsim.simulation.scheduler import SimulationScheduler
from pyulsim.state.store import DeviceStateStore

_logger = logging.getLogger(__name__)


class DeviceSimulator:
    """Run a fleet of Ultralight dummy devices.

    Usage::

        async with DeviceSimulator(SimulatorConfig.from_env()) as simulator:
            await simulator.serve_forever()

    Entering the context initializes the registry, connects the northbound
    transport, opens the HTTP command endpoints (and MQTT command topics
    when enabled) and starts both simulation cadences after
    ``config.startup_delay``.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: NorthboundTransport | None = None,
        rng: RandomSource | None = None,
        serve_http: bool = True,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport_override = transport
        self._rng = rng
        self._serve_http = serve_http
        self._loop: asyncio.AbstractEventLoop | None = None
        self._mqtt_runtime: UlMqttRuntime | None = None
        self._runner: web.AppRunner | None = None

        self.store = DeviceStateStore()
        self._reporter: NorthboundReporter | None = None
        self._processor: CommandProcessor | None = None
        self._scheduler: SimulationScheduler | None = None
        self._mqtt_handler: MqttCommandHandler | None = None

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def reporter(self) -> NorthboundReporter:
        return self._require(self._reporter)

    @property
    def processor(self) -> CommandProcessor:
        return self._require(self._processor)

    @property
    def scheduler(self) -> SimulationScheduler:
        return self._require(self._scheduler)

    @staticmethod
    def _require(component: Any) -> Any:
        if component is None:
            raise UlError("Simulator not started. Use 'async with DeviceSimulator(...) as simulator:'")
        return component

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DeviceSimulator:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        if self._reporter is not None:
            raise UlError("Simulator already started")
        config = self._config
        self._loop = asyncio.get_running_loop()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()

        if config.uses_mqtt:
            self._mqtt_runtime = UlMqttRuntime(
                loop=self._loop,
                on_message=self._on_mqtt_message,
                keepalive=config.mqtt_keepalive,
                logger=logging.getLogger("pyulsim.mqtt"),
            )

        transport = self._transport_override or build_transport(
            config,
            http_session=self._http_session,
            publisher=self._mqtt_runtime,
        )
        self._reporter = NorthboundReporter(transport)
        self._processor = CommandProcessor(self.store, self._reporter)
        self._scheduler = SimulationScheduler(
            self.store,
            self._reporter,
            fast_interval=config.fast_tick_interval,
            slow_interval=config.slow_tick_interval,
            rng=self._rng,
        )

        self.store.initialize(default_population(config.locations))
        _logger.info(
            "Simulating %d devices, reporting over %s to %s",
            len(self.store),
            config.transport,
            config.northbound_url if config.transport == NorthboundProtocol.HTTP else config.mqtt_broker_url,
        )

        if self._mqtt_runtime is not None:
            self._mqtt_handler = MqttCommandHandler(
                self._processor,
                self._mqtt_runtime,
                reporter=self._reporter,
                broker_url=config.mqtt_broker_url,
            )
            await self._loop.run_in_executor(
                None,
                self._mqtt_runtime.start,
                config.mqtt_broker_url,
                [command_subscription(config.api_key)],
            )

        if self._serve_http:
            self._runner = web.AppRunner(build_app(self._processor))
            await self._runner.setup()
            site = web.TCPSite(self._runner, config.listen_host, config.listen_port)
            await site.start()
            _logger.info("Listening for commands on %s:%s", config.listen_host, config.listen_port)

        self._scheduler.start(delay=config.startup_delay)

    async def stop(self) -> None:
        if self._scheduler is not None:
            await self._scheduler.stop()
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        if self._mqtt_runtime is not None and self._loop is not None:
            await self._loop.run_in_executor(None, self._mqtt_runtime.stop)
        if self._reporter is not None:
            await self._reporter.drain()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._loop = None

    async def serve_forever(self) -> None:
        """Block until cancelled."""
        await asyncio.Event().wait()

    def _on_mqtt_message(self, topic: str, message: str) -> None:
        if self._mqtt_handler is not None:
            self._mqtt_handler.handle(topic, message)
