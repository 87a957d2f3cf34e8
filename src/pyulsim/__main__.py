"""Command line entry point: ``python -m pyulsim``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pyulsim.config import SimulatorConfig
from pyulsim.exceptions import UlConfigError
from pyulsim.simulator import DeviceSimulator
from pyulsim.state.events import DeviceStateEvent, TrafficEvent

_LOG = logging.getLogger("pyulsim")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate Ultralight dummy devices (doors, bells, lamps, motion sensors).",
    )
    parser.add_argument(
        "--transport",
        choices=["HTTP", "MQTT", "http", "mqtt"],
        help="Northbound transport (default: $DUMMY_DEVICES_TRANSPORT or HTTP).",
    )
    parser.add_argument("--api-key", help="API key (default: $DUMMY_DEVICES_API_KEY or 1234).")
    parser.add_argument("--port", type=int, help="Command endpoint port (default: $DUMMY_DEVICES_PORT or 3001).")
    parser.add_argument("--broker", help="MQTT broker URL (default: $MQTT_BROKER_URL).")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every state and traffic notification at DEBUG.",
    )
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> SimulatorConfig:
    overrides: dict[str, object] = {}
    if args.transport:
        overrides["transport"] = args.transport
    if args.api_key:
        overrides["api_key"] = args.api_key
    if args.port is not None:
        overrides["listen_port"] = args.port
    if args.broker:
        overrides["mqtt_broker_url"] = args.broker
    return SimulatorConfig.from_env(**overrides)


def _log_state(event: DeviceStateEvent) -> None:
    _LOG.debug("%s %s", event.device_id, event.state)


def _log_traffic(event: TrafficEvent) -> None:
    _LOG.debug("[%s %s] %s", event.transport, event.direction, event.summary)


async def _run(config: SimulatorConfig, *, trace: bool) -> None:
    async with DeviceSimulator(config) as simulator:
        if trace:
            simulator.reporter.subscribe(_log_state)
            simulator.reporter.subscribe_traffic(_log_traffic)
        await simulator.serve_forever()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.trace else getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _build_config(args)
    except UlConfigError as exc:
        _LOG.error("%s", exc)
        return 2

    try:
        asyncio.run(_run(config, trace=args.trace))
    except KeyboardInterrupt:
        _LOG.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
