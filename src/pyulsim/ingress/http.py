"""HTTP command endpoints (``POST /iot/<type><location>``).

The request body is an Ultralight command such as ``door001@open``.
Responses are plain text: ``200 door001@open| open OK`` or
``422 door001@open| open NOT OK``.
"""

from __future__ import annotations

import logging

from aiohttp import web

from pyulsim import ultralight
from pyulsim.commands import CommandProcessor
from pyulsim.models.device import DeviceType

_logger = logging.getLogger(__name__)

#: Device types that accept commands over HTTP.
ACTUATED_TYPES: tuple[DeviceType, ...] = (DeviceType.BELL, DeviceType.DOOR, DeviceType.LAMP)

PROCESSOR_KEY: web.AppKey[CommandProcessor] = web.AppKey("processor", CommandProcessor)


def _make_handler(device_type: DeviceType):
    async def handle(request: web.Request) -> web.Response:
        processor = request.app[PROCESSOR_KEY]
        body = (await request.read()).decode("utf-8", errors="replace")
        device_id = f"{device_type}{request.match_info['location']}"
        outcome = processor.execute(device_id, ultralight.command_field(body))
        status = 200 if outcome.success else 422
        _logger.debug("HTTP command %s %r -> %s", device_id, body, status)
        return web.Response(status=status, text=outcome.ack, content_type="text/plain")

    handle.__name__ = f"process_{device_type}_command"
    return handle


def build_app(processor: CommandProcessor) -> web.Application:
    """Create the aiohttp application serving the per-type command endpoints."""
    app = web.Application()
    app[PROCESSOR_KEY] = processor
    for device_type in ACTUATED_TYPES:
        app.router.add_post(f"/iot/{device_type}{{location}}", _make_handler(device_type))
    return app
