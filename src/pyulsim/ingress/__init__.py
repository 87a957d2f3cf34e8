"""Southbound ingress adapters (HTTP endpoints and MQTT command topics)."""

from pyulsim.ingress.http import build_app
from pyulsim.ingress.mqtt import MqttCommandHandler

__all__ = ["MqttCommandHandler", "build_app"]
