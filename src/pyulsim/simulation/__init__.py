"""Simulation layer: periodic tasks and per-type evolution rules."""

from pyulsim.simulation.periodic import PeriodicTask
from pyulsim.simulation.scheduler import SimulationScheduler

__all__ = ["PeriodicTask", "SimulationScheduler"]
