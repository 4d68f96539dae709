"""
vehiclesim - A road vehicle simulator publishing CAN telemetry.

This package provides a longitudinal vehicle simulation with:
- Automatic transmission with P/R/N/D selector and speed-gated shifting
- Ignition, turn signals, hazards, battery and lights
- Engine, driveline and road-load physics with fuel and thermal models
- Fixed-format telemetry frames sent every tick over python-can
"""

__version__ = "0.1.0"

from vehiclesim.simulation.simulator import Simulator
from vehiclesim.vehicle.vehicle import Vehicle
from vehiclesim.telemetry.frames import TelemetryEncoder

__all__ = ["Simulator", "Vehicle", "TelemetryEncoder", "__version__"]
