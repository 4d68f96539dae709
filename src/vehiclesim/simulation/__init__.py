"""
Simulation module - Fixed-cadence tick loop.

This module contains:
- Simulator: Polls commands, advances the vehicle, transmits telemetry
"""

from vehiclesim.simulation.simulator import Simulator, SimulatorConfig

__all__ = [
    "Simulator",
    "SimulatorConfig",
]
