"""
Vehicle module - Road car simulation.

This module contains all vehicle-related components:
- VehicleState: The mutable state aggregate and its snapshots
- Engine: RPM, torque curve, fuel flow, temperature
- Transmission: Selector and automatic gearbox
- Electrics: Ignition, signals, battery, lights
- PhysicsIntegrator: Longitudinal dynamics
- Vehicle: Per-tick pipeline tying them together
"""

from vehiclesim.vehicle.state import (
    VehicleState,
    VehicleSnapshot,
    TransmissionMode,
    REVERSE_GEAR_INDEX,
)
from vehiclesim.vehicle.engine import Engine, EngineConfig
from vehiclesim.vehicle.transmission import Transmission, TransmissionConfig
from vehiclesim.vehicle.electrics import Electrics, ElectricsConfig
from vehiclesim.vehicle.dynamics import PhysicsIntegrator, PhysicsConfig
from vehiclesim.vehicle.vehicle import Vehicle, VehicleConfig

__all__ = [
    "VehicleState",
    "VehicleSnapshot",
    "TransmissionMode",
    "REVERSE_GEAR_INDEX",
    "Engine",
    "EngineConfig",
    "Transmission",
    "TransmissionConfig",
    "Electrics",
    "ElectricsConfig",
    "PhysicsIntegrator",
    "PhysicsConfig",
    "Vehicle",
    "VehicleConfig",
]
