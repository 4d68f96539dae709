"""
Vehicle dynamics - Physics integrator for the vehicle's continuous quantities.

Provides:
- Engine RPM recompute and automatic shifting
- Longitudinal force balance and speed integration
- Odometer and trip distance
- Fuel consumption with percentage carry
- Engine temperature
- Signal/battery timers and stall detection
"""

from dataclasses import dataclass, field
import logging

import numpy as np

from vehiclesim.vehicle.engine import Engine, EngineConfig
from vehiclesim.vehicle.transmission import Transmission, TransmissionConfig
from vehiclesim.vehicle.electrics import Electrics, ElectricsConfig
from vehiclesim.vehicle.state import VehicleState, TransmissionMode

logger = logging.getLogger(__name__)


@dataclass
class PhysicsConfig:
    """Physics simulation configuration."""
    # Gravity
    gravity: float = 9.81

    # Air properties and body
    air_density: float = 1.225
    drag_coefficient: float = 0.39
    frontal_area_m2: float = 2.2

    # Vehicle
    mass_kg: float = 1950.0
    rolling_resistance: float = 0.02
    max_brake_force_n: float = 2000.0

    # Speed limits (m/s)
    max_speed_ms: float = 60.0
    creep_threshold_ms: float = 0.1

    # Fuel
    tank_capacity_l: float = 50.0
    fuel_rate_min_speed_ms: float = 1.0  # Below this L/100km reads zero


@dataclass
class TickResult:
    """Per-tick outputs of the integrator."""
    dt: float = 0.0
    distance_m: float = 0.0
    fuel_flow_lph: float = 0.0
    shift: int = 0
    stalled: bool = False
    forces: dict = field(default_factory=dict)


class PhysicsIntegrator:
    """Longitudinal vehicle physics.

    Runs once per tick after discrete requests have been applied. Order:
    RPM, automatic shift, torque and forces, speed, distance, fuel, fuel
    rate, temperature, signal/battery timers, stall check.

    Usage:
        physics = PhysicsIntegrator()
        physics.step(state, dt=0.05)
    """

    def __init__(
        self,
        config: PhysicsConfig | None = None,
        engine: Engine | None = None,
        transmission: Transmission | None = None,
        electrics: Electrics | None = None,
    ):
        """Initialize integrator.

        Args:
            config: Physics configuration. Uses defaults if None.
            engine: Engine model
            transmission: Transmission state machine
            electrics: Electrics state machine
        """
        self.config = config or PhysicsConfig()
        self.engine = engine or Engine(EngineConfig())
        self.transmission = transmission or Transmission(TransmissionConfig())
        self.electrics = electrics or Electrics(ElectricsConfig())

    @property
    def fuel_per_percent_l(self) -> float:
        """Liters of fuel in one percentage point of the tank."""
        return self.config.tank_capacity_l / 100.0

    def calculate_drag(self, speed: float) -> float:
        """Aerodynamic drag in N."""
        cfg = self.config
        return 0.5 * cfg.air_density * cfg.drag_coefficient * cfg.frontal_area_m2 * speed * speed

    def calculate_rolling_resistance(self) -> float:
        """Rolling resistance in N."""
        return self.config.rolling_resistance * self.config.mass_kg * self.config.gravity

    def calculate_brake_force(self, brake: float) -> float:
        """Braking force in N."""
        return brake * self.config.max_brake_force_n

    def calculate_drive_force(self, state: VehicleState, torque: float) -> float:
        """Propulsive force at the contact patch in N.

        Zero unless the engine is running in DRIVE or REVERSE.
        """
        if not state.ignition:
            return 0.0
        if state.transmission_mode not in (TransmissionMode.DRIVE, TransmissionMode.REVERSE):
            return 0.0
        total_ratio = self.transmission.get_total_ratio(state)
        if total_ratio <= 0.0:
            return 0.0
        return torque * total_ratio / self.transmission.config.wheel_radius_m

    def update_rpm(self, state: VehicleState) -> int:
        """Recompute engine RPM from the current speed and gear."""
        in_gear = state.transmission_mode in (TransmissionMode.DRIVE, TransmissionMode.REVERSE)
        lugging = in_gear and state.throttle_intent == 0.0 and state.brake_intent >= 1.0
        state.engine_rpm = self.engine.calculate_rpm(
            state.ignition,
            in_gear,
            state.speed,
            self.transmission.get_total_ratio(state),
            self.transmission.config.wheel_radius_m,
            lugging=lugging,
        )
        return state.engine_rpm

    def integrate_speed(self, state: VehicleState, net_force: float, dt: float) -> float:
        """Integrate speed from the net force.

        Args:
            state: Vehicle state to modify
            net_force: Net longitudinal force in N
            dt: Time step

        Returns:
            New speed in m/s
        """
        cfg = self.config
        acceleration = net_force / cfg.mass_kg
        new_speed = state.speed + acceleration * dt

        if state.transmission_mode == TransmissionMode.PARK:
            new_speed = 0.0
        elif state.transmission_mode != TransmissionMode.NEUTRAL and new_speed < cfg.creep_threshold_ms:
            new_speed = 0.0

        state.speed = float(np.clip(new_speed, 0.0, cfg.max_speed_ms))
        return state.speed

    def consume_fuel(self, state: VehicleState, flow_lph: float, dt: float) -> None:
        """Accumulate fuel used and carry whole percentage points to the gauge."""
        if not state.ignition:
            return
        state.fuel_accumulator_liters += flow_lph * (dt / 3600.0)
        if state.fuel_accumulator_liters >= self.fuel_per_percent_l:
            state.fuel_level_percent = max(0, state.fuel_level_percent - 1)
            state.fuel_accumulator_liters -= self.fuel_per_percent_l

    def calculate_fuel_rate(self, flow_lph: float, speed: float) -> float:
        """Displayed consumption in L/100km (zero when nearly stationary)."""
        if speed <= self.config.fuel_rate_min_speed_ms:
            return 0.0
        hours_per_100km = 100.0 / (speed * 3.6)
        return flow_lph * hours_per_100km

    def step(self, state: VehicleState, dt: float) -> TickResult:
        """Advance the vehicle by one time step.

        Args:
            state: Vehicle state to modify
            dt: Time step in seconds

        Returns:
            Per-tick outputs
        """
        result = TickResult(dt=dt)
        self.transmission.normalize_gear(state)

        # RPM and shifting
        rpm = self.update_rpm(state)
        result.shift = self.transmission.auto_shift(state)

        # Forces
        torque = self.engine.get_torque(rpm, state.throttle_intent)
        drive = self.calculate_drive_force(state, torque)
        drag = self.calculate_drag(state.speed)
        rolling = self.calculate_rolling_resistance()
        braking = self.calculate_brake_force(state.brake_intent)
        result.forces = {
            "drive_n": drive,
            "drag_n": drag,
            "rolling_n": rolling,
            "brake_n": braking,
        }

        self.integrate_speed(state, drive - drag - rolling - braking, dt)

        # Distance
        result.distance_m = state.speed * dt
        state.odometer_km += result.distance_m / 1000.0
        state.trip_km += result.distance_m / 1000.0

        # Fuel
        result.fuel_flow_lph = self.engine.get_fuel_flow(state.ignition, rpm, state.throttle_intent)
        self.consume_fuel(state, result.fuel_flow_lph, dt)
        state.fuel_rate_l_per_100km = self.calculate_fuel_rate(result.fuel_flow_lph, state.speed)

        # Temperature
        state.engine_temp_celsius = self.engine.update_temperature(
            state.engine_temp_celsius,
            state.ignition,
            rpm,
            state.throttle_intent,
            state.speed,
        )

        self.electrics.update(state, dt, result.distance_m)

        # Stall
        neutral = state.transmission_mode == TransmissionMode.NEUTRAL
        if self.engine.is_stalled(state.ignition, state.engine_rpm, neutral):
            self.electrics.stall(state)
            result.stalled = True

        return result
