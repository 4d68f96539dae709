"""
Engine component - Combustion engine model for a road car.

Simulates:
- RPM derived from wheel speed through the driveline
- Triangular torque curve
- Fuel flow (idle to full load)
- Engine temperature (integer thermal model)
"""

from dataclasses import dataclass
import numpy as np


@dataclass
class EngineConfig:
    """Configuration for a road car petrol engine.

    Default values describe a mid-size automatic saloon.
    """
    # RPM limits
    idle_rpm: float = 800.0
    stall_rpm: float = 500.0

    # Torque curve (triangular, peaking at peak_torque_rpm)
    max_torque_nm: float = 250.0
    peak_torque_rpm: float = 3000.0
    torque_falloff_rpm: float = 4000.0  # RPM distance at which the curve reaches zero
    min_torque_nm: float = 50.0          # Floor so idle torque is nonzero

    # Fuel flow (liters per hour)
    idle_fuel_rate_lph: float = 0.8
    max_fuel_rate_lph: float = 25.0
    fuel_throttle_weight: float = 0.7
    fuel_rpm_weight: float = 0.3
    fuel_rpm_reference: float = 6000.0

    # Thermal characteristics
    ambient_temp_c: int = 20
    max_temp_c: int = 120
    heat_rpm_reference: float = 5000.0
    heat_rpm_gain: float = 0.5
    heat_throttle_gain: float = 0.5
    cooling_speed_reference: float = 20.0  # m/s
    cooling_gain: float = 0.8

    # Release the idle floor when braking hard in gear with no throttle
    lug_under_full_brake: bool = True


class Engine:
    """Road car engine model.

    Stateless with respect to the vehicle: every method reads the quantities
    it needs and returns a value for the caller to store.
    """

    def __init__(self, config: EngineConfig | None = None):
        """Initialize engine with optional custom configuration.

        Args:
            config: Engine configuration. Uses defaults if None.
        """
        self.config = config or EngineConfig()

    def calculate_rpm(
        self,
        ignition: bool,
        in_gear: bool,
        wheel_speed_ms: float,
        total_ratio: float,
        wheel_radius_m: float,
        lugging: bool = False,
    ) -> int:
        """Calculate engine RPM from the driveline.

        Args:
            ignition: Engine running
            in_gear: Driveline engaged (DRIVE or REVERSE)
            wheel_speed_ms: Vehicle speed in m/s
            total_ratio: Gear ratio * final drive (0 when no gear)
            wheel_radius_m: Driven wheel radius
            lugging: Drop the idle floor (full brake, no throttle)

        Returns:
            Engine RPM, truncated to an integer
        """
        if not ignition:
            return 0

        idle = self.config.idle_rpm
        if not in_gear or total_ratio == 0.0:
            return int(idle)

        wheel_rps = wheel_speed_ms / (2 * np.pi * wheel_radius_m)
        rpm = wheel_rps * total_ratio * 60.0
        if lugging and self.config.lug_under_full_brake:
            return int(rpm)
        return int(max(idle, rpm))

    def get_torque(self, rpm: float, throttle: float) -> float:
        """Get output torque in Nm.

        Args:
            rpm: Engine RPM
            throttle: Throttle intent (0-1)

        Returns:
            Torque in Nm
        """
        cfg = self.config
        curve = cfg.max_torque_nm * (
            1.0 - abs(rpm - cfg.peak_torque_rpm) / cfg.torque_falloff_rpm
        )
        return throttle * max(cfg.min_torque_nm, curve)

    def get_fuel_flow(self, ignition: bool, rpm: float, throttle: float) -> float:
        """Get fuel flow in liters per hour (zero with ignition off)."""
        if not ignition:
            return 0.0
        cfg = self.config
        load = throttle * cfg.fuel_throttle_weight + (rpm / cfg.fuel_rpm_reference) * cfg.fuel_rpm_weight
        return cfg.idle_fuel_rate_lph + (cfg.max_fuel_rate_lph - cfg.idle_fuel_rate_lph) * load

    def update_temperature(
        self,
        temperature: int,
        ignition: bool,
        rpm: float,
        throttle: float,
        speed_ms: float,
    ) -> int:
        """Advance the engine temperature by one tick.

        Heat comes from RPM and throttle, road speed cools. The net change is
        truncated toward zero. With the engine off it cools one degree per
        tick down to ambient.

        Args:
            temperature: Current temperature in Celsius
            ignition: Engine running
            rpm: Engine RPM
            throttle: Throttle intent (0-1)
            speed_ms: Vehicle speed in m/s

        Returns:
            New temperature, clamped to [ambient, max]
        """
        cfg = self.config
        if ignition:
            heating = (rpm / cfg.heat_rpm_reference) * cfg.heat_rpm_gain + throttle * cfg.heat_throttle_gain
            cooling = (speed_ms / cfg.cooling_speed_reference) * cfg.cooling_gain
            temperature += int(heating - cooling)
        elif temperature > cfg.ambient_temp_c:
            temperature -= 1
        return int(np.clip(temperature, cfg.ambient_temp_c, cfg.max_temp_c))

    def is_stalled(self, ignition: bool, rpm: float, neutral: bool) -> bool:
        """Check if a running engine has dropped below stall RPM outside neutral."""
        return ignition and not neutral and rpm < self.config.stall_rpm
