"""
Vehicle state - The mutable aggregate advanced by the tick loop.

Holds:
- Ignition, speed and engine RPM
- Transmission mode and gear
- Fuel, temperature, distances
- Turn signals, hazards, battery, lights
- Smoothed throttle/brake intents
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


class TransmissionMode(str, Enum):
    """Transmission selector positions, valued by their dashboard letter."""
    PARK = "P"
    REVERSE = "R"
    NEUTRAL = "N"
    DRIVE = "D"


# gear_index value used while in REVERSE
REVERSE_GEAR_INDEX = 5


@dataclass
class VehicleState:
    """Complete vehicle state.

    Owned by a single tick loop; only the input resolver, the transmission and
    electrics state machines and the physics integrator write to it.
    """
    ignition: bool = False
    speed: float = 0.0                  # m/s
    engine_rpm: int = 0

    transmission_mode: TransmissionMode = TransmissionMode.PARK
    gear_index: int = 0                 # 0-4 in DRIVE, REVERSE_GEAR_INDEX in REVERSE

    fuel_level_percent: int = 75
    fuel_accumulator_liters: float = 0.0
    fuel_rate_l_per_100km: float = 0.0

    engine_temp_celsius: int = 20

    odometer_km: float = 0.0
    trip_km: float = 0.0

    turn_left: bool = False
    turn_right: bool = False
    hazard: bool = False
    turn_signal_distance_accum: float = 0.0  # meters since last toggle

    battery_ok: bool = True
    battery_off_timer: float = 0.0      # seconds with ignition off

    backlight_on: bool = False

    throttle_intent: float = 0.0
    brake_intent: float = 0.0

    last_tick_time: Optional[float] = None

    @property
    def speed_kph(self) -> float:
        """Current speed in km/h."""
        return self.speed * 3.6

    def snapshot(self) -> "VehicleSnapshot":
        """Get a read-only copy of the current state."""
        return VehicleSnapshot(**asdict(self))


@dataclass(frozen=True)
class VehicleSnapshot:
    """Immutable view of a VehicleState, handed to the encoder and displays."""
    ignition: bool
    speed: float
    engine_rpm: int
    transmission_mode: TransmissionMode
    gear_index: int
    fuel_level_percent: int
    fuel_accumulator_liters: float
    fuel_rate_l_per_100km: float
    engine_temp_celsius: int
    odometer_km: float
    trip_km: float
    turn_left: bool
    turn_right: bool
    hazard: bool
    turn_signal_distance_accum: float
    battery_ok: bool
    battery_off_timer: float
    backlight_on: bool
    throttle_intent: float
    brake_intent: float
    last_tick_time: Optional[float]

    @property
    def speed_kph(self) -> float:
        """Speed in km/h."""
        return self.speed * 3.6

    @property
    def left_lamp(self) -> bool:
        """Left indicator lamp (turn signal or hazards)."""
        return self.turn_left or self.hazard

    @property
    def right_lamp(self) -> bool:
        """Right indicator lamp (turn signal or hazards)."""
        return self.turn_right or self.hazard
