"""
Transmission component - Automatic gearbox and selector.

Simulates:
- P/R/N/D selector with low-speed guards
- Five forward gears plus reverse
- Speed-gated automatic up/downshifts
- Final drive ratio
"""

from dataclasses import dataclass, field
import logging
from typing import List

from vehiclesim.vehicle.state import VehicleState, TransmissionMode, REVERSE_GEAR_INDEX

logger = logging.getLogger(__name__)


@dataclass
class TransmissionConfig:
    """Configuration for a five-speed automatic gearbox."""
    # Gear ratios: index 0-4 forward, index 5 reverse
    gear_ratios: List[float] = field(default_factory=lambda: [
        3.5,    # 1st
        2.2,    # 2nd
        1.6,    # 3rd
        1.2,    # 4th
        0.9,    # 5th
        3.2,    # Reverse
    ])

    final_drive: float = 3.7
    wheel_radius_m: float = 0.3

    # Selector guard: D, R and P only engage below this speed
    selector_max_speed_ms: float = 0.5

    # Shift points
    upshift_rpm: float = 3000.0
    downshift_rpm: float = 1500.0
    # Upshift from gear i requires speed above upshift_speeds_kph[i]
    upshift_speeds_kph: List[float] = field(default_factory=lambda: [15.0, 30.0, 45.0, 65.0])
    # Downshift from gear i+1 requires speed below downshift_speeds_kph[i]
    downshift_speeds_kph: List[float] = field(default_factory=lambda: [10.0, 25.0, 40.0, 55.0])


class Transmission:
    """Automatic transmission state machine.

    Owns no state of its own; operates on the VehicleState passed in.
    """

    def __init__(self, config: TransmissionConfig | None = None):
        """Initialize transmission with optional custom configuration.

        Args:
            config: Transmission configuration. Uses defaults if None.
        """
        self.config = config or TransmissionConfig()

    @property
    def max_gear(self) -> int:
        """Highest forward gear index."""
        return REVERSE_GEAR_INDEX - 1

    def normalize_gear(self, state: VehicleState) -> bool:
        """Reset an out-of-range DRIVE gear index to first gear.

        Returns:
            True if the gear index was changed
        """
        if state.transmission_mode != TransmissionMode.DRIVE:
            return False
        if 0 <= state.gear_index <= self.max_gear:
            return False
        logger.debug(f"Invalid gear index {state.gear_index} in DRIVE, using first gear")
        state.gear_index = 0
        return True

    def get_gear_ratio(self, state: VehicleState) -> float:
        """Get the active gear ratio (0.0 when no gear is engaged).

        In DRIVE an out-of-range gear index reads as first gear.
        """
        mode = state.transmission_mode
        if mode == TransmissionMode.REVERSE:
            return self.config.gear_ratios[REVERSE_GEAR_INDEX]
        if mode == TransmissionMode.DRIVE:
            gear = state.gear_index if 0 <= state.gear_index <= self.max_gear else 0
            return self.config.gear_ratios[gear]
        return 0.0

    def get_total_ratio(self, state: VehicleState) -> float:
        """Get total drive ratio (gear ratio * final drive)."""
        return self.get_gear_ratio(state) * self.config.final_drive

    def select(self, state: VehicleState, mode: TransmissionMode) -> bool:
        """Move the selector.

        Args:
            state: Vehicle state to modify
            mode: Requested selector position

        Returns:
            True if the selector moved
        """
        slow = state.speed < self.config.selector_max_speed_ms
        current = state.transmission_mode

        if mode == TransmissionMode.NEUTRAL:
            state.transmission_mode = mode
        elif mode == TransmissionMode.PARK:
            if not slow:
                logger.debug(f"Park refused at {state.speed:.2f} m/s")
                return False
            state.transmission_mode = mode
            state.speed = 0.0
        elif mode == TransmissionMode.DRIVE:
            if not slow or current == mode:
                return False
            state.transmission_mode = mode
            state.gear_index = 0
        elif mode == TransmissionMode.REVERSE:
            if not slow or current == mode:
                return False
            state.transmission_mode = mode
            state.gear_index = REVERSE_GEAR_INDEX

        return state.transmission_mode != current

    def auto_shift(self, state: VehicleState) -> int:
        """Apply at most one automatic shift.

        Only acts in DRIVE with the engine running. Uses the RPM already
        computed for this tick.

        Args:
            state: Vehicle state to modify

        Returns:
            +1 for an upshift, -1 for a downshift, 0 otherwise
        """
        if not state.ignition or state.transmission_mode != TransmissionMode.DRIVE:
            return 0

        cfg = self.config
        gear = state.gear_index
        speed_kph = state.speed_kph

        if state.engine_rpm > cfg.upshift_rpm and gear < self.max_gear:
            if speed_kph > cfg.upshift_speeds_kph[gear]:
                state.gear_index = gear + 1
                logger.debug(f"Upshift {gear + 1} -> {gear + 2} at {speed_kph:.1f} km/h")
                return 1
        elif state.engine_rpm < cfg.downshift_rpm and gear > 0:
            if speed_kph < cfg.downshift_speeds_kph[gear - 1]:
                state.gear_index = gear - 1
                logger.debug(f"Downshift {gear + 1} -> {gear} at {speed_kph:.1f} km/h")
                return -1

        return 0
