"""
Electrics component - Ignition and body electrics.

Simulates:
- Ignition start/stop with start interlocks
- Engine stall
- Turn signals with distance-based auto-cancel, hazard lights
- Battery drain while parked with the engine off
- Backlight, trip meter reset, handbrake
"""

from dataclasses import dataclass
import logging

from vehiclesim.vehicle.state import VehicleState, TransmissionMode

logger = logging.getLogger(__name__)


@dataclass
class ElectricsConfig:
    """Configuration for ignition and body electrics."""
    # Start interlocks
    min_start_fuel_percent: int = 5

    # RPM set when the engine starts
    start_rpm: int = 800

    # Turn signals cancel after this much travel (meters)
    turn_signal_cancel_m: float = 200.0

    # Battery goes flat after this long with the engine off (seconds)
    battery_drain_s: float = 300.0

    # Handbrake only holds below this speed (m/s)
    handbrake_max_speed_ms: float = 8.0


class Electrics:
    """Ignition and body electrics state machine."""

    def __init__(self, config: ElectricsConfig | None = None):
        """Initialize electrics with optional custom configuration.

        Args:
            config: Electrics configuration. Uses defaults if None.
        """
        self.config = config or ElectricsConfig()

    def can_start(self, state: VehicleState) -> bool:
        """Check the start interlocks (battery, fuel, P or N selected)."""
        return (
            state.battery_ok
            and state.fuel_level_percent > self.config.min_start_fuel_percent
            and state.transmission_mode in (TransmissionMode.PARK, TransmissionMode.NEUTRAL)
        )

    def toggle_ignition(self, state: VehicleState) -> bool:
        """Start or stop the engine.

        Stopping is always allowed. Starting requires the interlocks.

        Returns:
            True if the ignition state changed
        """
        if state.ignition:
            self.switch_off(state)
            logger.info("Engine stopped")
            return True

        if not self.can_start(state):
            logger.debug(
                f"Start refused: battery_ok={state.battery_ok} "
                f"fuel={state.fuel_level_percent}% mode={state.transmission_mode.value}"
            )
            return False

        state.ignition = True
        state.engine_rpm = self.config.start_rpm
        state.battery_ok = True
        state.battery_off_timer = 0.0
        logger.info("Engine started")
        return True

    def switch_off(self, state: VehicleState) -> None:
        """Turn the ignition off, zeroing speed and RPM."""
        state.ignition = False
        state.speed = 0.0
        state.engine_rpm = 0

    def stall(self, state: VehicleState) -> None:
        """Force the engine off after RPM dropped below stall speed."""
        logger.info(f"Engine stalled at {state.engine_rpm} rpm")
        self.switch_off(state)

    def toggle_turn_left(self, state: VehicleState) -> None:
        """Toggle the left indicator; clears right indicator and hazards."""
        state.turn_left = not state.turn_left
        state.turn_right = False
        state.hazard = False
        state.turn_signal_distance_accum = 0.0

    def toggle_turn_right(self, state: VehicleState) -> None:
        """Toggle the right indicator; clears left indicator and hazards."""
        state.turn_right = not state.turn_right
        state.turn_left = False
        state.hazard = False
        state.turn_signal_distance_accum = 0.0

    def toggle_hazard(self, state: VehicleState) -> None:
        """Toggle hazard lights; switching them on clears the indicators."""
        state.hazard = not state.hazard
        if state.hazard:
            state.turn_left = False
            state.turn_right = False
            state.turn_signal_distance_accum = 0.0

    def toggle_lights(self, state: VehicleState) -> None:
        state.backlight_on = not state.backlight_on

    def reset_trip(self, state: VehicleState) -> None:
        state.trip_km = 0.0

    def apply_handbrake(self, state: VehicleState) -> bool:
        """Pull the handbrake; stops the car only at low speed.

        Returns:
            True if the car was held
        """
        if state.speed >= self.config.handbrake_max_speed_ms:
            return False
        state.speed = 0.0
        return True

    def update(self, state: VehicleState, dt: float, distance_m: float) -> None:
        """Advance signal auto-cancel and battery timers by one tick.

        Args:
            state: Vehicle state to modify
            dt: Time step in seconds
            distance_m: Distance travelled this tick in meters
        """
        if state.turn_left or state.turn_right:
            state.turn_signal_distance_accum += distance_m
            if state.turn_signal_distance_accum > self.config.turn_signal_cancel_m:
                state.turn_left = False
                state.turn_right = False
                state.turn_signal_distance_accum = 0.0
                logger.debug("Turn signal cancelled")

        if state.ignition:
            state.battery_ok = True
            state.battery_off_timer = 0.0
        else:
            state.battery_off_timer += dt
            if state.battery_ok and state.battery_off_timer > self.config.battery_drain_s:
                state.battery_ok = False
                logger.warning("Battery flat after engine-off timeout")
