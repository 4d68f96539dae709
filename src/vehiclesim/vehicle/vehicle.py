"""
Vehicle - Complete road vehicle simulation.

Integrates all vehicle components:
- Input resolver (pedal intents, discrete requests)
- Transmission (selector, automatic gearbox)
- Electrics (ignition, signals, battery, lights)
- Engine and dynamics (physics integrator)
"""

from dataclasses import dataclass, field
import logging
from typing import Iterable

from vehiclesim.control.inputs import Command, ControlRequests, InputConfig, InputResolver
from vehiclesim.vehicle.dynamics import PhysicsConfig, PhysicsIntegrator, TickResult
from vehiclesim.vehicle.electrics import Electrics, ElectricsConfig
from vehiclesim.vehicle.engine import Engine, EngineConfig
from vehiclesim.vehicle.state import TransmissionMode, VehicleSnapshot, VehicleState
from vehiclesim.vehicle.transmission import Transmission, TransmissionConfig

logger = logging.getLogger(__name__)


SELECTOR_COMMANDS = {
    Command.DRIVE: TransmissionMode.DRIVE,
    Command.REVERSE: TransmissionMode.REVERSE,
    Command.NEUTRAL: TransmissionMode.NEUTRAL,
    Command.PARK: TransmissionMode.PARK,
}


@dataclass
class VehicleConfig:
    """Complete vehicle configuration.

    Default values create the mid-size automatic saloon.
    """
    inputs: InputConfig = field(default_factory=InputConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    transmission: TransmissionConfig = field(default_factory=TransmissionConfig)
    electrics: ElectricsConfig = field(default_factory=ElectricsConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)

    # Largest elapsed time integrated in a single tick (seconds)
    max_dt: float = 0.5


@dataclass
class TickOutcome:
    """What happened during one vehicle tick."""
    controls: ControlRequests
    physics: TickResult


class Vehicle:
    """Complete road vehicle simulation.

    Owns the VehicleState and runs the per-tick pipeline: resolve commands,
    apply discrete requests, integrate physics.

    Usage:
        vehicle = Vehicle()
        vehicle.update(["start_stop"], dt=0.05)
        vehicle.update(["drive"], dt=0.05)
        vehicle.update(["accelerate"], dt=0.05)
        snapshot = vehicle.snapshot()
    """

    def __init__(self, config: VehicleConfig | None = None):
        """Initialize vehicle with optional configuration.

        Args:
            config: Vehicle configuration. Uses defaults if None.
        """
        self.config = config or VehicleConfig()

        # Initialize subsystems
        self.resolver = InputResolver(self.config.inputs)
        self.engine = Engine(self.config.engine)
        self.transmission = Transmission(self.config.transmission)
        self.electrics = Electrics(self.config.electrics)
        self.physics = PhysicsIntegrator(
            self.config.physics,
            engine=self.engine,
            transmission=self.transmission,
            electrics=self.electrics,
        )

        self.state = VehicleState()

    def reset(self) -> None:
        """Reset vehicle to its power-on defaults."""
        self.state = VehicleState()

    def snapshot(self) -> VehicleSnapshot:
        """Get a read-only copy of the vehicle state."""
        return self.state.snapshot()

    def apply(self, command: Command) -> None:
        """Apply one discrete request to the vehicle state.

        Guard failures are no-ops.
        """
        state = self.state
        if command in SELECTOR_COMMANDS:
            self.transmission.select(state, SELECTOR_COMMANDS[command])
        elif command == Command.START_STOP:
            self.electrics.toggle_ignition(state)
        elif command == Command.HANDBRAKE:
            self.electrics.apply_handbrake(state)
        elif command == Command.LIGHTS:
            self.electrics.toggle_lights(state)
        elif command == Command.RESET_TRIP:
            self.electrics.reset_trip(state)
        elif command == Command.TURN_LEFT:
            self.electrics.toggle_turn_left(state)
        elif command == Command.TURN_RIGHT:
            self.electrics.toggle_turn_right(state)
        elif command == Command.HAZARD:
            self.electrics.toggle_hazard(state)

    def update(self, tokens: Iterable, dt: float) -> TickOutcome:
        """Advance the vehicle by one tick with a known time step.

        Args:
            tokens: Command tokens polled this tick
            dt: Time step in seconds

        Returns:
            Resolved controls and physics outputs
        """
        state = self.state
        controls = self.resolver.resolve(tokens, state.throttle_intent, state.brake_intent)
        state.throttle_intent = controls.throttle
        state.brake_intent = controls.brake

        for command in controls.requests:
            self.apply(command)

        result = self.physics.step(state, dt)
        return TickOutcome(controls=controls, physics=result)

    def tick(self, tokens: Iterable, now: float) -> TickOutcome:
        """Advance the vehicle by one tick of wall-clock time.

        The first tick integrates nothing; later ticks use the time since the
        previous one, capped at max_dt.

        Args:
            tokens: Command tokens polled this tick
            now: Monotonic clock reading in seconds

        Returns:
            Resolved controls and physics outputs
        """
        last = self.state.last_tick_time
        dt = 0.0 if last is None else min(max(now - last, 0.0), self.config.max_dt)
        self.state.last_tick_time = now
        return self.update(tokens, dt)
