"""
Input resolver - Turns a tick's command tokens into control intents.

Provides:
- The command vocabulary
- Pedal smoothing (hold to press, linear release)
- Collapsing of repeated commands into discrete requests
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Iterable, List

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """Operator commands."""
    ACCELERATE = "accelerate"
    BRAKE = "brake"
    START_STOP = "start_stop"
    DRIVE = "drive"
    REVERSE = "reverse"
    NEUTRAL = "neutral"
    PARK = "park"
    QUIT = "quit"
    HANDBRAKE = "handbrake"
    LIGHTS = "lights"
    RESET_TRIP = "reset_trip"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    HAZARD = "hazard"


# Commands that are continuous pedal holds rather than discrete requests
PEDAL_COMMANDS = frozenset({Command.ACCELERATE, Command.BRAKE})


@dataclass
class InputConfig:
    """Pedal smoothing rates, per tick."""
    throttle_release_rate: float = 0.1
    brake_release_rate: float = 0.2


@dataclass
class ControlRequests:
    """Result of resolving one tick of commands."""
    throttle: float = 0.0
    brake: float = 0.0
    # Discrete requests in first-occurrence order, each at most once
    requests: List[Command] = field(default_factory=list)
    quit: bool = False


class InputResolver:
    """Resolves raw command tokens into intents and discrete requests.

    Accelerate takes precedence over brake when both are held in one tick.

    Usage:
        resolver = InputResolver()
        result = resolver.resolve(["accelerate", "lights"], throttle, brake)
    """

    def __init__(self, config: InputConfig | None = None):
        """Initialize resolver.

        Args:
            config: Smoothing configuration. Uses defaults if None.
        """
        self.config = config or InputConfig()

    @staticmethod
    def parse(tokens: Iterable) -> List[Command]:
        """Convert tokens to commands, dropping unknown ones and duplicates."""
        seen: List[Command] = []
        for token in tokens:
            try:
                command = Command(token)
            except ValueError:
                logger.debug(f"Ignoring unknown command token {token!r}")
                continue
            if command not in seen:
                seen.append(command)
        return seen

    def resolve(
        self,
        tokens: Iterable,
        throttle: float,
        brake: float,
    ) -> ControlRequests:
        """Resolve one tick of commands.

        Args:
            tokens: Command tokens polled this tick
            throttle: Previous throttle intent (0-1)
            brake: Previous brake intent (0-1)

        Returns:
            Updated intents and pending discrete requests
        """
        commands = self.parse(tokens)

        if Command.ACCELERATE in commands:
            throttle, brake = 1.0, 0.0
        elif Command.BRAKE in commands:
            throttle, brake = 0.0, 1.0
        else:
            throttle = max(0.0, throttle - self.config.throttle_release_rate)
            brake = max(0.0, brake - self.config.brake_release_rate)

        return ControlRequests(
            throttle=throttle,
            brake=brake,
            requests=[c for c in commands if c not in PEDAL_COMMANDS and c != Command.QUIT],
            quit=Command.QUIT in commands,
        )
