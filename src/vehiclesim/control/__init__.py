"""
Control module - Operator commands.

This module contains:
- Command / InputResolver: Command vocabulary and pedal smoothing
- CommandSource: Keyboard and scripted command producers
"""

from vehiclesim.control.inputs import Command, ControlRequests, InputResolver
from vehiclesim.control.sources import (
    CommandSource,
    CommandSourceError,
    KeyboardCommandSource,
    ScriptedCommandSource,
)

__all__ = [
    "Command",
    "ControlRequests",
    "InputResolver",
    "CommandSource",
    "CommandSourceError",
    "KeyboardCommandSource",
    "ScriptedCommandSource",
]
