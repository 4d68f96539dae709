"""
Command sources - Producers of per-tick command tokens.

Provides:
- CommandSource interface (non-blocking poll)
- ScriptedCommandSource for deterministic runs
- KeyboardCommandSource reading a raw-mode terminal
"""

import json
import logging
import os
import select
import sys
import termios
from pathlib import Path
from typing import Iterable, List, Sequence

from vehiclesim.control.inputs import Command

logger = logging.getLogger(__name__)


class CommandSourceError(Exception):
    """Raised when a command source cannot be initialised."""


# Single-key bindings (case-insensitive)
KEY_BINDINGS = {
    "a": Command.ACCELERATE,
    "b": Command.BRAKE,
    "s": Command.START_STOP,
    "d": Command.DRIVE,
    "r": Command.REVERSE,
    "n": Command.NEUTRAL,
    "p": Command.PARK,
    "q": Command.QUIT,
    " ": Command.HANDBRAKE,
    "l": Command.LIGHTS,
    "t": Command.RESET_TRIP,
}

# Final byte of ESC [ x arrow-key sequences
ARROW_BINDINGS = {
    "C": Command.TURN_RIGHT,
    "D": Command.TURN_LEFT,
    "A": Command.HAZARD,
}


def parse_keys(text: str) -> List[Command]:
    """Translate raw terminal input into commands.

    Unbound keys and truncated escape sequences are dropped.

    Args:
        text: Characters read from the terminal

    Returns:
        Commands in input order (duplicates kept)
    """
    commands: List[Command] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\x1b":
            if text[i + 1:i + 2] == "[" and i + 2 < len(text):
                command = ARROW_BINDINGS.get(text[i + 2])
                if command is not None:
                    commands.append(command)
                i += 3
            else:
                i += 1
            continue
        command = KEY_BINDINGS.get(char.lower())
        if command is not None:
            commands.append(command)
        i += 1
    return commands


class CommandSource:
    """Source of operator commands, polled once per tick."""

    def poll_commands(self) -> List:
        """Return the commands received since the last poll, without blocking.

        Raises:
            CommandSourceError: If the source can no longer be read
        """
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ScriptedCommandSource(CommandSource):
    """Replays a fixed list of per-tick command batches.

    Usage:
        source = ScriptedCommandSource([["start_stop"], ["drive"], ["accelerate"] * 3])
    """

    def __init__(self, batches: Iterable[Sequence], quit_when_done: bool = False):
        """Initialize source.

        Args:
            batches: One sequence of tokens per tick
            quit_when_done: Emit a quit command once the script runs out
        """
        self._batches = [list(batch) for batch in batches]
        self._position = 0
        self.quit_when_done = quit_when_done

    @classmethod
    def from_file(cls, path: str | Path, quit_when_done: bool = True) -> "ScriptedCommandSource":
        """Load a JSON list of token lists.

        Raises:
            CommandSourceError: If the file is missing or malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                batches = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CommandSourceError(f"Could not load command script {path}: {e}") from e

        if not isinstance(batches, list) or not all(isinstance(b, list) for b in batches):
            raise CommandSourceError(f"Command script {path} must be a list of lists")
        logger.info(f"Loaded {len(batches)} scripted ticks from {path}")
        return cls(batches, quit_when_done=quit_when_done)

    @property
    def exhausted(self) -> bool:
        """Check if every batch has been replayed."""
        return self._position >= len(self._batches)

    def poll_commands(self) -> List:
        if self.exhausted:
            return [Command.QUIT] if self.quit_when_done else []
        batch = self._batches[self._position]
        self._position += 1
        return batch


class KeyboardCommandSource(CommandSource):
    """Reads key presses from a terminal in raw, non-blocking mode.

    The terminal settings are restored on close.
    """

    def __init__(self, stream=None):
        """Put the terminal into raw mode.

        Args:
            stream: Terminal input stream (stdin if None)

        Raises:
            CommandSourceError: If the stream is not a terminal
        """
        self._stream = stream or sys.stdin
        try:
            self._fd = self._stream.fileno()
            self._saved = termios.tcgetattr(self._fd)
        except (AttributeError, OSError, ValueError, termios.error) as e:
            raise CommandSourceError(f"Keyboard input needs a terminal: {e}") from e

        raw = termios.tcgetattr(self._fd)
        raw[3] &= ~(termios.ICANON | termios.ECHO)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 0
        termios.tcsetattr(self._fd, termios.TCSANOW, raw)
        self._closed = False

    def _read_available(self) -> str:
        chunks = []
        try:
            while select.select([self._fd], [], [], 0)[0]:
                data = os.read(self._fd, 64)
                if not data:
                    break
                chunks.append(data)
        except (OSError, ValueError) as e:
            raise CommandSourceError(f"Keyboard read failed: {e}") from e
        return b"".join(chunks).decode("utf-8", errors="ignore")

    def poll_commands(self) -> List:
        if self._closed:
            return []
        return parse_keys(self._read_available())

    def close(self) -> None:
        """Restore the terminal settings."""
        if self._closed:
            return
        termios.tcsetattr(self._fd, termios.TCSANOW, self._saved)
        self._closed = True
