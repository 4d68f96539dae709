"""
Telemetry frames - Fixed-format CAN encoding of the vehicle state.

Provides:
- Signal identifiers (offsets from a base arbitration ID)
- Encoder producing the 14 frames sent every tick
- Decoder turning received frames back into dashboard values
"""

from dataclasses import dataclass
from enum import IntEnum
import logging
import struct
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from vehiclesim.vehicle.state import TransmissionMode, VehicleSnapshot

logger = logging.getLogger(__name__)


class Signal(IntEnum):
    """Telemetry signals, valued by their offset from the base ID."""
    SPEED = 0x00
    RPM = 0x01
    FUEL_LEVEL = 0x02
    ENGINE_TEMP = 0x03
    TURN_LEFT = 0x04
    TURN_RIGHT = 0x05
    BATTERY = 0x06
    BACKLIGHT = 0x07
    TRANSMISSION_MODE = 0x08
    IGNITION = 0x09
    ODOMETER = 0x0A
    TRIP = 0x0B
    FUEL_RATE = 0x0C
    GEAR_POSITION = 0x0D


# Little-endian payload layout per signal
SIGNAL_FORMATS = {
    Signal.SPEED: "<H",
    Signal.RPM: "<H",
    Signal.FUEL_LEVEL: "<B",
    Signal.ENGINE_TEMP: "<B",
    Signal.TURN_LEFT: "<B",
    Signal.TURN_RIGHT: "<B",
    Signal.BATTERY: "<B",
    Signal.BACKLIGHT: "<B",
    Signal.TRANSMISSION_MODE: "<B",
    Signal.IGNITION: "<B",
    Signal.ODOMETER: "<I",
    Signal.TRIP: "<H",
    Signal.FUEL_RATE: "<H",
    Signal.GEAR_POSITION: "<B",
}

_MASKS = {"<B": 0xFF, "<H": 0xFFFF, "<I": 0xFFFFFFFF}

# Signals scaled by 10 on the wire
_TENTHS = frozenset({Signal.ODOMETER, Signal.TRIP, Signal.FUEL_RATE})

_BOOLEANS = frozenset({
    Signal.TURN_LEFT,
    Signal.TURN_RIGHT,
    Signal.BATTERY,
    Signal.BACKLIGHT,
    Signal.IGNITION,
})


@dataclass
class TelemetryConfig:
    """Telemetry encoding configuration."""
    base_id: int = 0x100


class Frame(NamedTuple):
    """One telemetry frame."""
    arbitration_id: int
    data: bytes


def pack_signal(signal: Signal, value: int) -> bytes:
    """Pack an unsigned value for a signal, wrapping at the field width."""
    fmt = SIGNAL_FORMATS[signal]
    return struct.pack(fmt, int(value) & _MASKS[fmt])


class TelemetryEncoder:
    """Serializes vehicle snapshots into telemetry frames.

    Every signal is emitted on every call, in identifier order.

    Usage:
        encoder = TelemetryEncoder()
        for frame in encoder.encode(vehicle.snapshot()):
            sink.send(frame.arbitration_id, frame.data)
    """

    def __init__(self, config: TelemetryConfig | None = None):
        """Initialize encoder.

        Args:
            config: Telemetry configuration. Uses defaults if None.
        """
        self.config = config or TelemetryConfig()

    def arbitration_id(self, signal: Signal) -> int:
        """Get the bus identifier for a signal."""
        return self.config.base_id + int(signal)

    def signal_values(self, snapshot: VehicleSnapshot) -> Dict[Signal, int]:
        """Get the raw integer wire value of each signal (before wrapping)."""
        return {
            Signal.SPEED: int(snapshot.speed * 3.6),
            Signal.RPM: int(snapshot.engine_rpm),
            Signal.FUEL_LEVEL: snapshot.fuel_level_percent,
            Signal.ENGINE_TEMP: snapshot.engine_temp_celsius,
            Signal.TURN_LEFT: int(snapshot.left_lamp),
            Signal.TURN_RIGHT: int(snapshot.right_lamp),
            Signal.BATTERY: int(snapshot.battery_ok),
            Signal.BACKLIGHT: int(snapshot.backlight_on),
            Signal.TRANSMISSION_MODE: ord(TransmissionMode(snapshot.transmission_mode).value),
            Signal.IGNITION: int(snapshot.ignition),
            Signal.ODOMETER: int(snapshot.odometer_km * 10),
            Signal.TRIP: int(snapshot.trip_km * 10),
            Signal.FUEL_RATE: int(snapshot.fuel_rate_l_per_100km * 10),
            Signal.GEAR_POSITION: snapshot.gear_index + 1,
        }

    def encode(self, snapshot: VehicleSnapshot) -> List[Frame]:
        """Encode a snapshot into the full ordered frame set.

        Args:
            snapshot: Vehicle state snapshot

        Returns:
            One frame per signal
        """
        values = self.signal_values(snapshot)
        return [
            Frame(self.arbitration_id(signal), pack_signal(signal, values[signal]))
            for signal in Signal
        ]


def decode_frame(
    arbitration_id: int,
    data: bytes,
    base_id: int = 0x100,
) -> Optional[Tuple[Signal, Any]]:
    """Decode one received frame.

    Args:
        arbitration_id: Bus identifier
        data: Frame payload
        base_id: Base identifier of the telemetry block

    Returns:
        (signal, value) in dashboard units, or None for foreign identifiers

    Raises:
        ValueError: If the payload is shorter than the signal's width
    """
    try:
        signal = Signal(arbitration_id - base_id)
    except ValueError:
        return None

    fmt = SIGNAL_FORMATS[signal]
    width = struct.calcsize(fmt)
    if len(data) < width:
        raise ValueError(
            f"{signal.name} frame needs {width} bytes, got {len(data)}"
        )
    (raw,) = struct.unpack(fmt, bytes(data[:width]))

    if signal in _TENTHS:
        return signal, raw / 10.0
    if signal in _BOOLEANS:
        return signal, bool(raw)
    if signal == Signal.TRANSMISSION_MODE:
        return signal, chr(raw)
    return signal, raw


class TelemetryDecoder:
    """Accumulates the latest value of each signal from received frames."""

    def __init__(self, config: TelemetryConfig | None = None):
        self.config = config or TelemetryConfig()
        self._values: Dict[Signal, Any] = {}
        self._frames: int = 0

    @property
    def frame_count(self) -> int:
        """Number of telemetry frames consumed."""
        return self._frames

    def feed(self, arbitration_id: int, data: bytes) -> Optional[Signal]:
        """Consume one frame; foreign identifiers are skipped.

        Returns:
            The signal updated, if any
        """
        decoded = decode_frame(arbitration_id, data, self.config.base_id)
        if decoded is None:
            return None
        signal, value = decoded
        self._values[signal] = value
        self._frames += 1
        return signal

    def get(self, signal: Signal, default: Any = None) -> Any:
        return self._values.get(signal, default)

    def get_state(self) -> Dict[str, Any]:
        """Get latest values keyed by lower-case signal name."""
        return {signal.name.lower(): value for signal, value in self._values.items()}
