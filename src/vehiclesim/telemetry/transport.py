"""
Telemetry transport - Frame sinks for the encoded telemetry.

Provides:
- TransportSink interface
- CanBusSink built on python-can (SocketCAN, virtual, ...)
"""

import logging

import can

logger = logging.getLogger(__name__)

# Classic CAN payload limit
MAX_PAYLOAD_BYTES = 8


class TransportError(Exception):
    """Raised when a sink cannot be opened or a frame cannot be sent."""


class TransportSink:
    """Destination for telemetry frames.

    Sends are best-effort: failures raise TransportError and the caller
    decides whether to carry on.
    """

    def send(self, arbitration_id: int, data: bytes) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class CanBusSink(TransportSink):
    """Sends frames as standard-ID CAN messages on a python-can bus.

    Usage:
        with CanBusSink(channel="vcan0", interface="socketcan") as sink:
            sink.send(0x100, b"\\x24\\x00")
    """

    def __init__(
        self,
        channel: str = "vcan0",
        interface: str = "socketcan",
        bus: can.BusABC | None = None,
    ):
        """Open the bus.

        Args:
            channel: Bus channel (interface name for SocketCAN)
            interface: python-can interface name
            bus: Already-open bus to use instead of opening one

        Raises:
            TransportError: If the bus cannot be opened
        """
        self.channel = channel
        self.interface = interface
        if bus is not None:
            self._bus = bus
        else:
            try:
                self._bus = can.Bus(channel=channel, interface=interface)
            except (can.CanError, OSError, ImportError, ValueError) as e:
                raise TransportError(
                    f"Could not open CAN interface {interface!r} on {channel!r}: {e}"
                ) from e
        self._sent: int = 0
        logger.info(f"CAN sink open on {channel} ({interface})")

    @property
    def sent_count(self) -> int:
        """Frames successfully handed to the bus."""
        return self._sent

    def send(self, arbitration_id: int, data: bytes) -> None:
        """Send one frame.

        Args:
            arbitration_id: 11-bit identifier
            data: Payload, at most 8 bytes

        Raises:
            TransportError: If the bus rejects the frame
        """
        if self._bus is None:
            raise TransportError(f"CAN sink on {self.channel} is closed")
        if len(data) > MAX_PAYLOAD_BYTES:
            raise TransportError(
                f"Payload for 0x{arbitration_id:X} is {len(data)} bytes, max {MAX_PAYLOAD_BYTES}"
            )
        message = can.Message(arbitration_id=arbitration_id, data=data, is_extended_id=False)
        try:
            self._bus.send(message)
        except (can.CanError, OSError) as e:
            raise TransportError(f"TX error on ID 0x{arbitration_id:X}: {e}") from e
        self._sent += 1

    def close(self) -> None:
        """Shut down the bus."""
        if self._bus is not None:
            self._bus.shutdown()
            self._bus = None
            logger.info(f"CAN sink on {self.channel} closed")
