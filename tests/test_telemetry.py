"""Tests for the vehiclesim telemetry module."""

import io
import uuid

import can
import pytest

from vehiclesim.telemetry.dashboard import TextDashboard
from vehiclesim.telemetry.frames import (
    Signal,
    TelemetryConfig,
    TelemetryDecoder,
    TelemetryEncoder,
    decode_frame,
)
from vehiclesim.telemetry.transport import CanBusSink, TransportError
from vehiclesim.vehicle.state import VehicleState, TransmissionMode


def known_state() -> VehicleState:
    return VehicleState(
        ignition=True,
        speed=10.0,
        engine_rpm=2500,
        transmission_mode=TransmissionMode.DRIVE,
        gear_index=2,
        fuel_level_percent=60,
        engine_temp_celsius=90,
        odometer_km=1234.56,
        trip_km=12.34,
        turn_left=True,
        battery_ok=True,
        backlight_on=True,
        fuel_rate_l_per_100km=7.85,
    )


class TestTelemetryEncoder:
    """Test the fixed frame layout."""

    def test_known_snapshot(self):
        """Test every frame of a known state byte for byte."""
        frames = TelemetryEncoder().encode(known_state().snapshot())

        assert [(f.arbitration_id, f.data) for f in frames] == [
            (0x100, bytes([0x24, 0x00])),
            (0x101, bytes([0xC4, 0x09])),
            (0x102, bytes([60])),
            (0x103, bytes([90])),
            (0x104, bytes([1])),
            (0x105, bytes([0])),
            (0x106, bytes([1])),
            (0x107, bytes([1])),
            (0x108, bytes([ord("D")])),
            (0x109, bytes([1])),
            (0x10A, bytes([0x39, 0x30, 0x00, 0x00])),
            (0x10B, bytes([0x7B, 0x00])),
            (0x10C, bytes([0x4E, 0x00])),
            (0x10D, bytes([3])),
        ]

    def test_default_state(self):
        """Test the power-on frame set."""
        frames = TelemetryEncoder().encode(VehicleState().snapshot())
        data = {f.arbitration_id: f.data for f in frames}

        assert data[0x100] == b"\x00\x00"
        assert data[0x102] == bytes([75])
        assert data[0x103] == bytes([20])
        assert data[0x108] == b"P"
        assert data[0x109] == b"\x00"
        assert data[0x10D] == b"\x01"

    def test_speed_truncates(self):
        """Test km/h is truncated, not rounded."""
        frames = TelemetryEncoder().encode(VehicleState(speed=9.99).snapshot())
        assert frames[0].data == bytes([35, 0])

    def test_frame_order_and_widths(self):
        """Test 14 frames in identifier order with fixed payload widths."""
        frames = TelemetryEncoder().encode(VehicleState().snapshot())

        assert [f.arbitration_id for f in frames] == list(range(0x100, 0x10E))
        assert [len(f.data) for f in frames] == [2, 2, 1, 1, 1, 1, 1, 1, 1, 1, 4, 2, 2, 1]

    def test_base_id(self):
        """Test the identifier block can move."""
        encoder = TelemetryEncoder(TelemetryConfig(base_id=0x200))
        frames = encoder.encode(VehicleState().snapshot())

        assert frames[0].arbitration_id == 0x200
        assert frames[-1].arbitration_id == 0x20D

    @pytest.mark.parametrize("mode,letter", [
        (TransmissionMode.PARK, 0x50),
        (TransmissionMode.REVERSE, 0x52),
        (TransmissionMode.NEUTRAL, 0x4E),
        (TransmissionMode.DRIVE, 0x44),
    ])
    def test_mode_letters(self, mode, letter):
        """Test selector position is sent as its ASCII letter."""
        frames = TelemetryEncoder().encode(VehicleState(transmission_mode=mode).snapshot())
        assert frames[Signal.TRANSMISSION_MODE].data == bytes([letter])

    def test_reverse_gear_position(self):
        """Test reverse reports gear position 6."""
        state = VehicleState(transmission_mode=TransmissionMode.REVERSE, gear_index=5)
        frames = TelemetryEncoder().encode(state.snapshot())
        assert frames[Signal.GEAR_POSITION].data == bytes([6])

    def test_wraparound(self):
        """Test odometer, trip and fuel rate wrap at their field width."""
        state = VehicleState(
            odometer_km=429496730.0,
            trip_km=6560.0,
            fuel_rate_l_per_100km=7000.0,
        )
        frames = TelemetryEncoder().encode(state.snapshot())

        assert frames[Signal.ODOMETER].data == bytes([4, 0, 0, 0])
        assert frames[Signal.TRIP].data == bytes([0x40, 0x00])
        assert frames[Signal.FUEL_RATE].data == bytes([0x70, 0x11])

    def test_hazard_lights_both_lamps(self):
        """Test hazards set both indicator frames."""
        frames = TelemetryEncoder().encode(VehicleState(hazard=True).snapshot())

        assert frames[Signal.TURN_LEFT].data == b"\x01"
        assert frames[Signal.TURN_RIGHT].data == b"\x01"


class TestTelemetryDecoder:
    """Test the receiver side."""

    def test_decodes_encoded_frames(self):
        """Test dashboard values recovered from a frame set."""
        decoder = TelemetryDecoder()
        for frame in TelemetryEncoder().encode(known_state().snapshot()):
            decoder.feed(frame.arbitration_id, frame.data)

        assert decoder.frame_count == 14
        assert decoder.get(Signal.SPEED) == 36
        assert decoder.get(Signal.RPM) == 2500
        assert decoder.get(Signal.TRANSMISSION_MODE) == "D"
        assert decoder.get(Signal.TURN_LEFT) is True
        assert decoder.get(Signal.TURN_RIGHT) is False
        assert decoder.get(Signal.ODOMETER) == pytest.approx(1234.5)
        assert decoder.get(Signal.TRIP) == pytest.approx(12.3)
        assert decoder.get(Signal.GEAR_POSITION) == 3
        assert decoder.get_state()["fuel_level"] == 60

    def test_foreign_identifiers_skipped(self):
        """Test frames outside the block are ignored."""
        decoder = TelemetryDecoder()

        assert decoder.feed(0x7DF, b"\x02\x01\x0c") is None
        assert decode_frame(0x10E, b"\x00") is None
        assert decoder.frame_count == 0

    def test_short_payload(self):
        """Test truncated payloads are rejected."""
        with pytest.raises(ValueError):
            decode_frame(0x10A, b"\x01\x02")


@pytest.fixture
def virtual_bus():
    """A receiving bus and the channel name to transmit on."""
    channel = f"vehiclesim-{uuid.uuid4().hex}"
    rx = can.Bus(interface="virtual", channel=channel)
    yield channel, rx
    rx.shutdown()


class FailingBus:
    def send(self, msg, timeout=None):
        raise can.CanOperationError("bus off")

    def shutdown(self):
        pass


class TestCanBusSink:
    """Test python-can transport."""

    def test_send_standard_frame(self, virtual_bus):
        """Test frames arrive with standard IDs and exact payloads."""
        channel, rx = virtual_bus
        with CanBusSink(channel=channel, interface="virtual") as sink:
            sink.send(0x100, b"\x24\x00")
            assert sink.sent_count == 1

        msg = rx.recv(timeout=1.0)
        assert msg is not None
        assert msg.arbitration_id == 0x100
        assert not msg.is_extended_id
        assert bytes(msg.data) == b"\x24\x00"

    def test_full_frame_set(self, virtual_bus):
        """Test a whole tick's frames reach the bus in order."""
        channel, rx = virtual_bus
        frames = TelemetryEncoder().encode(known_state().snapshot())

        with CanBusSink(channel=channel, interface="virtual") as sink:
            for frame in frames:
                sink.send(frame.arbitration_id, frame.data)

        received = [rx.recv(timeout=1.0) for _ in frames]
        assert [m.arbitration_id for m in received] == [f.arbitration_id for f in frames]
        assert [bytes(m.data) for m in received] == [f.data for f in frames]

    def test_unknown_interface(self):
        """Test opening failures surface as TransportError."""
        with pytest.raises(TransportError):
            CanBusSink(channel="vcan0", interface="no-such-interface")

    def test_send_failure(self):
        """Test bus errors surface as TransportError."""
        sink = CanBusSink(bus=FailingBus())
        with pytest.raises(TransportError):
            sink.send(0x100, b"\x00\x00")
        assert sink.sent_count == 0

    def test_payload_too_long(self):
        """Test classic CAN payload limit."""
        sink = CanBusSink(bus=FailingBus())
        with pytest.raises(TransportError):
            sink.send(0x100, bytes(9))

    def test_send_after_close(self):
        """Test a closed sink rejects frames."""
        sink = CanBusSink(bus=FailingBus())
        sink.close()
        with pytest.raises(TransportError):
            sink.send(0x100, b"\x00")


class TestTextDashboard:
    """Test the terminal display."""

    def test_render(self):
        """Test the panel shows the snapshot values."""
        stream = io.StringIO()
        TextDashboard(stream=stream, clear=False).render(known_state().snapshot())
        text = stream.getvalue()

        assert "DRIVE 3" in text
        assert " 36 km/h" in text
        assert "2500 rpm" in text
        assert "Turn Left:   ON" in text
        assert "Odometer:    1234.6 km" in text
        assert "\033[2J" not in text

    def test_clear_screen(self):
        """Test the panel redraws from the top."""
        stream = io.StringIO()
        TextDashboard(stream=stream).render(VehicleState().snapshot())
        assert stream.getvalue().startswith("\033[2J\033[H")
