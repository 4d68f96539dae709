"""
Telemetry module - Wire encoding and transport of the vehicle state.

This module contains:
- TelemetryEncoder / TelemetryDecoder: Fixed-format CAN frames
- CanBusSink: python-can transport
- TextDashboard: Terminal display
- TelemetryRecorder / TelemetryExporter: Sample history, alerts, CSV/JSON export
"""

from vehiclesim.telemetry.frames import (
    Frame,
    Signal,
    TelemetryConfig,
    TelemetryDecoder,
    TelemetryEncoder,
    decode_frame,
)
from vehiclesim.telemetry.transport import CanBusSink, TransportError, TransportSink
from vehiclesim.telemetry.dashboard import TextDashboard
from vehiclesim.telemetry.recorder import Alert, AlertType, RecorderConfig, TelemetryRecorder
from vehiclesim.telemetry.exporter import ExporterConfig, TelemetryExporter

__all__ = [
    "Frame",
    "Signal",
    "TelemetryConfig",
    "TelemetryDecoder",
    "TelemetryEncoder",
    "decode_frame",
    "CanBusSink",
    "TransportError",
    "TransportSink",
    "TextDashboard",
    "Alert",
    "AlertType",
    "RecorderConfig",
    "TelemetryRecorder",
    "ExporterConfig",
    "TelemetryExporter",
]
