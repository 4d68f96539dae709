"""
Text dashboard - Terminal display of the vehicle state.
"""

import sys
from typing import List, TextIO

from vehiclesim.vehicle.state import TransmissionMode, VehicleSnapshot

CLEAR_SCREEN = "\033[2J\033[H"

MODE_NAMES = {
    TransmissionMode.PARK: "PARK",
    TransmissionMode.REVERSE: "REVERSE",
    TransmissionMode.NEUTRAL: "NEUTRAL",
    TransmissionMode.DRIVE: "DRIVE",
}

CONTROLS_HELP = [
    "A - Accelerate    B - Brake",
    "S - Start/Stop    D - Drive",
    "R - Reverse       N - Neutral",
    "P - Park          T - Reset Trip",
    "<- -> Turn Signals  Up - Hazard",
    "Space - Handbrake L - Lights",
    "Q - Quit",
]


def _on_off(value: bool) -> str:
    return "ON" if value else "OFF"


def _bar(fraction: float, width: int = 20) -> str:
    filled = int(fraction * width)
    return "[" + "=" * filled + " " * (width - filled) + "]"


class TextDashboard:
    """Renders snapshots as a text panel.

    Never modifies the vehicle; only reads the snapshot it is given.
    """

    def __init__(self, stream: TextIO | None = None, clear: bool = True):
        """Initialize dashboard.

        Args:
            stream: Output stream (stdout if None)
            clear: Clear the terminal before each frame
        """
        self.stream = stream or sys.stdout
        self.clear = clear

    def format(self, snapshot: VehicleSnapshot) -> List[str]:
        """Build the panel lines for a snapshot."""
        mode = TransmissionMode(snapshot.transmission_mode)
        gear = MODE_NAMES[mode]
        if mode == TransmissionMode.DRIVE:
            gear += f" {snapshot.gear_index + 1}"

        lines = [
            "VEHICLE SIMULATOR",
            f"Engine:      {_on_off(snapshot.ignition)}",
            f"Speed:       {int(snapshot.speed_kph):3d} km/h",
            f"RPM:         {snapshot.engine_rpm:4d} rpm",
            f"Gear:        {gear}",
            f"Fuel:        {snapshot.fuel_level_percent:3d}%",
            f"Fuel Rate:   {snapshot.fuel_rate_l_per_100km:.1f} L/100km",
            f"Engine Temp: {snapshot.engine_temp_celsius:3d} C",
            f"Odometer:    {snapshot.odometer_km:.1f} km",
            f"Trip:        {snapshot.trip_km:.1f} km",
            f"Turn Left:   {_on_off(snapshot.left_lamp)}",
            f"Turn Right:  {_on_off(snapshot.right_lamp)}",
            f"Battery:     {'OK' if snapshot.battery_ok else 'LOW'}",
            f"Backlight:   {_on_off(snapshot.backlight_on)}",
            "",
            *CONTROLS_HELP,
            "",
            f"Throttle: {_bar(snapshot.throttle_intent)} {int(snapshot.throttle_intent * 100)}%"
            f"   Brake: {_bar(snapshot.brake_intent)} {int(snapshot.brake_intent * 100)}%",
        ]
        return lines

    def render(self, snapshot: VehicleSnapshot) -> None:
        """Draw one frame of the dashboard."""
        text = "\n".join(self.format(snapshot)) + "\n"
        if self.clear:
            text = CLEAR_SCREEN + text
        self.stream.write(text)
        self.stream.flush()
