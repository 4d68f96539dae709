"""
Command line entry point for the vehicle simulator.

Usage:
    vehiclesim                              # Keyboard control, vcan0
    vehiclesim --channel can1               # Different SocketCAN interface
    vehiclesim --interface virtual          # No hardware needed
    vehiclesim --script drive.json          # Replay scripted commands
    vehiclesim --record run.csv             # Record telemetry history
    vehiclesim --log-level DEBUG
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from vehiclesim.control.sources import (
    CommandSource,
    CommandSourceError,
    KeyboardCommandSource,
    ScriptedCommandSource,
)
from vehiclesim.simulation.simulator import Simulator, SimulatorConfig
from vehiclesim.telemetry.dashboard import TextDashboard
from vehiclesim.telemetry.exporter import ExporterConfig, TelemetryExporter
from vehiclesim.telemetry.frames import TelemetryConfig, TelemetryDecoder, TelemetryEncoder
from vehiclesim.telemetry.recorder import RecorderConfig, TelemetryRecorder
from vehiclesim.telemetry.transport import CanBusSink, TransportError
from vehiclesim.vehicle.vehicle import Vehicle

logger = logging.getLogger("vehiclesim")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Road vehicle simulator publishing CAN telemetry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
    A accelerate, B brake, S start/stop, D/R/N/P selector,
    arrows turn signals (up = hazard), space handbrake,
    L lights, T reset trip, Q quit
        """,
    )

    bus_group = parser.add_argument_group("Bus")
    bus_group.add_argument("--channel", default="vcan0", help="CAN channel (default: vcan0)")
    bus_group.add_argument(
        "--interface",
        default="socketcan",
        help="python-can interface (default: socketcan)",
    )
    bus_group.add_argument(
        "--base-id",
        type=lambda value: int(value, 0),
        default=0x100,
        help="Base arbitration ID of the telemetry block (default: 0x100)",
    )

    sim_group = parser.add_argument_group("Simulation")
    sim_group.add_argument("--tick-ms", type=float, default=50.0, help="Tick interval in ms")
    sim_group.add_argument("--max-ticks", type=int, default=0, help="Stop after N ticks")
    sim_group.add_argument(
        "--script",
        type=Path,
        help="JSON list of per-tick command lists to replay instead of the keyboard",
    )
    sim_group.add_argument("--no-dashboard", action="store_true", help="Do not draw the dashboard")

    record_group = parser.add_argument_group("Recording")
    record_group.add_argument(
        "--record",
        type=Path,
        help="Write the telemetry history to this file on exit (.json or .csv)",
    )
    record_group.add_argument(
        "--record-interval",
        type=float,
        default=1.0,
        help="Seconds between recorded samples (default: 1.0)",
    )

    log_group = parser.add_argument_group("Logging")
    log_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    log_group.add_argument("--log-file", type=Path, help="Also log to this file")

    return parser.parse_args(argv)


def setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Configure logging."""
    log_format = "%(asctime)s [%(levelname)s] %(message)s"
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level),
        format=log_format,
        handlers=handlers,
    )


def open_source(args: argparse.Namespace) -> CommandSource:
    if args.script:
        return ScriptedCommandSource.from_file(args.script)
    return KeyboardCommandSource()


def install_signal_handlers(simulator: Simulator) -> Dict[int, Any]:
    """Route SIGINT and SIGTERM to the simulator's run flag.

    The tick in progress completes, frames included, before the loop exits.

    Returns:
        Previous handlers keyed by signal number
    """
    def request_stop(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, stopping")
        simulator.stop()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, request_stop)
    return previous


def restore_signal_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def export_recording(recorder: TelemetryRecorder, path: Path) -> None:
    exporter = TelemetryExporter(ExporterConfig(output_dir=str(path.parent)))
    output = exporter.export(recorder, path.name)
    logger.info(
        f"Recorded {len(recorder.samples)} samples and "
        f"{len(recorder.alerts)} alert changes to {output}"
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the simulator.

    Returns:
        Process exit status
    """
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    # Startup failures abort before the first tick
    try:
        sink = CanBusSink(channel=args.channel, interface=args.interface)
    except TransportError as e:
        logger.error(str(e))
        return 1

    try:
        source = open_source(args)
    except CommandSourceError as e:
        logger.error(str(e))
        sink.close()
        return 1

    telemetry_config = TelemetryConfig(base_id=args.base_id)
    recorder = None
    if args.record:
        recorder = TelemetryRecorder(
            RecorderConfig(sample_interval_s=args.record_interval),
            TelemetryDecoder(telemetry_config),
        )

    dashboard = None if args.no_dashboard else TextDashboard()
    config = SimulatorConfig(
        tick_interval_s=args.tick_ms / 1000.0,
        max_ticks=args.max_ticks,
    )
    simulator = Simulator(
        Vehicle(),
        source,
        sink,
        encoder=TelemetryEncoder(telemetry_config),
        display=dashboard.render if dashboard else None,
        config=config,
        recorder=recorder,
    )

    with sink, source:
        previous = install_signal_handlers(simulator)
        try:
            simulator.run()
        finally:
            restore_signal_handlers(previous)

    if recorder is not None:
        try:
            export_recording(recorder, args.record)
        except OSError as e:
            logger.error(f"Could not write telemetry history: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
