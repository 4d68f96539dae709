#!/usr/bin/env python3
"""
Scripted Drive Example

This example demonstrates how to:
1. Script a drive cycle as per-tick command batches
2. Run the simulator headless on a python-can virtual bus
3. Listen on the same bus, decode and record the telemetry frames
4. Inspect the vehicle state and export the recorded history

Run with: python run_scripted_drive.py
"""

import itertools
from pathlib import Path

import can

from vehiclesim import Simulator, Vehicle
from vehiclesim.control import ScriptedCommandSource
from vehiclesim.simulation import SimulatorConfig
from vehiclesim.telemetry import (
    CanBusSink,
    ExporterConfig,
    Frame,
    Signal,
    TelemetryExporter,
    TelemetryRecorder,
)

CHANNEL = "vehiclesim-example"
TICK_S = 0.05


def build_script():
    """Start, pull away, cruise with an indicator, coast to a stop and park."""
    script = [["start_stop"], ["drive"]]
    script += [["accelerate"]] * 160
    script += [["turn_left"]]
    script += [[]] * 60
    # Neutral first: braking to a standstill in gear stalls the engine
    script += [["neutral"]]
    script += [["brake"]] * 400
    script += [["park"], ["start_stop"], ["quit"]]
    return script


def main():
    print("=" * 60)
    print("Vehicle Simulator Scripted Drive Example")
    print("=" * 60)

    # Setup output directory
    output_dir = Path(__file__).parent / "output"

    # Step 1: Build the script
    print("\n1. Building drive script...")
    script = build_script()
    print(f"   {len(script)} ticks ({len(script) * TICK_S:.1f} s simulated)")

    # Step 2: Open the bus
    print("\n2. Opening virtual CAN bus...")
    listener = can.Bus(interface="virtual", channel=CHANNEL)
    sink = CanBusSink(channel=CHANNEL, interface="virtual")
    print(f"   Channel: {CHANNEL}")

    # Step 3: Run the simulator in simulated time
    print("\n3. Running simulation...")
    sim_time = itertools.count()
    sim = Simulator(
        Vehicle(),
        ScriptedCommandSource(script),
        sink,
        config=SimulatorConfig(tick_interval_s=TICK_S, real_time=False),
        clock=lambda: next(sim_time) * TICK_S,
    )

    recorder = TelemetryRecorder()
    decoder = recorder.decoder
    with sink:
        quit_requested = False
        while not quit_requested:
            quit_requested = sim.tick().controls.quit

            received = []
            msg = listener.recv(timeout=0.0)
            while msg is not None:
                received.append(Frame(msg.arbitration_id, bytes(msg.data)))
                msg = listener.recv(timeout=0.0)
            recorder.feed(received, sim.ticks * TICK_S)

            if sim.ticks % 40 == 0:
                print(f"   Tick {sim.ticks}: {decoder.get(Signal.SPEED)} km/h, "
                      f"{decoder.get(Signal.RPM)} rpm, "
                      f"{decoder.get(Signal.TRANSMISSION_MODE)}{decoder.get(Signal.GEAR_POSITION)}")
    listener.shutdown()

    # Step 4: Final state
    print("\n4. Final state:")
    state = sim.vehicle.snapshot()
    print(f"   Odometer: {state.odometer_km:.3f} km")
    print(f"   Fuel: {state.fuel_level_percent}%")
    print(f"   Engine temp: {state.engine_temp_celsius}°C")
    print(f"   Selector: {state.transmission_mode.value}")
    print(f"   Ignition: {'ON' if state.ignition else 'OFF'}")
    print(f"   Frames received: {decoder.frame_count}")

    # Step 5: Export the recorded history
    print("\n5. Exporting telemetry history...")
    exporter = TelemetryExporter(ExporterConfig(output_dir=str(output_dir)))
    csv_path = exporter.export_csv(recorder, "scripted_drive.csv")
    json_path = exporter.export_json(recorder, "scripted_drive.json")
    print(f"   {len(recorder.samples)} samples, {len(recorder.alerts)} alert changes")
    print(f"   CSV: {csv_path}")
    print(f"   JSON: {json_path}")

    print("\n" + "=" * 60)
    print("Drive complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
