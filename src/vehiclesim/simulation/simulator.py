"""
Simulator - Fixed-cadence tick loop.

Provides:
- Command polling, vehicle update, telemetry encode and transmit per tick
- Cooperative cancellation via a run flag
- Best-effort transmission with rate-limited error reporting
- Optional display callback
- Optional recording of the transmitted telemetry
"""

from dataclasses import dataclass
import logging
import time
from typing import Callable, List, Optional

from vehiclesim.control.sources import CommandSource, CommandSourceError
from vehiclesim.telemetry.frames import Frame, TelemetryEncoder
from vehiclesim.telemetry.recorder import TelemetryRecorder
from vehiclesim.telemetry.transport import TransportError, TransportSink
from vehiclesim.vehicle.state import VehicleSnapshot
from vehiclesim.vehicle.vehicle import TickOutcome, Vehicle

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Simulator configuration."""
    # Time stepping
    tick_interval_s: float = 0.05    # 20 Hz
    real_time: bool = True           # Sleep between ticks

    # Stop after this many ticks (0 = until quit)
    max_ticks: int = 0

    # Report every Nth transmit, command or display failure
    error_log_every: int = 10


class Simulator:
    """Main vehicle simulator loop.

    One tick: poll commands, resolve and apply them, integrate physics,
    encode the snapshot, send every frame, render, sleep.

    Usage:
        sim = Simulator(vehicle, source, sink)
        sim.run()
    """

    def __init__(
        self,
        vehicle: Vehicle,
        source: CommandSource,
        sink: TransportSink,
        encoder: TelemetryEncoder | None = None,
        display: Optional[Callable[[VehicleSnapshot], None]] = None,
        config: SimulatorConfig | None = None,
        recorder: TelemetryRecorder | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize simulator.

        Args:
            vehicle: Vehicle to simulate
            source: Command source polled each tick
            sink: Transport for telemetry frames
            encoder: Telemetry encoder. Uses defaults if None.
            display: Called with a snapshot after each tick
            config: Simulator configuration. Uses defaults if None.
            recorder: Receives every frame that was sent
            clock: Monotonic time source
            sleep: Sleep function
        """
        self.config = config or SimulatorConfig()
        self.vehicle = vehicle
        self.source = source
        self.sink = sink
        self.encoder = encoder or TelemetryEncoder()
        self.display = display
        self.recorder = recorder
        self._clock = clock
        self._sleep = sleep

        self._running: bool = False
        self._ticks: int = 0
        self._frames_sent: int = 0
        self._tx_errors: int = 0
        self._source_errors: int = 0
        self._display_errors: int = 0

    @property
    def is_running(self) -> bool:
        """Check if the loop is running."""
        return self._running

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    @property
    def frames_sent(self) -> int:
        """Frames accepted by the sink."""
        return self._frames_sent

    @property
    def tx_errors(self) -> int:
        """Frames the sink failed to send."""
        return self._tx_errors

    @property
    def source_errors(self) -> int:
        """Command polls that failed."""
        return self._source_errors

    @property
    def display_errors(self) -> int:
        """Display updates that failed."""
        return self._display_errors

    def stop(self) -> None:
        """Request the loop to stop after the current tick."""
        self._running = False

    def transmit(self, frames: List[Frame]) -> List[Frame]:
        """Send frames, counting failures without retrying.

        Returns:
            Frames accepted by the sink
        """
        sent = []
        for frame in frames:
            try:
                self.sink.send(frame.arbitration_id, frame.data)
            except TransportError as e:
                self._tx_errors += 1
                self._report(e, self._tx_errors, "TX")
                continue
            sent.append(frame)
        self._frames_sent += len(sent)
        return sent

    def _report(self, error: Exception, count: int, kind: str) -> None:
        """Log the first failure of a kind and every Nth after it."""
        if (count - 1) % self.config.error_log_every == 0:
            logger.warning(f"{error} ({count} {kind} errors so far)")

    def poll(self) -> List:
        """Poll the command source; a failed poll yields no commands."""
        try:
            return self.source.poll_commands()
        except CommandSourceError as e:
            self._source_errors += 1
            self._report(e, self._source_errors, "command source")
            return []

    def show(self, snapshot: VehicleSnapshot) -> None:
        """Hand the snapshot to the display, if any."""
        if self.display is None:
            return
        try:
            self.display(snapshot)
        except (OSError, ValueError) as e:
            self._display_errors += 1
            self._report(e, self._display_errors, "display")

    def tick(self) -> TickOutcome:
        """Run one full tick of the pipeline."""
        tokens = self.poll()
        now = self._clock()
        outcome = self.vehicle.tick(tokens, now)
        if outcome.controls.quit:
            logger.info("Quit requested")
            self.stop()

        snapshot = self.vehicle.snapshot()
        sent = self.transmit(self.encoder.encode(snapshot))
        if self.recorder is not None:
            self.recorder.feed(sent, now)

        self.show(snapshot)

        self._ticks += 1
        return outcome

    def run(self) -> int:
        """Run ticks until quit, stop() or max_ticks.

        Returns:
            Number of ticks run
        """
        self._running = True
        start_ticks = self._ticks
        logger.info("Vehicle simulator running")

        while self._running:
            self.tick()
            if self.config.max_ticks and self._ticks - start_ticks >= self.config.max_ticks:
                self.stop()
            if self._running and self.config.real_time:
                self._sleep(self.config.tick_interval_s)

        logger.info(
            f"Simulator stopped after {self._ticks - start_ticks} ticks, "
            f"odometer {self.vehicle.state.odometer_km:.1f} km, "
            f"{self._frames_sent} frames sent, {self._tx_errors} TX errors, "
            f"{self._source_errors} command source errors, {self._display_errors} display errors"
        )
        return self._ticks - start_ticks
