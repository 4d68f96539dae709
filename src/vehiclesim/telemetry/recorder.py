"""
Telemetry recorder - Records decoded dashboard values over time.

Provides:
- Rate-limited sampling of received telemetry
- Low fuel and engine overheat alerts
- Per-signal series and statistics
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from vehiclesim.telemetry.frames import Frame, Signal, TelemetryDecoder

logger = logging.getLogger(__name__)

# Column order of a recorded sample
SAMPLE_FIELDS = [signal.name.lower() for signal in Signal]

# Signals with numeric values worth summarising
NUMERIC_FIELDS = [
    "speed",
    "rpm",
    "fuel_level",
    "engine_temp",
    "odometer",
    "trip",
    "fuel_rate",
    "gear_position",
]


@dataclass
class RecorderConfig:
    """Recorder configuration."""
    sample_interval_s: float = 1.0    # At most one sample per interval
    max_samples: int = 100000         # Oldest samples dropped beyond this

    # Alert thresholds
    low_fuel_percent: int = 20        # Alert below this level
    overheat_celsius: int = 90        # Alert above this temperature


class AlertType(str, Enum):
    """Dashboard warnings."""
    LOW_FUEL = "low_fuel"
    OVERHEAT = "overheat"


@dataclass
class Alert:
    """One alert transition (raised or cleared)."""
    time: float
    alert_type: AlertType
    message: str
    active: bool


class TelemetryRecorder:
    """Records decoded telemetry samples and tracks dashboard alerts.

    Frames are fed through a TelemetryDecoder exactly as a receiver would
    see them. Samples are stored at most once per sample interval; alert
    conditions are checked on every update so a warning is never missed
    between samples.

    Usage:
        recorder = TelemetryRecorder()
        recorder.feed(frames, time=now)
        recorder.samples[-1]["speed"]
    """

    def __init__(
        self,
        config: RecorderConfig | None = None,
        decoder: TelemetryDecoder | None = None,
    ):
        """Initialize recorder.

        Args:
            config: Recorder configuration. Uses defaults if None.
            decoder: Decoder that received frames go through
        """
        self.config = config or RecorderConfig()
        self.decoder = decoder or TelemetryDecoder()

        self._samples: List[Dict[str, Any]] = []
        self._alerts: List[Alert] = []
        self._active: Dict[AlertType, bool] = {t: False for t in AlertType}
        self._last_sample_time: Optional[float] = None

    @property
    def samples(self) -> List[Dict[str, Any]]:
        """Recorded samples, oldest first."""
        return self._samples

    @property
    def alerts(self) -> List[Alert]:
        """Alert transitions, oldest first."""
        return self._alerts

    @property
    def active_alerts(self) -> List[AlertType]:
        """Alerts currently raised."""
        return [t for t, active in self._active.items() if active]

    def feed(self, frames: Iterable[Frame], time: float) -> bool:
        """Decode received frames, then record.

        Args:
            frames: Frames received since the last call
            time: Receive time in seconds

        Returns:
            True if a sample was stored
        """
        for frame in frames:
            self.decoder.feed(frame.arbitration_id, frame.data)
        return self.record(time)

    def record(self, time: float, values: Dict[str, Any] | None = None) -> bool:
        """Record dashboard values at the given time.

        Args:
            time: Current time in seconds
            values: Values keyed by signal name (taken from the decoder if None)

        Returns:
            True if a sample was stored
        """
        if values is None:
            values = self.decoder.get_state()
        if not values:
            return False

        self._check_alerts(time, values)

        # Check sample rate
        if (
            self._last_sample_time is not None
            and time - self._last_sample_time < self.config.sample_interval_s
        ):
            return False

        self._last_sample_time = time
        sample = {"time": time}
        sample.update({name: values.get(name) for name in SAMPLE_FIELDS})
        self._samples.append(sample)

        if len(self._samples) > self.config.max_samples:
            del self._samples[0]

        return True

    def _check_alerts(self, time: float, values: Dict[str, Any]) -> None:
        cfg = self.config
        fuel = values.get("fuel_level")
        temp = values.get("engine_temp")

        if fuel is not None:
            self._set_alert(
                time,
                AlertType.LOW_FUEL,
                fuel < cfg.low_fuel_percent,
                f"Low fuel: {fuel}%",
            )
        if temp is not None:
            self._set_alert(
                time,
                AlertType.OVERHEAT,
                temp > cfg.overheat_celsius,
                f"Engine temperature high: {temp}°C",
            )

    def _set_alert(self, time: float, alert_type: AlertType, active: bool, message: str) -> None:
        if self._active[alert_type] == active:
            return

        self._active[alert_type] = active
        self._alerts.append(Alert(time, alert_type, message, active))
        if active:
            logger.warning(message)
        else:
            logger.info(f"{alert_type.value} cleared")

    def get_series(self, name: str) -> tuple[np.ndarray, np.ndarray]:
        """Get (times, values) for one numeric field.

        Samples where the field was not yet received are skipped.
        """
        points = [(s["time"], s[name]) for s in self._samples if s.get(name) is not None]
        if not points:
            return np.array([]), np.array([])
        times, values = zip(*points)
        return np.array(times, dtype=float), np.array(values, dtype=float)

    def get_statistics(self) -> Dict[str, Dict[str, float]]:
        """Get min/max/mean for each numeric field that has data."""
        stats = {}
        for name in NUMERIC_FIELDS:
            _, values = self.get_series(name)
            if len(values) == 0:
                continue
            stats[name] = {
                "min": float(np.min(values)),
                "max": float(np.max(values)),
                "mean": float(np.mean(values)),
            }
        return stats

    def clear(self) -> None:
        """Clear all recorded data."""
        self._samples = []
        self._alerts = []
        self._active = {t: False for t in AlertType}
        self._last_sample_time = None

    def get_state(self) -> dict:
        """Get recorder state.

        Returns:
            Dictionary containing recorder state
        """
        return {
            "sample_interval_s": self.config.sample_interval_s,
            "total_samples": len(self._samples),
            "total_alerts": len(self._alerts),
            "active_alerts": [t.value for t in self.active_alerts],
            "statistics": self.get_statistics(),
        }
