"""
Telemetry exporter - Export recorded telemetry to files.

Provides:
- CSV export of samples
- JSON export of samples, alerts and statistics
"""

from dataclasses import asdict, dataclass
import csv
import json
from pathlib import Path

import numpy as np

from vehiclesim.telemetry.recorder import SAMPLE_FIELDS, TelemetryRecorder


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@dataclass
class ExporterConfig:
    """Exporter configuration."""
    output_dir: str = "./telemetry_data"
    include_metadata: bool = True


class TelemetryExporter:
    """Export recorded telemetry for analysis in external tools."""

    def __init__(self, config: ExporterConfig | None = None):
        """Initialize exporter.

        Args:
            config: Exporter configuration
        """
        self.config = config or ExporterConfig()

        # Ensure output directory exists
        self._output_path = Path(self.config.output_dir)
        self._output_path.mkdir(parents=True, exist_ok=True)

    def export_csv(
        self,
        recorder: TelemetryRecorder,
        filename: str = "telemetry.csv",
    ) -> Path:
        """Export samples to a CSV file, one row per sample.

        Args:
            recorder: Telemetry recorder with data
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename
        header = ["time"] + SAMPLE_FIELDS

        with open(output_file, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            for sample in recorder.samples:
                row = [f"{sample['time']:.3f}"]
                for name in SAMPLE_FIELDS:
                    value = sample.get(name)
                    if value is None:
                        row.append("")
                    elif isinstance(value, bool):
                        row.append(int(value))
                    elif isinstance(value, float):
                        row.append(f"{value:.1f}")
                    else:
                        row.append(value)
                writer.writerow(row)

        return output_file

    def export_json(
        self,
        recorder: TelemetryRecorder,
        filename: str = "telemetry.json",
    ) -> Path:
        """Export samples and alerts to a JSON file.

        Args:
            recorder: Telemetry recorder with data
            filename: Output filename

        Returns:
            Path to exported file
        """
        output_file = self._output_path / filename

        data = {
            "metadata": recorder.get_state() if self.config.include_metadata else {},
            "samples": recorder.samples,
            "alerts": [
                dict(asdict(alert), alert_type=alert.alert_type.value)
                for alert in recorder.alerts
            ],
        }

        with open(output_file, "w") as f:
            json.dump(data, f, indent=2, cls=NumpyEncoder)

        return output_file

    def export(self, recorder: TelemetryRecorder, filename: str) -> Path:
        """Export in the format given by the file suffix (.json, else CSV)."""
        if Path(filename).suffix.lower() == ".json":
            return self.export_json(recorder, filename)
        return self.export_csv(recorder, filename)
