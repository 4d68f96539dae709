"""Tests for telemetry recording and export."""

import csv
import json

import pytest

from vehiclesim.telemetry.exporter import ExporterConfig, TelemetryExporter
from vehiclesim.telemetry.frames import TelemetryEncoder
from vehiclesim.telemetry.recorder import (
    AlertType,
    RecorderConfig,
    SAMPLE_FIELDS,
    TelemetryRecorder,
)
from vehiclesim.vehicle.state import TransmissionMode, VehicleState


def frames_for(**fields):
    return TelemetryEncoder().encode(VehicleState(**fields).snapshot())


class TestRecorderSampling:
    """Test rate-limited sampling."""

    def test_one_sample_per_interval(self):
        """Test samples closer than the interval are skipped."""
        recorder = TelemetryRecorder()
        values = {"speed": 10, "fuel_level": 50, "engine_temp": 60}

        results = [recorder.record(t, values) for t in (0.0, 0.5, 1.0, 1.5, 2.2)]

        assert results == [True, False, True, False, True]
        assert [s["time"] for s in recorder.samples] == [0.0, 1.0, 2.2]

    def test_custom_interval(self):
        """Test the interval is configurable."""
        recorder = TelemetryRecorder(RecorderConfig(sample_interval_s=0.1))
        for tick in range(10):
            recorder.record(tick * 0.25, {"speed": tick})

        assert len(recorder.samples) == 10

    def test_nothing_received(self):
        """Test no sample before any frame arrives."""
        recorder = TelemetryRecorder()

        assert not recorder.feed([], time=0.0)
        assert recorder.samples == []

    def test_feed_decodes_frames(self):
        """Test samples hold decoded dashboard values."""
        recorder = TelemetryRecorder()
        frames = frames_for(
            speed=10.0,
            engine_rpm=2500,
            transmission_mode=TransmissionMode.DRIVE,
            gear_index=1,
            odometer_km=12.34,
        )

        assert recorder.feed(frames, time=3.0)

        sample = recorder.samples[0]
        assert set(sample) == {"time"} | set(SAMPLE_FIELDS)
        assert sample["speed"] == 36
        assert sample["rpm"] == 2500
        assert sample["transmission_mode"] == "D"
        assert sample["gear_position"] == 2
        assert sample["odometer"] == pytest.approx(12.3)

    def test_max_samples(self):
        """Test the oldest samples are dropped past the limit."""
        recorder = TelemetryRecorder(RecorderConfig(max_samples=3))
        for t in range(5):
            recorder.record(float(t), {"speed": t})

        assert [s["speed"] for s in recorder.samples] == [2, 3, 4]

    def test_statistics(self):
        """Test per-field statistics over recorded samples."""
        recorder = TelemetryRecorder()
        for t, speed in enumerate([10, 20, 30]):
            recorder.record(float(t), {"speed": speed})

        stats = recorder.get_statistics()

        assert stats["speed"] == {"min": 10.0, "max": 30.0, "mean": 20.0}
        assert "rpm" not in stats

    def test_clear(self):
        """Test clearing resets samples, alerts and the sample timer."""
        recorder = TelemetryRecorder()
        recorder.record(0.0, {"fuel_level": 5})
        recorder.clear()

        assert recorder.samples == []
        assert recorder.alerts == []
        assert recorder.active_alerts == []
        assert recorder.record(0.1, {"fuel_level": 50})


class TestRecorderAlerts:
    """Test low fuel and overheat alerts."""

    @pytest.mark.parametrize("fuel,active", [(19, True), (20, False), (75, False)])
    def test_low_fuel_threshold(self, fuel, active):
        """Test low fuel is raised strictly below 20 %."""
        recorder = TelemetryRecorder()
        recorder.record(0.0, {"fuel_level": fuel})

        assert (AlertType.LOW_FUEL in recorder.active_alerts) == active

    @pytest.mark.parametrize("temp,active", [(91, True), (90, False), (20, False)])
    def test_overheat_threshold(self, temp, active):
        """Test overheat is raised strictly above 90 °C."""
        recorder = TelemetryRecorder()
        recorder.record(0.0, {"engine_temp": temp})

        assert (AlertType.OVERHEAT in recorder.active_alerts) == active

    def test_alerts_recorded_on_change_only(self):
        """Test raise and clear transitions are logged once each."""
        recorder = TelemetryRecorder()
        for t, temp in enumerate([85, 95, 96, 97, 88, 87]):
            recorder.record(t * 0.1, {"engine_temp": temp})

        assert [(a.alert_type, a.active) for a in recorder.alerts] == [
            (AlertType.OVERHEAT, True),
            (AlertType.OVERHEAT, False),
        ]
        assert recorder.alerts[0].time == pytest.approx(0.1)
        assert recorder.active_alerts == []

    def test_alerts_checked_between_samples(self):
        """Test an alert inside the sample interval is not missed."""
        recorder = TelemetryRecorder()
        recorder.record(0.0, {"fuel_level": 25})

        assert not recorder.record(0.3, {"fuel_level": 19})
        assert recorder.active_alerts == [AlertType.LOW_FUEL]
        assert len(recorder.samples) == 1

    def test_alerts_from_frames(self):
        """Test both alerts from a decoded frame set."""
        recorder = TelemetryRecorder()
        recorder.feed(frames_for(fuel_level_percent=12, engine_temp_celsius=101), time=0.0)

        assert set(recorder.active_alerts) == {AlertType.LOW_FUEL, AlertType.OVERHEAT}
        assert recorder.get_state()["total_alerts"] == 2


class TestTelemetryExporter:
    """Test CSV and JSON export."""

    def recorded(self):
        recorder = TelemetryRecorder()
        recorder.feed(frames_for(fuel_level_percent=60, odometer_km=1.5), time=0.0)
        recorder.feed(frames_for(fuel_level_percent=15, odometer_km=1.75, ignition=True), time=1.0)
        return recorder

    def test_export_csv(self, tmp_path):
        """Test one CSV row per sample with a header."""
        exporter = TelemetryExporter(ExporterConfig(output_dir=str(tmp_path / "out")))

        path = exporter.export_csv(self.recorded(), "run.csv")

        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["time"] == "0.000"
        assert rows[0]["fuel_level"] == "60"
        assert rows[1]["fuel_level"] == "15"
        assert rows[1]["odometer"] == "1.7"
        assert rows[0]["ignition"] == "0"
        assert rows[1]["ignition"] == "1"
        assert rows[0]["transmission_mode"] == "P"

    def test_export_json(self, tmp_path):
        """Test samples, alerts and metadata in JSON."""
        exporter = TelemetryExporter(ExporterConfig(output_dir=str(tmp_path)))

        path = exporter.export_json(self.recorded(), "run.json")
        data = json.loads(path.read_text())

        assert data["metadata"]["total_samples"] == 2
        assert data["metadata"]["active_alerts"] == ["low_fuel"]
        assert [s["fuel_level"] for s in data["samples"]] == [60, 15]
        assert data["alerts"] == [{
            "time": 1.0,
            "alert_type": "low_fuel",
            "message": "Low fuel: 15%",
            "active": True,
        }]

    def test_export_by_suffix(self, tmp_path):
        """Test the format follows the file suffix."""
        exporter = TelemetryExporter(ExporterConfig(output_dir=str(tmp_path)))
        recorder = self.recorded()

        json.loads(exporter.export(recorder, "run.JSON").read_text())
        assert exporter.export(recorder, "run.csv").read_text().startswith("time,speed,")
