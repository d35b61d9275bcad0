#!/usr/bin/env python
"""Battery probe tests with injected readers."""

from types import SimpleNamespace

import psutil

from termwatch.battery import BatteryProbe, read_system_battery


def test_read_formats_percentage():
    """A 0.73 charge reads as 73%."""
    probe = BatteryProbe(reader=lambda: 0.73)
    assert probe.read() == "73%"


def test_read_full_and_empty():
    assert BatteryProbe(reader=lambda: 1.0).read() == "100%"
    assert BatteryProbe(reader=lambda: 0.0).read() == "0%"


def test_read_enables_monitoring_once():
    probe = BatteryProbe(reader=lambda: 0.5)
    assert not probe.monitoring_enabled
    probe.read()
    probe.read()
    assert probe.monitoring_enabled


def test_read_unavailable_level():
    """Missing or sentinel levels show N/A."""
    assert BatteryProbe(reader=lambda: None).read() == "N/A"
    assert BatteryProbe(reader=lambda: -1.0).read() == "N/A"


def test_read_reader_error():
    """Reader failures are absorbed."""

    def broken():
        raise OSError("no battery sensor")

    assert BatteryProbe(reader=broken).read() == "N/A"


def test_read_system_battery(monkeypatch):
    """psutil percent is converted to a fraction."""
    monkeypatch.setattr(
        psutil, "sensors_battery", lambda: SimpleNamespace(percent=42.0), raising=False
    )
    assert read_system_battery() == 0.42


def test_read_system_battery_absent(monkeypatch):
    monkeypatch.setattr(psutil, "sensors_battery", lambda: None, raising=False)
    assert read_system_battery() is None
    assert BatteryProbe().read() == "N/A"
