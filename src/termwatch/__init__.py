"""
termwatch - Terminal Watch Face

A terminal-styled readout of time, date, battery, step count, heart rate
and ambient temperature.
"""

__version__ = "0.1.0"
__author__ = "OpenCode"
__description__ = (
    "Terminal-styled status readout of time, battery, health and weather"
)

from .aggregator import StatusAggregator
from .display import DisplayManager
from .snapshot import StatusSnapshot

__all__ = ["StatusAggregator", "DisplayManager", "StatusSnapshot"]
