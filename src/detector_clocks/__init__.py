"""
detector-clocks: Electronics Timing for Detector Data Processing

This package gives a particle-detector processing pipeline one consistent
notion of time across independently clocked electronics: TPC readout,
optical readout, trigger and an external clock.

Architecture:
    configuration → DetectorClocks → per-event set_trigger_time() → conversions

DetectorClocks provides:
    1. Tick ↔ electronics time conversions per clock domain
    2. Times relative to the hardware trigger and the beam gate
    3. Simulation (G4) time ↔ electronics time, with overlay rebasing
    4. Configuration consistency checks across jobs of a campaign

Version: 1.0.0
"""

__version__ = "1.0.0"

from .timing import ElecClock, DetectorClocks, ProviderState
from .interfaces.clock_config import (
    ClockConfig,
    ConfigurationInvalid,
    ConfigurationMismatch,
    ClockMisuseError,
)
from .interfaces.trigger_source import EventTiming, TriggerTimeSource, FixedTriggerSource

__all__ = [
    "ElecClock",
    "DetectorClocks",
    "ProviderState",
    "ClockConfig",
    "ConfigurationInvalid",
    "ConfigurationMismatch",
    "ClockMisuseError",
    "EventTiming",
    "TriggerTimeSource",
    "FixedTriggerSource",
    "__version__",
]
