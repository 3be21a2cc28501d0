#!/usr/bin/env python3
"""
Detector Clock Constants - Central Reference for Electronics Timing

================================================================================
PURPOSE
================================================================================
Single source of truth for configuration keys, units and default settings
used by the electronics clock model.

================================================================================
UNITS
================================================================================
    Time:        microseconds (µs) everywhere in the electronics time frame
    Frequency:   megahertz (MHz), i.e. ticks per microsecond
    G4 time:     nanoseconds, only at the simulation boundary

================================================================================
CLOCK DOMAINS
================================================================================
All domains share one frame period but tick at their own frequency:

    TPC       - TPC readout digitization clock (waveform ticks)
    OPTICAL   - optical (PMT) readout clock
    TRIGGER   - trigger electronics clock (not waveform sampled)
    EXTERNAL  - auxiliary external clock

================================================================================
TRIGGER OFFSET ENCODING
================================================================================
TriggerOffsetTPC is one signed number with two meanings:

    negative  -> µs between TPC readout start and the hardware trigger
    >= 0      -> TPC tick (possibly fractional) at which the trigger arrives

With a 2 MHz TPC clock, -1600.0 and 3200.0 describe the same timing.
"""

from enum import Enum
from typing import Dict, Any


class ClockDomain(str, Enum):
    """Electronics clock domains owned by the provider."""
    TPC = "TPC"
    OPTICAL = "Optical"
    TRIGGER = "Trigger"
    EXTERNAL = "External"


# =============================================================================
# CONFIGURATION KEYS
# =============================================================================

G4_REF_TIME = "G4RefTime"
TRIGGER_OFFSET_TPC = "TriggerOffsetTPC"
FRAME_PERIOD = "FramePeriod"
CLOCK_SPEED_TPC = "ClockSpeedTPC"
CLOCK_SPEED_OPTICAL = "ClockSpeedOptical"
CLOCK_SPEED_TRIGGER = "ClockSpeedTrigger"
CLOCK_SPEED_EXTERNAL = "ClockSpeedExternal"
DEFAULT_TRIG_TIME = "DefaultTrigTime"
DEFAULT_BEAM_TIME = "DefaultBeamTime"
TRIG_MODULE_NAME = "TrigModuleName"
INHERIT_CLOCK_CONFIG = "InheritClockConfig"
G4_REF_CORR_TRIG_MODULE_NAME = "G4RefCorrTrigModuleName"

# Numeric items recorded for the consistency check, in record order
CONFIG_RECORD_KEYS = (
    G4_REF_TIME,
    TRIGGER_OFFSET_TPC,
    FRAME_PERIOD,
    CLOCK_SPEED_TPC,
    CLOCK_SPEED_OPTICAL,
    CLOCK_SPEED_TRIGGER,
    CLOCK_SPEED_EXTERNAL,
    DEFAULT_TRIG_TIME,
    DEFAULT_BEAM_TIME,
)

# Frequencies must be strictly positive
CLOCK_SPEED_KEYS = {
    ClockDomain.TPC: CLOCK_SPEED_TPC,
    ClockDomain.OPTICAL: CLOCK_SPEED_OPTICAL,
    ClockDomain.TRIGGER: CLOCK_SPEED_TRIGGER,
    ClockDomain.EXTERNAL: CLOCK_SPEED_EXTERNAL,
}

MANDATORY_KEYS = CONFIG_RECORD_KEYS + (TRIG_MODULE_NAME, INHERIT_CLOCK_CONFIG)

# Key that marks a producer module's parameter set, never a clock configuration
MODULE_LABEL_KEY = "module_label"

# TOML table holding the clock configuration
CONFIG_TABLE = "detector_clocks"

# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

NS_TO_US = 1.0e-3

# =============================================================================
# DEFAULTS (MicroBooNE-style standard clocks)
# =============================================================================

DEFAULT_CLOCK_CONFIG: Dict[str, Any] = {
    G4_REF_TIME: -4050.0,           # µs
    TRIGGER_OFFSET_TPC: -1600.0,    # µs (negative -> time)
    FRAME_PERIOD: 1600.0,           # µs
    CLOCK_SPEED_TPC: 2.0,           # MHz
    CLOCK_SPEED_OPTICAL: 64.0,      # MHz
    CLOCK_SPEED_TRIGGER: 16.0,      # MHz
    CLOCK_SPEED_EXTERNAL: 31.25,    # MHz
    DEFAULT_TRIG_TIME: 4050.0,      # µs
    DEFAULT_BEAM_TIME: 4050.0,      # µs
    TRIG_MODULE_NAME: "daq",
    INHERIT_CLOCK_CONFIG: True,
    G4_REF_CORR_TRIG_MODULE_NAME: "",
}
