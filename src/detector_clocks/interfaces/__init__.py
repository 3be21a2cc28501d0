"""Interface definitions: clock configuration, trigger source, report."""

from .clock_config import (
    ClockConfig,
    ConfigurationInvalid,
    ConfigurationMismatch,
    ClockMisuseError,
)
from .trigger_source import EventTiming, TriggerTimeSource, FixedTriggerSource
from .clock_report import ClockReport, TickConversion, G4Conversion

__all__ = [
    'ClockConfig', 'ConfigurationInvalid', 'ConfigurationMismatch', 'ClockMisuseError',
    'EventTiming', 'TriggerTimeSource', 'FixedTriggerSource',
    'ClockReport', 'TickConversion', 'G4Conversion',
]
