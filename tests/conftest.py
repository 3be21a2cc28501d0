"""
Pytest configuration and fixtures for detector-clocks tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def clock_params():
    """Flat clock configuration with exactly representable test values."""
    return {
        'G4RefTime': 3.0,
        'TriggerOffsetTPC': -1600.0,
        'FramePeriod': 1600.0,
        'ClockSpeedTPC': 2.0,
        'ClockSpeedOptical': 64.0,
        'ClockSpeedTrigger': 16.0,
        'ClockSpeedExternal': 31.25,
        'DefaultTrigTime': 1600.0,
        'DefaultBeamTime': 1600.0,
        'TrigModuleName': 'daq',
        'InheritClockConfig': True,
    }


@pytest.fixture
def clocks(clock_params):
    """Configured clock provider (default trigger time in effect)."""
    from detector_clocks.timing.detector_clocks import DetectorClocks
    return DetectorClocks(clock_params)
