"""
Electronics timing for detector-clocks.

Clock domains and the provider that converts between ticks, electronics
time and simulation time.
"""

from .elec_clock import ElecClock
from .detector_clocks import DetectorClocks, ProviderState, trigger_offset_to_us

__all__ = ['ElecClock', 'DetectorClocks', 'ProviderState', 'trigger_offset_to_us']
