"""
Trigger Time Source Interface

Defines the contract for the collaborator that determines the hardware
trigger and beam gate times of an event. Trigger determination itself is
outside this package; the clock provider only stores and uses the values
it is handed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EventTiming:
    """
    Trigger timing of one event, in the electronics time frame.

    Attributes:
        trigger_time: Hardware trigger time [µs]
        beam_gate_time: Beam gate opening time [µs]
    """
    trigger_time: float
    beam_gate_time: float


class TriggerTimeSource(ABC):
    """
    Interface for the per-event trigger-time collaborator.

    Called once per event, before any tick/time conversion of that event.
    """

    @abstractmethod
    def event_timing(self, module_name: str) -> EventTiming:
        """
        Return trigger and beam gate time of the current event.

        Args:
            module_name: Input tag of the trigger data product
                (the provider's TrigModuleName)

        Returns:
            EventTiming for the current event
        """
        pass


class FixedTriggerSource(TriggerTimeSource):
    """Trigger source returning the same timing for every event."""

    def __init__(self, trigger_time: float, beam_gate_time: float):
        self.timing = EventTiming(trigger_time=trigger_time, beam_gate_time=beam_gate_time)

    def event_timing(self, module_name: str) -> EventTiming:
        return self.timing
