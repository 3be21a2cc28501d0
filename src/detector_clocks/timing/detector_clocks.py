"""
Detector Clocks - electronics time provider

================================================================================
OVERVIEW
================================================================================
Owns the four electronics clocks (TPC, Optical, Trigger, External) of a
detector and converts between waveform ticks, clock counts (TDC),
electronics time and simulation (Geant4) time.

    Electronics time:  common µs time frame shared by all clocks
    TPC time:          electronics time of TPC waveform tick 0
                       = trigger_time + trigger_offset_tpc
    G4 time:           simulation time [ns]; simulation time 0 sits at
                       g4_ref_time in electronics time

================================================================================
LIFECYCLE
================================================================================
    UNCONFIGURED --configure()--> CONFIGURED
    CONFIGURED / TRIGGER_TIME_SET / REBASED --set_trigger_time()--> TRIGGER_TIME_SET
    CONFIGURED / TRIGGER_TIME_SET --rebase_g4_ref_time()--> REBASED

The provider is an explicit context object: the host constructs it once per
job, calls set_trigger_time() at the entry of every event, and hands it to
the pipeline stages that need conversions. There is no internal locking;
per-event mutation must be serialized against readers by the host.

Until the first set_trigger_time() the configured default trigger and beam
gate times are in effect.

================================================================================
KNOWN QUIRKS (kept for numeric compatibility)
================================================================================
- The External clock keeps the reference time it was built with (0 µs);
  set_trigger_time() does not move it.
- external_clock(time) builds its clock with the Trigger clock frequency.

Ordering violations raise ClockMisuseError while __debug__ is set: any use
before configure(), and G4 conversions after set_trigger_time() moved the
trigger away from the one the G4 reference time was last rebased to. Under
``python -O`` the checks are skipped and results are undefined.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import logging
import numbers

from .elec_clock import ElecClock, Number
from .clock_constants import NS_TO_US, MODULE_LABEL_KEY
from ..interfaces.clock_config import (
    ClockConfig,
    ClockMisuseError,
    ConfigurationMismatch,
)
from ..interfaces.trigger_source import EventTiming, TriggerTimeSource

logger = logging.getLogger(__name__)


class ProviderState(Enum):
    """Lifecycle state of the clock provider."""
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    TRIGGER_TIME_SET = "trigger_time_set"
    REBASED = "rebased"


def trigger_offset_to_us(trigger_offset_tpc: float, tpc_frequency: float) -> float:
    """
    Resolve the dual-mode TriggerOffsetTPC parameter to microseconds.

    Negative values are already an offset in µs (TPC readout starts before
    the trigger). Non-negative values are the TPC tick at which the trigger
    arrives and are converted with the TPC frequency.
    """
    if trigger_offset_tpc < 0:
        return trigger_offset_tpc
    return -trigger_offset_tpc / tpc_frequency


class DetectorClocks:
    """
    Electronics clock provider with fixed configuration and per-event
    trigger time.
    """

    def __init__(self, config: Optional[Union[ClockConfig, Mapping[str, Any]]] = None):
        """
        Initialize provider.

        Args:
            config: ClockConfig or flat parameter mapping; when omitted the
                provider stays unconfigured until configure() is called
        """
        self._state = ProviderState.UNCONFIGURED
        self._config: Optional[ClockConfig] = None
        self._config_record: Dict[str, float] = {}

        self._g4_ref_time = 0.0
        self._g4_ref_time_default = 0.0
        self._trigger_offset_tpc = 0.0
        self._trigger_time = 0.0
        self._beam_gate_time = 0.0

        self._tpc_clock: Optional[ElecClock] = None
        self._optical_clock: Optional[ElecClock] = None
        self._trigger_clock: Optional[ElecClock] = None
        self._external_clock: Optional[ElecClock] = None

        # trigger time the G4 reference time was last rebased against
        self._rebase_trigger_time: Optional[float] = None

        if config is not None:
            self.configure(config)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def configure(self, config: Union[ClockConfig, Mapping[str, Any]]) -> None:
        """
        Apply a timing configuration and build the four clocks.

        Validation happens before anything is modified, so a failing
        configuration leaves the provider untouched.

        Raises:
            ConfigurationInvalid: missing or out-of-range parameter
        """
        if not isinstance(config, ClockConfig):
            config = ClockConfig.from_mapping(config)

        trig_time = config.default_trig_time
        tpc_clock = ElecClock(trig_time, config.frame_period, config.clock_speed_tpc)
        optical_clock = ElecClock(trig_time, config.frame_period, config.clock_speed_optical)
        trigger_clock = ElecClock(trig_time, config.frame_period, config.clock_speed_trigger)
        external_clock = ElecClock(0.0, config.frame_period, config.clock_speed_external)

        self._config = config
        self._config_record = config.config_record()
        self._g4_ref_time = config.g4_ref_time
        self._g4_ref_time_default = config.g4_ref_time
        self._trigger_offset_tpc = config.trigger_offset_tpc
        self._trigger_time = config.default_trig_time
        self._beam_gate_time = config.default_beam_time
        self._tpc_clock = tpc_clock
        self._optical_clock = optical_clock
        self._trigger_clock = trigger_clock
        self._external_clock = external_clock
        self._rebase_trigger_time = None

        previous = self._state
        self._state = ProviderState.CONFIGURED
        logger.info(f"Detector clocks: {previous.name} -> CONFIGURED")
        logger.info(
            f"  TPC {config.clock_speed_tpc} MHz, Optical {config.clock_speed_optical} MHz, "
            f"Trigger {config.clock_speed_trigger} MHz, External {config.clock_speed_external} MHz, "
            f"frame {config.frame_period} µs"
        )

    def _require_configured(self) -> None:
        if __debug__ and self._state is ProviderState.UNCONFIGURED:
            raise ClockMisuseError("Detector clocks used before configure()")

    @property
    def state(self) -> ProviderState:
        return self._state

    @property
    def is_configured(self) -> bool:
        return self._state is not ProviderState.UNCONFIGURED

    @property
    def config(self) -> Optional[ClockConfig]:
        return self._config

    @property
    def trig_module_name(self) -> str:
        """Input tag of the trigger data product."""
        self._require_configured()
        return self._config.trig_module_name

    @property
    def g4_ref_corr_trig_module_name(self) -> str:
        """Input tag of the trigger data product for G4 reference corrections."""
        self._require_configured()
        return self._config.g4_ref_corr_trig_module_name

    @property
    def inherit_clock_config(self) -> bool:
        """True if this job must be consistent with previous jobs."""
        self._require_configured()
        return self._config.inherit_clock_config

    def config_names(self) -> List[str]:
        return list(self._config_record)

    def config_values(self) -> List[float]:
        return list(self._config_record.values())

    def config_record(self) -> Dict[str, float]:
        """Copy of the recorded name -> value mapping."""
        return dict(self._config_record)

    # =========================================================================
    # CONSISTENCY CHECK
    # =========================================================================

    def config_differences(
        self,
        candidate: Union[ClockConfig, Mapping[str, Any]]
    ) -> Dict[str, Tuple[float, Any]]:
        """
        Compare recorded configuration items against a candidate.

        Returns:
            {name: (recorded_value, candidate_value)} for every recorded item
            that is missing (candidate value None), not a real scalar
            or not exactly equal
        """
        self._require_configured()
        if isinstance(candidate, ClockConfig):
            candidate = candidate.config_record()

        differences = {}
        for name, recorded in self._config_record.items():
            value = candidate.get(name)
            if (
                isinstance(value, bool)
                or not isinstance(value, numbers.Real)
                or value != recorded
            ):
                differences[name] = (recorded, value)
        return differences

    def is_right_config(self, candidate: Union[ClockConfig, Mapping[str, Any]]) -> bool:
        """
        True if the candidate carries every recorded item with an exactly
        equal value.

        A parameter set with a module_label belongs to a producer module and
        never matches.
        """
        if not isinstance(candidate, ClockConfig) and MODULE_LABEL_KEY in candidate:
            return False
        return not self.config_differences(candidate)

    def check_inherited_config(self, candidate: Union[ClockConfig, Mapping[str, Any]]) -> None:
        """
        Enforce consistency with a previous job's configuration record.

        Does nothing unless InheritClockConfig is enabled. The provider never
        merges or overrides values; it only reports the mismatch.

        Raises:
            ConfigurationMismatch: inheritance enabled and the record differs
        """
        if not self.inherit_clock_config:
            logger.debug("Clock config inheritance disabled, skipping consistency check")
            return

        if isinstance(candidate, Mapping) and MODULE_LABEL_KEY in candidate:
            raise ConfigurationMismatch({MODULE_LABEL_KEY: (None, candidate[MODULE_LABEL_KEY])})

        differences = self.config_differences(candidate)
        if differences:
            logger.error(f"Clock configuration differs from previous job: {sorted(differences)}")
            raise ConfigurationMismatch(differences)
        logger.info("Clock configuration consistent with previous job")

    # =========================================================================
    # PER-EVENT STATE
    # =========================================================================

    def set_trigger_time(self, trig_time: float, beam_time: float) -> None:
        """
        Set hardware trigger and beam gate time of the current event [µs].

        Moves the TPC, Optical and Trigger clocks to the trigger time. The
        External clock is left where it is.
        """
        self._require_configured()
        self._trigger_time = float(trig_time)
        self._beam_gate_time = float(beam_time)
        self._tpc_clock.set_time(trig_time)
        self._optical_clock.set_time(trig_time)
        self._trigger_clock.set_time(trig_time)

        self._state = ProviderState.TRIGGER_TIME_SET
        logger.debug(f"Trigger time set: trigger={trig_time} µs, beam gate={beam_time} µs")

    def set_default_trigger_time(self) -> None:
        """Reset trigger and beam gate time to the configured defaults."""
        self._require_configured()
        self.set_trigger_time(self._config.default_trig_time, self._config.default_beam_time)

    def apply_trigger_source(self, source: TriggerTimeSource) -> EventTiming:
        """
        Fetch the current event's timing from a trigger source and apply it.

        Returns:
            The EventTiming that was applied
        """
        timing = source.event_timing(self.trig_module_name)
        self.set_trigger_time(timing.trigger_time, timing.beam_gate_time)
        return timing

    def rebase_g4_ref_time(self, sim_trig_time: float) -> None:
        """
        Re-anchor simulation time to the current event's trigger time.

        Used when overlaying simulation on data: the G4 reference time is
        shifted so that the simulated trigger (sim_trig_time) lines up with
        the data trigger time:

            g4_ref_time = g4_ref_time_default - trigger_time + sim_trig_time

        Rebasing again replaces the previous value. Call it after every
        set_trigger_time() that G4 conversions depend on.
        """
        self._require_configured()
        self._g4_ref_time = self._g4_ref_time_default - self._trigger_time + sim_trig_time
        self._rebase_trigger_time = self._trigger_time
        self._state = ProviderState.REBASED
        logger.debug(
            f"G4 reference time rebased: {self._g4_ref_time} µs "
            f"(default={self._g4_ref_time_default}, trigger={self._trigger_time}, "
            f"sim trigger={sim_trig_time})"
        )

    # =========================================================================
    # REFERENCE TIMES
    # =========================================================================

    def trigger_time(self) -> float:
        """Hardware trigger time [µs] in electronics time."""
        self._require_configured()
        return self._trigger_time

    def beam_gate_time(self) -> float:
        """Beam gate opening time [µs] in electronics time."""
        self._require_configured()
        return self._beam_gate_time

    @property
    def g4_ref_time(self) -> float:
        """Electronics time of simulation time zero [µs]."""
        self._require_configured()
        return self._g4_ref_time

    @property
    def g4_ref_time_default(self) -> float:
        """Configured G4 reference time, before any rebasing [µs]."""
        self._require_configured()
        return self._g4_ref_time_default

    def trigger_offset_tpc(self) -> float:
        """Offset of TPC readout start relative to the trigger [µs]."""
        self._require_configured()
        return trigger_offset_to_us(self._trigger_offset_tpc, self._tpc_clock.frequency)

    def tpc_time(self) -> float:
        """Electronics time [µs] of TPC waveform tick 0."""
        return self.trigger_time() + self.trigger_offset_tpc()

    def g4_to_elec_time(self, g4_time: Number) -> Number:
        """Convert G4 time [ns] to electronics time [µs]."""
        self._require_configured()
        if __debug__ and (
            self._rebase_trigger_time is not None
            and self._rebase_trigger_time != self._trigger_time
        ):
            raise ClockMisuseError(
                f"G4 reference time was rebased for trigger time {self._rebase_trigger_time} µs "
                f"but the trigger time is now {self._trigger_time} µs; rebase again first"
            )
        return g4_time * NS_TO_US - self._g4_ref_time

    # =========================================================================
    # CLOCKS
    # =========================================================================

    def _clock(self, clock: Optional[ElecClock], time: Optional[float]) -> ElecClock:
        self._require_configured()
        if time is None:
            return clock.copy()
        return clock.with_time(time)

    @staticmethod
    def _clock_at(clock: ElecClock, sample: int, frame: int) -> ElecClock:
        clock.set_time_at(sample, frame)
        return clock

    def tpc_clock(self, time: Optional[float] = None) -> ElecClock:
        """Copy of the TPC clock, at the trigger time or at a given time [µs]."""
        return self._clock(self._tpc_clock, time)

    def tpc_clock_at(self, sample: int, frame: int) -> ElecClock:
        """TPC clock set to a sample/frame number."""
        return self._clock_at(self.tpc_clock(), sample, frame)

    def optical_clock(self, time: Optional[float] = None) -> ElecClock:
        """Copy of the Optical clock, at the trigger time or at a given time [µs]."""
        return self._clock(self._optical_clock, time)

    def optical_clock_at(self, sample: int, frame: int) -> ElecClock:
        """Optical clock set to a sample/frame number."""
        return self._clock_at(self.optical_clock(), sample, frame)

    def trigger_clock(self, time: Optional[float] = None) -> ElecClock:
        """Copy of the Trigger clock, at the trigger time or at a given time [µs]."""
        return self._clock(self._trigger_clock, time)

    def trigger_clock_at(self, sample: int, frame: int) -> ElecClock:
        """Trigger clock set to a sample/frame number."""
        return self._clock_at(self.trigger_clock(), sample, frame)

    def external_clock(self, time: Optional[float] = None) -> ElecClock:
        """
        Copy of the External clock, or a clock at a given time [µs].

        A clock built for an explicit time ticks at the Trigger clock
        frequency, not the External one.
        """
        self._require_configured()
        if time is None:
            return self._external_clock.copy()
        return ElecClock(time, self._external_clock.frame_period, self._trigger_clock.frequency)

    def external_clock_at(self, sample: int, frame: int) -> ElecClock:
        """External clock set to a sample/frame number."""
        return self._clock_at(self.external_clock(), sample, frame)

    # =========================================================================
    # TPC CONVERSIONS
    # =========================================================================

    def time_to_tick(self, time: Number) -> Number:
        """Electronics time [µs] to TPC waveform tick."""
        return (time - self.tpc_time()) / self._tpc_clock.tick_period

    def tpc_tick_to_trig_time(self, tick: Number) -> Number:
        """TPC waveform tick to time [µs] relative to the trigger."""
        self._require_configured()
        return self._tpc_clock.tick_period * tick + self.trigger_offset_tpc()

    def tpc_tick_to_beam_time(self, tick: Number) -> Number:
        """TPC waveform tick to time [µs] relative to the beam gate."""
        return self.tpc_tick_to_trig_time(tick) + self.trigger_time() - self.beam_gate_time()

    def tpc_tick_to_tdc(self, tick: Number) -> Number:
        """TPC waveform tick to TPC clock count."""
        return self.tpc_time() / self._tpc_clock.tick_period + tick

    def tpc_tick_to_time(self, tick: Number) -> Number:
        """TPC waveform tick to electronics time [µs]."""
        return self.tpc_time() + tick * self._tpc_clock.tick_period

    def tpc_tdc_to_tick(self, tdc: Number) -> Number:
        """TPC clock count to TPC waveform tick."""
        return tdc - self.tpc_time() / self._tpc_clock.tick_period

    def tpc_g4_time_to_tdc(self, g4_time: Number) -> Number:
        """G4 time [ns] to TPC clock count."""
        return self.g4_to_elec_time(g4_time) / self._tpc_clock.tick_period

    def tpc_g4_time_to_tick(self, g4_time: Number) -> Number:
        """G4 time [ns] to TPC waveform tick."""
        return (self.g4_to_elec_time(g4_time) - self.tpc_time()) / self._tpc_clock.tick_period

    # =========================================================================
    # OPTICAL CONVERSIONS
    # =========================================================================

    def optical_tick_to_trig_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """Optical tick of a sample/frame to time [µs] relative to the trigger."""
        self._require_configured()
        clock = self._optical_clock
        return clock.tick_period * tick + clock.time_at(sample, frame) - self.trigger_time()

    def optical_tick_to_beam_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """Optical tick of a sample/frame to time [µs] relative to the beam gate."""
        self._require_configured()
        clock = self._optical_clock
        return clock.tick_period * tick + clock.time_at(sample, frame) - self.beam_gate_time()

    def optical_tick_to_tdc(self, tick: Number, sample: Number, frame: Number) -> Number:
        """Optical tick of a sample/frame to Optical clock count."""
        self._require_configured()
        return self._optical_clock.ticks_at(sample, frame) + tick

    def optical_tick_to_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """Optical tick of a sample/frame to electronics time [µs]."""
        self._require_configured()
        clock = self._optical_clock
        return clock.time_at(sample, frame) + tick * clock.tick_period

    def optical_g4_time_to_tdc(self, g4_time: Number) -> Number:
        """G4 time [ns] to Optical clock count."""
        return self.g4_to_elec_time(g4_time) / self._optical_clock.tick_period

    # =========================================================================
    # EXTERNAL CONVERSIONS
    # =========================================================================

    def external_tick_to_trig_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """External tick of a sample/frame to time [µs] relative to the trigger."""
        self._require_configured()
        clock = self._external_clock
        return clock.tick_period * tick + clock.time_at(sample, frame) - self.trigger_time()

    def external_tick_to_beam_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """External tick of a sample/frame to time [µs] relative to the beam gate."""
        self._require_configured()
        clock = self._external_clock
        return clock.tick_period * tick + clock.time_at(sample, frame) - self.beam_gate_time()

    def external_tick_to_tdc(self, tick: Number, sample: Number, frame: Number) -> Number:
        """External tick of a sample/frame to External clock count."""
        self._require_configured()
        return self._external_clock.ticks_at(sample, frame) + tick

    def external_tick_to_time(self, tick: Number, sample: Number, frame: Number) -> Number:
        """External tick of a sample/frame to electronics time [µs]."""
        self._require_configured()
        clock = self._external_clock
        return clock.time_at(sample, frame) + tick * clock.tick_period

    def external_g4_time_to_tdc(self, g4_time: Number) -> Number:
        """G4 time [ns] to External clock count."""
        return self.g4_to_elec_time(g4_time) / self._external_clock.tick_period

    # =========================================================================
    # REPORTING
    # =========================================================================

    def debug_report(self) -> None:
        """Log configuration and current timing state."""
        self._require_configured()
        logger.info("=" * 60)
        logger.info("Detector clocks report")
        logger.info(f"  State:              {self._state.name}")
        logger.info(f"  Trigger module:     {self._config.trig_module_name}")
        logger.info(f"  Inherit config:     {self._config.inherit_clock_config}")
        for name, value in self._config_record.items():
            logger.info(f"  {name + ':':<20}{value}")
        logger.info(f"  Trigger offset TPC: {self.trigger_offset_tpc()} µs")
        logger.info(f"  Trigger time:       {self._trigger_time} µs")
        logger.info(f"  Beam gate time:     {self._beam_gate_time} µs")
        logger.info(f"  TPC time:           {self.tpc_time()} µs")
        logger.info(f"  G4 ref time:        {self._g4_ref_time} µs")
        logger.info("=" * 60)
