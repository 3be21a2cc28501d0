"""
Clock Configuration Data Model

Defines the timing configuration consumed by the clock provider and the
errors raised when it is invalid or inconsistent with a previous job.

The configuration surface is a flat mapping keyed by the historical
parameter names (G4RefTime, TriggerOffsetTPC, FramePeriod, ...). Every
parameter is mandatory except G4RefCorrTrigModuleName; no default is ever
substituted for a missing mandatory value.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple
import math
import numbers

from ..timing.clock_constants import (
    G4_REF_TIME,
    TRIGGER_OFFSET_TPC,
    FRAME_PERIOD,
    CLOCK_SPEED_TPC,
    CLOCK_SPEED_OPTICAL,
    CLOCK_SPEED_TRIGGER,
    CLOCK_SPEED_EXTERNAL,
    DEFAULT_TRIG_TIME,
    DEFAULT_BEAM_TIME,
    TRIG_MODULE_NAME,
    INHERIT_CLOCK_CONFIG,
    G4_REF_CORR_TRIG_MODULE_NAME,
    CLOCK_SPEED_KEYS,
    CONFIG_RECORD_KEYS,
    MANDATORY_KEYS,
)


class ConfigurationInvalid(ValueError):
    """A mandatory clock parameter is missing or outside its valid range."""


class ConfigurationMismatch(RuntimeError):
    """
    Clock configuration differs from the one inherited from a previous job.

    Attributes:
        differences: {name: (recorded_value, candidate_value)}
    """

    def __init__(self, differences: Dict[str, Tuple[Any, Any]]):
        self.differences = dict(differences)
        details = ", ".join(
            f"{name}: {recorded!r} != {candidate!r}"
            for name, (recorded, candidate) in self.differences.items()
        )
        super().__init__(f"Clock configuration mismatch ({details})")


class ClockMisuseError(RuntimeError):
    """Clock provider used out of order (checked only when __debug__ is set)."""


def _number(mapping: Mapping[str, Any], key: str) -> float:
    value = mapping[key]
    # bool is an int subclass but never a valid time or frequency
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationInvalid(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationInvalid(f"{key} must be finite, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class ClockConfig:
    """
    Validated timing configuration.

    Attributes:
        g4_ref_time: Electronics time of simulation time zero [µs]
        trigger_offset_tpc: Dual-mode offset (negative: µs, otherwise TPC ticks)
        frame_period: Frame duration shared by all clocks [µs]
        clock_speed_tpc: TPC clock frequency [MHz]
        clock_speed_optical: Optical clock frequency [MHz]
        clock_speed_trigger: Trigger clock frequency [MHz]
        clock_speed_external: External clock frequency [MHz]
        default_trig_time: Trigger time used until an event sets one [µs]
        default_beam_time: Beam gate time used until an event sets one [µs]
        trig_module_name: Input tag of the trigger data product
        inherit_clock_config: Require consistency with previous jobs
        g4_ref_corr_trig_module_name: Input tag of the trigger product used
            for G4 reference time corrections (optional)
    """
    g4_ref_time: float
    trigger_offset_tpc: float
    frame_period: float
    clock_speed_tpc: float
    clock_speed_optical: float
    clock_speed_trigger: float
    clock_speed_external: float
    default_trig_time: float
    default_beam_time: float
    trig_module_name: str
    inherit_clock_config: bool
    g4_ref_corr_trig_module_name: str = ""

    def __post_init__(self):
        # Also runs for direct construction and dataclasses.replace()
        record = self.config_record()
        for key, value in record.items():
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationInvalid(f"{key} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationInvalid(f"{key} must be finite, got {value!r}")
        for key in (FRAME_PERIOD,) + tuple(CLOCK_SPEED_KEYS.values()):
            value = record[key]
            if value <= 0:
                raise ConfigurationInvalid(f"{key} must be positive, got {value}")
        for key in CLOCK_SPEED_KEYS.values():
            if not math.isfinite(record[key] * self.frame_period):
                raise ConfigurationInvalid(
                    f"{key} x {FRAME_PERIOD} overflows the ticks per frame"
                )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ClockConfig":
        """
        Build a configuration from the flat parameter mapping.

        Raises:
            ConfigurationInvalid: missing key, wrong type or non-positive
                frequency/frame period
        """
        missing = [key for key in MANDATORY_KEYS if key not in mapping]
        if missing:
            raise ConfigurationInvalid(
                f"Missing mandatory clock parameters: {', '.join(missing)}"
            )

        values = {key: _number(mapping, key) for key in CONFIG_RECORD_KEYS}

        trig_module_name = mapping[TRIG_MODULE_NAME]
        if not isinstance(trig_module_name, str):
            raise ConfigurationInvalid(
                f"{TRIG_MODULE_NAME} must be a string, got {trig_module_name!r}"
            )

        inherit = mapping[INHERIT_CLOCK_CONFIG]
        if not isinstance(inherit, bool):
            raise ConfigurationInvalid(
                f"{INHERIT_CLOCK_CONFIG} must be true or false, got {inherit!r}"
            )

        g4_ref_corr = mapping.get(G4_REF_CORR_TRIG_MODULE_NAME, "")
        if not isinstance(g4_ref_corr, str):
            raise ConfigurationInvalid(
                f"{G4_REF_CORR_TRIG_MODULE_NAME} must be a string, got {g4_ref_corr!r}"
            )

        return cls(
            g4_ref_time=values[G4_REF_TIME],
            trigger_offset_tpc=values[TRIGGER_OFFSET_TPC],
            frame_period=values[FRAME_PERIOD],
            clock_speed_tpc=values[CLOCK_SPEED_TPC],
            clock_speed_optical=values[CLOCK_SPEED_OPTICAL],
            clock_speed_trigger=values[CLOCK_SPEED_TRIGGER],
            clock_speed_external=values[CLOCK_SPEED_EXTERNAL],
            default_trig_time=values[DEFAULT_TRIG_TIME],
            default_beam_time=values[DEFAULT_BEAM_TIME],
            trig_module_name=trig_module_name,
            inherit_clock_config=inherit,
            g4_ref_corr_trig_module_name=g4_ref_corr,
        )

    def config_record(self) -> Dict[str, float]:
        """Ordered name -> value mapping used for consistency checks."""
        return {
            G4_REF_TIME: self.g4_ref_time,
            TRIGGER_OFFSET_TPC: self.trigger_offset_tpc,
            FRAME_PERIOD: self.frame_period,
            CLOCK_SPEED_TPC: self.clock_speed_tpc,
            CLOCK_SPEED_OPTICAL: self.clock_speed_optical,
            CLOCK_SPEED_TRIGGER: self.clock_speed_trigger,
            CLOCK_SPEED_EXTERNAL: self.clock_speed_external,
            DEFAULT_TRIG_TIME: self.default_trig_time,
            DEFAULT_BEAM_TIME: self.default_beam_time,
        }

    def to_mapping(self) -> Dict[str, Any]:
        """Flat parameter mapping, the inverse of from_mapping()."""
        mapping: Dict[str, Any] = self.config_record()
        mapping[TRIG_MODULE_NAME] = self.trig_module_name
        mapping[INHERIT_CLOCK_CONFIG] = self.inherit_clock_config
        mapping[G4_REF_CORR_TRIG_MODULE_NAME] = self.g4_ref_corr_trig_module_name
        return mapping
