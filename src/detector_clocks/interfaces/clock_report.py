"""
Clock Report Data Model

Snapshot of the clock provider's configuration and per-event state, plus any
conversions requested by the host. Serialized to JSON by the command-line
tool.

Contract Version: 1.0.0
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional
import json


@dataclass
class TickConversion:
    """A TPC waveform tick expressed in every time frame."""
    tick: float
    trig_time_us: float
    beam_time_us: float
    elec_time_us: float
    tdc: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class G4Conversion:
    """A G4 (simulation) time expressed in electronics time and TPC ticks."""
    g4_time_ns: float
    elec_time_us: float
    tpc_tick: float
    tpc_tdc: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ClockReport:
    """
    Complete provider snapshot.

    Configuration items are kept in record order under `config`.
    """
    version: str = "1.0.0"

    state: str = "UNCONFIGURED"
    trig_module_name: str = ""
    inherit_clock_config: bool = False
    config: Dict[str, float] = field(default_factory=dict)

    # Per-event state
    trigger_time_us: float = 0.0
    beam_gate_time_us: float = 0.0
    trigger_offset_tpc_us: float = 0.0
    tpc_time_us: float = 0.0
    g4_ref_time_us: float = 0.0

    # Consistency check against a previous job (None when not performed)
    inherited_config_ok: Optional[bool] = None

    tick_conversions: List[TickConversion] = field(default_factory=list)
    g4_conversions: List[G4Conversion] = field(default_factory=list)

    @classmethod
    def from_clocks(cls, clocks) -> "ClockReport":
        """Build a report from a configured DetectorClocks provider."""
        return cls(
            state=clocks.state.name,
            trig_module_name=clocks.trig_module_name,
            inherit_clock_config=clocks.inherit_clock_config,
            config=clocks.config_record(),
            trigger_time_us=clocks.trigger_time(),
            beam_gate_time_us=clocks.beam_gate_time(),
            trigger_offset_tpc_us=clocks.trigger_offset_tpc(),
            tpc_time_us=clocks.tpc_time(),
            g4_ref_time_us=clocks.g4_ref_time,
        )

    def add_tick(self, clocks, tick: float) -> TickConversion:
        conversion = TickConversion(
            tick=tick,
            trig_time_us=float(clocks.tpc_tick_to_trig_time(tick)),
            beam_time_us=float(clocks.tpc_tick_to_beam_time(tick)),
            elec_time_us=float(clocks.tpc_tick_to_time(tick)),
            tdc=float(clocks.tpc_tick_to_tdc(tick)),
        )
        self.tick_conversions.append(conversion)
        return conversion

    def add_g4_time(self, clocks, g4_time_ns: float) -> G4Conversion:
        conversion = G4Conversion(
            g4_time_ns=g4_time_ns,
            elec_time_us=float(clocks.g4_to_elec_time(g4_time_ns)),
            tpc_tick=float(clocks.tpc_g4_time_to_tick(g4_time_ns)),
            tpc_tdc=float(clocks.tpc_g4_time_to_tdc(g4_time_ns)),
        )
        self.g4_conversions.append(conversion)
        return conversion

    def to_json(self) -> str:
        """Serialize to JSON."""
        data = {
            "version": self.version,
            "state": self.state,
            "trig_module_name": self.trig_module_name,
            "inherit_clock_config": self.inherit_clock_config,
            "config": self.config,
            "trigger_time_us": self.trigger_time_us,
            "beam_gate_time_us": self.beam_gate_time_us,
            "trigger_offset_tpc_us": self.trigger_offset_tpc_us,
            "tpc_time_us": self.tpc_time_us,
            "g4_ref_time_us": self.g4_ref_time_us,
        }

        if self.inherited_config_ok is not None:
            data["inherited_config_ok"] = self.inherited_config_ok

        data["tick_conversions"] = [c.to_dict() for c in self.tick_conversions]
        data["g4_conversions"] = [c.to_dict() for c in self.g4_conversions]

        return json.dumps(data, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "ClockReport":
        """Deserialize from JSON."""
        data = json.loads(json_str)

        return cls(
            version=data.get("version", "1.0.0"),
            state=data.get("state", "UNCONFIGURED"),
            trig_module_name=data.get("trig_module_name", ""),
            inherit_clock_config=data.get("inherit_clock_config", False),
            config=data.get("config", {}),
            trigger_time_us=data.get("trigger_time_us", 0.0),
            beam_gate_time_us=data.get("beam_gate_time_us", 0.0),
            trigger_offset_tpc_us=data.get("trigger_offset_tpc_us", 0.0),
            tpc_time_us=data.get("tpc_time_us", 0.0),
            g4_ref_time_us=data.get("g4_ref_time_us", 0.0),
            inherited_config_ok=data.get("inherited_config_ok"),
            tick_conversions=[TickConversion(**c) for c in data.get("tick_conversions", [])],
            g4_conversions=[G4Conversion(**c) for c in data.get("g4_conversions", [])],
        )
