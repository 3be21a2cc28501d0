#!/usr/bin/env python3
"""
detector-clocks: Electronics Timing for Detector Data Processing

Command-line host for the clock provider. It:
1. Loads the clock configuration from a TOML file (or built-in defaults)
2. Optionally checks it against a previous job's configuration
3. Applies the event's trigger and beam gate time
4. Optionally rebases simulation time for data+simulation overlay
5. Prints the provider state and requested conversions as JSON

Usage:
    # Report with default configuration
    detector-clocks

    # Convert TPC ticks for an event triggered at 4100 µs
    detector-clocks --config clocks.toml --trigger-time 4100 --tpc-tick 0 --tpc-tick 3200

    # Enforce consistency with a previous job
    detector-clocks --config clocks.toml --inherit-from previous_job.toml

Configuration file:
    [detector_clocks]
    G4RefTime = -4050.0
    TriggerOffsetTPC = -1600.0
    FramePeriod = 1600.0
    ClockSpeedTPC = 2.0
    ClockSpeedOptical = 64.0
    ClockSpeedTrigger = 16.0
    ClockSpeedExternal = 31.25
    DefaultTrigTime = 4050.0
    DefaultBeamTime = 4050.0
    TrigModuleName = "daq"
    InheritClockConfig = true
"""

import argparse
import logging
import sys
from typing import Dict, Optional, List, Any
import toml

# Set up logging before imports that use it
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger('detector-clocks')

from .interfaces.clock_config import ConfigurationInvalid, ConfigurationMismatch
from .interfaces.clock_report import ClockReport
from .interfaces.trigger_source import FixedTriggerSource
from .timing.clock_constants import CONFIG_TABLE, DEFAULT_CLOCK_CONFIG
from .timing.detector_clocks import DetectorClocks

EXIT_CONFIG_INVALID = 1
EXIT_CONFIG_MISMATCH = 2


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load clock configuration from TOML file.

    The parameters are read from the [detector_clocks] table when present,
    otherwise from the top level of the file. Built-in defaults are used only
    when no path is given.

    Raises:
        OSError: config_path cannot be read
        toml.TomlDecodeError: config_path is not valid TOML
    """
    if config_path is None:
        return dict(DEFAULT_CLOCK_CONFIG)

    with open(config_path, 'r') as f:
        data = toml.load(f)
    return dict(data.get(CONFIG_TABLE, data))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='detector-clocks: Electronics timing conversions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start with config file
    detector-clocks --config clocks.toml

    # Event timing and tick conversions
    detector-clocks --trigger-time 4100 --beam-time 4090 --tpc-tick 3200

    # Overlay: rebase simulation to the data trigger
    detector-clocks --trigger-time 4100 --sim-trigger-time 4050 --g4-time 5000
        """
    )

    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file (default: built-in configuration)'
    )
    parser.add_argument(
        '--inherit-from',
        help='TOML configuration of a previous job to check consistency against'
    )
    parser.add_argument(
        '--trigger-time',
        type=float,
        help='Hardware trigger time of the event [us] (default: DefaultTrigTime)'
    )
    parser.add_argument(
        '--beam-time',
        type=float,
        help='Beam gate opening time of the event [us] (default: trigger time)'
    )
    parser.add_argument(
        '--sim-trigger-time',
        type=float,
        help='Simulated trigger time [us]; rebases the G4 reference time'
    )
    parser.add_argument(
        '--tpc-tick',
        type=float,
        action='append',
        default=[],
        help='TPC waveform tick to convert (repeatable)'
    )
    parser.add_argument(
        '--g4-time',
        type=float,
        action='append',
        default=[],
        help='G4 time [ns] to convert (repeatable)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, toml.TomlDecodeError) as e:
        logger.error(f"Cannot load clock configuration {args.config}: {e}")
        sys.exit(EXIT_CONFIG_INVALID)

    try:
        clocks = DetectorClocks(config)
    except ConfigurationInvalid as e:
        logger.error(f"Invalid clock configuration: {e}")
        sys.exit(EXIT_CONFIG_INVALID)

    inherited_ok = None
    if args.inherit_from:
        try:
            previous = load_config(args.inherit_from)
        except (OSError, toml.TomlDecodeError) as e:
            logger.error(f"Cannot load previous job configuration {args.inherit_from}: {e}")
            sys.exit(EXIT_CONFIG_INVALID)
        try:
            clocks.check_inherited_config(previous)
            if clocks.inherit_clock_config:
                inherited_ok = True
        except ConfigurationMismatch as e:
            logger.error(str(e))
            sys.exit(EXIT_CONFIG_MISMATCH)

    if args.trigger_time is not None:
        beam_time = args.beam_time if args.beam_time is not None else args.trigger_time
        clocks.apply_trigger_source(FixedTriggerSource(args.trigger_time, beam_time))
    elif args.beam_time is not None:
        clocks.set_trigger_time(clocks.trigger_time(), args.beam_time)

    if args.sim_trigger_time is not None:
        clocks.rebase_g4_ref_time(args.sim_trigger_time)

    if args.debug:
        clocks.debug_report()

    report = ClockReport.from_clocks(clocks)
    report.inherited_config_ok = inherited_ok
    for tick in args.tpc_tick:
        report.add_tick(clocks, tick)
    for g4_time in args.g4_time:
        report.add_g4_time(clocks, g4_time)

    print(report.to_json())


if __name__ == '__main__':
    main()
