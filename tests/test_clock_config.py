"""
Unit tests for the clock configuration model.

Tests mandatory parameter validation and the consistency record.
"""

import pytest


class TestClockConfigValidation:
    """Test ClockConfig.from_mapping validation."""

    def test_valid_mapping(self, clock_params):
        from detector_clocks.interfaces.clock_config import ClockConfig

        config = ClockConfig.from_mapping(clock_params)

        assert config.g4_ref_time == 3.0
        assert config.trigger_offset_tpc == -1600.0
        assert config.clock_speed_external == 31.25
        assert config.trig_module_name == 'daq'
        assert config.inherit_clock_config is True
        assert config.g4_ref_corr_trig_module_name == ''

    def test_integer_values_are_accepted(self, clock_params):
        """TOML integers (e.g. ClockSpeedTPC = 2) are valid numbers."""
        from detector_clocks.interfaces.clock_config import ClockConfig

        config = ClockConfig.from_mapping(dict(clock_params, ClockSpeedTPC=2, FramePeriod=1600))
        assert config.clock_speed_tpc == 2.0
        assert isinstance(config.frame_period, float)

    def test_optional_g4_ref_corr_module(self, clock_params):
        from detector_clocks.interfaces.clock_config import ClockConfig

        config = ClockConfig.from_mapping(dict(clock_params, G4RefCorrTrigModuleName='triggersim'))
        assert config.g4_ref_corr_trig_module_name == 'triggersim'

    @pytest.mark.parametrize("key", [
        'G4RefTime', 'TriggerOffsetTPC', 'FramePeriod',
        'ClockSpeedTPC', 'ClockSpeedOptical', 'ClockSpeedTrigger', 'ClockSpeedExternal',
        'DefaultTrigTime', 'DefaultBeamTime', 'TrigModuleName', 'InheritClockConfig',
    ])
    def test_every_mandatory_key_is_required(self, clock_params, key):
        """Verify no default is substituted for a missing mandatory key."""
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        del clock_params[key]
        with pytest.raises(ConfigurationInvalid, match=key):
            ClockConfig.from_mapping(clock_params)

    @pytest.mark.parametrize("key,value", [
        ('ClockSpeedTPC', 0.0),
        ('ClockSpeedOptical', -64.0),
        ('ClockSpeedTrigger', 0),
        ('ClockSpeedExternal', -1.0),
        ('FramePeriod', 0.0),
    ])
    def test_non_positive_values_rejected(self, clock_params, key, value):
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        with pytest.raises(ConfigurationInvalid, match=key):
            ClockConfig.from_mapping(dict(clock_params, **{key: value}))

    @pytest.mark.parametrize("key,value", [
        ('ClockSpeedTPC', float('inf')),
        ('ClockSpeedOptical', float('nan')),
        ('FramePeriod', float('inf')),
        ('G4RefTime', float('-inf')),
        ('DefaultTrigTime', float('nan')),
    ])
    def test_non_finite_values_rejected(self, clock_params, key, value):
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        with pytest.raises(ConfigurationInvalid, match=key):
            ClockConfig.from_mapping(dict(clock_params, **{key: value}))

    @pytest.mark.parametrize("field,value", [
        ('clock_speed_tpc', 0.0),
        ('clock_speed_external', -31.25),
        ('frame_period', float('inf')),
        ('g4_ref_time', float('nan')),
    ])
    def test_replaced_fields_are_validated(self, clock_params, field, value):
        """Validation also covers direct construction and dataclasses.replace."""
        import dataclasses
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        config = ClockConfig.from_mapping(clock_params)
        with pytest.raises(ConfigurationInvalid):
            dataclasses.replace(config, **{field: value})

    def test_ticks_per_frame_overflow_rejected(self, clock_params):
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        with pytest.raises(ConfigurationInvalid, match='FramePeriod'):
            ClockConfig.from_mapping(dict(clock_params, FramePeriod=1e308))

    def test_direct_construction_is_validated(self):
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        with pytest.raises(ConfigurationInvalid, match='ClockSpeedTPC'):
            ClockConfig(
                g4_ref_time=0.0,
                trigger_offset_tpc=-1600.0,
                frame_period=1600.0,
                clock_speed_tpc=0.0,
                clock_speed_optical=64.0,
                clock_speed_trigger=16.0,
                clock_speed_external=31.25,
                default_trig_time=0.0,
                default_beam_time=0.0,
                trig_module_name='daq',
                inherit_clock_config=False,
            )

    @pytest.mark.parametrize("key,value", [
        ('G4RefTime', 'early'),
        ('DefaultTrigTime', True),
        ('TrigModuleName', 7),
        ('InheritClockConfig', 'yes'),
        ('G4RefCorrTrigModuleName', 1.0),
    ])
    def test_wrong_types_rejected(self, clock_params, key, value):
        from detector_clocks.interfaces.clock_config import ClockConfig, ConfigurationInvalid

        with pytest.raises(ConfigurationInvalid):
            ClockConfig.from_mapping(dict(clock_params, **{key: value}))

    def test_configuration_invalid_is_value_error(self):
        from detector_clocks.interfaces.clock_config import ConfigurationInvalid

        assert issubclass(ConfigurationInvalid, ValueError)


class TestConfigRecord:
    """Test the consistency record and mapping export."""

    def test_record_contains_numeric_items_in_order(self, clock_params):
        from detector_clocks.interfaces.clock_config import ClockConfig
        from detector_clocks.timing.clock_constants import CONFIG_RECORD_KEYS

        record = ClockConfig.from_mapping(clock_params).config_record()

        assert tuple(record) == CONFIG_RECORD_KEYS
        assert record['DefaultBeamTime'] == 1600.0

    def test_to_mapping_round_trip(self, clock_params):
        from detector_clocks.interfaces.clock_config import ClockConfig

        config = ClockConfig.from_mapping(clock_params)
        assert ClockConfig.from_mapping(config.to_mapping()) == config

    def test_default_config_is_valid(self):
        from detector_clocks.interfaces.clock_config import ClockConfig
        from detector_clocks.timing.clock_constants import DEFAULT_CLOCK_CONFIG

        config = ClockConfig.from_mapping(DEFAULT_CLOCK_CONFIG)
        assert config.clock_speed_tpc == 2.0

    def test_mismatch_message_lists_differences(self):
        from detector_clocks.interfaces.clock_config import ConfigurationMismatch

        error = ConfigurationMismatch({'FramePeriod': (1600.0, 1600.5)})
        assert 'FramePeriod' in str(error)
        assert error.differences == {'FramePeriod': (1600.0, 1600.5)}
