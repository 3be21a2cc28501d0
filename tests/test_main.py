"""
Tests for the detector-clocks command-line host.
"""

import json
import re
import pytest
import toml


@pytest.fixture
def config_file(tmp_path, clock_params):
    """Write the test configuration as a [detector_clocks] TOML table."""
    path = tmp_path / 'clocks.toml'
    path.write_text(toml.dumps({'detector_clocks': clock_params}))
    return path


def run_main(capsys, argv):
    from detector_clocks.main import main

    main(argv)
    return json.loads(capsys.readouterr().out)


class TestLoadConfig:
    """Tests for TOML configuration loading."""

    def test_defaults_without_file(self):
        from detector_clocks.main import load_config
        from detector_clocks.timing.clock_constants import DEFAULT_CLOCK_CONFIG

        assert load_config(None) == DEFAULT_CLOCK_CONFIG

    def test_missing_file_raises(self, tmp_path):
        from detector_clocks.main import load_config

        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / 'absent.toml'))

    def test_malformed_file_raises(self, tmp_path):
        from detector_clocks.main import load_config

        path = tmp_path / 'malformed.toml'
        path.write_text('[detector_clocks]\nG4RefTime = = 3\n')
        with pytest.raises(toml.TomlDecodeError):
            load_config(str(path))

        assert load_config(str(tmp_path / 'absent.toml')) == DEFAULT_CLOCK_CONFIG

    def test_reads_detector_clocks_table(self, config_file, clock_params):
        from detector_clocks.main import load_config

        assert load_config(str(config_file)) == clock_params

    def test_reads_top_level_table(self, tmp_path, clock_params):
        from detector_clocks.main import load_config

        path = tmp_path / 'flat.toml'
        path.write_text(toml.dumps(clock_params))
        assert load_config(str(path)) == clock_params


class TestMain:
    """Tests for the command-line entry point."""

    def test_default_report(self, capsys):
        report = run_main(capsys, [])

        assert report['state'] == 'CONFIGURED'
        assert report['trigger_time_us'] == 4050.0
        assert report['tpc_time_us'] == 2450.0
        assert report['config']['ClockSpeedTPC'] == 2.0
        assert 'inherited_config_ok' not in report

    def test_tick_conversions(self, capsys, config_file):
        report = run_main(capsys, [
            '--config', str(config_file),
            '--trigger-time', '100', '--beam-time', '50',
            '--tpc-tick', '3200', '--tpc-tick', '0',
        ])

        assert report['state'] == 'TRIGGER_TIME_SET'
        first, second = report['tick_conversions']
        assert first == {
            'tick': 3200.0,
            'trig_time_us': 0.0,
            'beam_time_us': 50.0,
            'elec_time_us': 100.0,
            'tdc': 200.0,
        }
        assert second['elec_time_us'] == -1500.0

    def test_rebase_and_g4_conversion(self, capsys, tmp_path, clock_params):
        path = tmp_path / 'overlay.toml'
        path.write_text(toml.dumps({'detector_clocks': dict(clock_params, G4RefTime=1.0)}))

        report = run_main(capsys, [
            '--config', str(path),
            '--trigger-time', '100', '--sim-trigger-time', '90',
            '--g4-time', '5000',
        ])

        assert report['state'] == 'REBASED'
        assert report['g4_ref_time_us'] == -9.0
        assert report['g4_conversions'][0]['elec_time_us'] == 14.0

    def test_consistent_previous_job(self, capsys, config_file):
        report = run_main(capsys, ['--config', str(config_file), '--inherit-from', str(config_file)])
        assert report['inherited_config_ok'] is True

    def test_inconsistent_previous_job_exits(self, tmp_path, config_file, clock_params):
        from detector_clocks.main import main, EXIT_CONFIG_MISMATCH

        previous = tmp_path / 'previous.toml'
        previous.write_text(toml.dumps({'detector_clocks': dict(clock_params, FramePeriod=800.0)}))

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(config_file), '--inherit-from', str(previous)])
        assert excinfo.value.code == EXIT_CONFIG_MISMATCH

    def test_invalid_config_exits(self, tmp_path, clock_params):
        from detector_clocks.main import main, EXIT_CONFIG_INVALID

        del clock_params['ClockSpeedOptical']
        path = tmp_path / 'broken.toml'
        path.write_text(toml.dumps({'detector_clocks': clock_params}))

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(path)])
        assert excinfo.value.code == EXIT_CONFIG_INVALID

    @pytest.mark.parametrize("text", [
        None,
        '[detector_clocks]\nG4RefTime = = 3\n',
    ])
    def test_unreadable_config_exits(self, tmp_path, text):
        from detector_clocks.main import main, EXIT_CONFIG_INVALID

        path = tmp_path / 'clocks.toml'
        if text is not None:
            path.write_text(text)

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(path)])
        assert excinfo.value.code == EXIT_CONFIG_INVALID

    def test_unreadable_previous_job_exits(self, tmp_path, config_file):
        from detector_clocks.main import main, EXIT_CONFIG_INVALID

        previous = tmp_path / 'previous.toml'
        previous.write_text('[detector_clocks]\nTrigModuleName = "daq\n')

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(config_file), '--inherit-from', str(previous)])
        assert excinfo.value.code == EXIT_CONFIG_INVALID

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(config_file), '--inherit-from', str(tmp_path / 'absent.toml')])
        assert excinfo.value.code == EXIT_CONFIG_INVALID

    def test_infinite_clock_speed_exits(self, tmp_path, clock_params):
        """An overflowing float literal parses as inf and must be rejected."""
        from detector_clocks.main import main, EXIT_CONFIG_INVALID

        text = toml.dumps({'detector_clocks': clock_params})
        text = re.sub(r'^ClockSpeedTPC = .*$', 'ClockSpeedTPC = 1e400', text, flags=re.MULTILINE)
        path = tmp_path / 'overflow.toml'
        path.write_text(text)

        with pytest.raises(SystemExit) as excinfo:
            main(['--config', str(path)])
        assert excinfo.value.code == EXIT_CONFIG_INVALID

    def test_report_json_round_trip(self, clocks):
        from detector_clocks.interfaces.clock_report import ClockReport

        report = ClockReport.from_clocks(clocks)
        report.add_tick(clocks, 10.0)
        report.add_g4_time(clocks, 5000.0)

        restored = ClockReport.from_json(report.to_json())
        assert restored == report
