import pathlib

import pytest

import hotbeat.config


def test_defaults () -> None:

	config = hotbeat.config.Config()

	assert config.bpm == 120
	assert config.monitor_resolution == 0.5
	assert config.device is None
	assert config.record is False


def test_missing_file_gives_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	config = hotbeat.config.load_config(str(tmp_path / "absent.yaml"))

	assert config == hotbeat.config.Config()
	assert "not found" in caplog.text


def test_yaml_values_are_applied (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "hotbeat.yaml"
	path.write_text("bpm: 96\ndevice: Synth\nprogram: 40\nrecord: true\nrecord_filename: jam.mid\n")

	config = hotbeat.config.load_config(str(path))

	assert config.bpm == 96
	assert config.device == "Synth"
	assert config.program == 40
	assert config.record is True
	assert config.record_filename == "jam.mid"


def test_empty_yaml_gives_defaults (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "empty.yaml"
	path.write_text("")

	assert hotbeat.config.load_config(str(path)) == hotbeat.config.Config()


def test_unknown_keys_rejected (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "typo.yaml"
	path.write_text("bmp: 90\n")

	with pytest.raises(ValueError, match="bmp"):
		hotbeat.config.load_config(str(path))


def test_non_mapping_rejected (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "list.yaml"
	path.write_text("- 1\n- 2\n")

	with pytest.raises(ValueError):
		hotbeat.config.load_config(str(path))


@pytest.mark.parametrize("kwargs", [
	{"bpm": 0},
	{"monitor_resolution": -1},
	{"channel": 16},
	{"program": 128},
	{"bpm": "fast"},
	{"bpm": True},
	{"channel": 1.5},
	{"record": "yes"},
	{"device": 3},
])
def test_invalid_values_rejected (kwargs: dict) -> None:

	with pytest.raises(ValueError):
		hotbeat.config.Config(**kwargs)


def test_wrong_type_in_yaml_is_a_value_error (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "hotbeat.yaml"
	path.write_text("bpm: fast\n")

	with pytest.raises(ValueError, match="bpm"):
		hotbeat.config.load_config(str(path))
