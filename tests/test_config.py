"""Tests for melody configuration, complexity scaling and YAML loading."""

import pathlib

import pytest

import loopvoice.config


class TestComplexityParams:

	def test_zero_complexity (self) -> None:
		params = loopvoice.config.complexity_params(0.0, loopvoice.config.ComplexityScaling())
		assert params.passing_tone_probability == 0.0
		assert params.dissonance_tolerance == 0.0
		assert params.rest_probability == pytest.approx(0.5)

	def test_full_complexity (self) -> None:
		params = loopvoice.config.complexity_params(1.0, loopvoice.config.ComplexityScaling())
		assert params.passing_tone_probability == pytest.approx(0.3)
		assert params.rhythmic_variation == pytest.approx(0.4)
		assert params.phrase_awareness == pytest.approx(0.7)
		assert params.dissonance_tolerance == pytest.approx(0.15)
		assert params.rest_probability == pytest.approx(0.2)

	def test_out_of_range_complexity_is_clamped (self) -> None:
		scaling = loopvoice.config.ComplexityScaling()
		assert loopvoice.config.complexity_params(5.0, scaling) == loopvoice.config.complexity_params(1.0, scaling)
		assert loopvoice.config.complexity_params(-1.0, scaling) == loopvoice.config.complexity_params(0.0, scaling)

	def test_results_are_clamped (self) -> None:
		"""Aggressive scaling cannot push a probability outside [0, 1]."""
		scaling = loopvoice.config.ComplexityScaling(dissonance_tolerance_max=3.0, rest_probability_base=0.1, rest_probability_range=2.0)
		params = loopvoice.config.complexity_params(1.0, scaling)
		assert params.dissonance_tolerance == 1.0
		assert params.rest_probability == 0.0


class TestMelodyConfig:

	def test_defaults (self) -> None:
		config = loopvoice.config.MelodyConfig()
		assert config.key == "A"
		assert config.mode == "minor"
		assert config.tier_thresholds == (0.1, 0.3, 0.5, 0.7)
		assert config.melodic.range_low == "A3"
		assert config.melodic.range_high == "E5"
		assert config.beat_seconds == pytest.approx(0.5)

	def test_initial_complexity_clamped (self) -> None:
		assert loopvoice.config.MelodyConfig(initial_complexity=2.0).initial_complexity == 1.0

	@pytest.mark.parametrize("kwargs", [
		{"tier_thresholds": (0.1, 0.3, 0.5)},
		{"tier_thresholds": (0.5, 0.3, 0.1, 0.7)},
		{"tier_thresholds": (0.1, 0.3, 0.5, 1.5)},
		{"bpm": 0},
		{"loop_bars": 0},
		{"note_overlap_seconds": -0.1},
		{"mode": "bebop"},
		{"key": "H"},
		{"melodic": loopvoice.config.MelodicBehavior(range_low="A4", range_high="C5")},
		{"melodic": loopvoice.config.MelodicBehavior(range_low="A", range_high="E5")},
	])
	def test_invalid_values_raise (self, kwargs: dict) -> None:
		with pytest.raises(ValueError):
			loopvoice.config.MelodyConfig(**kwargs)


class TestConfigFromDict:

	def test_empty_gives_defaults (self) -> None:
		assert loopvoice.config.config_from_dict(None) == loopvoice.config.MelodyConfig()
		assert loopvoice.config.config_from_dict({}) == loopvoice.config.MelodyConfig()

	def test_sections_merge_over_defaults (self) -> None:
		config = loopvoice.config.config_from_dict({
			"bpm": 96,
			"complexity": {"dissonance_tolerance_max": 0.25},
			"melodic": {"range_low": "G3", "range_high": "G5"},
		})
		assert config.bpm == 96
		assert config.complexity.dissonance_tolerance_max == 0.25
		assert config.complexity.rest_probability_base == 0.5
		assert config.melodic.range_low == "G3"
		assert config.melodic.root_preference == 0.7

	def test_unknown_top_level_key_raises (self) -> None:
		with pytest.raises(ValueError, match="Unknown melody setting"):
			loopvoice.config.config_from_dict({"tempo": 120})

	def test_unknown_section_key_raises (self) -> None:
		with pytest.raises(ValueError, match="Unknown motif setting"):
			loopvoice.config.config_from_dict({"motif": {"size": 4}})

	@pytest.mark.parametrize("value", [5, "loud", ["G3", "G5"]])
	def test_non_mapping_section_raises (self, value: object) -> None:
		with pytest.raises(ValueError, match="melodic setting must be a mapping"):
			loopvoice.config.config_from_dict({"melodic": value})


class TestLoadConfig:

	def test_missing_file_returns_defaults (self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:
		"""A missing file logs a warning and falls back to the defaults."""
		config = loopvoice.config.load_config(str(tmp_path / "absent.yaml"))
		assert config == loopvoice.config.MelodyConfig()
		assert "not found" in caplog.text

	def test_yaml_file (self, tmp_path: pathlib.Path) -> None:
		path = tmp_path / "melody.yaml"
		path.write_text(
			"key: D\n"
			"mode: dorian\n"
			"tier_thresholds: [0.2, 0.4, 0.6, 0.8]\n"
			"motif:\n"
			"  capacity: 5\n"
		)
		config = loopvoice.config.load_config(str(path))
		assert config.key == "D"
		assert config.mode == "dorian"
		assert config.tier_thresholds == (0.2, 0.4, 0.6, 0.8)
		assert config.motif.capacity == 5

	def test_empty_yaml_file (self, tmp_path: pathlib.Path) -> None:
		path = tmp_path / "melody.yaml"
		path.write_text("")
		assert loopvoice.config.load_config(str(path)) == loopvoice.config.MelodyConfig()

	def test_non_mapping_yaml_raises (self, tmp_path: pathlib.Path) -> None:
		path = tmp_path / "melody.yaml"
		path.write_text("- just\n- a list\n")
		with pytest.raises(ValueError, match="mapping"):
			loopvoice.config.load_config(str(path))
