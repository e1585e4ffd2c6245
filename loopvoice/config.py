"""Melody configuration and complexity scaling.

Everything that shapes the generated line is gathered in :class:`MelodyConfig`
so a layer can be tuned without touching the algorithm.  The values below are
the tuned defaults; any of them can be overridden in code or from a YAML file
via :func:`load_config`::

    complexity:
      dissonance_tolerance_max: 0.25
    melodic:
      range_low: G3
      range_high: G5
    bpm: 96

Complexity drives five derived parameters (:class:`ComplexityParams`), each a
fixed linear function of the complexity value.  Four rise with complexity;
the rest probability falls.
"""

import dataclasses
import logging
import os
import typing

import yaml

import loopvoice.pitches
import loopvoice.scales


logger = logging.getLogger(__name__)


DEFAULT_TIER_THRESHOLDS: typing.Tuple[float, ...] = (0.1, 0.3, 0.5, 0.7)


def clamp_unit (value: float) -> float:

	"""Clamp a value into [0, 1]."""

	return max(0.0, min(1.0, float(value)))


@dataclasses.dataclass
class ComplexityScaling:

	"""
	How far each derived parameter moves as complexity goes from 0 to 1.

	Attributes:
		passing_tone_max: Passing-tone probability at full complexity.
		rhythmic_variation_max: Rhythmic variation at full complexity.
		phrase_awareness_max: Phrase awareness at full complexity.
		dissonance_tolerance_max: Chance of a chromatic neighbour on a weak
			beat at full complexity.
		rest_probability_base: Rest probability at complexity 0.
		rest_probability_range: How much the rest probability drops by
			complexity 1.
	"""

	passing_tone_max: float = 0.3
	rhythmic_variation_max: float = 0.4
	phrase_awareness_max: float = 0.7
	dissonance_tolerance_max: float = 0.15
	rest_probability_base: float = 0.5
	rest_probability_range: float = 0.3


@dataclasses.dataclass
class MelodicBehavior:

	"""
	Contour and register settings for the note selector.

	Attributes:
		range_low: Lowest comfortable pitch; anything lower is raised an octave.
		range_high: Highest comfortable pitch; anything higher is lowered an octave.
		max_steps_in_direction: Base length of a melodic run before a
			direction change is considered.
		direction_change_scaling: Extra run length at full complexity
			(added as ``floor(complexity * scaling)``).
		direction_change_probability: Chance of turning once a run is long enough.
		strong_beat_rest_reduction: Multiplier on the rest probability for
			strong beats.
		preferred_start_index: Chord-tone index used for a non-root start
			(2 = the fifth of a triad).
		root_preference: Probability of starting a line on the chord root.
	"""

	range_low: str = "A3"
	range_high: str = "E5"
	max_steps_in_direction: int = 3
	direction_change_scaling: int = 2
	direction_change_probability: float = 0.6
	strong_beat_rest_reduction: float = 0.3
	preferred_start_index: int = 2
	root_preference: float = 0.7


@dataclasses.dataclass
class MotifSettings:

	"""Motif memory settings."""

	recall_probability: float = 0.3
	capacity: int = 3
	min_length: int = 3
	max_length: int = 4


@dataclasses.dataclass
class PhraseSettings:

	"""Phrase length, counted in decision steps of ``bars_per_phrase * beats_per_bar``."""

	bars_per_phrase: int = 4
	beats_per_bar: int = 4


@dataclasses.dataclass
class MelodyConfig:

	"""
	Complete configuration for one melodic voice.

	Attributes:
		key: Key root used for the scale lookup (e.g. ``"A"``).
		mode: Scale mode (e.g. ``"minor"``, ``"dorian"``).
		base_octave: Lower of the two octaves the scale and chord tones span.
		bpm: Tempo; one beat is a quarter note.
		tier_thresholds: Ascending upper bounds of the first four complexity
			tiers; the fifth tier runs up to 1.0.
		note_overlap_seconds: Legato overlap handed to the synth with every note.
		loop_bars: Bars in one loop repetition.
		lookahead_loops: Loop repetitions pre-scheduled by ``start()``.
		initial_complexity: Complexity before the first ``set_complexity()``.
	"""

	key: str = "A"
	mode: str = "minor"
	base_octave: int = 3
	bpm: float = 120.0
	tier_thresholds: typing.Tuple[float, ...] = DEFAULT_TIER_THRESHOLDS
	complexity: ComplexityScaling = dataclasses.field(default_factory=ComplexityScaling)
	melodic: MelodicBehavior = dataclasses.field(default_factory=MelodicBehavior)
	motif: MotifSettings = dataclasses.field(default_factory=MotifSettings)
	phrase: PhraseSettings = dataclasses.field(default_factory=PhraseSettings)
	note_overlap_seconds: float = 0.05
	loop_bars: int = 8
	lookahead_loops: int = 4
	initial_complexity: float = 0.5


	def __post_init__ (self) -> None:

		"""Validate the configuration."""

		self.tier_thresholds = tuple(float(t) for t in self.tier_thresholds)

		if len(self.tier_thresholds) != 4:
			raise ValueError("Tier thresholds must contain exactly four bounds")

		if list(self.tier_thresholds) != sorted(self.tier_thresholds):
			raise ValueError("Tier thresholds must be in ascending order")

		if self.tier_thresholds[0] < 0 or self.tier_thresholds[-1] > 1:
			raise ValueError("Tier thresholds must lie between 0 and 1")

		if self.bpm <= 0:
			raise ValueError("BPM must be positive")

		if self.loop_bars <= 0 or self.lookahead_loops < 0:
			raise ValueError("Loop length must be positive and lookahead non-negative")

		if self.note_overlap_seconds < 0:
			raise ValueError("Note overlap cannot be negative")

		# Raises ValueError for unknown names.
		loopvoice.scales.scale_intervals(self.mode)
		loopvoice.pitches.note_name_to_pc(self.key)

		if not loopvoice.pitches.is_valid_pitch(self.melodic.range_low) or not loopvoice.pitches.is_valid_pitch(self.melodic.range_high):
			raise ValueError(f"Invalid melodic range: {self.melodic.range_low!r}–{self.melodic.range_high!r}")

		if loopvoice.pitches.semitone_interval(self.melodic.range_low, self.melodic.range_high) < 12:
			raise ValueError("Melodic range must span at least an octave")

		self.initial_complexity = clamp_unit(self.initial_complexity)


	@property
	def beat_seconds (self) -> float:

		"""Return the length of one beat in seconds."""

		return 60.0 / self.bpm


@dataclasses.dataclass(frozen=True)
class ComplexityParams:

	"""Parameters derived from a complexity value, each in [0, 1]."""

	passing_tone_probability: float
	rhythmic_variation: float
	phrase_awareness: float
	dissonance_tolerance: float
	rest_probability: float


def complexity_params (complexity: float, scaling: ComplexityScaling) -> ComplexityParams:

	"""Derive the five complexity-scaled parameters.

	The complexity is clamped into [0, 1] first, and every result is clamped
	too, so unusual scaling values cannot push a probability out of range.

	Example:
		```python
		params = complexity_params(0.5, ComplexityScaling())
		params.dissonance_tolerance  # → 0.075
		params.rest_probability      # → 0.35
		```
	"""

	c = clamp_unit(complexity)

	return ComplexityParams(
		passing_tone_probability = clamp_unit(c * scaling.passing_tone_max),
		rhythmic_variation = clamp_unit(c * scaling.rhythmic_variation_max),
		phrase_awareness = clamp_unit(c * scaling.phrase_awareness_max),
		dissonance_tolerance = clamp_unit(c * scaling.dissonance_tolerance_max),
		rest_probability = clamp_unit(scaling.rest_probability_base - c * scaling.rest_probability_range),
	)


_SECTIONS: typing.Dict[str, typing.Type[typing.Any]] = {
	"complexity": ComplexityScaling,
	"melodic": MelodicBehavior,
	"motif": MotifSettings,
	"phrase": PhraseSettings,
}


def _check_keys (section: str, values: typing.Dict[str, typing.Any], allowed: typing.Iterable[str]) -> None:

	"""Raise ValueError for keys that are not fields of the target dataclass."""

	unknown = set(values) - set(allowed)

	if unknown:
		raise ValueError(f"Unknown {section} setting(s): {', '.join(sorted(unknown))}")


def config_from_dict (data: typing.Optional[typing.Dict[str, typing.Any]]) -> MelodyConfig:

	"""Build a MelodyConfig from a (possibly partial) nested dictionary.

	Top-level keys are `MelodyConfig` fields; the ``complexity``, ``melodic``,
	``motif`` and ``phrase`` keys hold dictionaries merged over the defaults
	of their section.

	Raises:
		ValueError: For unknown keys or invalid values.
	"""

	if not data:
		return MelodyConfig()

	field_names = [f.name for f in dataclasses.fields(MelodyConfig)]
	_check_keys("melody", data, field_names)

	kwargs: typing.Dict[str, typing.Any] = {}

	for name, value in data.items():

		if name in _SECTIONS:
			section_type = _SECTIONS[name]
			section_values = value or {}

			if not isinstance(section_values, dict):
				raise ValueError(f"The {name} setting must be a mapping, got {section_values!r}")

			_check_keys(name, section_values, [f.name for f in dataclasses.fields(section_type)])
			kwargs[name] = section_type(**section_values)

		else:
			kwargs[name] = value

	return MelodyConfig(**kwargs)


def load_config (config_path: str = "melody.yaml") -> MelodyConfig:

	"""
	Load a melody configuration from a YAML file.

	A missing file is not an error: a warning is logged and the defaults are
	returned.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return MelodyConfig()

	with open(config_path, "r") as f:
		data = yaml.safe_load(f)

	if data is not None and not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

	return config_from_dict(data)
