"""Complexity-tiered note selection for a single melodic line.

Provides :class:`NoteSelector`, the stateful pitch-decision engine behind
:class:`~loopvoice.melody.GenerativeMelody`.  Given the last note, the
extended scale (two octaves), the chord tones of the current bar, the beat
strength and a complexity value, it returns the next pitch together with a
label naming the strategy that produced it.

The strategies form five tiers of ascending complexity, held in an ordered
table of ``(upper_bound, strategy)`` pairs and evaluated from the lowest
bound up:

- **simple** (≤ 0.1): always the nearest chord tone.
- **stepwise** (≤ 0.3): chord tones on strong beats, one scale step toward a
  chord tone on weak beats.
- **directional** (≤ 0.5): chord tones in the current melodic direction on
  strong beats, approach steps on weak beats.
- **motivic** (≤ 0.7): as directional, but a remembered motif may be
  recalled first.
- **chromatic** (≤ 1.0): as motivic, but a weak beat may take a chromatic
  neighbour, which must be resolved on the next strong beat.

The selector also owns the melodic *direction state* (which way the line is
heading and for how many steps), which bounds the length of melodic arcs.

Scale positions are plain list indices into the extended scale; pitches are
compared by semitone (so ``"C#4"`` and ``"Db4"`` are the same note).
"""

import dataclasses
import logging
import random
import typing

import loopvoice.config
import loopvoice.constants
import loopvoice.motif_memory
import loopvoice.pitches


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class BeatPosition:

	"""
	Where a decision tick falls within its bar.

	Attributes:
		bar: Bar index (``tick // ticks_per_bar``).
		position: Eighth-note position within the bar (0–7).
		is_strong_beat: True on beats 1 and 3 (positions 0 and 4).
		is_downbeat: True on every quarter-note beat (even positions).
	"""

	bar: int
	position: int
	is_strong_beat: bool
	is_downbeat: bool

	@classmethod
	def from_tick (cls, tick: int, ticks_per_bar: int = loopvoice.constants.TICKS_PER_BAR) -> "BeatPosition":

		"""Derive the beat position of an absolute tick index."""

		position = tick % ticks_per_bar

		return cls(
			bar = tick // ticks_per_bar,
			position = position,
			is_strong_beat = position in loopvoice.constants.STRONG_BEAT_POSITIONS,
			is_downbeat = position % 2 == 0
		)


@dataclasses.dataclass
class DirectionState:

	"""Which way the line is moving (+1 up, -1 down) and for how many steps."""

	direction: int = 1
	steps_in_direction: int = 0

	def reverse (self) -> None:

		"""Turn around and start counting a new run."""

		self.direction = -self.direction
		self.steps_in_direction = 0

	def reset (self) -> None:

		"""Return to the initial upward state."""

		self.direction = 1
		self.steps_in_direction = 0


@dataclasses.dataclass(frozen=True)
class NoteChoice:

	"""A selected pitch and the name of the strategy that chose it."""

	pitch: str
	source: str


@dataclasses.dataclass(frozen=True)
class SelectionContext:

	"""Everything a tier strategy needs to choose the next note."""

	last_note: str
	current_index: int
	scale: typing.Sequence[str]
	chord_tones: typing.Sequence[str]
	is_strong_beat: bool
	complexity: float
	dissonance_tolerance: float


Strategy = typing.Callable[[SelectionContext], NoteChoice]
DistanceFn = typing.Callable[[str, str], int]


def _midi_or_none (pitch: str) -> typing.Optional[int]:

	"""Return the MIDI number of a token, or None if it does not parse."""

	try:
		return loopvoice.pitches.pitch_to_midi(pitch)
	except ValueError:
		return None


def _distance_or_none (distance: DistanceFn, a: str, b: str) -> typing.Optional[int]:

	"""Return ``distance(a, b)``, or None if either token cannot be measured."""

	try:
		return distance(a, b)
	except ValueError:
		return None


def nearest_chord_tone (
	from_note: str,
	chord_tones: typing.Sequence[str],
	distance: DistanceFn = loopvoice.pitches.semitone_distance
) -> str:

	"""Return the chord tone closest to *from_note* by absolute semitone distance.

	The unison is skipped so the line moves; ties go to the earlier chord tone.
	Tones that cannot be measured are ignored, and when none can be the first
	chord tone is returned.  With no chord tones, *from_note* is returned
	unchanged.
	"""

	if not chord_tones:
		return from_note

	nearest = chord_tones[0]
	min_distance: typing.Optional[int] = None

	for tone in chord_tones:

		tone_distance = _distance_or_none(distance, from_note, tone)

		if tone_distance is None:
			continue

		if tone_distance > 0 and (min_distance is None or tone_distance < min_distance):
			min_distance = tone_distance
			nearest = tone

	return nearest


class NoteSelector:

	"""Stateful pitch-decision engine with complexity-tiered strategies."""

	def __init__ (
		self,
		behavior: typing.Optional[loopvoice.config.MelodicBehavior] = None,
		tier_thresholds: typing.Sequence[float] = loopvoice.config.DEFAULT_TIER_THRESHOLDS,
		motif_memory: typing.Optional[loopvoice.motif_memory.MotifMemory] = None,
		rng: typing.Optional[random.Random] = None,
		transpose: loopvoice.motif_memory.TransposeFn = loopvoice.pitches.transpose,
		distance: DistanceFn = loopvoice.pitches.semitone_distance
	) -> None:

		"""Initialise the selector.

		Parameters:
			behavior: Range, direction and start-note settings.
			tier_thresholds: Ascending upper bounds of the first four tiers;
			    the last tier always extends to 1.0.
			motif_memory: Motif store consulted by the motivic and chromatic
			    tiers.  A private one is created when omitted.
			rng: Random source for every decision the selector makes.
			transpose: Moves a token by semitones (chromatic neighbours and
			    the octave clamp).
			distance: Absolute semitone distance between two tokens.
		"""

		self.behavior = behavior or loopvoice.config.MelodicBehavior()
		self.rng = rng or random.Random()
		self.transpose = transpose
		self.distance = distance
		self.motif_memory = motif_memory if motif_memory is not None else loopvoice.motif_memory.MotifMemory(rng=self.rng)
		self.direction_state = DirectionState()

		# Set by a chromatic note; cleared by the resolution on the next strong beat.
		self.needs_resolution: bool = False

		bounds = list(tier_thresholds) + [1.0]

		self.tiers: typing.List[typing.Tuple[float, Strategy]] = list(zip(bounds, [
			self._simple_tier,
			self._stepwise_tier,
			self._directional_tier,
			self._motivic_tier,
			self._chromatic_tier,
		]))


	@property
	def direction (self) -> int:

		"""Return the current melodic direction (+1 or -1)."""

		return self.direction_state.direction


	def reset (self) -> None:

		"""Forget direction and any pending resolution."""

		self.direction_state.reset()
		self.needs_resolution = False


	def reverse_direction (self) -> None:

		"""Turn the line around (used at phrase endings)."""

		self.direction_state.reverse()


	# --- Decisions that do not depend on the tier ---

	def should_rest (self, rest_probability: float, is_strong_beat: bool) -> bool:

		"""Decide whether this tick is a rest; strong beats rest less often."""

		if is_strong_beat:
			rest_probability *= self.behavior.strong_beat_rest_reduction

		return self.rng.random() < rest_probability


	def select_starting_note (self, chord_tones: typing.Sequence[str]) -> str:

		"""Choose the first note of a line: usually the root, otherwise the preferred interval."""

		if not chord_tones:
			return loopvoice.constants.FALLBACK_PITCH

		if self.rng.random() < self.behavior.root_preference:
			return chord_tones[0]

		index = self.behavior.preferred_start_index

		return chord_tones[index] if len(chord_tones) > index else chord_tones[0]


	def resolve (self, from_note: str, chord_tones: typing.Sequence[str]) -> NoteChoice:

		"""Resolve a pending dissonance to the nearest chord tone."""

		self.needs_resolution = False

		if not chord_tones:
			return NoteChoice(from_note, "resolution")

		return NoteChoice(self.nearest_chord_tone(from_note, chord_tones), "resolution")


	def nearest_chord_tone (self, from_note: str, chord_tones: typing.Sequence[str]) -> str:

		"""Return the closest chord tone, measured with this selector's distance."""

		return nearest_chord_tone(from_note, chord_tones, self.distance)


	def find_in_scale (self, pitch: str, scale: typing.Sequence[str]) -> int:

		"""Return the index of a pitch in the scale, matching enharmonics; -1 if absent."""

		if pitch in scale:
			return list(scale).index(pitch)

		for i, note in enumerate(scale):
			if _distance_or_none(self.distance, pitch, note) == 0:
				return i

		return -1


	# --- Building blocks used by the tiers ---

	def select_simple_chord_tone (
		self,
		from_note: str,
		chord_tones: typing.Sequence[str],
		scale: typing.Sequence[str]
	) -> str:

		"""Move to the nearest chord tone.

		Prefers the closest chord tone within a major third (excluding the
		unison).  When none is that close, takes the closest chord tone in the
		current direction by scale position, and failing that the first chord
		tone.  With no chord tones the line holds its note.
		"""

		if not chord_tones:
			return from_note

		nearest = chord_tones[0]
		min_distance: typing.Optional[int] = None

		for tone in chord_tones:

			distance = _distance_or_none(self.distance, from_note, tone)

			if distance is None:
				continue

			if 0 < distance <= 4 and (min_distance is None or distance < min_distance):
				min_distance = distance
				nearest = tone

		if min_distance is not None:
			return nearest

		from_index = self.find_in_scale(from_note, scale)

		if from_index == -1:
			return nearest

		min_steps: typing.Optional[int] = None

		for tone in chord_tones:

			tone_index = self.find_in_scale(tone, scale)

			if tone_index == -1:
				continue

			steps = tone_index - from_index

			if steps * self.direction > 0 and (min_steps is None or abs(steps) < min_steps):
				min_steps = abs(steps)
				nearest = tone

		return nearest


	def select_scale_step_toward_chord_tone (
		self,
		current_index: int,
		scale: typing.Sequence[str],
		chord_tones: typing.Sequence[str]
	) -> str:

		"""Take one scale step toward the nearest chord tone.

		The target is the closest chord tone (by scale position) in the current
		direction, or the closest in either direction when none lies ahead.
		Stays put if there is no target or the step would leave the scale.
		"""

		target_index = -1
		min_steps: typing.Optional[int] = None

		tone_indices = [self.find_in_scale(tone, scale) for tone in chord_tones]
		tone_indices = [i for i in tone_indices if i != -1]

		for tone_index in tone_indices:

			steps = tone_index - current_index

			if steps * self.direction > 0 and (min_steps is None or abs(steps) < min_steps):
				min_steps = abs(steps)
				target_index = tone_index

		if target_index == -1:
			for tone_index in tone_indices:

				steps = abs(tone_index - current_index)

				if steps > 0 and (min_steps is None or steps < min_steps):
					min_steps = steps
					target_index = tone_index

		if target_index != -1:
			next_index = current_index + (1 if target_index > current_index else -1)

			if 0 <= next_index < len(scale):
				return scale[next_index]

		return scale[current_index]


	def select_directional_chord_tone (
		self,
		from_note: str,
		chord_tones: typing.Sequence[str],
		scale: typing.Sequence[str]
	) -> str:

		"""Choose the closest chord tone up to a fourth away in the current direction.

		Falls back to :meth:`select_simple_chord_tone` when no chord tone lies
		within five semitones in that direction.
		"""

		from_midi = _midi_or_none(from_note)

		if from_midi is None:
			return chord_tones[0] if chord_tones else from_note

		best: typing.Optional[str] = None
		best_distance: typing.Optional[int] = None

		for tone in chord_tones:

			tone_midi = _midi_or_none(tone)

			if tone_midi is None:
				continue

			interval = (tone_midi - from_midi) * self.direction

			if 0 < interval <= 5 and (best_distance is None or interval < best_distance):
				best_distance = interval
				best = tone

		if best is not None:
			return best

		return self.select_simple_chord_tone(from_note, chord_tones, scale)


	def select_approach_note (self, current_index: int, scale: typing.Sequence[str]) -> str:

		"""Take one scale step in the current direction, turning around at the scale's edges."""

		next_index = current_index + self.direction

		if 0 <= next_index < len(scale):
			return scale[next_index]

		self.direction_state.direction = -self.direction_state.direction
		next_index = current_index + self.direction

		if 0 <= next_index < len(scale):
			return scale[next_index]

		return scale[current_index]


	def select_dissonant_note (self, from_note: str) -> str:

		"""Return a chromatic neighbour (a semitone above or below) of *from_note*."""

		semitones = 1 if self.rng.random() < 0.5 else -1

		try:
			return self.transpose(from_note, semitones)
		except ValueError:
			return from_note


	def constrain_to_range (self, pitch: str) -> str:

		"""Move a pitch an octave up or down to bring it back into the comfortable range.

		Only absolute distances are needed: a pitch lies inside the range when
		its distances to both ends add up to the span, and otherwise sits
		beyond whichever end is closer.
		"""

		low = self.behavior.range_low
		high = self.behavior.range_high

		to_low = _distance_or_none(self.distance, pitch, low)
		to_high = _distance_or_none(self.distance, pitch, high)

		if to_low is None or to_high is None:
			return pitch

		if to_low + to_high <= self.distance(low, high):
			return pitch

		if to_low < to_high:
			return self.transpose(pitch, 12)

		return self.transpose(pitch, -12)


	def update_direction (self, previous_index: int, new_index: int, complexity: float) -> None:

		"""Track the run of steps in one direction and occasionally turn around.

		Moving the same way as the current direction extends the run; moving
		the other way starts a new run of one.  Repeated notes and notes
		outside the scale leave the state alone.  Once the run reaches
		``max_steps_in_direction + floor(complexity * direction_change_scaling)``
		steps the line turns with ``direction_change_probability``, so higher
		complexity allows longer arcs.
		"""

		if previous_index == -1 or new_index == -1 or new_index == previous_index:
			return

		state = self.direction_state
		moved = 1 if new_index > previous_index else -1

		if moved == state.direction:
			state.steps_in_direction += 1

		else:
			state.direction = moved
			state.steps_in_direction = 1

		max_steps = self.behavior.max_steps_in_direction + int(complexity * self.behavior.direction_change_scaling)

		if state.steps_in_direction >= max_steps and self.rng.random() < self.behavior.direction_change_probability:
			state.reverse()


	# --- Tier dispatch ---

	def select_by_complexity (self, context: SelectionContext) -> NoteChoice:

		"""Dispatch to the first tier whose upper bound covers the complexity."""

		for upper_bound, strategy in self.tiers:
			if context.complexity <= upper_bound:
				return strategy(context)

		return self.tiers[-1][1](context)


	def _simple_tier (self, context: SelectionContext) -> NoteChoice:

		"""Nearest chord tone on every beat."""

		note = self.select_simple_chord_tone(context.last_note, context.chord_tones, context.scale)

		return NoteChoice(note, "simple-chord")


	def _stepwise_tier (self, context: SelectionContext) -> NoteChoice:

		"""Chord tones on strong beats, steps toward them on weak beats."""

		if context.is_strong_beat:
			note = self.select_simple_chord_tone(context.last_note, context.chord_tones, context.scale)
			return NoteChoice(note, "chord-strong")

		note = self.select_scale_step_toward_chord_tone(context.current_index, context.scale, context.chord_tones)

		return NoteChoice(note, "scale-step")


	def _directional_tier (self, context: SelectionContext) -> NoteChoice:

		"""Directional chord tones on strong beats, approach steps on weak beats."""

		if context.is_strong_beat:
			note = self.select_directional_chord_tone(context.last_note, context.chord_tones, context.scale)
			return NoteChoice(note, "directional-chord")

		note = self.select_approach_note(context.current_index, context.scale)

		return NoteChoice(note, "approach")


	def _motivic_tier (self, context: SelectionContext) -> NoteChoice:

		"""Recall a varied motif when memory allows, otherwise the directional tier."""

		if self.motif_memory.should_recall(context.complexity):

			try:
				motif = self.motif_memory.recall_varied()
			except ValueError:
				logger.debug("Motif variation fell outside the pitch range; skipping recall")
				motif = None

			if motif:
				return NoteChoice(motif[0], "motif")

		return self._directional_tier(context)


	def _chromatic_tier (self, context: SelectionContext) -> NoteChoice:

		"""Occasional chromatic neighbours on weak beats, otherwise the motivic tier."""

		if not context.is_strong_beat and self.rng.random() < context.dissonance_tolerance:
			self.needs_resolution = True
			return NoteChoice(self.select_dissonant_note(context.last_note), "dissonant")

		return self._motivic_tier(context)
