"""The melody orchestrator.

:class:`GenerativeMelody` turns a stream of decision ticks into synth
directives.  One tick is an eighth note (eight per 4/4 bar).  For every tick
the orchestrator decides between a rest and a note; on the note path it asks
the :class:`~loopvoice.note_selector.NoteSelector` for a pitch, the
:class:`~loopvoice.rhythm.RhythmicPattern` for a duration, and hands one
:class:`~loopvoice.synth.SynthDirective` to the synth.

How adventurous the line is depends on a single *complexity* value in
[0, 1], which can be changed at any time with :meth:`GenerativeMelody.set_complexity`.

Example:
	```python
	import random

	import loopvoice

	provider = loopvoice.ChordProgression.from_names(["Am", "F", "C", "G"])
	synth = loopvoice.MidiFileSynth(bpm=120)

	melody = loopvoice.GenerativeMelody(provider, synth, rng=random.Random(1))
	melody.set_complexity(0.6)
	melody.start(0.0)

	synth.save("melody.mid")
	```
"""

import dataclasses
import logging
import random
import typing

import loopvoice.config
import loopvoice.constants
import loopvoice.harmony
import loopvoice.motif_memory
import loopvoice.note_selector
import loopvoice.phrase
import loopvoice.pitches
import loopvoice.rhythm
import loopvoice.synth


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ScheduledNote:

	"""A note emitted by :meth:`GenerativeMelody.schedule_tick`."""

	tick: int
	pitch: str
	source: str
	directive: loopvoice.synth.SynthDirective


class GenerativeMelody:

	"""
	A single melodic voice whose behaviour scales with complexity.

	All state lives on the instance and is reset by :meth:`start` and
	:meth:`stop`; independent instances share nothing.
	"""

	def __init__ (
		self,
		provider: loopvoice.harmony.PitchProvider,
		synth: loopvoice.synth.Synth,
		config: typing.Optional[loopvoice.config.MelodyConfig] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the melody.

		Parameters:
			provider: Scale and chord lookups for the progression being played over.
			synth: Receives one directive per emitted note.
			config: Tuning; the defaults when omitted.
			rng: Random source shared with every sub-component.  Pass a seeded
			    ``random.Random`` for reproducible lines.
		"""

		self.provider = provider
		self.synth = synth
		self.config = config or loopvoice.config.MelodyConfig()
		self.rng = rng or random.Random()

		self.motif_memory = loopvoice.motif_memory.MotifMemory(
			capacity = self.config.motif.capacity,
			recall_probability = self.config.motif.recall_probability,
			min_length = self.config.motif.min_length,
			max_length = self.config.motif.max_length,
			rng = self.rng,
			transpose = provider.transpose_by_semitones
		)

		self.selector = loopvoice.note_selector.NoteSelector(
			behavior = self.config.melodic,
			tier_thresholds = self.config.tier_thresholds,
			motif_memory = self.motif_memory,
			rng = self.rng,
			transpose = provider.transpose_by_semitones,
			distance = provider.semitone_distance
		)

		self.phrase = loopvoice.phrase.PhraseTracker(
			bars_per_phrase = self.config.phrase.bars_per_phrase,
			beats_per_bar = self.config.phrase.beats_per_bar
		)

		self.rhythm = loopvoice.rhythm.RhythmicPattern(rng=self.rng)

		octave = self.config.base_octave

		self.scale: typing.List[str] = (
			provider.scale_for(self.config.key, self.config.mode, octave)
			+ provider.scale_for(self.config.key, self.config.mode, octave + 1)
		)

		self.complexity: float = self.config.initial_complexity
		self.params = loopvoice.config.complexity_params(self.complexity, self.config.complexity)

		self._rest_override: typing.Optional[float] = None

		self.last_note: typing.Optional[str] = None
		self.recent_notes: typing.List[str] = []
		self.scheduled_ticks: typing.Set[int] = set()
		self.running: bool = False


	@property
	def beat_seconds (self) -> float:

		"""Return the length of one beat (a quarter note) in seconds."""

		return self.config.beat_seconds


	@property
	def tick_seconds (self) -> float:

		"""Return the length of one decision tick (an eighth note) in seconds."""

		return self.beat_seconds * loopvoice.constants.BEATS_PER_BAR / loopvoice.constants.TICKS_PER_BAR


	@property
	def rest_probability (self) -> float:

		"""Return the rest probability in effect (the override if one is set)."""

		if self._rest_override is not None:
			return self._rest_override

		return self.params.rest_probability


	@property
	def needs_resolution (self) -> bool:

		"""Return True while a chromatic note is waiting to be resolved."""

		return self.selector.needs_resolution


	def set_complexity (self, value: float) -> None:

		"""Set the complexity (clamped to [0, 1]) and recompute the derived parameters."""

		self.complexity = loopvoice.config.clamp_unit(value)
		self.params = loopvoice.config.complexity_params(self.complexity, self.config.complexity)

		logger.debug(f"Complexity set to {self.complexity:.2f}: {self.params}")


	def set_rest_probability_override (self, value: typing.Optional[float]) -> None:

		"""Force the rest probability (clamped to [0, 1]); ``None`` returns to the derived value."""

		self._rest_override = None if value is None else loopvoice.config.clamp_unit(value)


	def beat_position (self, tick: int) -> loopvoice.note_selector.BeatPosition:

		"""Return the beat position of a tick index."""

		return loopvoice.note_selector.BeatPosition.from_tick(tick)


	def chord_tones (self, bar: int) -> typing.List[str]:

		"""Return two octaves of chord tones for a bar."""

		octave = self.config.base_octave

		return self.provider.chord_tones_for(bar, octave) + self.provider.chord_tones_for(bar, octave + 1)


	def schedule_tick (self, tick: int, time: float) -> typing.Optional[ScheduledNote]:

		"""
		Make the rest-or-note decision for one tick.

		Only the first call for a tick index has any effect; repeats return
		``None`` without touching state.  Returns the emitted note, or
		``None`` for a rest, a repeat or a skipped note.

		Raises:
			ValueError: If ``tick`` is negative.
		"""

		if tick < 0:
			raise ValueError(f"Tick index must be non-negative, got {tick}")

		if tick in self.scheduled_ticks:
			return None

		self.scheduled_ticks.add(tick)

		beat = self.beat_position(tick)
		resolution_due = self.selector.needs_resolution and beat.is_strong_beat

		if not resolution_due and self.selector.should_rest(self.rest_probability, beat.is_strong_beat):
			logger.debug(f"Tick {tick}: rest")
			self.phrase.advance()
			return None

		chord_tones = self.chord_tones(beat.bar)
		choice = self._choose_note(beat, chord_tones)
		pitch = self._validate_pitch(self.selector.constrain_to_range(choice.pitch), chord_tones)

		try:
			frequency = self.provider.pitch_to_frequency_hz(pitch)
		except ValueError as e:
			logger.warning(f"Tick {tick}: skipping note {pitch!r}: {e}")
			self.phrase.advance()
			return None

		token = self.rhythm.next_duration(self.params.rhythmic_variation)

		directive = loopvoice.synth.SynthDirective(
			frequency_hz = frequency,
			start_time = time,
			duration_seconds = loopvoice.rhythm.parse_duration(token, self.beat_seconds),
			overlap_seconds = self.config.note_overlap_seconds
		)

		self.synth.schedule(directive)

		logger.debug(f"Tick {tick}: {pitch} ({choice.source}, {token})")

		self._remember(pitch)
		self.phrase.advance()

		return ScheduledNote(tick=tick, pitch=pitch, source=choice.source, directive=directive)


	def _choose_note (
		self,
		beat: loopvoice.note_selector.BeatPosition,
		chord_tones: typing.List[str]
	) -> loopvoice.note_selector.NoteChoice:

		"""Pick the next pitch before range clamping and validation."""

		if self.last_note is None:
			return loopvoice.note_selector.NoteChoice(self.selector.select_starting_note(chord_tones), "start")

		if self.selector.needs_resolution and beat.is_strong_beat:
			return self.selector.resolve(self.last_note, chord_tones)

		current_index = self.selector.find_in_scale(self.last_note, self.scale)

		if current_index == -1:
			return loopvoice.note_selector.NoteChoice(
				self.selector.nearest_chord_tone(self.last_note, chord_tones),
				"nearest-chord"
			)

		if not chord_tones:
			return loopvoice.note_selector.NoteChoice(self.last_note, "hold")

		if self.phrase.should_resolve() and self.complexity >= self.config.tier_thresholds[1]:
			self.selector.reverse_direction()
			root = self.provider.chord_root_for(beat.bar, self.config.base_octave + 1)
			return loopvoice.note_selector.NoteChoice(root, "phrase-resolution")

		context = loopvoice.note_selector.SelectionContext(
			last_note = self.last_note,
			current_index = current_index,
			scale = self.scale,
			chord_tones = chord_tones,
			is_strong_beat = beat.is_strong_beat,
			complexity = self.complexity,
			dissonance_tolerance = self.params.dissonance_tolerance
		)

		choice = self.selector.select_by_complexity(context)

		self.selector.update_direction(
			current_index,
			self.selector.find_in_scale(choice.pitch, self.scale),
			self.complexity
		)

		return choice


	def _validate_pitch (self, pitch: str, chord_tones: typing.List[str]) -> str:

		"""Return the pitch re-spelled to the strict grammar, or a fallback if it cannot be."""

		try:
			normalized = loopvoice.pitches.normalize_pitch(pitch)
		except ValueError:
			normalized = None

		if normalized is not None and loopvoice.pitches.is_valid_pitch(normalized):
			return normalized

		fallback = next(
			(tone for tone in chord_tones if loopvoice.pitches.is_valid_pitch(tone)),
			loopvoice.constants.FALLBACK_PITCH
		)

		logger.warning(f"Invalid pitch {pitch!r}, using {fallback}")

		return fallback


	def _remember (self, pitch: str) -> None:

		self.last_note = pitch
		self.recent_notes.append(pitch)

		if len(self.recent_notes) > loopvoice.constants.HISTORY_LENGTH:
			self.recent_notes = self.recent_notes[-loopvoice.constants.HISTORY_LENGTH:]

		self.motif_memory.record(self.recent_notes)


	def schedule_loops (self, start_time: float, loops: int, first_tick: int = 0) -> typing.List[ScheduledNote]:

		"""
		Schedule whole loops of ticks ahead of time.

		Tick ``first_tick + i`` is scheduled at ``start_time + i * tick_seconds``.
		Ticks that were already scheduled are skipped, so overlapping windows
		never emit a note twice.

		Returns:
			The notes emitted in this window.
		"""

		ticks = loops * self.config.loop_bars * loopvoice.constants.TICKS_PER_BAR
		notes: typing.List[ScheduledNote] = []

		for i in range(ticks):

			note = self.schedule_tick(first_tick + i, start_time + i * self.tick_seconds)

			if note is not None:
				notes.append(note)

		return notes


	def start (self, time: float) -> None:

		"""Reset all state and pre-schedule the lookahead loops from ``time``."""

		self._reset()
		self.running = True

		notes = self.schedule_loops(time, self.config.lookahead_loops)

		logger.info(f"Melody started at {time:.2f}s: {len(notes)} notes over {self.config.lookahead_loops} loops")


	def stop (self) -> None:

		"""Reset all state and silence the synth."""

		self._reset()
		self.running = False
		self.synth.stop()


	def _reset (self) -> None:

		"""Return every sub-component to its initial state.  Complexity and the rest override are kept."""

		self.selector.reset()
		self.phrase.reset()
		self.rhythm.reset()
		self.motif_memory.clear()
		self.scheduled_ticks.clear()
		self.last_note = None
		self.recent_notes = []
