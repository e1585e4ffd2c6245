"""The pitch/scale provider consumed by the melody engine.

:class:`PitchProvider` is the contract the melody orchestrator depends on:
scale lookup, per-bar chord tones, the chord root of a bar, and the
token arithmetic (frequency conversion, transposition, semitone distance).
Any object with these methods can drive a melody; a layer that follows a
different harmonic source only needs to supply them.

:class:`ChordProgression` is the reference provider: a fixed, looping list of
chords, each held for a number of bars.
"""

import typing

import loopvoice.chords
import loopvoice.pitches
import loopvoice.scales


DEFAULT_PROGRESSION: typing.Tuple[str, ...] = ("Am", "F", "C", "G")
DEFAULT_BARS_PER_CHORD: int = 2


@typing.runtime_checkable
class PitchProvider (typing.Protocol):

	"""
	Protocol for the harmonic context a melody is generated against.
	"""

	def scale_for (self, key: str, mode: str, octave: int) -> typing.List[str]:

		"""
		Return one octave of the scale, ascending from the root in ``octave``.
		"""

		...

	def chord_tones_for (self, bar_index: int, octave: int) -> typing.List[str]:

		"""
		Return the tones of the chord active at ``bar_index``, rooted in ``octave``.
		"""

		...

	def chord_root_for (self, bar_index: int, octave: int) -> str:

		"""
		Return the root of the chord active at ``bar_index`` in ``octave``.
		"""

		...

	def pitch_to_frequency_hz (self, pitch: str) -> float:

		"""
		Return the frequency of a pitch token; raise ``ValueError`` if it is malformed.
		"""

		...

	def transpose_by_semitones (self, pitch: str, semitones: int) -> str:

		"""
		Return the pitch token ``semitones`` above (or below) ``pitch``.
		"""

		...

	def semitone_distance (self, a: str, b: str) -> int:

		"""
		Return the non-negative distance in semitones between two pitch tokens.
		"""

		...


class ChordProgression:

	"""A looping chord progression that answers pitch/scale queries per bar."""

	def __init__ (
		self,
		chords: typing.Sequence[loopvoice.chords.Chord],
		bars_per_chord: int = DEFAULT_BARS_PER_CHORD
	) -> None:

		"""
		Initialize the progression.

		Parameters:
			chords: The chords of one loop, in order.
			bars_per_chord: How many bars each chord is held (default 2).
		"""

		if not chords:
			raise ValueError("A chord progression needs at least one chord")

		if bars_per_chord <= 0:
			raise ValueError("Bars per chord must be positive")

		self.chords: typing.List[loopvoice.chords.Chord] = list(chords)
		self.bars_per_chord = bars_per_chord


	@classmethod
	def from_names (
		cls,
		names: typing.Sequence[str] = DEFAULT_PROGRESSION,
		bars_per_chord: int = DEFAULT_BARS_PER_CHORD
	) -> "ChordProgression":

		"""Build a progression from chord names.

		Example:
			```python
			progression = ChordProgression.from_names(["Am", "F", "C", "G"])
			progression.chord_tones_for(2, 4)  # → ["F4", "A4", "C5"]
			```
		"""

		return cls(
			chords = [loopvoice.chords.parse_chord_name(name) for name in names],
			bars_per_chord = bars_per_chord
		)


	@property
	def loop_bars (self) -> int:

		"""Return the number of bars before the progression repeats."""

		return len(self.chords) * self.bars_per_chord


	def chord_for (self, bar_index: int) -> loopvoice.chords.Chord:

		"""Return the chord active at a bar index.  Negative indices wrap around the loop."""

		bar_in_loop = bar_index % self.loop_bars

		return self.chords[bar_in_loop // self.bars_per_chord]


	def scale_for (self, key: str, mode: str, octave: int) -> typing.List[str]:

		"""Return one octave of the scale of ``key``/``mode`` rooted in ``octave``."""

		return loopvoice.scales.scale_pitches(key, mode, octave)


	def chord_tones_for (self, bar_index: int, octave: int) -> typing.List[str]:

		"""Return the chord tones for a bar, stacked upward from the root in ``octave``."""

		return self.chord_for(bar_index).tones(octave)


	def chord_root_for (self, bar_index: int, octave: int) -> str:

		"""Return the chord root for a bar in ``octave``."""

		return self.chord_tones_for(bar_index, octave)[0]


	def pitch_to_frequency_hz (self, pitch: str) -> float:

		"""Return the frequency of a pitch token in Hz."""

		return loopvoice.pitches.pitch_to_frequency(pitch)


	def transpose_by_semitones (self, pitch: str, semitones: int) -> str:

		"""Return a pitch token transposed by ``semitones``."""

		return loopvoice.pitches.transpose(pitch, semitones)


	def semitone_distance (self, a: str, b: str) -> int:

		"""Return the absolute distance in semitones between two tokens."""

		return loopvoice.pitches.semitone_distance(a, b)
