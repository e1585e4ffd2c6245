"""Chord definitions and chord-name parsing.

This module provides chord quality definitions and the `Chord` class used by
the chord-progression provider to answer "which pitches belong to the harmony
of this bar".

Module-level constants:
- `CHORD_INTERVALS`: Maps chord quality names to interval lists (semitones from root)
- `CHORD_SUFFIX`: Maps chord quality names to human-readable suffixes (e.g., `"m"`, `"7"`)

Chord qualities: `"major"`, `"minor"`, `"diminished"`, `"augmented"`, `"dominant_7th"`,
`"major_7th"`, `"minor_7th"`, `"half_diminished_7th"`, `"sus2"`, `"sus4"`
"""

import dataclasses
import re
import typing

import loopvoice.pitches


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 4, 7],
	"minor": [0, 3, 7],
	"diminished": [0, 3, 6],
	"augmented": [0, 4, 8],
	"dominant_7th": [0, 4, 7, 10],
	"major_7th": [0, 4, 7, 11],
	"minor_7th": [0, 3, 7, 10],
	"half_diminished_7th": [0, 3, 6, 10],
	"sus2": [0, 2, 7],
	"sus4": [0, 5, 7],
}

CHORD_SUFFIX: typing.Dict[str, str] = {
	"major": "",
	"minor": "m",
	"diminished": "dim",
	"augmented": "+",
	"dominant_7th": "7",
	"major_7th": "maj7",
	"minor_7th": "m7",
	"half_diminished_7th": "m7b5",
	"sus2": "sus2",
	"sus4": "sus4",
}

_SUFFIX_TO_QUALITY: typing.Dict[str, str] = {suffix: quality for quality, suffix in CHORD_SUFFIX.items()}

_CHORD_NAME_PATTERN = re.compile(r"^([A-G][#b]?)(.*)$")


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	Represents a chord as a root pitch class and quality.
	"""

	root_pc: int
	quality: str
	prefer_flats: bool = dataclasses.field(default=False, compare=False)


	def intervals (self) -> typing.List[int]:

		"""
		Return the chord intervals for this chord quality.
		"""

		if self.quality not in CHORD_INTERVALS:
			raise ValueError(f"Unknown chord quality: {self.quality}")

		return CHORD_INTERVALS[self.quality]


	def tones (self, octave: int) -> typing.List[str]:

		"""Return the chord tones as pitch tokens, stacked upward from the root.

		The root sits in ``octave``; upper tones climb into the next octave
		where needed, so the list is always in ascending pitch order.

		Example:
			```python
			Chord(root_pc=9, quality="minor").tones(4)  # → ["A4", "C5", "E5"]
			Chord(root_pc=5, quality="major").tones(3)  # → ["F3", "A3", "C4"]
			```
		"""

		root_midi = (octave + 1) * 12 + self.root_pc

		return [
			loopvoice.pitches.midi_to_pitch(root_midi + interval, prefer_flats=self.prefer_flats)
			for interval in self.intervals()
		]


	def root_name (self) -> str:

		"""
		Return the root note name without an octave.
		"""

		names = loopvoice.pitches.FLAT_NAMES if self.prefer_flats else loopvoice.pitches.SHARP_NAMES

		return names[self.root_pc % 12]


	def name (self) -> str:

		"""
		Return a human-friendly chord name.
		"""

		return f"{self.root_name()}{CHORD_SUFFIX.get(self.quality, '')}"


def parse_chord_name (name: str) -> Chord:

	"""Parse a chord name such as ``"Am"``, ``"F"``, ``"Bbmaj7"`` or ``"G7"``.

	The suffix must be one of the values of `CHORD_SUFFIX`.

	Raises:
		ValueError: If the root or the suffix is not recognised.

	Example:
		```python
		parse_chord_name("Am")   # → Chord(root_pc=9, quality="minor")
		parse_chord_name("Eb7")  # → Chord(root_pc=3, quality="dominant_7th")
		```
	"""

	match = _CHORD_NAME_PATTERN.match(name)

	if match is None:
		raise ValueError(f"Invalid chord name: {name!r}")

	root, suffix = match.groups()

	if suffix not in _SUFFIX_TO_QUALITY:
		known = ", ".join(repr(s) for s in sorted(_SUFFIX_TO_QUALITY))
		raise ValueError(f"Unknown chord suffix {suffix!r} in {name!r}. Known suffixes: {known}")

	return Chord(
		root_pc = loopvoice.pitches.note_name_to_pc(root),
		quality = _SUFFIX_TO_QUALITY[suffix],
		prefer_flats = "b" in root
	)
