"""Scale definitions and scale spelling.

Modes are looked up by name in `MODE_INTERVALS` and spelled upward from a
root in a given octave, with octave numbers advancing as the scale crosses
from B to C: A natural minor from octave 4 is
``["A4", "B4", "C5", "D5", "E5", "F5", "G5"]``.
"""

import typing

import loopvoice.pitches


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major_ionian": [0, 2, 4, 5, 7, 9, 11],
	"dorian_mode": [0, 2, 3, 5, 7, 9, 10],
	"phrygian_mode": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"locrian_mode": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
}


# Map mode names to their scale interval key.
MODE_MAP: typing.Dict[str, str] = {
	"ionian":           "major_ionian",
	"major":            "major_ionian",
	"dorian":           "dorian_mode",
	"phrygian":         "phrygian_mode",
	"lydian":           "lydian",
	"mixolydian":       "mixolydian",
	"aeolian":          "natural_minor",
	"minor":            "natural_minor",
	"locrian":          "locrian_mode",
	"harmonic_minor":   "harmonic_minor",
	"melodic_minor":    "melodic_minor",
	"major_pentatonic": "major_pentatonic",
	"minor_pentatonic": "minor_pentatonic",
}

# Modes whose key signature is read from the relative major a minor third up.
_MINOR_MODES = {"aeolian", "minor", "harmonic_minor", "melodic_minor", "minor_pentatonic"}

# Major-key roots (as pitch classes) whose signatures use flats: F, Bb, Eb, Ab, Db, Gb.
_FLAT_MAJOR_PCS = {5, 10, 3, 8, 1, 6}


def scale_intervals (mode: str) -> typing.List[int]:

	"""
	Return the semitone intervals above the root for a mode name.

	Raises:
		ValueError: If the mode is unknown.
	"""

	if mode not in MODE_MAP:
		raise ValueError(f"Unknown mode '{mode}'. Available: {sorted(MODE_MAP)}")

	return list(SCALE_INTERVALS[MODE_MAP[mode]])


def scale_pitch_classes (key_pc: int, mode: str = "ionian") -> typing.List[int]:

	"""
	Return the pitch classes (0–11) that belong to a key and mode.

	Example:
		```python
		scale_pitch_classes(9, "minor")  # → [9, 11, 0, 2, 4, 5, 7]
		```
	"""

	return [(key_pc + i) % 12 for i in scale_intervals(mode)]


def prefers_flats (key: str, mode: str) -> bool:

	"""Return True if a key is conventionally spelled with flats."""

	if "b" in key:
		return True

	if "#" in key:
		return False

	key_pc = loopvoice.pitches.note_name_to_pc(key)

	if mode in _MINOR_MODES:
		key_pc = (key_pc + 3) % 12

	return key_pc in _FLAT_MAJOR_PCS


def scale_pitches (key: str, mode: str, octave: int) -> typing.List[str]:

	"""Spell one octave of a scale upward from ``key`` in ``octave``.

	Parameters:
		key: Root note name (e.g. ``"A"``, ``"F#"``, ``"Bb"``).
		mode: Mode name, any key of `MODE_MAP`.
		octave: Octave number of the root.

	Returns:
		Pitch tokens in ascending order, one per scale degree.

	Example:
		```python
		scale_pitches("A", "minor", 4)
		# → ["A4", "B4", "C5", "D5", "E5", "F5", "G5"]
		```
	"""

	root_midi = (octave + 1) * 12 + loopvoice.pitches.note_name_to_pc(key)
	flats = prefers_flats(key, mode)

	return [
		loopvoice.pitches.midi_to_pitch(root_midi + interval, prefer_flats=flats)
		for interval in scale_intervals(mode)
	]
