"""Pitch tokens and the arithmetic on them.

A pitch travels through the melody engine as a string token such as ``"A4"``,
``"C#5"`` or ``"Bb3"``: a letter ``A``–``G``, an optional single accidental
(``#`` or ``b``) and an octave number.  Tokens are treated as opaque lookup
keys; every conversion goes through the functions in this module.

MIDI numbering follows the usual convention where C4 = 60 and A4 = 69, and
A4 sounds at 440 Hz.

Module-level constants:
- `PITCH_PATTERN`: The strict token grammar ``^[A-G][#b]?\\d+$``
- `NOTE_NAME_TO_PC`: Maps note names (e.g. `"C"`, `"F#"`, `"Bb"`) to pitch
  classes (0-11)
- `SHARP_NAMES` / `FLAT_NAMES`: Pitch class to note name, sharp or flat
  spelling
"""

import math
import re
import typing


PITCH_PATTERN = re.compile(r"^([A-G])([#b]?)(\d+)$")

# Accepts any run of accidentals so that tokens like "C##4" or "Bbb3" can be
# re-spelled before validation.
_LOOSE_PITCH_PATTERN = re.compile(r"^([A-G])([#b]*)(-?\d+)$")

LETTER_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

SHARP_NAMES: typing.List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

FLAT_NAMES: typing.List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

A4_FREQUENCY = 440.0
A4_MIDI = 69


def note_name_to_pc (note_name: str) -> int:

	"""Validate a note name (no octave) and return its pitch class (0–11).

	Parameters:
		note_name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Raises:
		ValueError: If the name is not recognised.

	Example:
		```python
		note_name_to_pc("A")   # → 9
		note_name_to_pc("Bb")  # → 10
		```
	"""

	if note_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown note name: {note_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[note_name]


def is_valid_pitch (pitch: typing.Any) -> bool:

	"""Return True if *pitch* matches the strict token grammar."""

	return isinstance(pitch, str) and PITCH_PATTERN.match(pitch) is not None


def pitch_to_midi (pitch: str) -> int:

	"""Return the MIDI note number of a pitch token.

	Enharmonic and edge spellings resolve by plain semitone arithmetic, so
	``"E#4"`` is F4 (65), ``"Cb4"`` is B3 (59) and ``"B#3"`` is C4 (60).
	Double accidentals are accepted here so that un-normalised tokens can
	still be measured.

	Raises:
		ValueError: If the token cannot be parsed.
	"""

	if not isinstance(pitch, str):
		raise ValueError(f"Pitch must be a string token, got {pitch!r}")

	match = _LOOSE_PITCH_PATTERN.match(pitch)

	if match is None:
		raise ValueError(f"Invalid pitch token: {pitch!r}")

	letter, accidentals, octave = match.groups()
	offset = accidentals.count("#") - accidentals.count("b")

	return (int(octave) + 1) * 12 + LETTER_TO_PC[letter] + offset


def midi_to_pitch (midi: int, prefer_flats: bool = False) -> str:

	"""Spell a MIDI note number as a pitch token.

	Parameters:
		midi: MIDI note number.  Must be at least 12 (C0) so the octave stays
		      a non-negative integer.
		prefer_flats: Spell black keys with flats (``"Bb4"``) instead of
		      sharps (``"A#4"``).

	Raises:
		ValueError: If *midi* falls below C0.
	"""

	if midi < 12:
		raise ValueError(f"MIDI note {midi} is below C0 and has no pitch token")

	names = FLAT_NAMES if prefer_flats else SHARP_NAMES
	octave = midi // 12 - 1

	return f"{names[midi % 12]}{octave}"


def normalize_pitch (pitch: str) -> str:

	"""Re-spell a token with at most one accidental.

	Valid tokens are returned unchanged.  Tokens with stacked accidentals are
	re-spelled from their MIDI number, keeping flats for flat input:
	``"C##4"`` → ``"D4"``, ``"B##4"`` → ``"C#5"``, ``"Cbb4"`` → ``"Bb3"``.

	Raises:
		ValueError: If the token cannot be parsed at all.
	"""

	if is_valid_pitch(pitch):
		return pitch

	midi = pitch_to_midi(pitch)

	return midi_to_pitch(midi, prefer_flats="b" in pitch)


def pitch_class (pitch: str) -> int:

	"""Return the pitch class (0–11) of a token."""

	return pitch_to_midi(pitch) % 12


def pitch_to_frequency (pitch: str) -> float:

	"""Return the equal-tempered frequency in Hz of a strictly valid token.

	Raises:
		ValueError: If the token does not match the strict grammar.
	"""

	if not is_valid_pitch(pitch):
		raise ValueError(f"Invalid pitch token: {pitch!r}")

	return midi_to_frequency(pitch_to_midi(pitch))


def midi_to_frequency (midi: float) -> float:

	"""Return the equal-tempered frequency of a (possibly fractional) MIDI note."""

	return A4_FREQUENCY * 2.0 ** ((midi - A4_MIDI) / 12.0)


def frequency_to_midi (frequency_hz: float) -> int:

	"""Return the MIDI note number nearest to a frequency.

	Raises:
		ValueError: If the frequency is not positive.
	"""

	if frequency_hz <= 0:
		raise ValueError(f"Frequency must be positive, got {frequency_hz}")

	return int(round(A4_MIDI + 12.0 * math.log2(frequency_hz / A4_FREQUENCY)))


def transpose (pitch: str, semitones: int) -> str:

	"""Transpose a token by a number of semitones, keeping its flat/sharp spelling.

	Example:
		```python
		transpose("A4", 2)    # → "B4"
		transpose("Bb3", 1)   # → "B3"
		transpose("E4", -1)   # → "D#4"
		```
	"""

	return midi_to_pitch(pitch_to_midi(pitch) + semitones, prefer_flats="b" in pitch)


def semitone_interval (from_pitch: str, to_pitch: str) -> int:

	"""Return the signed distance in semitones (positive when *to_pitch* is higher)."""

	return pitch_to_midi(to_pitch) - pitch_to_midi(from_pitch)


def semitone_distance (a: str, b: str) -> int:

	"""Return the absolute distance in semitones between two tokens."""

	return abs(semitone_interval(a, b))
