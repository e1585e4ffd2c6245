"""Tests for pitch tokens: parsing, spelling, frequency conversion and transposition."""

import pytest

import loopvoice.pitches


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestPitchToMidi:

	def test_reference_pitches (self) -> None:
		"""C4 is 60 and A4 is 69."""
		assert loopvoice.pitches.pitch_to_midi("C4") == 60
		assert loopvoice.pitches.pitch_to_midi("A4") == 69
		assert loopvoice.pitches.pitch_to_midi("A3") == 57

	def test_accidentals (self) -> None:
		"""Sharps and flats move by one semitone."""
		assert loopvoice.pitches.pitch_to_midi("C#4") == 61
		assert loopvoice.pitches.pitch_to_midi("Db4") == 61
		assert loopvoice.pitches.pitch_to_midi("Bb3") == 58

	def test_edge_spellings_cross_octave_arithmetically (self) -> None:
		"""E#, Cb and B# resolve by plain semitone arithmetic."""
		assert loopvoice.pitches.pitch_to_midi("E#4") == 65
		assert loopvoice.pitches.pitch_to_midi("Cb4") == 59
		assert loopvoice.pitches.pitch_to_midi("B#3") == 60

	def test_double_accidentals_are_measurable (self) -> None:
		assert loopvoice.pitches.pitch_to_midi("C##4") == 62

	@pytest.mark.parametrize("token", ["H4", "A", "4A", "", "a4", "A#x4"])
	def test_malformed_tokens_raise (self, token: str) -> None:
		"""Unparseable tokens raise ValueError."""
		with pytest.raises(ValueError):
			loopvoice.pitches.pitch_to_midi(token)

	def test_non_string_raises (self) -> None:
		with pytest.raises(ValueError):
			loopvoice.pitches.pitch_to_midi(69)  # type: ignore[arg-type]


class TestValidity:

	def test_strict_grammar (self) -> None:
		"""Only a letter, one optional accidental and an octave are valid."""
		assert loopvoice.pitches.is_valid_pitch("A4")
		assert loopvoice.pitches.is_valid_pitch("C#5")
		assert loopvoice.pitches.is_valid_pitch("Bb3")
		assert not loopvoice.pitches.is_valid_pitch("C##4")
		assert not loopvoice.pitches.is_valid_pitch("c4")
		assert not loopvoice.pitches.is_valid_pitch("A")
		assert not loopvoice.pitches.is_valid_pitch(None)

	def test_note_name_lookup (self) -> None:
		assert loopvoice.pitches.note_name_to_pc("A") == 9
		assert loopvoice.pitches.note_name_to_pc("Bb") == 10

		with pytest.raises(ValueError):
			loopvoice.pitches.note_name_to_pc("H")


# ---------------------------------------------------------------------------
# Spelling
# ---------------------------------------------------------------------------

class TestSpelling:

	def test_midi_to_pitch_sharps_and_flats (self) -> None:
		assert loopvoice.pitches.midi_to_pitch(61) == "C#4"
		assert loopvoice.pitches.midi_to_pitch(61, prefer_flats=True) == "Db4"
		assert loopvoice.pitches.midi_to_pitch(60) == "C4"

	def test_below_c0_raises (self) -> None:
		with pytest.raises(ValueError):
			loopvoice.pitches.midi_to_pitch(11)

	def test_normalize_respells_double_accidentals (self) -> None:
		"""Stacked accidentals are re-spelled from the MIDI number."""
		assert loopvoice.pitches.normalize_pitch("C##4") == "D4"
		assert loopvoice.pitches.normalize_pitch("B##4") == "C#5"
		assert loopvoice.pitches.normalize_pitch("Cbb4") == "Bb3"

	def test_normalize_keeps_valid_tokens (self) -> None:
		assert loopvoice.pitches.normalize_pitch("Db4") == "Db4"
		assert loopvoice.pitches.normalize_pitch("A3") == "A3"


# ---------------------------------------------------------------------------
# Frequency
# ---------------------------------------------------------------------------

class TestFrequency:

	def test_concert_a (self) -> None:
		assert loopvoice.pitches.pitch_to_frequency("A4") == pytest.approx(440.0)
		assert loopvoice.pitches.pitch_to_frequency("A5") == pytest.approx(880.0)
		assert loopvoice.pitches.pitch_to_frequency("A3") == pytest.approx(220.0)

	def test_middle_c (self) -> None:
		assert loopvoice.pitches.pitch_to_frequency("C4") == pytest.approx(261.6256, abs=1e-3)

	def test_enharmonics_share_a_frequency (self) -> None:
		assert loopvoice.pitches.pitch_to_frequency("C#4") == pytest.approx(loopvoice.pitches.pitch_to_frequency("Db4"))

	def test_strict_grammar_enforced (self) -> None:
		"""Frequency conversion rejects tokens outside the strict grammar."""
		with pytest.raises(ValueError):
			loopvoice.pitches.pitch_to_frequency("C##4")

		with pytest.raises(ValueError):
			loopvoice.pitches.pitch_to_frequency("X4")

	def test_frequency_to_midi (self) -> None:
		assert loopvoice.pitches.frequency_to_midi(440.0) == 69
		assert loopvoice.pitches.frequency_to_midi(261.63) == 60

		with pytest.raises(ValueError):
			loopvoice.pitches.frequency_to_midi(0.0)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

class TestArithmetic:

	def test_transpose_keeps_spelling (self) -> None:
		assert loopvoice.pitches.transpose("A4", 2) == "B4"
		assert loopvoice.pitches.transpose("E4", -1) == "D#4"
		assert loopvoice.pitches.transpose("Eb4", -1) == "D4"
		assert loopvoice.pitches.transpose("Bb3", -1) == "A3"
		assert loopvoice.pitches.transpose("G4", 12) == "G5"

	def test_transpose_crosses_octave (self) -> None:
		assert loopvoice.pitches.transpose("B3", 1) == "C4"
		assert loopvoice.pitches.transpose("C4", -1) == "B3"

	def test_semitone_interval_is_signed (self) -> None:
		assert loopvoice.pitches.semitone_interval("A3", "E5") == 19
		assert loopvoice.pitches.semitone_interval("E5", "A3") == -19

	def test_semitone_distance_is_symmetric (self) -> None:
		assert loopvoice.pitches.semitone_distance("C4", "G4") == 7
		assert loopvoice.pitches.semitone_distance("G4", "C4") == 7
		assert loopvoice.pitches.semitone_distance("C#4", "Db4") == 0

	def test_pitch_class (self) -> None:
		assert loopvoice.pitches.pitch_class("A3") == 9
		assert loopvoice.pitches.pitch_class("C5") == 0
