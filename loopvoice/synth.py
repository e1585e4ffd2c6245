"""Synth directives and the sinks that receive them.

The melody never produces sound itself.  For every note it emits one
:class:`SynthDirective` (frequency, start time, duration and a legato
overlap) to an object implementing the :class:`Synth` protocol.

Two sinks are provided:

- :class:`DirectiveRecorder` keeps every directive in a list, for tests and
  for inspecting a rendered line.
- :class:`MidiFileSynth` buffers directives and writes them to a Standard
  MIDI File with ``mido``.
"""

import dataclasses
import logging
import typing

import mido

import loopvoice.constants
import loopvoice.pitches


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SynthDirective:

	"""
	One note handed to a synth.

	Attributes:
		frequency_hz: Pitch of the note.
		start_time: When the note starts, in seconds on the caller's clock.
		duration_seconds: Nominal length of the note.
		overlap_seconds: Extra sustain past the nominal end, for legato.
	"""

	frequency_hz: float
	start_time: float
	duration_seconds: float
	overlap_seconds: float = 0.0

	@property
	def end_time (self) -> float:

		"""Return when the note is released, overlap included."""

		return self.start_time + self.duration_seconds + self.overlap_seconds


@typing.runtime_checkable
class Synth (typing.Protocol):

	"""
	Protocol for anything that can play melody directives.
	"""

	def schedule (self, directive: SynthDirective) -> None:

		"""
		Accept a note for playback at ``directive.start_time``.
		"""

		...

	def stop (self) -> None:

		"""
		Silence the synth and drop anything still pending.
		"""

		...


class DirectiveRecorder:

	"""A synth that records every directive it receives."""

	def __init__ (self) -> None:

		self.directives: typing.List[SynthDirective] = []
		self.stop_count: int = 0


	def schedule (self, directive: SynthDirective) -> None:

		self.directives.append(directive)


	def stop (self) -> None:

		self.stop_count += 1


class MidiFileSynth:

	"""
	Buffers directives and renders them as a single-track MIDI file.

	Frequencies are mapped to the nearest MIDI note; times are converted from
	seconds to ticks at the configured tempo.
	"""

	def __init__ (
		self,
		bpm: float = 120.0,
		channel: int = 0,
		velocity: int = 90,
		program: typing.Optional[int] = None
	) -> None:

		"""
		Initialize the synth.

		Parameters:
			bpm: Tempo written to the file and used for the seconds → ticks conversion.
			channel: MIDI channel (0-15).
			velocity: Note-on velocity (1-127).
			program: Optional program change sent at the start of the track.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		if not 0 <= channel <= 15:
			raise ValueError(f"MIDI channel must be 0-15, got {channel}")

		if not 1 <= velocity <= 127:
			raise ValueError(f"Velocity must be 1-127, got {velocity}")

		self.bpm = bpm
		self.channel = channel
		self.velocity = velocity
		self.program = program
		self.directives: typing.List[SynthDirective] = []


	def schedule (self, directive: SynthDirective) -> None:

		"""Buffer a directive for the next render."""

		self.directives.append(directive)


	def stop (self) -> None:

		"""Discard every buffered directive."""

		if self.directives:
			logger.debug(f"Discarding {len(self.directives)} buffered directives")

		self.directives = []


	def _seconds_to_ticks (self, seconds: float) -> int:

		ticks_per_second = loopvoice.constants.MIDI_TICKS_PER_BEAT * self.bpm / 60.0

		return max(0, int(round(seconds * ticks_per_second)))


	def to_midi_file (self) -> mido.MidiFile:

		"""Render the buffered directives as a type 1 MIDI file."""

		mid = mido.MidiFile(type=1)
		mid.ticks_per_beat = loopvoice.constants.MIDI_TICKS_PER_BEAT

		track = mido.MidiTrack()
		mid.tracks.append(track)

		track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(self.bpm), time=0))

		if self.program is not None:
			track.append(mido.Message("program_change", channel=self.channel, program=self.program, time=0))

		# (tick, order, message); note-offs sort before note-ons at the same tick.
		events: typing.List[typing.Tuple[int, int, mido.Message]] = []

		for directive in self.directives:

			note = max(0, min(127, loopvoice.pitches.frequency_to_midi(directive.frequency_hz)))
			on_tick = self._seconds_to_ticks(directive.start_time)
			off_tick = max(on_tick + 1, self._seconds_to_ticks(directive.end_time))

			events.append((on_tick, 1, mido.Message("note_on", channel=self.channel, note=note, velocity=self.velocity)))
			events.append((off_tick, 0, mido.Message("note_off", channel=self.channel, note=note, velocity=0)))

		events.sort(key=lambda x: (x[0], x[1]))

		last_tick = 0

		for tick, _, message in events:
			message.time = tick - last_tick
			track.append(message)
			last_tick = tick

		track.append(mido.MetaMessage("end_of_track", time=0))

		return mid


	def save (self, filename: str) -> bool:

		"""Write the buffered directives to a MIDI file; return True on success."""

		logger.info(f"Saving {len(self.directives)} notes to {filename}...")

		mid = self.to_midi_file()

		try:
			mid.save(filename)
		except OSError as e:
			logger.error(f"Failed to save MIDI file: {e}")
			return False

		logger.info(f"Saved {filename}")

		return True
