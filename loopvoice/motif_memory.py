"""Short-term memory of recently played motifs.

Every emitted note extends a short history; the last few notes of that
history are remembered as a *motif*.  At higher complexity the melody can
recall a remembered motif in varied form (moved up or down a whole step, or
played backwards), which gives the line recognisable, developing fragments
instead of a purely note-by-note walk.
"""

import random
import typing

import loopvoice.pitches


Motif = typing.Tuple[str, ...]
TransposeFn = typing.Callable[[str, int], str]

VARIATIONS: typing.Tuple[str, ...] = ("step_up", "step_down", "retrograde")

WHOLE_STEP = 2


class MotifMemory:

	"""Bounded FIFO store of recent motifs with randomised recall."""

	def __init__ (
		self,
		capacity: int = 3,
		recall_probability: float = 0.3,
		min_length: int = 3,
		max_length: int = 4,
		rng: typing.Optional[random.Random] = None,
		transpose: TransposeFn = loopvoice.pitches.transpose
	) -> None:

		"""
		Initialize an empty motif store.

		Parameters:
			capacity: Maximum number of motifs kept; the oldest is dropped first.
			recall_probability: Base chance of recalling a motif, scaled by
				complexity in :meth:`should_recall`.
			min_length: Fewest recent notes needed before a motif is stored.
			max_length: Number of trailing notes kept as a motif.
			rng: Random source for recall decisions and variations.
			transpose: Function used to move a motif by semitones.
		"""

		if capacity <= 0:
			raise ValueError("Motif capacity must be positive")

		if min_length <= 0 or max_length < min_length:
			raise ValueError("Motif lengths must be positive with max_length >= min_length")

		self.capacity = capacity
		self.recall_probability = recall_probability
		self.min_length = min_length
		self.max_length = max_length
		self.rng = rng or random.Random()
		self.transpose = transpose
		self.motifs: typing.List[Motif] = []


	def __len__ (self) -> int:

		return len(self.motifs)


	def record (self, recent_notes: typing.Sequence[str]) -> None:

		"""Store the tail of the recent notes as a motif, once there are enough of them."""

		if len(recent_notes) < self.min_length:
			return

		self.motifs.append(tuple(recent_notes[-self.max_length:]))

		if len(self.motifs) > self.capacity:
			self.motifs.pop(0)


	def should_recall (self, complexity: float) -> bool:

		"""Decide whether to recall a motif; more likely at higher complexity."""

		if not self.motifs:
			return False

		probability = self.recall_probability * (0.5 + 0.5 * complexity)

		return self.rng.random() < probability


	def recall_varied (self) -> typing.Optional[typing.List[str]]:

		"""Return a varied copy of a random stored motif, or None if nothing is stored."""

		if not self.motifs:
			return None

		motif = self.rng.choice(self.motifs)
		variation = self.rng.choice(VARIATIONS)

		if variation == "step_up":
			return [self.transpose(note, WHOLE_STEP) for note in motif]

		if variation == "step_down":
			return [self.transpose(note, -WHOLE_STEP) for note in motif]

		return list(reversed(motif))


	def clear (self) -> None:

		"""Forget every stored motif."""

		self.motifs = []
