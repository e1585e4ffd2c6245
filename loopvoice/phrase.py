"""Phrase position tracking.

A phrase is a cycle of decision steps (``bars_per_phrase * beats_per_bar``,
16 by default).  The tracker advances once per decision tick and wraps back
to the start without any terminal state, so it only ever answers questions
about *where* in the cycle the melody is.
"""

CONTOUR_RISING = "rising"
CONTOUR_FALLING = "falling"


class PhraseTracker:

	"""Cyclic counter over the decision steps of one phrase."""

	def __init__ (self, bars_per_phrase: int = 4, beats_per_bar: int = 4) -> None:

		"""Initialize the tracker at the start of a phrase."""

		if bars_per_phrase <= 0 or beats_per_bar <= 0:
			raise ValueError("Bars per phrase and beats per bar must be positive")

		self.bars_per_phrase = bars_per_phrase
		self.beats_per_bar = beats_per_bar
		self.length = bars_per_phrase * beats_per_bar
		self.step = 0


	def advance (self) -> None:

		"""Move to the next step, wrapping at the end of the phrase."""

		self.step = (self.step + 1) % self.length


	@property
	def position (self) -> float:

		"""Return how far through the phrase we are (0.0 to just under 1.0)."""

		return self.step / self.length


	def is_structural_point (self) -> bool:

		"""Return True at the structural points of the phrase (every two bars)."""

		return self.step % (self.beats_per_bar * 2) == 0


	def should_resolve (self) -> bool:

		"""Return True on the last step of the phrase."""

		return self.step == self.length - 1


	def contour_bias (self) -> str:

		"""Return ``"rising"`` for the first half of the phrase and ``"falling"`` for the second."""

		return CONTOUR_RISING if self.position < 0.5 else CONTOUR_FALLING


	def reset (self) -> None:

		"""Return to the start of the phrase."""

		self.step = 0
