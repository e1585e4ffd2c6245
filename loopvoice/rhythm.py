"""Duration patterns for the melody.

Note lengths come from five fixed families of duration tokens.  Tokens use a
compact notation: ``"8n"`` is an eighth note, ``"16n"`` a sixteenth, ``"4n"`` a
quarter, ``"8t"`` an eighth-note triplet, a trailing ``"."`` dots the value,
and ``"2h"`` counts in half notes (two beats each).

Which family a note draws from depends on the *rhythmic variation* amount:
low variation stays on steady eighths, high variation mixes syncopation,
swing, mixed values and triplets.
"""

import random
import re
import typing


PATTERN_FAMILIES: typing.Dict[str, typing.Tuple[str, ...]] = {
	"steady":     ("8n", "8n", "8n", "8n"),
	"syncopated": ("8n", "16n", "16n", "8n"),
	"swung":      ("8n.", "16n", "8n", "8n"),
	"mixed":      ("4n", "8n", "16n", "16n", "8n"),
	"triplet":    ("8t", "8t", "8t"),
}

DURATION_PATTERN = re.compile(r"^(\d+)([nth])(\.?)$")

# Beats used for tokens that do not parse (an eighth note).
DEFAULT_BEATS = 0.5


def duration_beats (token: str) -> float:

	"""Return the length of a duration token in beats (quarter notes).

	Example:
		```python
		duration_beats("4n")     # → 1.0
		duration_beats("8n.")    # → 0.75
		duration_beats("8t")     # → 0.333...
		duration_beats("2h")     # → 4.0
		duration_beats("bogus")  # → 0.5
		```
	"""

	match = DURATION_PATTERN.match(token)

	if match is None:
		return DEFAULT_BEATS

	value, unit, dot = match.groups()
	denominator = int(value)

	if unit == "h":
		beats = denominator * 2.0

	elif denominator == 0:
		return DEFAULT_BEATS

	elif unit == "t":
		beats = (4.0 / denominator) * (2.0 / 3.0)

	else:
		beats = 4.0 / denominator

	if dot:
		beats *= 1.5

	return beats


def parse_duration (token: str, beat_seconds: float) -> float:

	"""Return the length of a duration token in seconds for a given beat length."""

	return duration_beats(token) * beat_seconds


class RhythmicPattern:

	"""Chooses a duration token per note from the pattern families."""

	def __init__ (self, rng: typing.Optional[random.Random] = None) -> None:

		"""
		Initialize the generator.

		Parameters:
			rng: Random source for family selection.
		"""

		self.rng = rng or random.Random()
		self.family: str = "steady"

		# One index shared by all families; switching family keeps counting.
		self.index: int = 0


	def choose_family (self, variation: float) -> str:

		"""Pick a pattern family for a variation amount in [0, 1]."""

		if variation < 0.2:
			return "steady"

		if variation < 0.5:
			return "steady" if self.rng.random() < 0.7 else "syncopated"

		if variation < 0.8:
			return self.rng.choice(("syncopated", "swung", "mixed"))

		return self.rng.choice(("syncopated", "swung", "mixed", "triplet"))


	def next_duration (self, variation: float) -> str:

		"""Return the next duration token and advance the shared index."""

		self.family = self.choose_family(variation)
		pattern = PATTERN_FAMILIES[self.family]

		token = pattern[self.index % len(pattern)]
		self.index += 1

		return token


	def reset (self) -> None:

		"""Restart the pattern from its first position."""

		self.index = 0
		self.family = "steady"
