import random
import typing

import pytest

import loopvoice.config
import loopvoice.harmony
import loopvoice.melody
import loopvoice.synth


class ScriptedRandom (random.Random):

	"""Random source whose ``random()`` draws come from a fixed script.

	Once the script runs out, draws fall back to the seeded generator.
	``choice()`` keeps using the seeded generator throughout.
	"""

	def __init__ (self, values: typing.Iterable[float], seed: int = 0) -> None:

		"""Store the scripted draws."""

		self.values = list(values)
		super().__init__(seed)


	def random (self) -> float:

		"""Return the next scripted draw."""

		if self.values:
			return self.values.pop(0)

		return super().random()


@pytest.fixture
def provider () -> loopvoice.harmony.ChordProgression:

	"""The default Am - F - C - G progression, two bars per chord."""

	return loopvoice.harmony.ChordProgression.from_names()


@pytest.fixture
def recorder () -> loopvoice.synth.DirectiveRecorder:

	"""A synth that keeps every directive."""

	return loopvoice.synth.DirectiveRecorder()


@pytest.fixture
def make_melody (
	provider: loopvoice.harmony.ChordProgression,
	recorder: loopvoice.synth.DirectiveRecorder
) -> typing.Callable[..., loopvoice.melody.GenerativeMelody]:

	"""Factory for melodies wired to the default provider and the recorder."""

	def _make (
		complexity: typing.Optional[float] = None,
		seed: int = 1,
		rng: typing.Optional[random.Random] = None,
		config: typing.Optional[loopvoice.config.MelodyConfig] = None,
		rest_probability: typing.Optional[float] = None,
	) -> loopvoice.melody.GenerativeMelody:

		melody = loopvoice.melody.GenerativeMelody(
			provider,
			recorder,
			config = config,
			rng = rng if rng is not None else random.Random(seed)
		)

		if complexity is not None:
			melody.set_complexity(complexity)

		if rest_probability is not None:
			melody.set_rest_probability_override(rest_probability)

		return melody

	return _make


@pytest.fixture
def scripted_rng () -> typing.Callable[..., ScriptedRandom]:

	"""Factory for random sources with scripted ``random()`` draws."""

	return ScriptedRandom
