"""Render a melody to a MIDI file.

Usage:

    python -m loopvoice [--config melody.yaml] [--complexity 0.6] [--loops 8]
                        [--seed 42] [--output melody.mid] [--verbose]
"""

import argparse
import logging
import random
import sys
import typing

import loopvoice.config
import loopvoice.constants
import loopvoice.harmony
import loopvoice.melody
import loopvoice.synth


logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	"""
	Parse the command line.
	"""

	parser = argparse.ArgumentParser(prog="loopvoice", description="Render a generative melody to a MIDI file")
	parser.add_argument("--config", default="melody.yaml", help="YAML config file (default: melody.yaml)")
	parser.add_argument("--complexity", type=float, default=None, help="Complexity 0-1 (default: from config)")
	parser.add_argument("--loops", type=int, default=None, help="Loops to render; never fewer than the lookahead from config")
	parser.add_argument("--seed", type=int, default=None, help="Random seed for a repeatable melody")
	parser.add_argument("--output", default="melody.mid", help="MIDI file to write (default: melody.mid)")
	parser.add_argument("--verbose", action="store_true", help="Log every tick decision")

	return parser.parse_args(argv)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point: render the default progression with one melodic voice.
	"""

	args = parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	logger.info("Loopvoice starting...")

	try:
		config = loopvoice.config.load_config(args.config)
	except ValueError as e:
		logger.error(f"Invalid config: {e}")
		return 1

	if args.loops is not None and args.loops < 1:
		logger.error("--loops must be at least 1")
		return 1

	provider = loopvoice.harmony.ChordProgression.from_names()
	synth = loopvoice.synth.MidiFileSynth(bpm=config.bpm)
	melody = loopvoice.melody.GenerativeMelody(provider, synth, config=config, rng=random.Random(args.seed))

	if args.complexity is not None:
		melody.set_complexity(args.complexity)

	melody.start(0.0)

	loops = args.loops if args.loops is not None else config.lookahead_loops
	extra_loops = loops - config.lookahead_loops

	if extra_loops > 0:
		ticks_per_loop = config.loop_bars * loopvoice.constants.TICKS_PER_BAR
		first_tick = config.lookahead_loops * ticks_per_loop
		melody.schedule_loops(first_tick * melody.tick_seconds, extra_loops, first_tick=first_tick)

	logger.info(f"Rendered {len(synth.directives)} notes at complexity {melody.complexity:.2f}")

	return 0 if synth.save(args.output) else 1


if __name__ == "__main__":
	sys.exit(main())
