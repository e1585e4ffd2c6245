"""
Loopvoice - a single generative melodic voice for looping background music.

Loopvoice plays one melody over a fixed chord progression, one eighth-note
decision at a time.  A single *complexity* value in [0, 1] decides how
adventurous the line is, and can be turned up or down while it plays:

- **Low complexity** keeps to chord tones, with plenty of rests.
- **Middle complexity** walks through the scale toward chord tones, follows
  a melodic direction for a few steps at a time, and resolves to the chord
  root at phrase endings.
- **High complexity** recalls short motifs (moved up or down, or played
  backwards), varies the rhythm with syncopation, swing and triplets, and
  drops in chromatic neighbour notes that resolve on the next strong beat.

Loopvoice produces no sound itself.  Every note is handed to a synth as a
``SynthDirective`` (frequency, start time, duration, legato overlap).  A
MIDI-file synth is included, so a line can be rendered offline::

    python -m loopvoice --complexity 0.7 --loops 8 --output melody.mid

Minimal example:

    ```python
    import random

    import loopvoice

    provider = loopvoice.ChordProgression.from_names(["Am", "F", "C", "G"])
    synth = loopvoice.MidiFileSynth(bpm=120)

    melody = loopvoice.GenerativeMelody(provider, synth, rng=random.Random(7))
    melody.set_complexity(0.8)
    melody.start(0.0)

    synth.save("melody.mid")
    ```

Package-level exports: ``GenerativeMelody``, ``ChordProgression``,
``MelodyConfig``, ``load_config``, ``SynthDirective``, ``MidiFileSynth``,
``DirectiveRecorder``.
"""

import loopvoice.config
import loopvoice.harmony
import loopvoice.melody
import loopvoice.synth


GenerativeMelody = loopvoice.melody.GenerativeMelody
ChordProgression = loopvoice.harmony.ChordProgression
MelodyConfig = loopvoice.config.MelodyConfig
load_config = loopvoice.config.load_config
SynthDirective = loopvoice.synth.SynthDirective
MidiFileSynth = loopvoice.synth.MidiFileSynth
DirectiveRecorder = loopvoice.synth.DirectiveRecorder
