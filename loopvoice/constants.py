"""Timing and fallback constants.

The melody is driven by **eighth-note decision ticks**: one tick per eighth
note, eight ticks to a bar of 4/4.  Ticks are counted from the start of the
loop and never wrap, so a tick index also identifies the bar it falls in
(``tick // TICKS_PER_BAR``).

- `TICKS_PER_BAR = 8`: eighth-note subdivisions of one bar
- `STRONG_BEAT_POSITIONS`: positions within the bar that count as strong
  beats (beats 1 and 3)
- `FALLBACK_PITCH`: the pitch used when no chord tone or scale note is
  available at all
"""

TICKS_PER_BAR = 8
BEATS_PER_BAR = 4

STRONG_BEAT_POSITIONS = (0, 4)

FALLBACK_PITCH = "A4"

# Recent-note history fed to the motif memory.
HISTORY_LENGTH = 8

# Standard MIDI file resolution used when rendering.
MIDI_TICKS_PER_BEAT = 480
