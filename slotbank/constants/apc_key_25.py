"""MIDI layout of the Akai APC Key 25 mk2.

The controller exposes two ports. The keyboard port only carries notes from
the keys; buttons, knobs and LEDs live on the second port (``MIDIIN2`` /
``MIDIOUT2``). On Windows the port names carry the parent device name in
parentheses, which is why ports are matched by substring as a fallback.
"""

import typing


KEYBOARD_PORT = "APC Key 25 mk2"
CONTROLLER_INPUT_PORT = "MIDIIN2 (APC Key 25 mk2)"
CONTROLLER_OUTPUT_PORT = "MIDIOUT2 (APC Key 25 mk2)"

# Clip grid, top row first. Note numbers equal slot ids.
GRID_ROWS: typing.Tuple[typing.Tuple[int, ...], ...] = (
	(32, 33, 34, 35, 36, 37, 38, 39),
	(24, 25, 26, 27, 28, 29, 30, 31),
	(16, 17, 18, 19, 20, 21, 22, 23),
	(8, 9, 10, 11, 12, 13, 14, 15),
	(0, 1, 2, 3, 4, 5, 6, 7),
)

GRID_NOTES: typing.FrozenSet[int] = frozenset(note for row in GRID_ROWS for note in row)

# Knobs send relative CC 48-55; knob index = CC - FIRST_KNOB_CC.
FIRST_KNOB_CC = 48
KNOB_CCS: typing.Tuple[int, ...] = tuple(range(FIRST_KNOB_CC, FIRST_KNOB_CC + 8))

SHIFT = 98
STOP_ALL_CLIPS = 81
PLAY = 91
RECORD = 93
