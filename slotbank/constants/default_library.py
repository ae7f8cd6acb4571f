"""The built-in pattern library: one program per clip-grid button.

Rows follow the controller grid from the top: melodic patterns (32-39), drums
and bass (24-31), percussion (16-23), textures (8-15), and effects and
combinations (0-7). A few programs carry ``$name`` placeholders so there is
something to put on the knobs straight away.
"""

import typing

import slotbank.constants.leds
import slotbank.slots


NAME = "Default Library"
VERSION = "1.0.0"

_GREEN = slotbank.constants.leds.GREEN
_RED = slotbank.constants.leds.RED
_YELLOW = slotbank.constants.leds.YELLOW

# (id, code, display name, category, playing color)
PATTERNS: typing.Tuple[typing.Tuple[int, str, str, str, int], ...] = (

	# Row 0 - melodic
	(32, 'note("c4 e4 g4 c5").s("casio")', "C Major Chord", "melody", _GREEN),
	(33, 'note("a3 c4 e4 a4").s("gtr")', "A Minor Chord", "melody", _GREEN),
	(34, 'note("c4 d4 e4 g4 a4 g4 e4 d4").slow(2).s("sine")', "C Major Scale", "melody", _GREEN),
	(35, 'note("c4 e4 g4 b4 c5").fast($speed).s("triangle")', "Arpeggio Up", "melody", _GREEN),
	(36, 'note("<c4 e4 g4>*4").s("sawtooth").lpf($cutoff * 2000)', "Filtered Chord", "melody", _GREEN),
	(37, 'note("c5 c5 g4 g4 a4 a4 g4").slow(2).s("arpy")', "Twinkle Melody", "melody", _GREEN),
	(38, 'note("c4 eb4 g4").s("casio").fast(2)', "C Minor Fast", "melody", _GREEN),
	(39, 'note("c4 d4 e4 f4 g4 a4 b4 c5").fast(8).s("sine")', "Fast Scale Run", "melody", _GREEN),

	# Row 1 - drums and bass
	(24, 's("bd").fast(2)', "Kick Drum x2", "drums", _RED),
	(25, 's("bd sd")', "Kick-Snare", "drums", _RED),
	(26, 's("bd*2 sd")', "Double Kick", "drums", _RED),
	(27, 's("bd ~ sd ~")', "Four on Floor", "drums", _RED),
	(28, 'note("c2 c2 eb2 g2").s("sawtooth").lpf(800)', "Bass Line", "bass", _YELLOW),
	(29, 'note("c2").s("sawtooth").fast(4)', "Bass Pulse", "bass", _YELLOW),
	(30, 'note("c2 ~ eb2 ~").s("triangle")', "Sub Bass", "bass", _YELLOW),
	(31, 'note("c2 g1 c2 g1").s("sawtooth").lpf(400)', "Deep Bass", "bass", _YELLOW),

	# Row 2 - percussion
	(16, 's("hh*8").gain($volume)', "Hi-Hat 8th", "drums", _RED),
	(17, 's("hh*16").fast(0.5)', "Hi-Hat 16th", "drums", _RED),
	(18, 's("cp, rm*4")', "Clap + Rim", "drums", _RED),
	(19, 's("~ cp")', "Clap on 2", "drums", _RED),
	(20, 's("perc*4").fast(2)', "Percussion Loop", "drums", _RED),
	(21, 's("oh ~ oh ~")', "Open Hi-Hat", "drums", _RED),
	(22, 's("rm*4")', "Rim Shots", "drums", _RED),
	(23, 's("tabla*8").fast(2)', "Fast Tabla", "drums", _RED),

	# Row 3 - textures
	(8, 'sound("sine").note("c3").lpf(600)', "Filtered Sine", "texture", _GREEN),
	(9, 'sound("sawtooth").note("<c3 e3 g3>").fast(2)', "Saw Chord", "texture", _GREEN),
	(10, 'sound("square").note("c4 e4 g4").slow(2)', "Square Wave", "texture", _GREEN),
	(11, 'sound("triangle").note("c4").fast(8).lpf(1200)', "Triangle Pulse", "texture", _GREEN),
	(12, 's("pad").note("c3 e3 g3").slow(4).room($reverb)', "Pad Slow", "texture", _GREEN),
	(13, 's("space").slow(2)', "Space Ambient", "texture", _GREEN),
	(14, 's("wind").fast(0.5)', "Wind Texture", "texture", _GREEN),
	(15, 's("noise").lpf(400).hpf(200)', "Filtered Noise", "texture", _GREEN),

	# Row 4 - effects and combinations
	(0, 's("bd sd").fast(2).rev()', "Reversed Beat", "effect", _YELLOW),
	(1, 'note("c4 e4 g4").s("arpy").jux(rev).pan($pan)', "Stereo Reverse", "effect", _YELLOW),
	(2, 's("bd hh sd hh").fast(2)', "Full Beat", "combo", _RED),
	(3, 'note("c2 c2 eb2 g2").s("sawtooth").lpf(800)', "Bass + Filter", "combo", _YELLOW),
	(4, 's("bd*4, hh*8, ~ cp")', "Layered Drums", "combo", _RED),
	(5, 'note("<c4 e4 g4 c5>*4").s("sine").lpf(1200)', "Melodic Pulse", "combo", _GREEN),
	(6, 's("bd sd, hh*16").fast(2)', "Breakbeat", "combo", _RED),
	(7, 'note("c4 d4 e4 g4").s("gtr").slow(4)', "Slow Melody", "melody", _GREEN),
)


def build () -> typing.List[slotbank.slots.PatternSlotDefinition]:

	"""Return fresh slot objects for the built-in library."""

	return [
		slotbank.slots.PatternSlotDefinition(
			id = slot_id,
			code = code,
			display_name = display_name,
			category = category,
			led_color_playing = color
		)
		for slot_id, code, display_name, category, color in PATTERNS
	]
