"""Well-known controllable parameters.

Each entry carries a range, a default, and a code fragment template that can
be appended to a slot's program to make it controllable. For example the
``cutoff`` entry appends ``.lpf($cutoff * 10000)`` and seeds a ``cutoff``
parameter at 0.5 in ``0..1``.
"""

import dataclasses
import typing

import slotbank.errors


@dataclasses.dataclass(frozen=True)
class CatalogEntry:

	"""
	A parameter that can be added to a slot on demand.

	Attributes:
		name: Placeholder name (without ``$``).
		display_name: Human-readable label.
		category: Grouping used for browsing (e.g. ``"Filter"``).
		min_value: Default lower bound.
		max_value: Default upper bound.
		default_value: Starting value.
		description: What the parameter does.
		syntax: Code fragment appended to the program, containing ``$name``.
	"""

	name: str
	display_name: str
	category: str
	min_value: float
	max_value: float
	default_value: float
	description: str
	syntax: str


BUILTIN_ENTRIES: typing.Tuple[CatalogEntry, ...] = (

	# Time
	CatalogEntry("speed", "Speed", "Time", 0.1, 4.0, 1.0, "Speed up pattern playback", ".fast($speed)"),
	CatalogEntry("slowness", "Slowness", "Time", 0.25, 4.0, 1.0, "Slow down pattern playback", ".slow($slowness)"),
	CatalogEntry("timing", "Timing Shift", "Time", -0.5, 0.5, 0.0, "Shift pattern timing early/late", ".early($timing)"),

	# Filter
	CatalogEntry("cutoff", "LP Cutoff", "Filter", 0.0, 1.0, 0.5, "Low-pass filter cutoff frequency", ".lpf($cutoff * 10000)"),
	CatalogEntry("resonance", "LP Resonance", "Filter", 0.0, 10.0, 1.0, "Low-pass filter resonance", ".lpq($resonance)"),
	CatalogEntry("hcutoff", "HP Cutoff", "Filter", 0.0, 1.0, 0.5, "High-pass filter cutoff frequency", ".hpf($hcutoff * 10000)"),
	CatalogEntry("hresonance", "HP Resonance", "Filter", 0.0, 10.0, 1.0, "High-pass filter resonance", ".hpq($hresonance)"),
	CatalogEntry("bandfreq", "BP Frequency", "Filter", 0.0, 1.0, 0.5, "Band-pass filter center frequency", ".bandf($bandfreq * 10000)"),
	CatalogEntry("bandq", "BP Q-Factor", "Filter", 0.1, 10.0, 1.0, "Band-pass filter Q-factor", ".bandq($bandq)"),

	# Dynamics
	CatalogEntry("volume", "Volume", "Dynamics", 0.0, 1.0, 0.7, "Volume/gain level", ".gain($volume)"),
	CatalogEntry("velocity", "Velocity", "Dynamics", 0.0, 1.0, 0.8, "Note velocity (MIDI-style amplitude)", ".velocity($velocity)"),

	# Spatial
	CatalogEntry("pan", "Pan", "Spatial", -1.0, 1.0, 0.0, "Stereo pan position (left to right)", ".pan($pan)"),

	# Distortion
	CatalogEntry("shape", "Wave Shape", "Distortion", 0.0, 1.0, 0.0, "Wave shaping distortion amount", ".shape($shape)"),
	CatalogEntry("crush", "Bit Crush", "Distortion", 0.0, 16.0, 8.0, "Bit depth reduction", ".crush($crush)"),
	CatalogEntry("coarse", "Sample Rate", "Distortion", 1.0, 32.0, 1.0, "Sample rate reduction", ".coarse($coarse)"),

	# Delay
	CatalogEntry("delay", "Delay Level", "Delay", 0.0, 1.0, 0.3, "Delay wet signal level", ".delay($delay)"),
	CatalogEntry("delaytime", "Delay Time", "Delay", 0.0, 1.0, 0.25, "Delay time duration", ".delaytime($delaytime)"),
	CatalogEntry("delayfeedback", "Delay Feedback", "Delay", 0.0, 1.0, 0.5, "Delay feedback/recirculation amount", ".delayfeedback($delayfeedback)"),

	# Reverb
	CatalogEntry("room", "Reverb Level", "Reverb", 0.0, 1.0, 0.3, "Reverb wet signal level", ".room($room)"),
	CatalogEntry("roomsize", "Room Size", "Reverb", 0.0, 1.0, 0.5, "Reverb room/space size", ".size($roomsize)"),

	# Modulation
	CatalogEntry("vowel", "Vowel", "Modulation", 0.0, 4.0, 0.0, "Formant filter vowel (0=a, 1=e, 2=i, 3=o, 4=u)", '.vowel(["a", "e", "i", "o", "u"][$vowel])'),

	# Envelope
	CatalogEntry("attack", "Attack", "Envelope", 0.0, 1.0, 0.01, "Envelope attack time", ".attack($attack)"),
	CatalogEntry("decay", "Decay", "Envelope", 0.0, 1.0, 0.1, "Envelope decay time", ".decay($decay)"),
	CatalogEntry("sustain", "Sustain", "Envelope", 0.0, 1.0, 0.5, "Envelope sustain level", ".sustain($sustain)"),
	CatalogEntry("release", "Release", "Envelope", 0.0, 1.0, 0.1, "Envelope release time", ".release($release)"),

	# Rhythm
	CatalogEntry("legato", "Legato", "Rhythm", 0.1, 2.0, 1.0, "Note duration multiplier", ".legato($legato)"),
)


class ParameterCatalog:

	"""A lookup table of :class:`CatalogEntry` keyed by name."""

	def __init__ (self, entries: typing.Iterable[CatalogEntry] = BUILTIN_ENTRIES) -> None:

		self._entries: typing.Dict[str, CatalogEntry] = {}

		for entry in entries:
			if entry.name in self._entries:
				raise ValueError(f"Duplicate catalog entry: {entry.name!r}")
			if "$" + entry.name not in entry.syntax:
				raise ValueError(f"Catalog entry {entry.name!r} syntax must contain ${entry.name}")
			self._entries[entry.name] = entry

	def __len__ (self) -> int:
		return len(self._entries)

	def __iter__ (self) -> typing.Iterator[CatalogEntry]:
		return iter(self._entries.values())

	def __contains__ (self, name: object) -> bool:
		return name in self._entries

	def find (self, name: str) -> typing.Optional[CatalogEntry]:

		"""Return the entry called ``name``, or ``None``."""

		return self._entries.get(name)

	def get (self, name: str) -> CatalogEntry:

		"""Return the entry called ``name``, raising ``NotFound`` if there is none."""

		entry = self._entries.get(name)

		if entry is None:
			raise slotbank.errors.NotFound(f"Catalog has no parameter {name!r}. Available: {list(self._entries)}")

		return entry

	def by_category (self, category: str) -> typing.List[CatalogEntry]:
		return [entry for entry in self._entries.values() if entry.category == category]

	def categories (self) -> typing.List[str]:
		return sorted({entry.category for entry in self._entries.values()})

	def options (self) -> typing.List[typing.Tuple[str, str, str]]:

		"""Return ``(name, display_name, category)`` for every entry, for menus."""

		return [(entry.name, entry.display_name, entry.category) for entry in self._entries.values()]
