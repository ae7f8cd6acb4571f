import dataclasses
import logging
import time
import typing

import slotbank.errors
import slotbank.parameters


logger = logging.getLogger(__name__)

SLOT_COUNT: int = 40
"""Number of grid positions; slot ids run from 0 to ``SLOT_COUNT - 1``."""


@dataclasses.dataclass
class PatternSlotDefinition:

	"""
	One grid position and the program it holds.

	Attributes:
		id: Grid position, 0-39.
		code: Program text; may contain ``$name`` placeholders.
		display_name: Free-text label.
		category: Free-text grouping (e.g. ``"drums"``).
		led_color_playing: Indicator color while the slot plays. Opaque to
			the engine; passed through to the transport layer.
		is_playing: Mirrors membership in the engine's active set.
		dynamic_parameters: Parameters keyed by placeholder name, in the order
			they were first detected. Empty until first detection.
		last_modified: ``time.time()`` of the last change to code, playing
			state, or parameter values.
	"""

	id: int
	code: str
	display_name: str = ""
	category: str = ""
	led_color_playing: int = 0
	is_playing: bool = False
	dynamic_parameters: typing.Dict[str, slotbank.parameters.DynamicParameter] = dataclasses.field(default_factory=dict)
	last_modified: typing.Optional[float] = None

	def touch (self) -> None:

		"""Record that the slot changed just now."""

		self.last_modified = time.time()

	def parameter (self, name: str) -> slotbank.parameters.DynamicParameter:

		"""Return the parameter called ``name``, raising ``NotFound`` if absent."""

		param = self.dynamic_parameters.get(name)

		if param is None:
			raise slotbank.errors.NotFound(f"Slot {self.id} has no parameter {name!r}. Available: {list(self.dynamic_parameters)}")

		return param

	def parameter_for_control (self, control_index: int) -> typing.Optional[slotbank.parameters.DynamicParameter]:

		"""Return the parameter assigned to ``control_index``, if any."""

		for param in self.dynamic_parameters.values():
			if param.assigned_control_index == control_index:
				return param

		return None


class SlotStore:

	"""
	Owns the fixed bank of pattern slots.

	Slots are created when a library is loaded and live until the next load.
	"""

	def __init__ (self, slots: typing.Iterable[PatternSlotDefinition] = (), name: str = "Untitled", version: str = "1.0.0") -> None:

		self._slots: typing.Dict[int, PatternSlotDefinition] = {}
		self.name = name
		self.version = version

		self.load_library(slots, name=name, version=version)

	def load_library (self, slots: typing.Iterable[PatternSlotDefinition], name: typing.Optional[str] = None, version: typing.Optional[str] = None) -> None:

		"""
		Replace every slot with ``slots``.

		Ids must be unique and within ``0..SLOT_COUNT - 1``. Parameters are not
		detected here; a slot without parameters keeps an empty mapping until
		it is first played or edited.

		Raises:
			ValueError: If an id is out of range or repeated.
		"""

		loaded: typing.Dict[int, PatternSlotDefinition] = {}

		for slot in slots:

			if not 0 <= slot.id < SLOT_COUNT:
				raise ValueError(f"Slot id {slot.id} out of range (0-{SLOT_COUNT - 1})")

			if slot.id in loaded:
				raise ValueError(f"Duplicate slot id {slot.id}")

			if slot.dynamic_parameters is None:
				slot.dynamic_parameters = {}

			loaded[slot.id] = slot

		self._slots = loaded

		if name is not None:
			self.name = name

		if version is not None:
			self.version = version

		if loaded:
			logger.info(f"Loaded library: {self.name} ({len(loaded)} patterns)")

	def get (self, slot_id: int) -> PatternSlotDefinition:

		"""Return the slot with ``slot_id``, raising ``NotFound`` if there is none."""

		slot = self._slots.get(slot_id)

		if slot is None:
			raise slotbank.errors.NotFound(f"Slot {slot_id} not found")

		return slot

	def find (self, slot_id: int) -> typing.Optional[PatternSlotDefinition]:
		return self._slots.get(slot_id)

	def all (self) -> typing.List[PatternSlotDefinition]:

		"""Every loaded slot, ordered by id."""

		return [self._slots[slot_id] for slot_id in sorted(self._slots)]

	def playing (self) -> typing.List[PatternSlotDefinition]:
		return [slot for slot in self.all() if slot.is_playing]

	def __len__ (self) -> int:
		return len(self._slots)

	def __contains__ (self, slot_id: object) -> bool:
		return slot_id in self._slots

	def __iter__ (self) -> typing.Iterator[PatternSlotDefinition]:
		return iter(self.all())
