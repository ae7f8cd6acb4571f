import dataclasses
import logging
import typing

import slotbank.parameters
import slotbank.slots


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ControlUpdate:

	"""The outcome of a knob movement that changed a parameter."""

	slot_id: int
	parameter: slotbank.parameters.DynamicParameter
	old_value: float
	new_value: float


class ControlRouter:

	"""
	Route relative knob movement to the parameters of the selected slot.

	Only one slot is selected at a time. Selection is independent of playback:
	a slot can be selected without playing and played without being selected.
	"""

	def __init__ (self, store: slotbank.slots.SlotStore) -> None:

		self._store = store
		self.selected_slot_id: typing.Optional[int] = None

	def select (self, slot_id: typing.Optional[int]) -> None:

		"""Select ``slot_id`` for knob input, or clear the selection with ``None``."""

		if slot_id is not None:
			self._store.get(slot_id)

		self.selected_slot_id = slot_id

	def apply_delta (self, control_index: int, delta: float) -> typing.Optional[ControlUpdate]:

		"""
		Move the selected slot's parameter bound to ``control_index`` by ``delta`` ticks.

		One tick is 1/127 of the parameter's range. The result is clamped and
		then snapped onto a whole number when it lands within
		``SNAP_THRESHOLD`` of one while moving toward it.

		Returns ``None`` (and changes nothing) when no slot is selected or no
		parameter in it is bound to ``control_index``.
		"""

		if self.selected_slot_id is None:
			return None

		slot = self._store.find(self.selected_slot_id)

		if slot is None:
			return None

		param = slot.parameter_for_control(control_index)

		if param is None:
			return None

		old_value = param.value
		param.value = slotbank.parameters.apply_delta(param, delta)
		slot.touch()

		logger.debug(f"Slot {slot.id} {param.name}: {old_value} -> {param.value}")

		return ControlUpdate(slot_id=slot.id, parameter=param, old_value=old_value, new_value=param.value)
