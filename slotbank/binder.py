import logging
import typing

import slotbank.catalog
import slotbank.parameters
import slotbank.slots


logger = logging.getLogger(__name__)


class ParameterBinder:

	"""
	Keeps each slot's dynamic parameters in step with its program text.

	All operations address a slot by id and a parameter by name, and raise
	``NotFound`` when either is unknown. Nothing here triggers playback; the
	engine decides whether a change needs a rebuild.
	"""

	def __init__ (self, store: slotbank.slots.SlotStore, catalog: typing.Optional[slotbank.catalog.ParameterCatalog] = None) -> None:

		self._store = store
		self.catalog = catalog if catalog is not None else slotbank.catalog.ParameterCatalog()

	def refresh (self, slot_id: int) -> typing.Dict[str, slotbank.parameters.DynamicParameter]:

		"""
		Detect the slot's placeholders and merge them into its parameters.

		Existing parameters are left exactly as they are. Running this twice on
		unchanged code changes nothing.
		"""

		slot = self._store.get(slot_id)
		names = slotbank.parameters.detect(slot.code)

		slot.dynamic_parameters = slotbank.parameters.merge(names, slot.dynamic_parameters)

		return slot.dynamic_parameters

	def resolve (self, slot_id: int) -> str:

		"""Refresh the slot's parameters and return its code with values injected."""

		parameters = self.refresh(slot_id)

		return slotbank.parameters.inject(self._store.get(slot_id).code, parameters)

	def assign_to_control (self, slot_id: int, name: str, control_index: typing.Optional[int]) -> slotbank.parameters.DynamicParameter:

		"""
		Bind a parameter to a physical control, or unbind it with ``None``.

		Within one slot a control index drives at most one parameter, so any
		other parameter in the slot holding ``control_index`` loses it. Other
		slots are unaffected.
		"""

		if control_index is not None and not 0 <= control_index < slotbank.parameters.CONTROL_COUNT:
			raise ValueError(f"Control index {control_index} out of range (0-{slotbank.parameters.CONTROL_COUNT - 1})")

		slot = self._store.get(slot_id)
		param = slot.parameter(name)

		if control_index is not None:
			for other in slot.dynamic_parameters.values():
				if other is not param and other.assigned_control_index == control_index:
					other.assigned_control_index = None

		param.assigned_control_index = control_index
		slot.touch()

		return param

	def update_range (self, slot_id: int, name: str, min_value: float, max_value: float) -> slotbank.parameters.DynamicParameter:

		"""Replace a parameter's bounds and clamp its value into them."""

		if min_value >= max_value:
			raise ValueError(f"min_value ({min_value}) must be less than max_value ({max_value})")

		slot = self._store.get(slot_id)
		param = slot.parameter(name)

		param.min_value = min_value
		param.max_value = max_value
		param.value = slotbank.parameters.clamp(param.value, min_value, max_value)
		slot.touch()

		return param

	def set_value (self, slot_id: int, name: str, value: float) -> slotbank.parameters.DynamicParameter:

		"""Store a new value for a parameter, clamped to its bounds."""

		slot = self._store.get(slot_id)
		param = slot.parameter(name)

		param.value = slotbank.parameters.clamp(value, param.min_value, param.max_value)
		slot.touch()

		return param

	def add_from_catalog (self, slot_id: int, catalog_name: str, control_index: typing.Optional[int] = None) -> slotbank.parameters.DynamicParameter:

		"""
		Make a well-known parameter controllable in a slot.

		If the slot's code already uses ``$catalog_name`` the code is left
		alone and only the control assignment is made. Otherwise the catalog
		entry's code fragment is appended to the program and a parameter is
		created from the entry's default, min and max.
		"""

		entry = self.catalog.get(catalog_name)
		slot = self._store.get(slot_id)

		if entry.name in slotbank.parameters.detect(slot.code):
			self.refresh(slot_id)

		else:
			slot.code = slot.code + entry.syntax

			# An orphaned parameter of the same name keeps its tuned state.
			if entry.name not in slot.dynamic_parameters:
				slot.dynamic_parameters[entry.name] = slotbank.parameters.DynamicParameter(
					name = entry.name,
					value = entry.default_value,
					min_value = entry.min_value,
					max_value = entry.max_value,
					display_name = entry.display_name
				)

			slot.touch()
			logger.info(f"Added parameter '{entry.name}' to slot {slot_id}")

		if control_index is not None:
			return self.assign_to_control(slot_id, entry.name, control_index)

		return slot.parameter(entry.name)
