import pytest

import slotbank.binder
import slotbank.errors
import slotbank.slots


@pytest.fixture
def store () -> slotbank.slots.SlotStore:

	"""Two slots sharing a parameter name."""

	return slotbank.slots.SlotStore([
		slotbank.slots.PatternSlotDefinition(id=1, code='note("c4").fast($speed).lpf($cutoff * 1000)'),
		slotbank.slots.PatternSlotDefinition(id=2, code='s("bd").fast($speed)'),
		slotbank.slots.PatternSlotDefinition(id=3, code='s("hh*8")'),
	])


@pytest.fixture
def binder (store: slotbank.slots.SlotStore) -> slotbank.binder.ParameterBinder:

	return slotbank.binder.ParameterBinder(store)


def test_refresh_detects_parameters (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""refresh() fills the slot's parameters in detection order."""

	params = binder.refresh(1)

	assert list(params) == ["speed", "cutoff"]
	assert store.get(1).dynamic_parameters is params


def test_refresh_twice_changes_nothing (binder: slotbank.binder.ParameterBinder) -> None:

	"""Detection is idempotent on unchanged code."""

	first = binder.refresh(1)
	first["speed"].value = 3.0
	second = binder.refresh(1)

	assert second == first
	assert second["speed"].value == 3.0


def test_resolve_injects_values (binder: slotbank.binder.ParameterBinder) -> None:

	"""resolve() returns the code with every placeholder replaced."""

	binder.refresh(1)
	binder.set_value(1, "speed", 2.0)

	assert binder.resolve(1) == 'note("c4").fast(2).lpf(0.5 * 1000)'


def test_unknown_slot_or_parameter_raises_not_found (binder: slotbank.binder.ParameterBinder) -> None:

	"""Operations on unknown slots or names raise NotFound."""

	with pytest.raises(slotbank.errors.NotFound):
		binder.refresh(99)

	binder.refresh(1)

	with pytest.raises(slotbank.errors.NotFound):
		binder.set_value(1, "volume", 0.5)


def test_assign_moves_control_within_slot (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""Assigning a taken knob unassigns the previous holder in the same slot."""

	binder.refresh(1)
	binder.assign_to_control(1, "speed", 0)
	binder.assign_to_control(1, "cutoff", 0)

	params = store.get(1).dynamic_parameters

	assert params["cutoff"].assigned_control_index == 0
	assert params["speed"].assigned_control_index is None


def test_assign_is_per_slot (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""The same knob index can be used in different slots."""

	binder.refresh(1)
	binder.refresh(2)
	binder.assign_to_control(1, "speed", 0)
	binder.assign_to_control(2, "speed", 0)

	assert store.get(1).parameter("speed").assigned_control_index == 0
	assert store.get(2).parameter("speed").assigned_control_index == 0


def test_assign_none_unbinds (binder: slotbank.binder.ParameterBinder) -> None:

	"""None clears the assignment."""

	binder.refresh(1)
	binder.assign_to_control(1, "speed", 4)
	param = binder.assign_to_control(1, "speed", None)

	assert param.assigned_control_index is None


@pytest.mark.parametrize("index", [-1, 8, 100])
def test_assign_rejects_invalid_index (binder: slotbank.binder.ParameterBinder, index: int) -> None:

	"""Only knobs 0-7 exist."""

	binder.refresh(1)

	with pytest.raises(ValueError):
		binder.assign_to_control(1, "speed", index)


def test_update_range_clamps_value (binder: slotbank.binder.ParameterBinder) -> None:

	"""Narrowing a range pulls the value inside it."""

	binder.refresh(1)
	param = binder.update_range(1, "speed", 0.5, 1.0)

	assert (param.min_value, param.max_value) == (0.5, 1.0)
	assert param.value == 1.0


def test_update_range_rejects_inverted_bounds (binder: slotbank.binder.ParameterBinder) -> None:

	"""min must be below max."""

	binder.refresh(1)

	with pytest.raises(ValueError):
		binder.update_range(1, "speed", 2.0, 1.0)


def test_set_value_clamps (binder: slotbank.binder.ParameterBinder) -> None:

	"""Values outside the range are clamped."""

	binder.refresh(1)

	assert binder.set_value(1, "speed", 100.0).value == 4.0
	assert binder.set_value(1, "speed", -5.0).value == 0.1


def test_add_from_catalog_appends_syntax (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""A new catalog parameter appends its fragment and uses catalog defaults."""

	param = binder.add_from_catalog(3, "room", control_index=2)

	slot = store.get(3)

	assert slot.code == 's("hh*8").room($room)'
	assert param.value == 0.3
	assert param.display_name == "Reverb Level"
	assert param.assigned_control_index == 2


def test_add_from_catalog_keeps_existing_placeholder (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""If the code already uses the name, only the knob is assigned."""

	code = store.get(1).code
	param = binder.add_from_catalog(1, "speed", control_index=5)

	assert store.get(1).code == code
	assert param.assigned_control_index == 5
	assert param.min_value == 0.1


def test_add_from_catalog_unknown_name (binder: slotbank.binder.ParameterBinder) -> None:

	"""Unknown catalog names raise NotFound."""

	with pytest.raises(slotbank.errors.NotFound):
		binder.add_from_catalog(3, "wobble")


def test_add_from_catalog_keeps_orphaned_parameter_state (binder: slotbank.binder.ParameterBinder, store: slotbank.slots.SlotStore) -> None:

	"""Re-adding a name whose placeholder was removed restores the tuned parameter."""

	binder.refresh(2)
	binder.set_value(2, "speed", 3.0)

	slot = store.get(2)
	slot.code = 's("bd")'

	param = binder.add_from_catalog(2, "speed")

	assert slot.code == 's("bd").fast($speed)'
	assert param.value == 3.0


def test_prefix_sharing_names_resolve_independently () -> None:

	"""$speed and $speedLimit are two parameters; each gets its own value."""

	store = slotbank.slots.SlotStore([
		slotbank.slots.PatternSlotDefinition(id=4, code='s("bd").fast($speed).slow($speedLimit).late($speed)'),
	])
	binder = slotbank.binder.ParameterBinder(store)

	assert list(binder.refresh(4)) == ["speed", "speedLimit"]

	binder.set_value(4, "speed", 2.0)
	binder.set_value(4, "speedLimit", 3.5)

	assert binder.resolve(4) == 's("bd").fast(2).slow(3.5).late(2)'
