import pytest

import slotbank.parameters


def test_detect_returns_unique_names_in_first_seen_order () -> None:

	"""Each placeholder name appears once, in the order first written."""

	code = 'note("c4").fast($speed).lpf($cutoff * 1000).slow($speed)'

	assert slotbank.parameters.detect(code) == ["speed", "cutoff"]


def test_detect_matches_whole_identifiers () -> None:

	"""A longer identifier is its own parameter, never a prefix match."""

	assert slotbank.parameters.detect("$speedX $speed") == ["speedX", "speed"]


def test_detect_ignores_bare_dollar_and_digits () -> None:

	"""A ``$`` must be followed by a letter or underscore to be a placeholder."""

	assert slotbank.parameters.detect('s("bd") $ $1 $_x') == ["_x"]


def test_detect_on_plain_code_is_empty () -> None:

	"""Code without placeholders has no parameters."""

	assert slotbank.parameters.detect('s("bd sd")') == []


@pytest.mark.parametrize("name, expected", [
	("speed", (0.1, 4.0)),
	("tempo", (0.1, 4.0)),
	("cutoff", (0.0, 1.0)),
	("resonance", (0.0, 10.0)),
	("volume", (0.0, 1.0)),
	("pan", (-1.0, 1.0)),
	("reverb", (0.0, 1.0)),
	("mystery", (0.0, 1.0)),
	("filterRate", (0.1, 4.0)),
	("SPEED", (0.1, 4.0)),
])
def test_infer_default_range (name: str, expected: tuple) -> None:

	"""Ranges come from the first matching name rule, case-insensitively."""

	assert slotbank.parameters.infer_default_range(name) == expected


def test_format_display_name () -> None:

	"""camelCase and snake_case become Title Case words."""

	assert slotbank.parameters.format_display_name("delayFeedback") == "Delay Feedback"
	assert slotbank.parameters.format_display_name("room_size") == "Room Size"
	assert slotbank.parameters.format_display_name("cutoff") == "Cutoff"


def test_create_parameter_uses_range_midpoint () -> None:

	"""A new parameter starts halfway through its inferred range."""

	param = slotbank.parameters.create_parameter("speed")

	assert param.min_value == 0.1
	assert param.max_value == 4.0
	assert param.value == pytest.approx(2.05)
	assert param.assigned_control_index is None
	assert param.display_name == "Speed"


def test_parameter_rejects_empty_range () -> None:

	"""min_value must be strictly less than max_value."""

	with pytest.raises(ValueError):
		slotbank.parameters.DynamicParameter(name="x", value=0.5, min_value=1.0, max_value=1.0)


def test_parameter_clamps_initial_value () -> None:

	"""An out-of-range value is clamped on construction."""

	param = slotbank.parameters.DynamicParameter(name="x", value=5.0, min_value=0.0, max_value=1.0)

	assert param.value == 1.0


def test_merge_keeps_existing_parameters_untouched () -> None:

	"""Tuned parameters survive a merge as the same objects."""

	speed = slotbank.parameters.DynamicParameter(name="speed", value=3.0, min_value=0.5, max_value=8.0, assigned_control_index=2)
	existing = {"speed": speed}

	merged = slotbank.parameters.merge(["cutoff", "speed"], existing)

	assert list(merged) == ["speed", "cutoff"]
	assert merged["speed"] is speed
	assert speed.value == 3.0
	assert speed.assigned_control_index == 2
	assert merged["cutoff"].value == pytest.approx(0.5)


def test_merge_keeps_orphaned_parameters () -> None:

	"""A parameter whose placeholder disappeared is not pruned."""

	existing = {"old": slotbank.parameters.create_parameter("old")}

	merged = slotbank.parameters.merge([], existing)

	assert list(merged) == ["old"]


def test_merge_does_not_modify_input_mapping () -> None:

	"""merge returns a new mapping."""

	existing: dict = {}

	merged = slotbank.parameters.merge(["speed"], existing)

	assert existing == {}
	assert "speed" in merged


def test_merge_is_idempotent () -> None:

	"""Merging the same names twice yields the same parameters."""

	names = slotbank.parameters.detect("$a $b")
	first = slotbank.parameters.merge(names, {})
	second = slotbank.parameters.merge(names, first)

	assert second == first
	assert all(second[name] is first[name] for name in names)


def test_format_value () -> None:

	"""Whole numbers are written without a fractional part."""

	assert slotbank.parameters.format_value(2.0) == "2"
	assert slotbank.parameters.format_value(-1.0) == "-1"
	assert slotbank.parameters.format_value(2.05) == "2.05"
	assert slotbank.parameters.format_value(0.5) == "0.5"


def test_inject_replaces_placeholder_with_value () -> None:

	"""A whole-number value is injected as an integer literal."""

	param = slotbank.parameters.DynamicParameter(name="speed", value=2.0, min_value=0.1, max_value=4.0)

	assert slotbank.parameters.inject("fast($speed)", {"speed": param}) == "fast(2)"


def test_inject_replaces_every_occurrence () -> None:

	"""All placeholders of a name are replaced."""

	param = slotbank.parameters.DynamicParameter(name="x", value=0.25, min_value=0.0, max_value=1.0)

	assert slotbank.parameters.inject("$x + $x", [param]) == "0.25 + 0.25"


def test_inject_is_word_bounded () -> None:

	"""Injecting ``speed`` leaves ``$speedLimit`` alone."""

	param = slotbank.parameters.DynamicParameter(name="speed", value=1.5, min_value=0.1, max_value=4.0)

	assert slotbank.parameters.inject("fast($speed).x($speedLimit)", [param]) == "fast(1.5).x($speedLimit)"


def test_inject_leaves_unknown_placeholders () -> None:

	"""Placeholders without a parameter stay in the text."""

	assert slotbank.parameters.inject("fast($speed)", {}) == "fast($speed)"


def test_snap_when_approaching_whole_number () -> None:

	"""Moving from 1.95 to 1.99 lands on 2.0."""

	assert slotbank.parameters.snap_to_whole_number(1.95, 1.99) == 2.0


def test_no_snap_when_leaving_whole_number () -> None:

	"""Moving from 2.0 to 2.05 is allowed to leave the whole number."""

	assert slotbank.parameters.snap_to_whole_number(2.0, 2.05) == 2.05


def test_no_snap_outside_threshold () -> None:

	"""A value further than the threshold from a whole number is kept."""

	assert slotbank.parameters.snap_to_whole_number(1.7, 1.85) == 1.85


def test_apply_delta_moves_by_range_fraction () -> None:

	"""One tick is 1/127 of the range."""

	param = slotbank.parameters.DynamicParameter(name="speed", value=2.05, min_value=0.1, max_value=4.0)

	new_value = slotbank.parameters.apply_delta(param, 10)

	assert new_value == pytest.approx(2.05 + 10 * 3.9 / 127)
	assert param.value == pytest.approx(2.05)


def test_apply_delta_clamps_to_range () -> None:

	"""Large movements stop at the range edges."""

	param = slotbank.parameters.DynamicParameter(name="pan", value=0.0, min_value=-1.0, max_value=1.0)

	assert slotbank.parameters.apply_delta(param, 500) == 1.0
	assert slotbank.parameters.apply_delta(param, -500) == -1.0


def test_apply_delta_snaps_toward_whole_number () -> None:

	"""A tick that lands near 2.0 from below snaps onto it."""

	param = slotbank.parameters.DynamicParameter(name="speed", value=1.95, min_value=0.1, max_value=4.0)

	assert slotbank.parameters.apply_delta(param, 1) == 2.0


def test_apply_delta_never_snaps_below_range () -> None:

	"""A move clamped to a minimum of 0.05 stays there rather than snapping to 0."""

	param = slotbank.parameters.DynamicParameter(name="gain", value=0.12, min_value=0.05, max_value=1.0)

	assert slotbank.parameters.apply_delta(param, -20) == 0.05


def test_apply_delta_never_snaps_above_range () -> None:

	"""A move clamped to a maximum of 1.95 stays there rather than snapping to 2."""

	param = slotbank.parameters.DynamicParameter(name="speed", value=1.88, min_value=0.0, max_value=1.95)

	assert slotbank.parameters.apply_delta(param, 20) == 1.95


def test_snap_respects_bounds () -> None:

	"""A whole number outside the bounds is not a snap target; inside them it still is."""

	assert slotbank.parameters.snap_to_whole_number(0.12, 0.05, min_value=0.05, max_value=1.0) == 0.05
	assert slotbank.parameters.snap_to_whole_number(0.9, 0.97, min_value=0.05, max_value=1.0) == 1.0


@pytest.mark.parametrize("code", [
	'note("c4").fast($speed)',
	's("hh*8").gain($volume).pan($pan).lpf($cutoff * 1000)',
	's("bd").fast($speed).slow($speedLimit)',
	'$a + $b + $a',
])
def test_injected_code_has_no_placeholders_left (code: str) -> None:

	"""Injecting every detected parameter leaves nothing for detect to find."""

	parameters = slotbank.parameters.merge(slotbank.parameters.detect(code))

	assert slotbank.parameters.detect(slotbank.parameters.inject(code, parameters)) == []
