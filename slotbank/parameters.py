"""Placeholder parameters embedded in slot programs.

A program may contain ``$name`` placeholders standing in for numbers. Each
distinct name becomes a :class:`DynamicParameter` with a value, a range, and an
optional knob assignment. Before a program is submitted for playback every
placeholder is replaced by the current value of its parameter.

The functions here are pure: they never touch a slot or the engine.

Example:
	```python
	names = detect('note("c4").fast($speed).lpf($cutoff * 1000)')
	# ['speed', 'cutoff']

	params = merge(names, {})
	inject('note("c4").fast($speed)', params)
	# 'note("c4").fast(2.05)'
	```
"""

import dataclasses
import re
import typing


PLACEHOLDER_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")

CONTROL_COUNT: int = 8
"""Number of physical controls (knobs) a parameter can be assigned to."""

KNOB_STEPS: int = 127
"""A full sweep of a parameter's range takes this many encoder ticks."""

SNAP_THRESHOLD: float = 0.08
"""How close to a whole number a value must land before it snaps onto it."""


# Ordered: the first rule whose substring appears in the (lower-cased) name wins.
DEFAULT_RANGE_RULES: typing.Tuple[typing.Tuple[typing.Tuple[str, ...], float, float], ...] = (
	(("speed", "tempo", "rate"), 0.1, 4.0),
	(("cutoff", "lpf", "hpf"), 0.0, 1.0),
	(("res", "q"), 0.0, 10.0),
	(("vol", "gain", "amp"), 0.0, 1.0),
	(("pan",), -1.0, 1.0),
	(("delay", "reverb", "echo", "fx", "effect"), 0.0, 1.0),
)

FALLBACK_RANGE: typing.Tuple[float, float] = (0.0, 1.0)


@dataclasses.dataclass
class DynamicParameter:

	"""
	The bound, rangeable value behind one ``$name`` placeholder in a slot.

	Attributes:
		name: The identifier as written after ``$`` in the program text.
		value: Current value, always within ``[min_value, max_value]``.
		min_value: Lower bound (strictly less than ``max_value``).
		max_value: Upper bound.
		assigned_control_index: Which knob (0-7) drives this parameter, or
			``None`` when unassigned.
		display_name: Human-readable label.
	"""

	name: str
	value: float
	min_value: float
	max_value: float
	assigned_control_index: typing.Optional[int] = None
	display_name: str = ""

	def __post_init__ (self) -> None:

		if self.min_value >= self.max_value:
			raise ValueError(f"Parameter {self.name!r}: min_value ({self.min_value}) must be less than max_value ({self.max_value})")

		if not self.display_name:
			self.display_name = format_display_name(self.name)

		self.value = clamp(self.value, self.min_value, self.max_value)

	@property
	def step (self) -> float:

		"""The value change produced by one encoder tick."""

		return (self.max_value - self.min_value) / KNOB_STEPS


def detect (code: str) -> typing.List[str]:

	"""
	Return the unique placeholder names in ``code``, in first-seen order.

	Names are matched as whole identifiers, so ``$speedX`` yields ``speedX``
	and never ``speed``.
	"""

	names: typing.Dict[str, None] = {}

	for match in PLACEHOLDER_PATTERN.finditer(code):
		names.setdefault(match.group(1), None)

	return list(names)


def infer_default_range (name: str) -> typing.Tuple[float, float]:

	"""
	Guess a sensible ``(min, max)`` for a parameter from its name.

	Matching is a case-insensitive substring test against
	``DEFAULT_RANGE_RULES`` in order; names that match nothing get ``0..1``.
	"""

	lower = name.lower()

	for substrings, min_value, max_value in DEFAULT_RANGE_RULES:
		if any(substring in lower for substring in substrings):
			return min_value, max_value

	return FALLBACK_RANGE


def format_display_name (name: str) -> str:

	"""
	Expand a camelCase or snake_case identifier into Title Case.

	``"delayFeedback"`` becomes ``"Delay Feedback"`` and ``"room_size"``
	becomes ``"Room Size"``.
	"""

	spaced = re.sub(r"([A-Z])", r" \1", name).replace("_", " ")

	return " ".join(word[:1].upper() + word[1:] for word in spaced.split(" ")).strip()


def create_parameter (name: str) -> DynamicParameter:

	"""Create a parameter with an inferred range, valued at the range midpoint."""

	min_value, max_value = infer_default_range(name)

	return DynamicParameter(
		name = name,
		value = (min_value + max_value) / 2,
		min_value = min_value,
		max_value = max_value
	)


def merge (detected_names: typing.Iterable[str], existing: typing.Optional[typing.Mapping[str, DynamicParameter]] = None) -> typing.Dict[str, DynamicParameter]:

	"""
	Combine freshly detected names with a slot's existing parameters.

	Existing parameters are returned unchanged (same objects, same order) so a
	tuned value, range, or knob assignment is never lost. Names not seen before
	are appended with inferred defaults. Parameters whose placeholder no longer
	appears in the code are kept.
	"""

	merged: typing.Dict[str, DynamicParameter] = dict(existing) if existing else {}

	for name in detected_names:
		if name not in merged:
			merged[name] = create_parameter(name)

	return merged


def format_value (value: float) -> str:

	"""
	Render a number the way it should appear as a literal in program text.

	Whole numbers drop their fractional part (``2.0`` → ``"2"``).
	"""

	if float(value).is_integer():
		return str(int(value))

	return repr(float(value))


def inject (code: str, parameters: typing.Union[typing.Mapping[str, DynamicParameter], typing.Iterable[DynamicParameter]]) -> str:

	"""
	Replace every ``$name`` placeholder with its parameter's current value.

	Replacement is word-bounded: injecting ``speed`` leaves ``$speedLimit``
	untouched. Placeholders without a parameter are left as they are.
	"""

	if isinstance(parameters, typing.Mapping):
		parameters = parameters.values()

	result = code

	for param in parameters:
		literal = format_value(param.value)
		result = re.sub(r"\$" + re.escape(param.name) + r"\b", lambda _match: literal, result)

	return result


def clamp (value: float, min_value: float, max_value: float) -> float:

	"""Limit ``value`` to ``[min_value, max_value]``."""

	return max(min_value, min(max_value, value))


def snap_to_whole_number (
	old_value: float,
	new_value: float,
	threshold: float = SNAP_THRESHOLD,
	min_value: typing.Optional[float] = None,
	max_value: typing.Optional[float] = None
) -> float:

	"""
	Snap ``new_value`` onto the nearest whole number, but only when moving toward it.

	A value sitting on a whole number must be able to leave it: from ``2.0`` a
	move to ``2.05`` is moving away, so it is kept as is. A whole number
	outside ``[min_value, max_value]`` is never snapped to.
	"""

	nearest = round(new_value)

	if (min_value is not None and nearest < min_value) or (max_value is not None and nearest > max_value):
		return new_value

	new_distance = abs(new_value - nearest)
	old_distance = abs(old_value - nearest)

	if new_distance <= threshold and new_distance < old_distance:
		return float(nearest)

	return new_value


def apply_delta (param: DynamicParameter, delta: float) -> float:

	"""
	Move a parameter by ``delta`` encoder ticks and return the new value.

	The result is clamped to the parameter's range and then snapped
	directionally, never onto a whole number outside the range. The
	parameter itself is not modified.
	"""

	old_value = param.value
	new_value = clamp(old_value + delta * param.step, param.min_value, param.max_value)

	return snap_to_whole_number(old_value, new_value, min_value=param.min_value, max_value=param.max_value)
