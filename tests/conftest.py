import typing

import mido
import pytest

import slotbank.engine
import slotbank.evaluator
import slotbank.slots


class FakeEvaluator:

	"""
	In-memory evaluator that records what it is asked to do.

	``reject`` decides which programs fail to compile: a set of substrings
	(any match rejects) or a predicate. ``fail_start`` makes ``start`` raise.
	"""

	def __init__ (self, reject: typing.Union[typing.Set[str], typing.Callable[[str], bool], None] = None) -> None:

		self.reject = reject if reject is not None else set()
		self.fail_start = False
		self.fail_stop = False

		self.compiled: typing.List[str] = []
		self.started: typing.List[str] = []
		self.stopped: typing.List[str] = []
		self.hush_count = 0
		self.playing: typing.Optional[str] = None

	def _rejects (self, program: str) -> bool:

		if callable(self.reject):
			return self.reject(program)

		return any(fragment in program for fragment in self.reject)

	def compile (self, program: str) -> str:

		"""Return the program itself as the handle."""

		if self._rejects(program):
			raise RuntimeError(f"Cannot evaluate: {program}")

		self.compiled.append(program)
		return program

	def start (self, handle: str) -> None:

		if self.fail_start:
			raise RuntimeError("Audio engine unavailable")

		self.started.append(handle)
		self.playing = handle

	def stop (self, handle: str) -> None:

		if self.fail_stop:
			raise RuntimeError("Stale handle")

		self.stopped.append(handle)
		if self.playing == handle:
			self.playing = None

	def hush (self) -> None:

		self.hush_count += 1
		self.playing = None

	def stack (self, fragments: typing.Sequence[str]) -> str:
		return slotbank.evaluator.stack_programs(fragments)


class FakeMidiOut:

	"""MIDI output stub that keeps every sent message."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		self.sent.append(message)

	def close (self) -> None:

		self.closed = True


class FakeMidiIn:

	"""Minimal MIDI input stub for tests."""

	def __init__ (self, callback: typing.Optional[typing.Callable] = None) -> None:

		"""Store the callback for injecting test messages."""

		self.callback = callback
		self.closed = False

	def close (self) -> None:

		self.closed = True

	def inject (self, message: mido.Message) -> None:

		"""Simulate receiving a MIDI message by calling the stored callback."""

		if self.callback is not None:
			self.callback(message)


CONTROLLER_PORTS = ["APC Key 25 mk2", "MIDIIN2 (APC Key 25 mk2)"]
CONTROLLER_OUTPUTS = ["APC Key 25 mk2", "MIDIOUT2 (APC Key 25 mk2)"]


class FakeMidiPorts:

	"""The most recently opened fake ports, for tests to inspect."""

	def __init__ (self) -> None:

		self.output: typing.Optional[FakeMidiOut] = None
		self.input: typing.Optional[FakeMidiIn] = None
		self.opened_output: typing.Optional[str] = None
		self.opened_input: typing.Optional[str] = None


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> FakeMidiPorts:

	"""Patch mido to use fake MIDI output and input for all tests that need it."""

	ports = FakeMidiPorts()

	def _open_output (name: str) -> FakeMidiOut:
		ports.output = FakeMidiOut()
		ports.opened_output = name
		return ports.output

	def _open_input (name: str, callback: typing.Optional[typing.Callable] = None) -> FakeMidiIn:
		ports.input = FakeMidiIn(callback=callback)
		ports.opened_input = name
		return ports.input

	monkeypatch.setattr(mido, "get_output_names", lambda: list(CONTROLLER_OUTPUTS))
	monkeypatch.setattr(mido, "open_output", _open_output)
	monkeypatch.setattr(mido, "get_input_names", lambda: list(CONTROLLER_PORTS))
	monkeypatch.setattr(mido, "open_input", _open_input)

	return ports


@pytest.fixture
def evaluator () -> FakeEvaluator:

	"""A fresh recording evaluator."""

	return FakeEvaluator()


@pytest.fixture
def slots () -> typing.List[slotbank.slots.PatternSlotDefinition]:

	"""A small library covering placeholders, plain code and a shared name."""

	return [
		slotbank.slots.PatternSlotDefinition(id=5, code='note("c4").fast($speed)', display_name="Lead", led_color_playing=13),
		slotbank.slots.PatternSlotDefinition(id=6, code='s("bd sd")', display_name="Beat", led_color_playing=5),
		slotbank.slots.PatternSlotDefinition(id=7, code='s("hh*8").gain($volume).fast($speed)', display_name="Hats", led_color_playing=96),
	]


@pytest.fixture
def engine (evaluator: FakeEvaluator, slots: typing.List[slotbank.slots.PatternSlotDefinition]) -> slotbank.engine.PlaybackEngine:

	"""An engine over the small library with a recording evaluator."""

	return slotbank.engine.PlaybackEngine(evaluator, slots)


@pytest.fixture
def recorded_events (engine: slotbank.engine.PlaybackEngine) -> typing.Dict[str, typing.List[typing.Tuple[typing.Any, ...]]]:

	"""Every engine event, keyed by name, as argument tuples."""

	events: typing.Dict[str, typing.List[typing.Tuple[typing.Any, ...]]] = {}

	for name in ("state_change", "indicator", "error", "rebuild", "parameter_change"):
		events[name] = []
		engine.events.on(name, lambda *args, _name=name: events[_name].append(args))

	return events
