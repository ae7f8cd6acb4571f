import typing

import pytest

import slotbank.evaluator
import slotbank.program_text


class RecordingClient:

	"""Stands in for SimpleUDPClient and keeps every message."""

	def __init__ (self) -> None:

		self.messages: typing.List[typing.Tuple[str, typing.Any]] = []
		self.fail = False

	def send_message (self, address: str, value: typing.Any) -> None:

		if self.fail:
			raise OSError("Network is unreachable")

		self.messages.append((address, value))


@pytest.fixture
def osc_evaluator () -> typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]:

	evaluator = slotbank.evaluator.OscEvaluator(host="127.0.0.1", port=57130)
	client = RecordingClient()
	evaluator._client = client

	return evaluator, client


def test_stack_single_fragment_is_verbatim () -> None:

	"""One fragment needs no combinator."""

	assert slotbank.evaluator.stack_programs(['s("bd")']) == 's("bd")'


def test_stack_multiple_fragments () -> None:

	"""Several fragments are combined in order."""

	assert slotbank.evaluator.stack_programs(['s("bd")', 'note("c4")']) == 'stack(s("bd"), note("c4"))'


def test_stack_empty_raises () -> None:

	"""There is nothing to stack."""

	with pytest.raises(ValueError):
		slotbank.evaluator.stack_programs([])


def test_osc_evaluator_satisfies_protocol () -> None:

	"""The bundled evaluator is an Evaluator."""

	assert isinstance(slotbank.evaluator.OscEvaluator(), slotbank.evaluator.Evaluator)


def test_compile_issues_increasing_handles (osc_evaluator: typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]) -> None:

	"""Each compiled program gets its own id and sends nothing."""

	evaluator, client = osc_evaluator

	first = evaluator.compile('s("bd")')
	second = evaluator.compile('s("sd")')

	assert second.program_id > first.program_id
	assert client.messages == []


def test_compile_rejects_broken_text (osc_evaluator: typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]) -> None:

	"""Structurally broken programs never get a handle."""

	evaluator, _ = osc_evaluator

	with pytest.raises(slotbank.program_text.ProgramSyntaxError):
		evaluator.compile('note("c4"')


def test_start_stop_hush_messages (osc_evaluator: typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]) -> None:

	"""start, stop and hush map to /eval, /stop and /hush."""

	evaluator, client = osc_evaluator

	handle = evaluator.compile('s("bd")')
	evaluator.start(handle)
	evaluator.stop(handle)
	evaluator.hush()

	assert client.messages == [
		("/eval", [handle.program_id, 's("bd")']),
		("/stop", handle.program_id),
		("/hush", []),
	]


def test_stop_and_hush_tolerate_send_errors (osc_evaluator: typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]) -> None:

	"""Stopping never raises on a network error."""

	evaluator, client = osc_evaluator

	handle = evaluator.compile('s("bd")')
	client.fail = True

	evaluator.stop(handle)
	evaluator.hush()


def test_start_propagates_send_errors (osc_evaluator: typing.Tuple[slotbank.evaluator.OscEvaluator, RecordingClient]) -> None:

	"""A failed start is reported to the caller."""

	evaluator, client = osc_evaluator

	handle = evaluator.compile('s("bd")')
	client.fail = True

	with pytest.raises(OSError):
		evaluator.start(handle)
