"""The boundary to the external pattern-evaluation and audio engine.

The engine only ever hands over program text. Anything that satisfies
:class:`Evaluator` can sit behind it: the bundled :class:`OscEvaluator`
forwards programs to a renderer process over OSC, and the tests use an
in-memory fake.

Evaluator contract
──────────────────
- ``compile(program)`` parses ``program`` and returns an opaque handle, or
  raises any exception describing why the program was rejected. Compiling
  must not make a sound.
- ``start(handle)`` begins playback of a compiled program.
- ``stop(handle)`` stops one program. Stopping a stale handle must be harmless.
- ``hush()`` stops everything the renderer is playing.
- ``stack(fragments)`` returns one program that plays all ``fragments``
  together.
"""

import dataclasses
import itertools
import logging
import typing

import pythonosc.udp_client

import slotbank.program_text


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class Evaluator (typing.Protocol):

	"""Protocol for the external engine that turns program text into sound."""

	def compile (self, program: str) -> typing.Any:
		...

	def start (self, handle: typing.Any) -> None:
		...

	def stop (self, handle: typing.Any) -> None:
		...

	def hush (self) -> None:
		...

	def stack (self, fragments: typing.Sequence[str]) -> str:
		...


def stack_programs (fragments: typing.Sequence[str]) -> str:

	"""
	Combine programs with the pattern language's ``stack`` combinator.

	A single fragment is returned verbatim.
	"""

	if not fragments:
		raise ValueError("Cannot stack an empty list of programs")

	if len(fragments) == 1:
		return fragments[0]

	return f"stack({', '.join(fragments)})"


@dataclasses.dataclass(frozen=True)
class ProgramHandle:

	"""A program accepted by :class:`OscEvaluator`, identified by ``program_id``."""

	program_id: int
	program: str


class OscEvaluator:

	"""
	Forward programs to an external renderer over OSC.

	The renderer is expected to handle:

	- ``/eval <id> <program>``: evaluate and play ``program`` under ``id``
	- ``/stop <id>``: stop the program with ``id``
	- ``/hush``: stop everything

	Programs are checked locally with :func:`slotbank.program_text.check`
	before a handle is issued, so structurally broken text never reaches the
	renderer.
	"""

	def __init__ (self, host: str = "127.0.0.1", port: int = 57130) -> None:

		self._host = host
		self._port = port
		self._client = pythonosc.udp_client.SimpleUDPClient(host, port)
		self._ids = itertools.count(1)

	def compile (self, program: str) -> ProgramHandle:

		slotbank.program_text.check(program)

		return ProgramHandle(program_id=next(self._ids), program=program)

	def start (self, handle: ProgramHandle) -> None:

		self._client.send_message("/eval", [handle.program_id, handle.program])
		logger.debug(f"Sent program {handle.program_id} to {self._host}:{self._port}")

	def stop (self, handle: ProgramHandle) -> None:

		try:
			self._client.send_message("/stop", handle.program_id)
		except OSError as exc:
			logger.warning(f"OSC stop for program {handle.program_id} failed: {exc}")

	def hush (self) -> None:

		try:
			self._client.send_message("/hush", [])
		except OSError as exc:
			logger.warning(f"OSC hush failed: {exc}")

	def stack (self, fragments: typing.Sequence[str]) -> str:
		return stack_programs(fragments)
