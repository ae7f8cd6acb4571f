"""Error kinds raised by the slot bank engine.

Every failure is scoped to the single operation that caused it; none of these
are fatal to the engine.
"""

import typing


class SlotBankError (Exception):

	"""Base class for all engine errors."""

	pass


class NotFound (SlotBankError, LookupError):

	"""An unknown slot id, parameter name, or catalog entry was requested."""

	pass


class EvaluationFailure (SlotBankError):

	"""
	The external evaluation engine rejected a program.

	The message is the engine's own message, unchanged. The original exception
	is chained as ``__cause__``.
	"""

	def __init__ (self, message: str, program: typing.Optional[str] = None) -> None:

		super().__init__(message)
		self.program = program


class ValidationFailure (SlotBankError):

	"""A pre-commit check in ``PlaybackEngine.update_live_code`` failed."""

	def __init__ (self, message: str, program: typing.Optional[str] = None) -> None:

		super().__init__(message)
		self.program = program
