"""Structural checks on program text before it reaches the external engine.

The pattern language itself is parsed by the external engine. This module only
catches the mistakes that would make any program unparseable: unbalanced
brackets and unterminated string literals or comments. Catching them locally means a
broken edit is rejected before the running composite is touched.
"""

import typing


OPENERS: typing.Dict[str, str] = {"(": ")", "[": "]", "{": "}"}
CLOSERS: typing.Dict[str, str] = {close: open_ for open_, close in OPENERS.items()}
QUOTES: typing.FrozenSet[str] = frozenset({'"', "'", "`"})


class ProgramSyntaxError (Exception):

	"""Program text is structurally broken. ``position`` is the offending offset."""

	def __init__ (self, message: str, position: int) -> None:

		super().__init__(f"{message} at position {position}")
		self.position = position



def check (program: str) -> None:

	"""
	Raise ``ProgramSyntaxError`` if ``program`` is empty or structurally broken.

	Brackets inside string literals and comments are ignored; a backslash
	escapes the next character inside a string. ``//`` runs to the end of the
	line and ``/* ... */`` must be closed.
	"""

	if not program.strip():
		raise ProgramSyntaxError("Empty program", 0)

	stack: typing.List[typing.Tuple[str, int]] = []
	quote: typing.Optional[str] = None
	quote_start = 0
	escaped = False
	position = 0

	while position < len(program):

		char = program[position]

		if quote is not None:
			if escaped:
				escaped = False
			elif char == "\\":
				escaped = True
			elif char == quote:
				quote = None
			position += 1
			continue

		if program.startswith("//", position):
			newline = program.find("\n", position)
			position = len(program) if newline == -1 else newline + 1
			continue

		if program.startswith("/*", position):
			end = program.find("*/", position + 2)
			if end == -1:
				raise ProgramSyntaxError("Unterminated comment", position)
			position = end + 2
			continue

		if char in QUOTES:
			quote = char
			quote_start = position

		elif char in OPENERS:
			stack.append((char, position))

		elif char in CLOSERS:
			if not stack:
				raise ProgramSyntaxError(f"Unexpected {char!r}", position)
			opener, _ = stack.pop()
			if OPENERS[opener] != char:
				raise ProgramSyntaxError(f"Expected {OPENERS[opener]!r} but found {char!r}", position)

		position += 1

	if quote is not None:
		raise ProgramSyntaxError(f"Unterminated string starting with {quote}", quote_start)

	if stack:
		opener, position = stack[-1]
		raise ProgramSyntaxError(f"Missing {OPENERS[opener]!r} for {opener!r}", position)
