"""Walk through a short set without any hardware or renderer.

A printing evaluator stands in for the audio engine, so every composite the
engine builds is shown as it would be sent.

    python examples/offline_preview.py
"""

import logging
import typing

import slotbank
import slotbank.constants.default_library
import slotbank.evaluator


logging.basicConfig(level=logging.INFO)


class PrintEvaluator:

	"""Accepts every program and prints what would play."""

	def compile (self, program: str) -> str:
		return program

	def start (self, handle: str) -> None:
		print(f"  >> {handle}")

	def stop (self, handle: str) -> None:
		pass

	def hush (self) -> None:
		print("  >> (silence)")

	def stack (self, fragments: typing.Sequence[str]) -> str:
		return slotbank.evaluator.stack_programs(fragments)


def main () -> None:

	engine = slotbank.PlaybackEngine(
		PrintEvaluator(),
		slotbank.constants.default_library.build(),
		library_name = slotbank.constants.default_library.NAME
	)

	# Arpeggio with a $speed placeholder, plus a plain kick pattern.
	engine.handle_button(slotbank.ButtonEvent(control_id=35, pressed=True))
	engine.start(24)

	# Put speed on the first knob and turn it up.
	engine.assign_parameter(35, "speed", 0)

	for _ in range(3):
		engine.handle_knob(slotbank.KnobEvent(control_index=0, delta=8))

	# Add a catalog reverb to the kick and put it on the second knob.
	engine.add_catalog_parameter(24, "room", control_index=1)

	engine.stop_all()


if __name__ == "__main__":
	main()
