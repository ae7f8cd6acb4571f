"""Hardware adapter for an APC Key 25 mk2 style controller.

Translates the controller's MIDI into engine calls and the engine's indicator
events back into LED messages:

- Note On / Note Off on grid notes 0-39 → :class:`~slotbank.engine.ButtonEvent`
- CC 48-55 (relative encoders) → :class:`~slotbank.engine.KnobEvent`
- Note On on the *Stop All Clips* button → ``engine.stop_all()``
- ``"indicator"`` events → Note On with ``velocity = color`` on the grid note

mido delivers input on its own thread. When an event loop is given to
:meth:`Controller.open`, messages are handed to that loop so the engine only
ever runs on one thread.
"""

import asyncio
import logging
import typing

import mido

import slotbank.constants.apc_key_25
import slotbank.constants.leds
import slotbank.engine
import slotbank.errors
import slotbank.midi_utils


logger = logging.getLogger(__name__)


def decode_relative (value: int) -> int:

	"""
	Turn a relative-encoder CC value into a signed tick count.

	1-63 are clockwise ticks, 65-127 are counter-clockwise (two's complement
	in 7 bits); 0 and 64 mean no movement.
	"""

	if 1 <= value <= 63:
		return value

	if 65 <= value <= 127:
		return -(128 - value)

	return 0


class Controller:

	"""
	Connects one controller's input and output ports to a :class:`PlaybackEngine`.

	Parameters:
		engine: The engine to drive.
		input_name: Controller input port (buttons and knobs).
		output_name: Controller output port (LEDs).
		channel: MIDI channel used for LED messages.
	"""

	def __init__ (
		self,
		engine: slotbank.engine.PlaybackEngine,
		input_name: typing.Optional[str] = slotbank.constants.apc_key_25.CONTROLLER_INPUT_PORT,
		output_name: typing.Optional[str] = slotbank.constants.apc_key_25.CONTROLLER_OUTPUT_PORT,
		channel: int = 0
	) -> None:

		self._engine = engine
		self.input_name = input_name
		self.output_name = output_name
		self.channel = channel

		self.midi_in: typing.Optional[typing.Any] = None
		self.midi_out: typing.Optional[typing.Any] = None
		self.shift_held = False

		self._loop: typing.Optional[asyncio.AbstractEventLoop] = None
		self._unsubscribe: typing.Optional[typing.Callable[[], None]] = None

	def open (self, loop: typing.Optional[asyncio.AbstractEventLoop] = None) -> None:

		"""
		Open the ports, subscribe to indicator events, and sync every LED.

		Parameters:
			loop: If given, incoming messages are processed on this loop
				instead of mido's input thread.
		"""

		self._loop = loop

		name, midi_out = slotbank.midi_utils.select_output_device(self.output_name)
		if name:
			self.output_name = name
			self.midi_out = midi_out

		name, midi_in = slotbank.midi_utils.select_input_device(self.input_name, self._on_midi_input)
		if name:
			self.input_name = name
			self.midi_in = midi_in

		self._unsubscribe = self._engine.events.on("indicator", self.set_indicator)
		self.sync_indicators()

	def close (self) -> None:

		"""Turn the LEDs off and release the ports."""

		if self._unsubscribe is not None:
			self._unsubscribe()
			self._unsubscribe = None

		if self.midi_out is not None:
			self.clear_indicators()
			self.midi_out.close()
			self.midi_out = None

		if self.midi_in is not None:
			self.midi_in.close()
			self.midi_in = None

	def _on_midi_input (self, message: mido.Message) -> None:

		"""mido input callback; hands the message to the engine's thread when there is a loop."""

		if self._loop is not None:
			self._loop.call_soon_threadsafe(self.handle_message, message)
		else:
			self.handle_message(message)

	def handle_message (self, message: mido.Message) -> None:

		"""
		Decode one controller message and drive the engine.

		Engine failures have already been reported on the engine's error
		channel, so they are logged here rather than raised back into the
		MIDI callback.
		"""

		try:

			if message.type in ("note_on", "note_off"):
				self._handle_note(message)

			elif message.type == "control_change":
				self._handle_cc(message)

		except slotbank.errors.SlotBankError as exc:
			logger.warning(f"Controller event {message} failed: {exc}")

	def _handle_note (self, message: mido.Message) -> None:

		pressed = message.type == "note_on" and message.velocity > 0

		if message.note == slotbank.constants.apc_key_25.SHIFT:
			self.shift_held = pressed
			return

		if message.note == slotbank.constants.apc_key_25.STOP_ALL_CLIPS:
			if pressed:
				self._engine.stop_all()
			return

		if message.note not in slotbank.constants.apc_key_25.GRID_NOTES:
			return

		self._engine.handle_button(slotbank.engine.ButtonEvent(
			control_id = message.note,
			pressed = pressed,
			shift_held = self.shift_held
		))

	def _handle_cc (self, message: mido.Message) -> None:

		if message.control not in slotbank.constants.apc_key_25.KNOB_CCS:
			return

		delta = decode_relative(message.value)

		if delta == 0:
			return

		self._engine.handle_knob(slotbank.engine.KnobEvent(
			control_index = message.control - slotbank.constants.apc_key_25.FIRST_KNOB_CC,
			delta = delta
		))

	def set_indicator (self, slot_id: int, color: int) -> None:

		"""Light a grid button in ``color`` (0 turns it off)."""

		if self.midi_out is None:
			return

		if slot_id not in slotbank.constants.apc_key_25.GRID_NOTES:
			logger.warning(f"Invalid button note: {slot_id} (must be 0-39)")
			return

		self.midi_out.send(mido.Message("note_on", channel=self.channel, note=slot_id, velocity=color))

	def sync_indicators (self) -> None:

		"""Set every grid LED from the engine's current playing state."""

		for note in sorted(slotbank.constants.apc_key_25.GRID_NOTES):
			self.set_indicator(note, self._engine.led_color(note))

	def clear_indicators (self) -> None:

		for note in sorted(slotbank.constants.apc_key_25.GRID_NOTES):
			self.set_indicator(note, slotbank.constants.leds.OFF)
