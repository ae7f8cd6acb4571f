"""OSC control surface for the playback engine.

Start the server with ``await OscServer(engine).start()``. It listens on a UDP
port (default 9100) for control messages and sends state updates to a target
host/port (default 127.0.0.1:9101).

Receive Handlers
────────────────
- ``/toggle/<id>``: Toggle a slot
- ``/start/<id>``: Start a slot
- ``/stop/<id>``: Stop a slot
- ``/stop_all``: Stop everything
- ``/select <id>``: Select a slot for knob input (negative clears it)
- ``/knob/<index> <delta>``: Move a knob by ``delta`` ticks
- ``/param/<id>/<name> <value>``: Set a parameter value
- ``/code/<id> <text>``: Hot-swap the code of a playing slot

Send Events
───────────
- ``/slot/<id>/playing <0|1>``: On playing state change
- ``/error <message>``: On any engine error
"""

import asyncio
import logging
import typing

import pythonosc.dispatcher
import pythonosc.osc_server
import pythonosc.udp_client

import slotbank.engine
import slotbank.errors


logger = logging.getLogger(__name__)


class OscServer:

	"""Async OSC server/client bridging a :class:`PlaybackEngine`."""

	def __init__ (
		self,
		engine: slotbank.engine.PlaybackEngine,
		receive_port: int = 9100,
		send_port: int = 9101,
		send_host: str = "127.0.0.1"
	) -> None:

		self._engine = engine
		self._receive_port = receive_port
		self._send_port = send_port
		self._send_host = send_host

		self._transport: typing.Optional[asyncio.BaseTransport] = None
		self._client: typing.Optional[pythonosc.udp_client.SimpleUDPClient] = None
		self._unsubscribers: typing.List[typing.Callable[[], None]] = []
		self._dispatcher = pythonosc.dispatcher.Dispatcher()

		self._dispatcher.map("/toggle/*", self._handle_slot_action)
		self._dispatcher.map("/start/*", self._handle_slot_action)
		self._dispatcher.map("/stop/*", self._handle_slot_action)
		self._dispatcher.map("/stop_all", self._handle_stop_all)
		self._dispatcher.map("/select", self._handle_select)
		self._dispatcher.map("/knob/*", self._handle_knob)
		self._dispatcher.map("/param/*/*", self._handle_param)
		self._dispatcher.map("/code/*", self._handle_code)

	@property
	def port (self) -> typing.Optional[int]:
		"""The bound receive port (useful when started with port 0)."""
		if self._transport is None:
			return None
		return typing.cast(int, self._transport.get_extra_info("sockname")[1])

	async def start (self) -> None:

		"""Start the OSC server and client and subscribe to engine events."""

		self._client = pythonosc.udp_client.SimpleUDPClient(self._send_host, self._send_port)

		server = pythonosc.osc_server.AsyncIOOSCUDPServer(
			("0.0.0.0", self._receive_port),
			self._dispatcher,
			asyncio.get_running_loop()
		)

		transport, _ = await server.create_serve_endpoint()
		self._transport = transport

		self._unsubscribers = [
			self._engine.events.on("indicator", self._send_playing),
			self._engine.events.on("error", self._send_error),
		]

		logger.info(f"OSC listening on :{self.port}, sending to {self._send_host}:{self._send_port}")

	async def stop (self) -> None:

		"""Stop the OSC server."""

		for unsubscribe in self._unsubscribers:
			unsubscribe()
		self._unsubscribers = []

		if self._transport:
			self._transport.close()
			self._transport = None
			logger.info("OSC server stopped")

	def send (self, address: str, *args: typing.Any) -> None:

		"""Send an OSC message."""

		if self._client:
			try:
				self._client.send_message(address, args)
			except Exception as e:
				logger.warning(f"OSC send error: {e}")

	# Outgoing

	def _send_playing (self, slot_id: int, color: int) -> None:
		self.send(f"/slot/{slot_id}/playing", 1 if self._engine.is_playing(slot_id) else 0)

	def _send_error (self, slot_id: typing.Optional[int], error: Exception) -> None:
		self.send("/error", str(error))

	# Handlers

	def _handle_slot_action (self, address: str, *args: typing.Any) -> None:

		# address is like /toggle/5
		parts = address.split("/")
		if len(parts) < 3:
			return

		try:
			slot_id = int(parts[2])
		except ValueError:
			logger.warning(f"Invalid OSC slot id in {address}")
			return

		action = {
			"toggle": self._engine.toggle,
			"start": self._engine.start,
			"stop": self._engine.stop,
		}[parts[1]]

		self._run(address, lambda: action(slot_id))

	def _handle_stop_all (self, address: str, *args: typing.Any) -> None:
		self._engine.stop_all()

	def _handle_select (self, address: str, *args: typing.Any) -> None:
		if not args:
			return
		try:
			slot_id = int(args[0])
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC select argument: {args[0]}")
			return
		self._run(address, lambda: self._engine.select(slot_id if slot_id >= 0 else None))

	def _handle_knob (self, address: str, *args: typing.Any) -> None:
		# address is like /knob/3
		if not args:
			return
		parts = address.split("/")
		try:
			event = slotbank.engine.KnobEvent(control_index=int(parts[2]), delta=int(args[0]))
		except (IndexError, ValueError, TypeError):
			logger.warning(f"Invalid OSC knob message: {address} {args}")
			return
		self._run(address, lambda: self._engine.handle_knob(event))

	def _handle_param (self, address: str, *args: typing.Any) -> None:
		# address is like /param/5/speed
		if not args:
			return
		parts = address.split("/")
		try:
			slot_id = int(parts[2])
			value = float(args[0])
		except (IndexError, ValueError, TypeError):
			logger.warning(f"Invalid OSC param message: {address} {args}")
			return
		self._run(address, lambda: self._engine.set_parameter_value(slot_id, parts[3], value))

	def _handle_code (self, address: str, *args: typing.Any) -> None:
		if not args:
			return
		try:
			slot_id = int(address.split("/")[2])
		except (IndexError, ValueError):
			logger.warning(f"Invalid OSC slot id in {address}")
			return
		self._run(address, lambda: self._engine.update_live_code(slot_id, str(args[0])))

	def _run (self, address: str, action: typing.Callable[[], typing.Any]) -> None:

		"""Run an engine action; its failure is already on the error channel, so only log it."""

		try:
			action()
		except slotbank.errors.SlotBankError as exc:
			logger.warning(f"OSC {address} failed: {exc}")
