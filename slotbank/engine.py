"""Playback of the slot bank.

The :class:`PlaybackEngine` keeps the set of active slots and the single
composite program built from them. Every change to that set, to the code of an
active slot, or to a parameter of an active slot rebuilds the composite and
submits it to the external :class:`~slotbank.evaluator.Evaluator`.

Operations run synchronously to completion. Nothing here blocks on the audio
engine, schedules background work, retries, or debounces: two button presses
are handled strictly in order, and the running composite always reflects the
last completed operation.

Rebuild order
─────────────
The new composite is compiled before the old one is stopped. A program the
evaluator rejects therefore never interrupts what is already playing. Once it
compiles, the previous handle is stopped and only then is the new one started,
so two composites never run at the same time.

Events
──────
``engine.events`` emits:

- ``"state_change" (slot)`` when a slot's playing state, code or parameters change
- ``"indicator" (slot_id, color)`` when a slot starts or stops playing
- ``"parameter_change" (slot_id, parameter)`` when a parameter is updated
- ``"rebuild" (program)`` when a new composite starts (``None`` once silent)
- ``"error" (slot_id, error)`` for every failed operation, before it is raised
"""

import dataclasses
import logging
import typing

import slotbank.binder
import slotbank.catalog
import slotbank.constants.leds
import slotbank.control_router
import slotbank.errors
import slotbank.evaluator
import slotbank.event_emitter
import slotbank.parameters
import slotbank.slots


logger = logging.getLogger(__name__)

LED_OFF = slotbank.constants.leds.OFF

SaveSlotType = typing.Callable[[slotbank.slots.PatternSlotDefinition], None]


@dataclasses.dataclass
class ButtonEvent:

	"""A clip-grid button changed state. ``control_id`` is the slot id."""

	control_id: int
	pressed: bool
	shift_held: bool = False


@dataclasses.dataclass
class KnobEvent:

	"""A relative knob moved by ``delta`` encoder ticks."""

	control_index: int
	delta: int


class PlaybackEngine:

	"""
	Owns the slot bank, the active set, and the running composite program.

	Parameters:
		evaluator: The external engine that compiles and plays program text.
		slots: Initial library.
		catalog: Well-known parameters for ``add_catalog_parameter``.
		save_slot: Optional persistence callback, called after a slot's code
			or parameters change. Failures are logged and ignored.
		library_name: Name reported by ``info()``.
		library_version: Version reported by ``info()``.

	Example:
		```python
		engine = PlaybackEngine(evaluator, slotbank.constants.default_library.build())
		engine.start(5)
		engine.select(5)
		engine.assign_parameter(5, "speed", 0)
		engine.handle_knob(KnobEvent(control_index=0, delta=10))
		```
	"""

	def __init__ (
		self,
		evaluator: slotbank.evaluator.Evaluator,
		slots: typing.Iterable[slotbank.slots.PatternSlotDefinition] = (),
		catalog: typing.Optional[slotbank.catalog.ParameterCatalog] = None,
		save_slot: typing.Optional[SaveSlotType] = None,
		library_name: str = "Untitled",
		library_version: str = "1.0.0"
	) -> None:

		self._evaluator = evaluator
		self._save_slot = save_slot

		self.store = slotbank.slots.SlotStore(slots, name=library_name, version=library_version)
		self.binder = slotbank.binder.ParameterBinder(self.store, catalog)
		self.router = slotbank.control_router.ControlRouter(self.store)
		self.events = slotbank.event_emitter.EventEmitter()

		# Slot ids in activation order; the composite stacks them in this order.
		self._active: typing.Dict[int, None] = {}
		self._handle: typing.Any = None
		self._program: typing.Optional[str] = None

	# -----------------------------------------------------------------------
	# State
	# -----------------------------------------------------------------------

	@property
	def active_slot_ids (self) -> typing.Tuple[int, ...]:
		"""Ids of the playing slots, in activation order."""
		return tuple(self._active)

	@property
	def current_program (self) -> typing.Optional[str]:
		"""The composite program currently running, or ``None`` when silent."""
		return self._program

	@property
	def selected_slot_id (self) -> typing.Optional[int]:
		"""The slot knob input is routed to."""
		return self.router.selected_slot_id

	def is_playing (self, slot_id: int) -> bool:
		return slot_id in self._active

	def playing_slots (self) -> typing.List[slotbank.slots.PatternSlotDefinition]:
		return [self.store.get(slot_id) for slot_id in self._active]

	def led_color (self, slot_id: int) -> int:

		"""The indicator color for a slot: its playing color while active, otherwise off."""

		slot = self.store.find(slot_id)

		if slot is None or not slot.is_playing:
			return LED_OFF

		return slot.led_color_playing

	def info (self) -> typing.Dict[str, typing.Any]:

		"""Summary of the loaded library and playback state."""

		return {
			"name": self.store.name,
			"version": self.store.version,
			"pattern_count": len(self.store),
			"playing_count": len(self._active),
			"playing": list(self._active),
			"selected": self.router.selected_slot_id,
			"program": self._program,
		}

	# -----------------------------------------------------------------------
	# Library
	# -----------------------------------------------------------------------

	def load_library (self, slots: typing.Iterable[slotbank.slots.PatternSlotDefinition], name: typing.Optional[str] = None, version: typing.Optional[str] = None) -> None:

		"""
		Stop everything and replace the slot bank.

		The selection is cleared if the selected slot no longer exists.
		"""

		self.stop_all()
		self.store.load_library(slots, name=name, version=version)

		if self.router.selected_slot_id is not None and self.router.selected_slot_id not in self.store:
			self.router.selected_slot_id = None

	# -----------------------------------------------------------------------
	# Playback
	# -----------------------------------------------------------------------

	def start (self, slot_id: int) -> None:

		"""
		Add a slot to the active set and rebuild the composite.

		Does nothing if the slot is already playing. If the rebuild fails the
		slot is removed again and the error is raised; the other playing slots
		keep sounding.
		"""

		slot = self._slot(slot_id)

		if slot_id in self._active:
			logger.debug(f"Pattern {slot_id} already playing")
			return

		self._active[slot_id] = None
		slot.is_playing = True

		try:
			self._rebuild()

		except slotbank.errors.SlotBankError as exc:
			del self._active[slot_id]
			slot.is_playing = False
			logger.error(f"Failed to start pattern {slot_id}: {exc}")
			self._report(slot_id, exc)
			raise

		slot.touch()
		self._notify_playing(slot)
		self._persist(slot)
		logger.info(f"Started pattern {slot_id}: {slot.display_name}")

	def stop (self, slot_id: int) -> None:

		"""
		Remove a slot from the active set and rebuild the composite.

		Does nothing if the slot is not playing. If the rebuild fails the
		previous composite is still sounding, so the slot is put back into the
		active set before the error is raised.
		"""

		slot = self._slot(slot_id)

		if slot_id not in self._active:
			logger.debug(f"Pattern {slot_id} not playing")
			return

		previous = dict(self._active)
		del self._active[slot_id]
		slot.is_playing = False

		try:
			self._rebuild()

		except slotbank.errors.SlotBankError as exc:
			self._active = previous
			slot.is_playing = True
			logger.error(f"Failed to stop pattern {slot_id}: {exc}")
			self._report(slot_id, exc)
			raise

		slot.touch()
		self._notify_playing(slot)
		logger.info(f"Stopped pattern {slot_id}: {slot.display_name}")

	def toggle (self, slot_id: int) -> None:

		"""Stop the slot if it is playing, otherwise start it."""

		if slot_id in self._active:
			self.stop(slot_id)
		else:
			self.start(slot_id)

	def stop_all (self) -> None:

		"""
		Silence everything and mark every slot as not playing.

		The running composite is stopped and the evaluator is also told to
		hush globally, in case anything outlived its handle. Failures of either
		are logged; this operation always completes.
		"""

		logger.info("Stopping all patterns")

		self._stop_current()

		try:
			self._evaluator.hush()
		except Exception as exc:
			logger.warning(f"Global hush failed: {exc}")

		was_playing = [slot for slot in self.store if slot.is_playing or slot.id in self._active]

		self._active.clear()

		for slot in self.store:
			slot.is_playing = False

		for slot in was_playing:
			slot.touch()
			self._notify_playing(slot)

		self.events.emit("rebuild", None)

	# -----------------------------------------------------------------------
	# Code changes
	# -----------------------------------------------------------------------

	def update_live_code (self, slot_id: int, new_code: str) -> None:

		"""
		Hot-swap the code of a playing slot without stopping the others.

		Parameters are detected and merged against ``new_code`` and the
		resolved program is compiled on its own before anything is committed.
		If that check or the following rebuild fails, the slot's code,
		parameters and playing state are exactly as they were before the call.

		Raises:
			ValidationFailure: The slot is not playing, or the evaluator
				rejected the resolved new code.
			EvaluationFailure: The rebuilt composite was rejected.
		"""

		slot = self._slot(slot_id)

		if slot_id not in self._active:
			error = slotbank.errors.ValidationFailure(f"Slot {slot_id} is not playing; live code can only be applied to a playing slot")
			self._report(slot_id, error)
			raise error

		names = slotbank.parameters.detect(new_code)
		merged = slotbank.parameters.merge(names, slot.dynamic_parameters)
		resolved = slotbank.parameters.inject(new_code, merged)

		try:
			self._evaluator.compile(resolved)

		except Exception as exc:
			error = slotbank.errors.ValidationFailure(_message(exc), resolved)
			logger.error(f"Rejected live code for slot {slot_id}: {error}")
			self._report(slot_id, error)
			raise error from exc

		previous_code = slot.code
		previous_parameters = slot.dynamic_parameters

		slot.code = new_code
		slot.dynamic_parameters = merged

		try:
			self._rebuild()

		except slotbank.errors.SlotBankError as exc:
			slot.code = previous_code
			slot.dynamic_parameters = previous_parameters
			logger.error(f"Rebuild after live code for slot {slot_id} failed: {exc}")
			self._report(slot_id, exc)
			raise

		slot.touch()
		self.events.emit("state_change", slot)
		self._persist(slot)
		logger.info(f"Hot-swapped code for slot {slot_id}")

	def update_pattern_code (self, slot_id: int, code: str) -> None:

		"""
		Replace a slot's code with a full stop and restart.

		A playing slot is stopped, its code replaced and its parameters
		re-detected, and then started again. A slot that was not playing just
		gets the new code. This is the entry point for externally generated
		programs such as recorded phrases.

		The new code is kept, announced and persisted even when the restart
		fails; the slot is then left stopped and the failure is raised.
		"""

		slot = self._slot(slot_id)
		was_playing = slot_id in self._active

		if was_playing:
			self.stop(slot_id)

		slot.code = code
		slot.touch()
		self.binder.refresh(slot_id)

		try:
			if was_playing:
				self.start(slot_id)
		finally:
			self.events.emit("state_change", slot)
			self._persist(slot)

	# -----------------------------------------------------------------------
	# Parameters
	# -----------------------------------------------------------------------

	def select (self, slot_id: typing.Optional[int]) -> None:

		"""Route knob input to ``slot_id`` (``None`` clears the selection)."""

		try:
			self.router.select(slot_id)
		except slotbank.errors.NotFound as exc:
			self._report(slot_id, exc)
			raise

	def parameters (self, slot_id: int) -> typing.List[slotbank.parameters.DynamicParameter]:

		"""Detect and return the slot's parameters in order."""

		self._slot(slot_id)

		return list(self.binder.refresh(slot_id).values())

	def assign_parameter (self, slot_id: int, name: str, control_index: typing.Optional[int]) -> slotbank.parameters.DynamicParameter:

		"""Bind a parameter to a knob (or unbind with ``None``)."""

		param = self._binder_call(slot_id, lambda: self.binder.assign_to_control(slot_id, name, control_index))
		self._parameter_changed(slot_id, param, rebuild=False)

		return param

	def set_parameter_range (self, slot_id: int, name: str, min_value: float, max_value: float) -> slotbank.parameters.DynamicParameter:

		"""Change a parameter's bounds; rebuilds if the slot is playing."""

		param = self._binder_call(slot_id, lambda: self.binder.update_range(slot_id, name, min_value, max_value))
		self._parameter_changed(slot_id, param)

		return param

	def set_parameter_value (self, slot_id: int, name: str, value: float) -> slotbank.parameters.DynamicParameter:

		"""Set a parameter's value (clamped); rebuilds if the slot is playing."""

		param = self._binder_call(slot_id, lambda: self.binder.set_value(slot_id, name, value))
		self._parameter_changed(slot_id, param)

		return param

	def add_catalog_parameter (self, slot_id: int, catalog_name: str, control_index: typing.Optional[int] = None) -> slotbank.parameters.DynamicParameter:

		"""
		Add a well-known parameter from the catalog to a slot.

		Appends the entry's code fragment unless the slot already uses the
		placeholder; rebuilds if the slot is playing.
		"""

		param = self._binder_call(slot_id, lambda: self.binder.add_from_catalog(slot_id, catalog_name, control_index))
		self._parameter_changed(slot_id, param)

		return param

	# -----------------------------------------------------------------------
	# Transport events
	# -----------------------------------------------------------------------

	def handle_button (self, event: ButtonEvent) -> None:

		"""A grid press selects the slot and toggles its playback. Releases are ignored."""

		if not event.pressed:
			return

		self.select(event.control_id)
		self.toggle(event.control_id)

	def handle_knob (self, event: KnobEvent) -> None:

		"""
		Apply a knob movement to the selected slot.

		Rebuilds immediately when the selected slot is playing.
		"""

		update = self.router.apply_delta(event.control_index, event.delta)

		if update is None:
			return

		self._parameter_changed(update.slot_id, update.parameter)

	# -----------------------------------------------------------------------
	# Internals
	# -----------------------------------------------------------------------

	def _rebuild (self) -> None:

		"""
		Compile and start a composite of all active slots.

		Raises ``EvaluationFailure`` if the evaluator rejects the composite.
		"""

		if not self._active:
			self._stop_current()
			self.events.emit("rebuild", None)
			logger.info("No active patterns")
			return

		fragments = [self.binder.resolve(slot_id) for slot_id in self._active]

		if len(fragments) == 1:
			program = fragments[0]
		else:
			program = self._evaluator.stack(fragments)

		logger.debug(f"Building composite program: {program}")

		try:
			handle = self._evaluator.compile(program)
		except Exception as exc:
			raise slotbank.errors.EvaluationFailure(_message(exc), program) from exc

		self._stop_current()

		try:
			self._evaluator.start(handle)
		except Exception as exc:
			raise slotbank.errors.EvaluationFailure(_message(exc), program) from exc

		self._handle = handle
		self._program = program

		self.events.emit("rebuild", program)
		logger.info(f"Composite program playing ({len(fragments)} {'layer' if len(fragments) == 1 else 'layers'})")

	def _stop_current (self) -> None:

		"""Stop the running composite, tolerating a stale or already stopped handle."""

		if self._handle is None:
			return

		handle = self._handle
		self._handle = None
		self._program = None

		try:
			self._evaluator.stop(handle)
		except Exception as exc:
			logger.warning(f"Stopping previous composite failed: {exc}")

	def _slot (self, slot_id: int) -> slotbank.slots.PatternSlotDefinition:

		"""Look up a slot, reporting ``NotFound`` on the error channel."""

		try:
			return self.store.get(slot_id)
		except slotbank.errors.NotFound as exc:
			self._report(slot_id, exc)
			raise

	def _binder_call (self, slot_id: int, call: typing.Callable[[], slotbank.parameters.DynamicParameter]) -> slotbank.parameters.DynamicParameter:

		"""Run a binder operation on freshly detected parameters, reporting failures."""

		self._slot(slot_id)
		self.binder.refresh(slot_id)

		try:
			return call()
		except slotbank.errors.SlotBankError as exc:
			self._report(slot_id, exc)
			raise

	def _parameter_changed (self, slot_id: int, param: slotbank.parameters.DynamicParameter, rebuild: bool = True) -> None:

		"""Notify, persist, and rebuild if the slot is playing."""

		slot = self.store.get(slot_id)

		self.events.emit("parameter_change", slot_id, param)
		self.events.emit("state_change", slot)
		self._persist(slot)

		if not rebuild or slot_id not in self._active:
			return

		try:
			self._rebuild()
		except slotbank.errors.SlotBankError as exc:
			logger.error(f"Rebuild after parameter change on slot {slot_id} failed: {exc}")
			self._report(slot_id, exc)
			raise

	def _notify_playing (self, slot: slotbank.slots.PatternSlotDefinition) -> None:

		self.events.emit("state_change", slot)
		self.events.emit("indicator", slot.id, self.led_color(slot.id))

	def _report (self, slot_id: typing.Optional[int], error: Exception) -> None:
		self.events.emit("error", slot_id, error)

	def _persist (self, slot: slotbank.slots.PatternSlotDefinition) -> None:

		"""Save a slot best-effort; playback never waits on or fails because of storage."""

		if self._save_slot is None:
			return

		try:
			self._save_slot(slot)
		except Exception as exc:
			logger.warning(f"Saving slot {slot.id} failed: {exc}")


def _message (exc: BaseException) -> str:

	"""The exception's own message, or its class name if it has none."""

	return str(exc) or type(exc).__name__
