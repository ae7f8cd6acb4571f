import asyncio
import logging
import os
import signal
import sys
import typing

import yaml

import slotbank.constants.apc_key_25
import slotbank.constants.default_library
import slotbank.controller
import slotbank.engine
import slotbank.evaluator
import slotbank.library
import slotbank.osc


logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_engine (config: dict) -> slotbank.engine.PlaybackEngine:

	"""
	Create the engine from configuration.

	With ``library.path`` set and the file present, slots are loaded from it
	and every change is saved back. Otherwise the built-in library is used; a
	configured path that does not exist yet is created on the first save.
	"""

	renderer = config.get('renderer', {})
	evaluator = slotbank.evaluator.OscEvaluator(
		host = renderer.get('host', '127.0.0.1'),
		port = renderer.get('port', 57130)
	)

	library_path = config.get('library', {}).get('path')

	name = slotbank.constants.default_library.NAME
	version = slotbank.constants.default_library.VERSION
	slots = slotbank.constants.default_library.build()
	store: typing.Optional[slotbank.library.LibraryStore] = None

	if library_path:

		store = slotbank.library.LibraryStore(library_path, name=name, version=version)

		if os.path.exists(library_path):
			library = store.load()
			name, version, slots = library.name, library.version, library.slots
			store.name, store.version = name, version

		else:
			logger.warning(f"Library file {library_path} not found. Using the default library.")

	return slotbank.engine.PlaybackEngine(
		evaluator,
		slots,
		save_slot = store.save_slot if store else None,
		library_name = name,
		library_version = version
	)


async def run (config: dict) -> None:

	"""
	Run the controller and OSC surface until interrupted.
	"""

	engine = build_engine(config)
	loop = asyncio.get_running_loop()

	midi = config.get('midi', {})
	controller = slotbank.controller.Controller(
		engine,
		input_name = midi.get('input', slotbank.constants.apc_key_25.CONTROLLER_INPUT_PORT),
		output_name = midi.get('output', slotbank.constants.apc_key_25.CONTROLLER_OUTPUT_PORT)
	)

	osc = config.get('osc', {})
	osc_server = slotbank.osc.OscServer(
		engine,
		receive_port = osc.get('receive_port', 9100),
		send_port = osc.get('send_port', 9101),
		send_host = osc.get('send_host', '127.0.0.1')
	)

	stop_event = asyncio.Event()

	for sig in (signal.SIGINT, signal.SIGTERM):
		try:
			loop.add_signal_handler(sig, stop_event.set)
		except NotImplementedError:
			# Windows: KeyboardInterrupt ends asyncio.run instead.
			pass

	controller.open(loop)
	await osc_server.start()

	info = engine.info()
	logger.info(f"Slotbank ready: {info['name']} v{info['version']} ({info['pattern_count']} patterns)")

	try:
		await stop_event.wait()
	finally:
		logger.info("Stopping...")
		engine.stop_all()
		await osc_server.stop()
		controller.close()


def main () -> None:

	"""
	Main entry point for the slotbank application.
	"""

	logging.basicConfig(level=logging.INFO)

	config_path = sys.argv[1] if len(sys.argv) > 1 else 'config.yaml'
	config = load_config(config_path)

	logging.getLogger().setLevel(getattr(logging, str(config.get('log_level', 'INFO')).upper(), logging.INFO))
	logger.info("Slotbank starting...")

	try:
		asyncio.run(run(config))
	except KeyboardInterrupt:
		pass


if __name__ == "__main__":
	main()
