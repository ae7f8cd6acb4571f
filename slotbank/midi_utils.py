import logging
import typing

import mido

logger = logging.getLogger(__name__)


def match_port_name (wanted: str, available: typing.Sequence[str]) -> typing.Optional[str]:
    """
    Find the port called ``wanted`` among ``available``.

    An exact match wins. Otherwise the first port whose name contains
    ``wanted`` is used, and failing that the first port whose name is
    contained in ``wanted``. Windows decorates port names with the parent
    device, e.g. ``"MIDIIN2 (APC Key 25 mk2)"``, and Linux appends
    client/port numbers.

    Returns:
        The matching port name, or None.
    """
    if wanted in available:
        return wanted

    for name in available:
        if wanted in name:
            return name

    for name in available:
        if name in wanted:
            return name

    return None


def select_output_device(device_name: typing.Optional[str]) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Open the MIDI output port matching `device_name`.

    Unlike a sequencer, the controller adapter needs a specific port (the
    one carrying the LEDs), so there is no auto-discovery or prompting.

    Returns:
        A tuple of (device_name, midi_out_object) or (None, None) on failure.
    """
    if device_name is None:
        return None, None

    try:
        outputs = mido.get_output_names()
        logger.info(f"Available MIDI outputs: {outputs}")

        target = match_port_name(device_name, outputs)

        if target is None:
            logger.error(
                f"MIDI output device '{device_name}' not found. "
                f"Available devices: {outputs}"
            )
            return None, None

        midi_out = mido.open_output(target)
        logger.info(f"Opened MIDI output: {target}")
        return target, midi_out

    except Exception as e:
        logger.error(f"Failed to open MIDI output: {e}")
        return None, None


def select_input_device(device_name: typing.Optional[str], callback: typing.Optional[typing.Callable] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Open the MIDI input port matching `device_name`, delivering messages to `callback`.

    The callback runs on mido's input thread.

    Returns:
        A tuple of (device_name, midi_in_object) or (None, None) on failure.
    """
    if device_name is None:
        return None, None

    try:
        inputs = mido.get_input_names()
        logger.info(f"Available MIDI inputs: {inputs}")

        target = match_port_name(device_name, inputs)

        if target is None:
            logger.error(
                f"MIDI input device '{device_name}' not found. "
                f"Available devices: {inputs}"
            )
            return None, None

        midi_in = mido.open_input(target, callback=callback)
        logger.info(f"Opened MIDI input: {target}")
        return target, midi_in

    except Exception as e:
        logger.error(f"Failed to open MIDI input: {e}")
        return None, None
