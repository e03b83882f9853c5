import logging
import typing

import mido

logger = logging.getLogger(__name__)


def open_output(device_name: typing.Optional[str] = None, virtual: bool = False) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Open a MIDI output port for an Instrument.

    - If `virtual` is True, creates a virtual output named `device_name`
      (default "hotbeat") that other software can connect to.
    - If `device_name` is provided, opens that device or fails.
    - Otherwise auto-discovers: a single device is used as is; with several,
      the first is used and the others are listed in a warning so the caller
      can pick one by name next time.

    Returns:
        A tuple of (device_name, port) or (None, None) on failure.
    """
    try:
        if virtual:
            name = device_name or "hotbeat"
            port = mido.open_output(name, virtual=True)
            logger.info(f"Opened virtual MIDI output: {name}")
            return name, port

        outputs = mido.get_output_names()
        logger.info(f"Available MIDI outputs: {outputs}")

        if not outputs:
            logger.error("No MIDI output devices found.")
            return None, None

        if device_name is not None:
            if device_name not in outputs:
                logger.error(
                    f"MIDI output device '{device_name}' not found. "
                    f"Available devices: {outputs}"
                )
                return None, None
            port = mido.open_output(device_name)
            logger.info(f"Opened MIDI output: {device_name}")
            return device_name, port

        selected_name = outputs[0]
        if len(outputs) > 1:
            logger.warning(
                f"Several MIDI outputs found, using '{selected_name}'. "
                f"Pass device=... to choose one of: {outputs}"
            )
        port = mido.open_output(selected_name)
        logger.info(f"Opened MIDI output: {selected_name}")
        return selected_name, port

    except Exception as e:
        logger.error(f"Failed to open MIDI output: {e}")
        return None, None
