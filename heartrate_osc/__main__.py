"""Entry point for heartrate-osc."""

import argparse
import asyncio
import contextlib
import dataclasses
import logging
import signal
import sys

from bleak.exc import BleakError

from . import __version__
from .config import Config, SelectionMode, load_config
from .log import setup_logging
from .osc import OscEmitter
from .supervisor import ConnectionSupervisor

logger = logging.getLogger(__name__)

# Shutdown event for graceful termination
_shutdown_event: asyncio.Event | None = None


def _signal_handler() -> None:
    """Handle shutdown signals."""
    if _shutdown_event:
        logger.info("Shutdown requested...")
        _shutdown_event.set()


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return config with CLI values applied."""
    osc = dataclasses.replace(config.osc, host=args.host, port=args.port)
    device = dataclasses.replace(config.device, selection=SelectionMode(args.mode))
    return dataclasses.replace(config, osc=osc, device=device)


async def run(config: Config) -> None:
    """Run the relay until shutdown or a fatal adapter error."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _signal_handler)

    emitter = OscEmitter(
        host=config.osc.host,
        port=config.osc.port,
        percent_ceiling=config.osc.percent_ceiling,
    )
    logger.info("OSC client ready, sending to %s:%d", config.osc.host, config.osc.port)
    logger.info("Heart rate is mirrored to %s", config.relay.heart_rate_file)

    supervisor = ConnectionSupervisor(config, emitter)
    supervisor_task = asyncio.create_task(supervisor.run())
    shutdown_task = asyncio.create_task(_shutdown_event.wait())

    try:
        done, pending = await asyncio.wait(
            [supervisor_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (supervisor_task, shutdown_task):
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        logger.info("Relay stopped")

    if supervisor_task in done:
        # Propagates adapter errors from the supervisor
        supervisor_task.result()


def main() -> None:
    """CLI entry point."""
    config = load_config()

    parser = argparse.ArgumentParser(description="Relay BLE heart rate to VRChat over OSC")
    parser.add_argument("-H", "--host", default=config.osc.host, help="OSC destination host")
    parser.add_argument("-p", "--port", type=int, default=config.osc.port, help="OSC destination port")
    parser.add_argument(
        "-m",
        "--mode",
        choices=[mode.value for mode in SelectionMode],
        default=config.device.selection.value,
        help="Device selection: first name match or strongest signal",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    log_level = "DEBUG" if args.verbose else config.relay.log_level
    setup_logging(log_level)

    config = _apply_overrides(config, args)
    logger.info("HeartRate for VRChat v%s", __version__)

    try:
        asyncio.run(run(config))
    except (BleakError, OSError) as e:
        logger.error("Bluetooth error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
