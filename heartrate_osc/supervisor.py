"""Connection lifecycle: scan, connect, stream, recover."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from bleak import BleakClient

from .ble import Candidate, HeartRateSession, Notification, is_device_known, select_device
from .config import Config
from .errors import AdapterUnavailableError, DeviceNotFoundError, OscSendError
from .log import show_status
from .osc import OscEmitter
from .parser import clamp_heart_rate, parse_heart_rate
from .sink import write_heart_rate_file

logger = logging.getLogger(__name__)

# Flags byte plus at least one byte of heart rate
MIN_PAYLOAD_LEN = 2


class SupervisorState(str, Enum):
    SCANNING = "scanning"
    CONNECTING = "connecting"
    CONNECT_FAILED = "connect_failed"
    STREAMING = "streaming"
    DISCONNECTED = "disconnected"
    STREAM_CLOSED = "stream_closed"
    TIMED_OUT = "timed_out"
    RECONNECTING = "reconnecting"
    RESCANNING = "rescanning"


class ConnectionSupervisor:
    """Keeps one heart rate device connected and relays its samples.

    Runs until cancelled. At most one session is open at any time.
    """

    def __init__(
        self,
        config: Config,
        emitter: OscEmitter,
        on_status: Callable[[str], None] = show_status,
    ):
        self.config = config
        self.emitter = emitter
        self.on_status = on_status
        self.state = SupervisorState.SCANNING
        self._session: HeartRateSession | None = None

    def _set_state(self, state: SupervisorState) -> None:
        if state is not self.state:
            logger.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self) -> None:
        """Scan, serve the selected device, and rescan when it disappears."""
        while True:
            candidate = await self._scan()
            await self._serve(candidate)

    async def _scan(self) -> Candidate:
        """Retry device selection until a candidate is found."""
        delay = self.config.ble.retry_delay
        while True:
            self._set_state(SupervisorState.SCANNING)
            try:
                return await select_device(self.config)
            except (AdapterUnavailableError, DeviceNotFoundError) as e:
                logger.warning("%s", e)
                logger.warning(
                    "Check that Bluetooth is on, the device is nearby and not connected to another receiver."
                )
                logger.info("Retrying scan in %.0fs...", delay)
                await asyncio.sleep(delay)

    def _on_disconnected(self, client: BleakClient) -> None:
        logger.info("Device %s disconnected", client.address)
        if self._session is not None:
            self._session.end_stream()

    async def _serve(self, candidate: Candidate) -> None:
        """Connect to one device repeatedly until the adapter loses it."""
        client = BleakClient(candidate.device, disconnected_callback=self._on_disconnected)
        delay = self.config.ble.retry_delay

        try:
            while True:
                await self._run_session(client)

                logger.info("Connection lost. Reconnecting in %.0fs...", delay)
                await asyncio.sleep(delay)

                if not await is_device_known(client, candidate.address, self.config.ble.presence_timeout):
                    logger.info("Device %s is gone, rescanning...", candidate.address)
                    self._set_state(SupervisorState.RESCANNING)
                    return
                self._set_state(SupervisorState.RECONNECTING)
        finally:
            # Also runs on cancellation at shutdown
            if client.is_connected:
                await self._disconnect(client)

    async def _run_session(self, client: BleakClient) -> None:
        """Open a session on ``client`` and stream until it ends."""
        self._set_state(SupervisorState.CONNECTING)
        session = HeartRateSession(client, self.config.ble.char_uuid)
        self._session = session
        try:
            try:
                await session.open()
            except Exception as e:
                logger.error("Connection failed: %s", e)
                self._set_state(SupervisorState.CONNECT_FAILED)
                return

            logger.info("Sending OSC to %s:%d", self.emitter.host, self.emitter.port)
            self._set_state(SupervisorState.STREAMING)
            end_state = await self._stream(session)
            self._set_state(end_state)

            if end_state is SupervisorState.TIMED_OUT and client.is_connected:
                await self._disconnect(client)
        finally:
            await session.close()
            self._session = None

    async def _disconnect(self, client: BleakClient) -> None:
        try:
            await client.disconnect()
        except Exception as e:
            logger.warning("Disconnect failed: %s", e)

    async def _stream(self, session: HeartRateSession) -> SupervisorState:
        """Relay notifications until the stream ends or goes idle."""
        timeout = self.config.ble.idle_timeout
        while True:
            try:
                notification = await session.next_notification(timeout)
            except TimeoutError:
                logger.warning("No heart rate data for %.0fs, treating connection as lost", timeout)
                return SupervisorState.TIMED_OUT

            if notification is None:
                if not session.connected:
                    logger.info("Link lost while streaming")
                    return SupervisorState.DISCONNECTED
                logger.info("Notification stream closed")
                return SupervisorState.STREAM_CLOSED

            self.handle_notification(notification, session.char_uuid)

    def handle_notification(self, notification: Notification, char_uuid: str) -> None:
        """Decode one notification and push it to the file and OSC sinks.

        Unrelated or malformed notifications are skipped.
        """
        if notification.char_uuid != char_uuid or len(notification.value) < MIN_PAYLOAD_LEN:
            logger.debug("Ignoring notification from %s (%d bytes)", notification.char_uuid, len(notification.value))
            return

        try:
            measurement = parse_heart_rate(notification.value)
        except ValueError as e:
            logger.debug("Malformed HR packet: %s", e)
            return

        heart_rate = clamp_heart_rate(measurement.bpm)
        if measurement.sensor_contact is False:
            logger.debug("Sensor reports no skin contact")

        try:
            write_heart_rate_file(self.config.relay.heart_rate_file, heart_rate)
        except OSError as e:
            logger.error("Failed to write heart rate file: %s", e)

        try:
            status = self.emitter.emit(heart_rate)
        except OscSendError as e:
            logger.error("%s", e)
            return
        self.on_status(status)
