"""BLE heart rate device selection and notification sessions."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError
from bleak.uuids import normalize_uuid_str

from .config import Config, SelectionMode
from .errors import (
    AdapterUnavailableError,
    CharacteristicNotFoundError,
    DeviceNotFoundError,
    SubscriptionFailedError,
    SubscriptionUnsupportedError,
)

logger = logging.getLogger(__name__)

HR_SERVICE_UUID = normalize_uuid_str("180D")
HR_CHAR_UUID = normalize_uuid_str("2A37")

UNKNOWN_NAME = "Unknown Device"
DISPLAY_NAME_LEN = 15


@dataclass(frozen=True)
class Candidate:
    """A peripheral seen during a scan.

    ``device`` is the handle the supervisor keeps after selection. The other
    fields are what the advertisement said at scan time and may be stale by
    the time a connection is attempted.
    """

    device: BLEDevice
    name: str | None
    rssi: int | None
    service_uuids: tuple[str, ...] = ()

    @property
    def address(self) -> str:
        return self.device.address

    @classmethod
    def observe(cls, device: BLEDevice, adv: AdvertisementData) -> "Candidate":
        return cls(
            device=device,
            name=adv.local_name or device.name,
            rssi=adv.rssi,
            service_uuids=tuple(adv.service_uuids or ()),
        )


@dataclass(frozen=True)
class Notification:
    """One characteristic value pushed by the peripheral."""

    char_uuid: str
    value: bytes


def display_name(name: str | None) -> str:
    """Name for log output: ASCII alphanumerics only, truncated."""
    if not name:
        return UNKNOWN_NAME
    filtered = "".join(c for c in name if c.isascii() and c.isalnum())
    return filtered[:DISPLAY_NAME_LEN]


def _matches_name(name: str | None, names: Iterable[str]) -> bool:
    return bool(name) and any(target in name for target in names)


def pick_candidate(
    peripherals: Iterable[tuple[BLEDevice, AdvertisementData | None]],
    names: Iterable[str],
    mode: SelectionMode,
) -> Candidate | None:
    """Choose one peripheral from a scan result.

    Tracks the first name match and the strongest RSSI in one pass. Only the
    candidate for ``mode`` is returned; the other one is never a fallback.
    Equal RSSI keeps the earlier peripheral.
    """
    names = tuple(names)
    by_name: Candidate | None = None
    strongest: Candidate | None = None

    for device, adv in peripherals:
        if adv is None:
            continue
        candidate = Candidate.observe(device, adv)
        rssi_str = f"{candidate.rssi} dBm" if candidate.rssi is not None else "N/A"
        logger.info("  %-15s | %s | %s", display_name(candidate.name), candidate.address, rssi_str)

        if by_name is None and _matches_name(candidate.name, names):
            by_name = candidate

        if candidate.rssi is not None and (strongest is None or candidate.rssi > strongest.rssi):
            strongest = candidate

    if mode is SelectionMode.BY_NAME:
        return by_name
    return strongest


async def select_device(config: Config) -> Candidate:
    """Scan for heart rate peripherals and select one.

    Args:
        config: Relay configuration (scan duration, names, selection mode)

    Returns:
        The selected Candidate

    Raises:
        AdapterUnavailableError: If the adapter fails while starting or stopping the scan
        DeviceNotFoundError: If no peripheral fits the selection mode
    """
    service_uuid = normalize_uuid_str(config.ble.service_uuid)
    scanner = BleakScanner(service_uuids=[service_uuid])

    logger.info("Scanning for heart rate devices (%.0fs)...", config.ble.scan_duration)
    try:
        await scanner.start()
    except (BleakError, OSError) as e:
        raise AdapterUnavailableError(f"Bluetooth adapter unavailable: {e}") from e

    try:
        try:
            await asyncio.sleep(config.ble.scan_duration)
            discovered = list(scanner.discovered_devices_and_advertisement_data.values())
        finally:
            await scanner.stop()
    except (BleakError, OSError) as e:
        raise AdapterUnavailableError(f"Bluetooth adapter error during scan: {e}") from e

    if not discovered:
        logger.info("No devices found. Is the device on and advertising?")
        raise DeviceNotFoundError("No heart rate devices discovered")

    mode = config.device.selection
    logger.info("Nearby devices:")
    chosen = pick_candidate(discovered, config.device.names, mode)

    if mode is SelectionMode.BY_NAME:
        logger.info("Selection mode: by name, keywords: %s", list(config.device.names))
    else:
        logger.info("Selection mode: strongest signal")

    if chosen is None:
        raise DeviceNotFoundError("No device matched the selection criteria")

    logger.info("Selected device: %s (%s)", display_name(chosen.name), chosen.address)
    return chosen


async def is_device_known(client: BleakClient, address: str, timeout: float) -> bool:
    """Check whether the device can still be reached.

    A connected client counts as known. Otherwise the adapter is asked to find
    the address again. Adapter errors propagate.
    """
    if client.is_connected:
        return True
    device = await BleakScanner.find_device_by_address(address, timeout=timeout)
    return device is not None


class HeartRateSession:
    """One subscription to the heart rate characteristic of a connected client.

    Notifications are queued as they arrive. A ``None`` in the queue marks the
    end of the stream (device disconnected).
    """

    def __init__(self, client: BleakClient, char_uuid: str = HR_CHAR_UUID):
        self._client = client
        self.char_uuid = normalize_uuid_str(char_uuid)
        self._queue: asyncio.Queue[Notification | None] = asyncio.Queue()
        self._subscribed = False

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    @property
    def connected(self) -> bool:
        return self._client.is_connected

    def _on_notification(self, sender: BleakGATTCharacteristic, data: bytearray) -> None:
        self._queue.put_nowait(Notification(char_uuid=sender.uuid, value=bytes(data)))

    def end_stream(self) -> None:
        """Signal that no more notifications will arrive."""
        self._queue.put_nowait(None)

    async def open(self) -> None:
        """Connect if needed and subscribe to heart rate notifications.

        Raises:
            CharacteristicNotFoundError: If the device lacks the characteristic
            SubscriptionUnsupportedError: If the characteristic cannot notify
            SubscriptionFailedError: If the subscribe call fails
            BleakError: On transport failures while connecting
        """
        if self._client.is_connected:
            # Repeated connect calls are unsafe on some backends
            logger.debug("Already connected to %s, skipping connect", self._client.address)
        else:
            logger.info("Connecting to %s...", self._client.address)
            await self._client.connect()
            logger.info("Connected, discovering heart rate characteristic...")

        char = self._client.services.get_characteristic(self.char_uuid)
        if char is None:
            raise CharacteristicNotFoundError(f"Characteristic {self.char_uuid} not found")
        if "notify" not in char.properties:
            raise SubscriptionUnsupportedError(f"Characteristic {self.char_uuid} does not support notify")

        try:
            await self._client.start_notify(char, self._on_notification)
        except BleakError as e:
            raise SubscriptionFailedError(f"Subscribe failed: {e}") from e
        self._subscribed = True
        logger.info("Subscribed to heart rate notifications, waiting for data...")

    async def next_notification(self, timeout: float) -> Notification | None:
        """Wait for the next notification.

        Returns:
            The notification, or None if the stream has ended

        Raises:
            TimeoutError: If nothing arrives within ``timeout`` seconds
        """
        return await asyncio.wait_for(self._queue.get(), timeout)

    async def close(self) -> None:
        """Drop the subscription if the link is still up."""
        if not self._subscribed:
            return
        self._subscribed = False
        if not self._client.is_connected:
            return
        try:
            await self._client.stop_notify(self.char_uuid)
        except BleakError as e:
            logger.debug("stop_notify failed: %s", e)
