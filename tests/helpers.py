"""Shared test helper functions for heartrate_osc tests."""

from __future__ import annotations

from unittest.mock import MagicMock


def make_hr_packet(
    bpm: int,
    *,
    is_16bit: bool = False,
    sensor_contact: bool | None = None,
    rr_intervals: list[int] | None = None,
) -> bytes:
    """Build a BLE HR measurement packet.

    Args:
        bpm: Heart rate in BPM
        is_16bit: If True, use 16-bit BPM format
        sensor_contact: None=not supported, True=detected, False=not detected
        rr_intervals: RR intervals in 1/1024 second units

    Returns:
        Raw bytes for HR measurement characteristic
    """
    flags = 0

    if is_16bit:
        flags |= 0b1

    if sensor_contact is not None:
        flags |= 0b100
        if sensor_contact:
            flags |= 0b10

    if rr_intervals:
        flags |= 0b10000

    data = bytearray([flags])

    if is_16bit:
        data.extend(bpm.to_bytes(2, "little"))
    else:
        data.append(bpm)

    for rr in rr_intervals or []:
        data.extend(rr.to_bytes(2, "little"))

    return bytes(data)


def make_peripheral(address: str, name: str | None, rssi: int | None) -> tuple[MagicMock, MagicMock]:
    """Build a (BLEDevice, AdvertisementData) pair as returned by a scan."""
    device = MagicMock()
    device.address = address
    device.name = name

    adv = MagicMock()
    adv.local_name = name
    adv.rssi = rssi
    adv.service_uuids = ["0000180d-0000-1000-8000-00805f9b34fb"]
    return device, adv
