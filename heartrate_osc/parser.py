"""Heart rate measurement parser following BLE HR specification."""

from dataclasses import dataclass

MAX_SAMPLE = 255


@dataclass
class HeartRateMeasurement:
    """Parsed heart rate measurement data."""

    bpm: int
    sensor_contact: bool | None  # None if not supported


def parse_heart_rate(data: bytes) -> HeartRateMeasurement:
    """Parse BLE heart rate measurement characteristic data.

    Only the fields needed for relaying are decoded. Optional trailing fields
    (energy expended, RR intervals) are ignored.

    Args:
        data: Raw bytes from HR measurement characteristic (0x2A37)

    Returns:
        HeartRateMeasurement with parsed values

    Raises:
        ValueError: If data is empty or too short for the declared BPM width
    """
    if not data:
        raise ValueError("Empty HR data received")

    flags = data[0]

    # Bit 0: HR format (0 = uint8, 1 = uint16)
    is_16_bit = flags & 0b1 == 1
    # Bit 2: Sensor contact feature supported
    has_sensor_contact = flags & 0b100 == 0b100

    min_len = 1 + (2 if is_16_bit else 1)
    if len(data) < min_len:
        raise ValueError(f"HR data too short: {len(data)} bytes, need {min_len}")

    if is_16_bit:
        bpm = int.from_bytes(data[1:3], "little")
    else:
        bpm = data[1]

    sensor_contact = None
    if has_sensor_contact:
        sensor_contact = flags & 0b10 == 0b10

    return HeartRateMeasurement(bpm=bpm, sensor_contact=sensor_contact)


def decode_heart_rate(data: bytes) -> int:
    """Return the BPM value of a measurement packet."""
    return parse_heart_rate(data).bpm


def clamp_heart_rate(bpm: int) -> int:
    """Clamp a decoded BPM to the single-byte range used by the sinks."""
    return min(bpm, MAX_SAMPLE)
