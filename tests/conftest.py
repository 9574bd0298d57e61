"""Shared test fixtures for heartrate_osc tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from heartrate_osc.ble import HR_CHAR_UUID
from heartrate_osc.config import BLEConfig, Config, RelayConfig
from tests.helpers import make_hr_packet


@pytest.fixture
def hr_packet_simple() -> bytes:
    """Simple 8-bit BPM packet (72 bpm)."""
    return make_hr_packet(72)


@pytest.fixture
def hr_packet_16bit() -> bytes:
    """16-bit BPM packet (180 bpm)."""
    return make_hr_packet(180, is_16bit=True)


@pytest.fixture
def fast_config(tmp_path) -> Config:
    """Config with short timings and a temporary output file."""
    return Config(
        ble=BLEConfig(scan_duration=0.01, retry_delay=0.01, idle_timeout=0.05, presence_timeout=0.01),
        relay=RelayConfig(heart_rate_file=str(tmp_path / "HeartRate.txt")),
    )


@pytest.fixture
def hr_characteristic():
    """Mock heart rate characteristic with notify support."""
    char = MagicMock()
    char.uuid = HR_CHAR_UUID
    char.properties = ["notify"]
    return char


@pytest.fixture
def mock_bleak_client(hr_characteristic):
    """Create a mock BleakClient exposing the HR characteristic."""
    client = AsyncMock()
    client.address = "AA:BB:CC:DD:EE:FF"
    client.is_connected = False
    client.connect = AsyncMock(return_value=True)
    client.disconnect = AsyncMock()
    client.start_notify = AsyncMock()
    client.stop_notify = AsyncMock()

    mock_services = MagicMock()
    mock_services.get_characteristic = MagicMock(return_value=hr_characteristic)
    type(client).services = PropertyMock(return_value=mock_services)

    return client


@pytest.fixture
def mock_emitter():
    """OscEmitter stand-in that records emitted samples."""
    emitter = MagicMock()
    emitter.host = "127.0.0.1"
    emitter.port = 9000
    emitter.emit = MagicMock(side_effect=lambda hr: f"HR: {hr}")
    return emitter


@pytest.fixture
def mock_udp_client():
    """Patch the python-osc UDP client used by OscEmitter."""
    with patch("heartrate_osc.osc.UDPClient") as MockClient:
        yield MockClient.return_value


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample config dict as would be parsed from TOML."""
    return {
        "osc": {
            "host": "192.168.1.20",
            "port": 9001,
            "percent_ceiling": 180.0,
        },
        "ble": {
            "scan_duration": 10.0,
            "retry_delay": 2.0,
            "idle_timeout": 30.0,
        },
        "device": {
            "names": ["Polar", "HUAWEI"],
            "selection": "by_name",
        },
        "relay": {
            "heart_rate_file": "out.txt",
            "log_level": "DEBUG",
        },
    }


@pytest.fixture
def partial_config_dict() -> dict:
    """Partial config dict with some values missing."""
    return {
        "osc": {"port": 9100},
        "ble": {"idle_timeout": 3.0},
    }
