"""Configuration file loading and defaults."""

import logging
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_NAMES = (
    "Xiaomi Smart Band 9",
    "Xiaomi Smart Band 10",
    "HUAWEI",
    "HONOR",
)


class SelectionMode(str, Enum):
    """Which scan candidate the device selector returns."""

    BY_NAME = "by_name"
    STRONGEST_SIGNAL = "strongest_signal"


@dataclass(frozen=True)
class OscConfig:
    host: str = "127.0.0.1"
    port: int = 9000
    percent_ceiling: float = 200.0

    def __post_init__(self) -> None:
        if self.percent_ceiling <= 0:
            raise ValueError(f"percent_ceiling must be positive, got {self.percent_ceiling}")


@dataclass(frozen=True)
class BLEConfig:
    service_uuid: str = "180D"
    char_uuid: str = "2A37"
    scan_duration: float = 5.0
    retry_delay: float = 5.0
    idle_timeout: float = 15.0
    presence_timeout: float = 5.0


@dataclass(frozen=True)
class DeviceConfig:
    names: tuple[str, ...] = DEFAULT_DEVICE_NAMES
    selection: SelectionMode = SelectionMode.STRONGEST_SIGNAL


@dataclass(frozen=True)
class RelayConfig:
    heart_rate_file: str = "HeartRate.txt"
    log_level: str = "INFO"


@dataclass(frozen=True)
class Config:
    osc: OscConfig = field(default_factory=OscConfig)
    ble: BLEConfig = field(default_factory=BLEConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)


def load_config() -> Config:
    """Load config from file, with defaults for missing values."""
    paths = [
        Path("./config.toml"),
        Path.home() / ".config" / "heartrate-osc" / "config.toml",
    ]

    for path in paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
                return _parse_config(data)
            except tomllib.TOMLDecodeError as e:
                logger.warning("Failed to parse config '%s': %s. Using defaults.", path, e)
                return Config()

    return Config()


def _parse_device(data: dict) -> DeviceConfig:
    values = dict(data)
    if "names" in values:
        values["names"] = tuple(values["names"])
    if "selection" in values:
        values["selection"] = SelectionMode(values["selection"])
    return DeviceConfig(**values)


def _parse_config(data: dict) -> Config:
    """Parse TOML dict into Config dataclass.

    Uses dataclass defaults for missing values.
    """
    return Config(
        osc=OscConfig(**data.get("osc", {})),
        ble=BLEConfig(**data.get("ble", {})),
        device=_parse_device(data.get("device", {})),
        relay=RelayConfig(**data.get("relay", {})),
    )
