"""BLE heart rate to VRChat OSC relay."""

__version__ = "0.1.0"

from .ble import Candidate, HeartRateSession, pick_candidate, select_device
from .config import Config, SelectionMode, load_config
from .errors import (
    AdapterUnavailableError,
    CharacteristicNotFoundError,
    DeviceNotFoundError,
    OscSendError,
    RelayError,
    SubscriptionFailedError,
    SubscriptionUnsupportedError,
)
from .log import setup_logging
from .osc import OscEmitter, avatar_parameters
from .parser import HeartRateMeasurement, clamp_heart_rate, decode_heart_rate, parse_heart_rate
from .supervisor import ConnectionSupervisor, SupervisorState

__all__ = [
    "parse_heart_rate",
    "decode_heart_rate",
    "clamp_heart_rate",
    "HeartRateMeasurement",
    "Candidate",
    "HeartRateSession",
    "pick_candidate",
    "select_device",
    "ConnectionSupervisor",
    "SupervisorState",
    "OscEmitter",
    "avatar_parameters",
    "Config",
    "SelectionMode",
    "load_config",
    "setup_logging",
    "RelayError",
    "AdapterUnavailableError",
    "DeviceNotFoundError",
    "CharacteristicNotFoundError",
    "SubscriptionFailedError",
    "SubscriptionUnsupportedError",
    "OscSendError",
]
