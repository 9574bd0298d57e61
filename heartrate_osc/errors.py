"""Error types raised by the relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class AdapterUnavailableError(RelayError):
    """No usable Bluetooth adapter (missing, powered off or busy)."""


class DeviceNotFoundError(RelayError):
    """Scan finished without a candidate for the configured selection mode."""


class CharacteristicNotFoundError(RelayError):
    """Connected device does not expose the heart rate characteristic."""


class SubscriptionFailedError(RelayError):
    """Subscribing to heart rate notifications failed."""


class SubscriptionUnsupportedError(SubscriptionFailedError):
    """Heart rate characteristic does not support notifications."""


class OscSendError(RelayError):
    """OSC bundle could not be built or sent."""
