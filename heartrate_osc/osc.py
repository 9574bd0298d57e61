"""OSC output of heart rate samples as VRChat avatar parameters."""

import logging

from pythonosc import osc_bundle_builder, osc_message_builder
from pythonosc.osc_bundle import OscBundle
from pythonosc.udp_client import UDPClient

from .errors import OscSendError

logger = logging.getLogger(__name__)

PARAM_PREFIX = "/avatar/parameters/"
HR_CONNECTED = PARAM_PREFIX + "hr_connected"
HR_ACTIVE = PARAM_PREFIX + "isHRActive"
HR_PERCENT = PARAM_PREFIX + "hr_percent"
HR_NORMALISED = PARAM_PREFIX + "VRCOSC/Heartrate/Normalised"
HR_INT = PARAM_PREFIX + "HR"

# Ceiling shared by the VRCOSC normalised value and the integer parameter
INT_CEILING = 240

ARG_BOOL = {
    True: osc_message_builder.OscMessageBuilder.ARG_TYPE_TRUE,
    False: osc_message_builder.OscMessageBuilder.ARG_TYPE_FALSE,
}

AvatarParameter = tuple[str, bool | int | float]


def avatar_parameters(heart_rate: int, percent_ceiling: float = 200.0) -> list[AvatarParameter]:
    """Map one heart rate sample to the (address, value) pairs sent per bundle."""
    is_active = heart_rate > 0
    percent = min(heart_rate, percent_ceiling) / percent_ceiling
    normalised = min(heart_rate, INT_CEILING) / INT_CEILING
    return [
        (HR_CONNECTED, is_active),
        (HR_ACTIVE, is_active),
        (HR_PERCENT, float(percent)),
        (HR_NORMALISED, float(normalised)),
        (HR_INT, min(heart_rate, INT_CEILING)),
    ]


def _build_message(address: str, value: bool | int | float):
    builder = osc_message_builder.OscMessageBuilder(address=address)
    if isinstance(value, bool):
        builder.add_arg(value, ARG_BOOL[value])
    elif isinstance(value, int):
        builder.add_arg(value, osc_message_builder.OscMessageBuilder.ARG_TYPE_INT)
    else:
        builder.add_arg(value, osc_message_builder.OscMessageBuilder.ARG_TYPE_FLOAT)
    return builder.build()


class OscEmitter:
    """Sends avatar parameter bundles over one long-lived UDP client."""

    def __init__(self, host: str = "127.0.0.1", port: int = 9000, percent_ceiling: float = 200.0):
        self.host = host
        self.port = port
        self.percent_ceiling = percent_ceiling
        self._client = UDPClient(host, port)

    def build_bundle(self, heart_rate: int) -> OscBundle:
        """Build the bundle for one sample.

        The timetag is the fixed "immediately" marker, so equal samples
        encode to identical datagrams.

        Raises:
            OscSendError: If a message or the bundle fails to build
        """
        bundle = osc_bundle_builder.OscBundleBuilder(osc_bundle_builder.IMMEDIATELY)
        try:
            for address, value in avatar_parameters(heart_rate, self.percent_ceiling):
                bundle.add_content(_build_message(address, value))
            return bundle.build()
        except (osc_message_builder.BuildError, osc_bundle_builder.BuildError) as e:
            raise OscSendError(f"OSC encode failed: {e}") from e

    def emit(self, heart_rate: int) -> str:
        """Send one sample as a single datagram and return a status string.

        Raises:
            OscSendError: If encoding or sending fails
        """
        bundle = self.build_bundle(heart_rate)
        try:
            self._client.send(bundle)
        except OSError as e:
            raise OscSendError(f"OSC send to {self.host}:{self.port} failed: {e}") from e

        params = dict(avatar_parameters(heart_rate, self.percent_ceiling))
        return (
            f"HR: {heart_rate} -> Active: {params[HR_ACTIVE]}, Int: {params[HR_INT]}, "
            f"Float/{self.percent_ceiling:g}: {params[HR_PERCENT]:.2f}  "
            f"Float/{INT_CEILING}: {params[HR_NORMALISED]:.2f}"
        )
