from enum import StrEnum

from viralgrowth.domain.shared.model.value import ValueObject


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChannelInfo(ValueObject):
    """Public details of the connected publishing channel."""

    name: str
    handle: str
    subscribers: str  # Display string, e.g. "128K"
    avatar: str
