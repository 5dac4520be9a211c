"""ConnectionProvider port: opens a session with the publishing channel."""

from typing import Protocol

from viralgrowth.domain.channel.model.value import ChannelInfo


class ConnectionProvider(Protocol):
    async def connect(self, credential: str) -> ChannelInfo:
        """Connect using `credential` (an e-mail address for the simulated channel).

        Raises:
            ChannelConnectionError: If the channel rejects the credential.
        """
        ...
