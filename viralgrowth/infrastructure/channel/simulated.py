"""Simulated adapter for the ConnectionProvider port."""

import asyncio
import random
import re

from viralgrowth.domain.channel.model.value import ChannelInfo
from viralgrowth.domain.channel.port.connection_provider import ConnectionProvider
from viralgrowth.domain.shared.error import ChannelConnectionError

_EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


class SimulatedConnectionProvider(ConnectionProvider):
    """Pretends to sign in after a fixed latency and derives a channel from the e-mail.

    No credential is verified; anything e-mail shaped connects.
    """

    def __init__(self, latency: float = 1.5, rng: random.Random | None = None) -> None:
        self._latency = latency
        self._rng = rng or random.Random()

    async def connect(self, credential: str) -> ChannelInfo:
        email = credential.strip()
        if not _EMAIL_PATTERN.fullmatch(email):
            raise ChannelConnectionError(f"Not a valid account e-mail: {credential!r}")

        await asyncio.sleep(self._latency)

        local_part = email.split("@", 1)[0]
        return ChannelInfo(
            name=f"{local_part[:1].upper()}{local_part[1:]} Studio",
            handle=f"@{local_part}",
            subscribers=f"{self._rng.randint(1, 500)}K",
            avatar=_AVATAR_URL.format(seed=local_part),
        )
