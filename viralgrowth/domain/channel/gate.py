"""ConnectionGate - tri-state connection that enables or disables scheduling."""

import asyncio
import logging
from typing import Callable

from viralgrowth.domain.channel.model.value import ChannelInfo, ConnectionState
from viralgrowth.domain.channel.port.connection_provider import ConnectionProvider
from viralgrowth.domain.shared.error import ChannelConnectionError, InvalidStateError

logger = logging.getLogger(__name__)

StateListener = Callable[[ConnectionState, ConnectionState], None]


class ConnectionGate:
    """Finite-state machine guarding the publishing channel.

    Transitions:
        disconnected -> connecting   connect() called
        connecting   -> connected    provider answered
        connecting   -> disconnected provider failed, or abandon()
        connected    -> disconnected disconnect()

    Listeners are called synchronously with (previous, current) after every
    transition, in subscription order.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        self._provider = provider
        self._state = ConnectionState.DISCONNECTED
        self._channel: ChannelInfo | None = None
        self._attempt: asyncio.Task[ChannelInfo] | None = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def channel(self) -> ChannelInfo | None:
        """Channel details while connected, else None."""
        return self._channel

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def connect(self, credential: str) -> ChannelInfo:
        """Open the channel connection.

        Args:
            credential: Credential forwarded to the connection provider.

        Returns:
            The connected channel's info.

        Raises:
            InvalidStateError: If not currently disconnected.
            ChannelConnectionError: If the provider fails or the attempt is abandoned.
        """
        if self._state != ConnectionState.DISCONNECTED:
            raise InvalidStateError(f"Cannot connect while {self._state}")

        self._set_state(ConnectionState.CONNECTING)
        attempt = asyncio.ensure_future(self._provider.connect(credential))
        self._attempt = attempt

        try:
            channel = await attempt
        except asyncio.CancelledError:
            if self._attempt is not attempt:
                # abandon() already reset the state
                raise ChannelConnectionError("Connection attempt abandoned") from None
            self._attempt = None
            self._set_state(ConnectionState.DISCONNECTED)
            raise
        except ChannelConnectionError:
            self._attempt = None
            self._set_state(ConnectionState.DISCONNECTED)
            logger.warning("Channel connection rejected")
            raise
        except Exception as e:
            self._attempt = None
            self._set_state(ConnectionState.DISCONNECTED)
            raise ChannelConnectionError(f"Channel connection failed: {e}") from e

        if self._attempt is not attempt:
            raise ChannelConnectionError("Connection attempt abandoned")

        self._attempt = None
        self._channel = channel
        self._set_state(ConnectionState.CONNECTED)
        logger.info(f"Connected to channel {channel.name} ({channel.handle})")
        return channel

    def abandon(self) -> None:
        """Close a pending connect attempt; no-op unless connecting."""
        if self._state != ConnectionState.CONNECTING:
            return
        attempt, self._attempt = self._attempt, None
        if attempt is not None and not attempt.done():
            attempt.cancel()
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info("Connection attempt abandoned")

    def disconnect(self) -> None:
        """Drop the connection; no-op unless connected."""
        if self._state != ConnectionState.CONNECTED:
            return
        self._channel = None
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info("Disconnected from channel")

    def _set_state(self, state: ConnectionState) -> None:
        previous, self._state = self._state, state
        logger.debug(f"Connection state {previous} -> {state}")
        for listener in self._listeners:
            listener(previous, state)
