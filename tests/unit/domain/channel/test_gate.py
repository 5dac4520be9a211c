"""Unit tests for ConnectionGate transitions."""

import asyncio

import pytest

from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.channel.model.value import ChannelInfo, ConnectionState
from viralgrowth.domain.shared.error import ChannelConnectionError, InvalidStateError


class SlowConnectionProvider:
    """Provider that answers only once `release` is set."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.cancelled = False

    async def connect(self, credential: str) -> ChannelInfo:
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return ChannelInfo(name="Slow", handle="@slow", subscribers="1K", avatar="a")


class BrokenConnectionProvider:
    async def connect(self, credential: str) -> ChannelInfo:
        raise OSError("network unreachable")


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_success(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        assert gate.state == ConnectionState.DISCONNECTED
        assert gate.channel is None

        channel = await gate.connect("creator@example.com")

        assert gate.state == ConnectionState.CONNECTED
        assert gate.is_connected
        assert gate.channel == channel
        assert channel.handle == "@creator"
        assert connection_provider.credentials == ["creator@example.com"]

    @pytest.mark.asyncio
    async def test_state_is_connecting_while_provider_pending(self):
        provider = SlowConnectionProvider()
        gate = ConnectionGate(provider)

        task = asyncio.create_task(gate.connect("creator@example.com"))
        await asyncio.sleep(0)
        assert gate.state == ConnectionState.CONNECTING
        assert not gate.is_connected

        provider.release.set()
        await task
        assert gate.state == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_rejected_credential_returns_to_disconnected(self, connection_provider):
        connection_provider.fail = True
        gate = ConnectionGate(connection_provider)

        with pytest.raises(ChannelConnectionError):
            await gate.connect("creator@example.com")
        assert gate.state == ConnectionState.DISCONNECTED
        assert gate.channel is None

    @pytest.mark.asyncio
    async def test_unexpected_provider_error_is_wrapped(self):
        gate = ConnectionGate(BrokenConnectionProvider())

        with pytest.raises(ChannelConnectionError, match="network unreachable"):
            await gate.connect("creator@example.com")
        assert gate.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_requires_disconnected(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        await gate.connect("creator@example.com")

        with pytest.raises(InvalidStateError):
            await gate.connect("creator@example.com")
        assert gate.state == ConnectionState.CONNECTED


class TestAbandon:
    @pytest.mark.asyncio
    async def test_abandon_cancels_pending_attempt(self):
        provider = SlowConnectionProvider()
        gate = ConnectionGate(provider)

        task = asyncio.create_task(gate.connect("creator@example.com"))
        await asyncio.sleep(0)
        gate.abandon()

        assert gate.state == ConnectionState.DISCONNECTED
        with pytest.raises(ChannelConnectionError, match="abandoned"):
            await task
        assert provider.cancelled
        assert gate.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_abandon_is_noop_unless_connecting(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        gate.abandon()
        assert gate.state == ConnectionState.DISCONNECTED

        await gate.connect("creator@example.com")
        gate.abandon()
        assert gate.state == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_cancelling_the_caller_resets_state(self):
        gate = ConnectionGate(SlowConnectionProvider())

        task = asyncio.create_task(gate.connect("creator@example.com"))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert gate.state == ConnectionState.DISCONNECTED


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect_clears_channel(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        await gate.connect("creator@example.com")

        gate.disconnect()

        assert gate.state == ConnectionState.DISCONNECTED
        assert gate.channel is None

    def test_disconnect_is_noop_when_disconnected(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        gate.disconnect()
        assert gate.state == ConnectionState.DISCONNECTED


class TestListeners:
    @pytest.mark.asyncio
    async def test_listeners_see_every_transition_in_order(self, connection_provider):
        gate = ConnectionGate(connection_provider)
        seen: list[tuple[ConnectionState, ConnectionState]] = []
        gate.subscribe(lambda prev, cur: seen.append((prev, cur)))

        await gate.connect("creator@example.com")
        gate.disconnect()

        assert seen == [
            (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING),
            (ConnectionState.CONNECTING, ConnectionState.CONNECTED),
            (ConnectionState.CONNECTED, ConnectionState.DISCONNECTED),
        ]

    @pytest.mark.asyncio
    async def test_failed_attempt_notifies_return_to_disconnected(self):
        gate = ConnectionGate(BrokenConnectionProvider())
        seen: list[ConnectionState] = []
        gate.subscribe(lambda prev, cur: seen.append(cur))

        with pytest.raises(ChannelConnectionError):
            await gate.connect("creator@example.com")

        assert seen == [ConnectionState.CONNECTING, ConnectionState.DISCONNECTED]
