"""DI provider for the channel side: connection provider and gate."""

from dishka import Provider, provide

from viralgrowth.config import Config
from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.channel.port.connection_provider import ConnectionProvider
from viralgrowth.infrastructure.channel.simulated import SimulatedConnectionProvider
from viralgrowth.util.di.scope import Scope


class ChannelProvider(Provider):
    @provide(scope=Scope.APP, provides=ConnectionProvider)
    def get_connection_provider(self, config: Config) -> SimulatedConnectionProvider:
        return SimulatedConnectionProvider(latency=config.channel.connect_latency)

    @provide(scope=Scope.APP)
    def get_gate(self, provider: ConnectionProvider) -> ConnectionGate:
        return ConnectionGate(provider)
