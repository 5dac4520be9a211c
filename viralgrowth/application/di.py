from dishka import AsyncContainer, Provider, from_context, make_async_container, provide

from viralgrowth.application.autopilot import Autopilot
from viralgrowth.config import Config
from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.upload.port.record_store import RecordStore
from viralgrowth.infrastructure.channel.di import ChannelProvider
from viralgrowth.infrastructure.metadata.di import MetadataProviderProvider
from viralgrowth.infrastructure.schedule.countdown import CountdownClock
from viralgrowth.infrastructure.schedule.di import ScheduleProvider
from viralgrowth.infrastructure.schedule.scheduler import UploadScheduler
from viralgrowth.util.di.scope import Scope


class ApplicationProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_autopilot(
        self,
        gate: ConnectionGate,
        store: RecordStore,
        scheduler: UploadScheduler,
        clock: CountdownClock,
    ) -> Autopilot:
        return Autopilot(gate, store, scheduler, clock)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ApplicationProvider(),
        ChannelProvider(),
        MetadataProviderProvider(),
        ScheduleProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
