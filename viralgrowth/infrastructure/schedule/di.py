"""DI provider for the upload side: store, engine, clock, scheduler."""

from dishka import Provider, provide

from viralgrowth.config import Config
from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.upload.model.value import RunSettings
from viralgrowth.domain.upload.port.metadata_provider import MetadataProvider
from viralgrowth.domain.upload.port.record_store import RecordStore
from viralgrowth.domain.upload.service.pipeline import PipelineEngine
from viralgrowth.infrastructure.memory.record_store import InMemoryRecordStore
from viralgrowth.infrastructure.schedule.countdown import CountdownClock
from viralgrowth.infrastructure.schedule.scheduler import UploadScheduler
from viralgrowth.util.di.scope import Scope


class ScheduleProvider(Provider):
    """Provides the scheduling components. All APP-scoped singletons."""

    @provide(scope=Scope.APP, provides=RecordStore)
    def get_record_store(self, config: Config) -> InMemoryRecordStore:
        return InMemoryRecordStore(max_records=config.pipeline.max_records)

    @provide(scope=Scope.APP)
    def get_pipeline_engine(
        self, store: RecordStore, provider: MetadataProvider, config: Config
    ) -> PipelineEngine:
        return PipelineEngine(
            store=store,
            provider=provider,
            stage_delay=config.pipeline.stage_delay,
        )

    @provide(scope=Scope.APP)
    def get_countdown_clock(self, config: Config) -> CountdownClock:
        return CountdownClock(
            period=config.scheduler.period,
            tick_interval=config.scheduler.tick_interval,
        )

    @provide(scope=Scope.APP)
    def get_scheduler(
        self,
        gate: ConnectionGate,
        store: RecordStore,
        engine: PipelineEngine,
        clock: CountdownClock,
        config: Config,
    ) -> UploadScheduler:
        settings = RunSettings(
            niche=config.pipeline.niche,
            tone=config.pipeline.tone,
            format=config.pipeline.format,
        )
        return UploadScheduler(gate, store, engine, clock, settings=settings)
