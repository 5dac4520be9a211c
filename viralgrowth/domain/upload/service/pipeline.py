"""PipelineEngine - advances one upload record through the stage sequence."""

import asyncio
import logging
import random
from dataclasses import field
from typing import Awaitable, Callable

import logfire

from viralgrowth.domain.shared.error import NotFoundError
from viralgrowth.domain.shared.service import Service
from viralgrowth.domain.upload.model.record import RecordId, UploadRecord
from viralgrowth.domain.upload.model.value import (
    POST_METADATA_STAGES,
    Metrics,
    ProcessingStage,
    UploadStatus,
)
from viralgrowth.domain.upload.port.metadata_provider import MetadataProvider
from viralgrowth.domain.upload.port.record_store import RecordStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Bounds for the synthetic engagement numbers attached on publish
CTR_RANGE = (4.0, 12.0)
RETENTION_RANGE = (70.0, 90.0)


class PipelineEngine(Service):
    """Runs the fixed stage sequence for one record.

    A run makes exactly one metadata-provider call, at the very start, and
    ends in exactly one terminal status: `uploaded` or `failed`. Releasing
    the single-flight guard is the caller's job.

    Usage:
        engine = PipelineEngine(store=store, provider=provider, stage_delay=2.0)
        status = await engine.run(record.id, niche="AI Technology", tone="energetic")
    """

    store: RecordStore
    provider: MetadataProvider
    stage_delay: float = 2.0
    rng: random.Random = field(default_factory=random.Random)
    sleep: Sleep = asyncio.sleep

    async def run(self, record_id: RecordId, niche: str, tone: str) -> UploadStatus:
        """Drive a pending record to its terminal status.

        Provider failures end the run as FAILED at `trend_scouting`. Any
        unexpected error later in the run also ends it as FAILED so the store
        never keeps a stale active record. Cancellation marks the record
        failed and propagates.

        Args:
            record_id: Id of a record already inserted in the store as pending.
            niche: Content niche passed to the metadata provider.
            tone: Content tone passed to the metadata provider.

        Returns:
            The terminal status reached (UPLOADED or FAILED).

        Raises:
            NotFoundError: If the record is not in the store.
        """
        record = self.store.get(record_id)
        if record is None:
            raise NotFoundError(f"Record {record_id} not found")

        with logfire.span("PipelineRun", record_id=str(record_id), format=str(record.format)):
            try:
                try:
                    data = await self.provider.fetch_trend_and_metadata(
                        niche, tone, record.format
                    )
                except Exception as e:
                    logger.warning(f"Metadata fetch failed for record {record_id}: {e}")
                    return self._fail(record_id, reason=str(e))

                self.store.update_by_id(record_id, lambda r: r.begin_processing(data))
                logger.info(
                    f"Record {record_id} processing: {data.title!r} (trend={data.trend_topic})"
                )

                await self._walk_stages(record_id)

                metrics = self._synthesize_metrics()
                self.store.update_by_id(record_id, lambda r: r.mark_uploaded(metrics))

            except asyncio.CancelledError:
                self._fail(record_id, reason="run cancelled")
                raise
            except Exception as e:
                logger.exception(f"Pipeline run for record {record_id} crashed: {e}")
                return self._fail(record_id, reason=str(e))

            logger.info(
                f"Record {record_id} uploaded (ctr={metrics.ctr:.1f}%, "
                f"retention={metrics.retention:.0f}%)"
            )
            logfire.info("Upload published", record_id=str(record_id))
            return UploadStatus.UPLOADED

    async def _walk_stages(self, record_id: RecordId) -> None:
        for stage in POST_METADATA_STAGES:
            self.store.update_by_id(record_id, _advance(stage))
            logger.debug(f"Record {record_id} entered stage {stage}")
            await self.sleep(self.stage_delay)

    def _fail(self, record_id: RecordId, reason: str) -> UploadStatus:
        current = self.store.get(record_id)
        if current is not None and current.is_active:
            self.store.update_by_id(record_id, UploadRecord.mark_failed)
        logfire.info("Upload failed", record_id=str(record_id), reason=reason)
        return UploadStatus.FAILED

    def _synthesize_metrics(self) -> Metrics:
        return Metrics(
            ctr=round(self.rng.uniform(*CTR_RANGE), 1),
            retention=round(self.rng.uniform(*RETENTION_RANGE)),
        )


def _advance(stage: ProcessingStage) -> Callable[[UploadRecord], None]:
    def mutation(record: UploadRecord) -> None:
        record.advance_to(stage)

    return mutation
