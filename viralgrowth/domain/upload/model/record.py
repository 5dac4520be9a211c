from datetime import UTC, datetime
from typing import NewType
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self

from viralgrowth.domain.shared.error import InvalidStateError
from viralgrowth.domain.upload.model.value import (
    STAGE_ORDER,
    GroundingSource,
    GrowthData,
    Metrics,
    ProcessingStage,
    UploadStatus,
    VideoFormat,
)

RecordId = NewType("RecordId", UUID)

PLACEHOLDER_TITLE = "Detecting High-Velocity Signals..."
PLACEHOLDER_DESCRIPTION = (
    "ViralGrowth Engine is currently scanning global trends for peak virality..."
)

_PENDING_THUMBNAIL = (
    "https://images.unsplash.com/photo-1618005182384-a83a8bd57fbe"
    "?w=800&auto=format&fit=crop&q=60&seed={seed}"
)
_PUBLISHED_THUMBNAIL = (
    "https://images.unsplash.com/photo-1620641788421-7a1c342ea42e"
    "?w=800&auto=format&fit=crop&q=60&seed={seed}"
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class UploadRecord(BaseModel):
    """One content item moving through the upload pipeline.

    Status and stage only move forward; the transition methods below are the
    only sanctioned way to change them and raise InvalidStateError otherwise.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: RecordId = Field(frozen=True)
    timestamp: datetime = Field(default_factory=_utc_now, frozen=True)
    format: VideoFormat = Field(frozen=True)
    title: str = PLACEHOLDER_TITLE
    description: str = PLACEHOLDER_DESCRIPTION
    status: UploadStatus = UploadStatus.PENDING
    stage: ProcessingStage = ProcessingStage.TREND_SCOUTING
    thumbnail: str
    trend_source: str | None = None
    sources: list[GroundingSource] | None = None
    metrics: Metrics | None = None

    @classmethod
    def create(cls, format: VideoFormat) -> Self:
        """Build a fresh pending record with placeholder content."""
        record_id = RecordId(uuid4())
        return cls(
            id=record_id,
            format=format,
            thumbnail=_PENDING_THUMBNAIL.format(seed=record_id.hex[:8]),
        )

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def progress(self) -> float:
        """Fraction of the stage sequence completed, 1.0 once uploaded."""
        if self.status == UploadStatus.UPLOADED:
            return 1.0
        return self.stage.position / len(STAGE_ORDER)

    def begin_processing(self, data: GrowthData) -> None:
        """Apply the provider answer and move pending -> processing."""
        self._require_status(UploadStatus.PENDING, action="begin processing")
        self.title = data.title
        self.description = data.description
        self.trend_source = data.trend_topic
        self.sources = list(data.sources)
        self.status = UploadStatus.PROCESSING

    def advance_to(self, stage: ProcessingStage) -> None:
        """Move to the next stage; skipping or revisiting a stage is refused."""
        self._require_status(UploadStatus.PROCESSING, action=f"advance to {stage}")
        if stage.position != self.stage.position + 1:
            raise InvalidStateError(
                f"Record {self.id} cannot move from {self.stage} to {stage}"
            )
        self.stage = stage

    def mark_uploaded(self, metrics: Metrics) -> None:
        self._require_status(UploadStatus.PROCESSING, action="mark uploaded")
        if self.stage != ProcessingStage.PUBLISHING:
            raise InvalidStateError(
                f"Record {self.id} cannot be uploaded from stage {self.stage}"
            )
        self.metrics = metrics
        self.thumbnail = _PUBLISHED_THUMBNAIL.format(seed=self.id.hex[:8])
        self.status = UploadStatus.UPLOADED

    def mark_failed(self) -> None:
        if not self.status.is_active:
            raise InvalidStateError(f"Record {self.id} is already {self.status}")
        self.status = UploadStatus.FAILED

    def _require_status(self, expected: UploadStatus, *, action: str) -> None:
        if self.status != expected:
            raise InvalidStateError(
                f"Cannot {action}: record {self.id} is {self.status}, expected {expected}"
            )
