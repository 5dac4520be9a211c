from enum import StrEnum

from pydantic import Field

from viralgrowth.domain.shared.model.value import ValueObject


class VideoFormat(StrEnum):
    SHORTS = "shorts"
    LONG = "long"


class UploadStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    UPLOADED = "uploaded"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (UploadStatus.PENDING, UploadStatus.PROCESSING)

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.UPLOADED, UploadStatus.FAILED)


class ProcessingStage(StrEnum):
    """Pipeline stages, declared in traversal order."""

    TREND_SCOUTING = "trend_scouting"
    STRATEGY_MAPPING = "strategy_mapping"
    SCRIPT_GENERATION = "script_generation"
    NEURAL_RENDERING = "neural_rendering"
    VOICE_SYNTHESIS = "voice_synthesis"
    QC_VALIDATION = "qc_validation"
    PUBLISHING = "publishing"

    @property
    def position(self) -> int:
        return STAGE_ORDER.index(self)


STAGE_ORDER: tuple[ProcessingStage, ...] = tuple(ProcessingStage)

# Stages walked after the metadata provider has answered
POST_METADATA_STAGES: tuple[ProcessingStage, ...] = STAGE_ORDER[1:]


class GroundingSource(ValueObject):
    """A web source the trend research was grounded on."""

    title: str
    uri: str


class GrowthData(ValueObject):
    """Metadata provider answer for one run."""

    title: str
    description: str
    trend_topic: str
    sources: list[GroundingSource] = Field(default_factory=list)


class RunSettings(ValueObject):
    """Inputs read at trigger time for each new run."""

    niche: str = Field(default="AI Technology", min_length=1)
    tone: str = Field(default="energetic", min_length=1)
    format: VideoFormat = VideoFormat.SHORTS


class Metrics(ValueObject):
    """Synthetic engagement indicators attached on successful publish."""

    ctr: float = Field(ge=0, le=100)  # Click-through rate, percent
    retention: float = Field(ge=0, le=100)  # Average view retention, percent

    def display(self) -> dict[str, str]:
        return {"ctr": f"{self.ctr:.1f}%", "retention": f"{self.retention:.0f}%"}
