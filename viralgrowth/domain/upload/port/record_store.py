"""RecordStore port: ordered, newest-first collection of upload records."""

from typing import Callable, Protocol

from viralgrowth.domain.upload.model.record import RecordId, UploadRecord

RecordMutation = Callable[[UploadRecord], None]


class RecordStore(Protocol):
    """Append-only store; the scheduler inserts, the pipeline engine updates."""

    def insert(self, record: UploadRecord) -> None:
        """Prepend a record.

        Raises:
            ConflictError: If another record is still pending or processing.
        """
        ...

    def update_by_id(self, record_id: RecordId, mutation: RecordMutation) -> UploadRecord:
        """Apply `mutation` to the stored record in place and return a snapshot of it.

        Raises:
            NotFoundError: If no record has this id.
        """
        ...

    def get(self, record_id: RecordId) -> UploadRecord | None: ...

    def active(self) -> UploadRecord | None:
        """The record currently pending or processing, if any."""
        ...

    def all(self) -> tuple[UploadRecord, ...]:
        """Read-only snapshot, newest first."""
        ...

    def __len__(self) -> int: ...
