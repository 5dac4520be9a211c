import logging

from viralgrowth.domain.shared.error import ConflictError, NotFoundError
from viralgrowth.domain.upload.model.record import RecordId, UploadRecord
from viralgrowth.domain.upload.port.record_store import RecordMutation, RecordStore

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Process-lifetime record store, newest record first.

    Growth is unbounded unless `max_records` is given, in which case the
    oldest terminal records beyond the bound are dropped on insert. The
    active record is never evicted.
    """

    def __init__(self, max_records: int | None = None) -> None:
        if max_records is not None and max_records < 1:
            raise ValueError("max_records must be >= 1")
        self._records: list[UploadRecord] = []
        self._index: dict[RecordId, UploadRecord] = {}
        self._max_records = max_records

    def insert(self, record: UploadRecord) -> None:
        if record.id in self._index:
            raise ConflictError(f"Record {record.id} already stored")
        current = self.active()
        if record.is_active and current is not None:
            raise ConflictError(
                f"Record {current.id} is still {current.status}; only one run may be active"
            )
        self._records.insert(0, record)
        self._index[record.id] = record
        self._evict()

    def update_by_id(self, record_id: RecordId, mutation: RecordMutation) -> UploadRecord:
        record = self._index.get(record_id)
        if record is None:
            raise NotFoundError(f"Record {record_id} not found")
        mutation(record)
        return record.model_copy(deep=True)

    def get(self, record_id: RecordId) -> UploadRecord | None:
        record = self._index.get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    def active(self) -> UploadRecord | None:
        for record in self._records:
            if record.is_active:
                return record.model_copy(deep=True)
        return None

    def all(self) -> tuple[UploadRecord, ...]:
        return tuple(record.model_copy(deep=True) for record in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _evict(self) -> None:
        if self._max_records is None:
            return
        while len(self._records) > self._max_records and not self._records[-1].is_active:
            dropped = self._records.pop()
            del self._index[dropped.id]
            logger.debug(f"Evicted record {dropped.id} (retention={self._max_records})")
