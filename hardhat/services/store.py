"""
In-memory detection history.

Records live for the lifetime of the process; a restart loses them.
"""
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional
from uuid import uuid4

from hardhat.core.config import settings
from hardhat.core.logging import logger
from hardhat.models.schemas.detection import DetectionCreate, DetectionRecord
from hardhat.services.summary import calculate_summary


def generate_record_id() -> str:
    return f"det_{uuid4().hex}"


class DetectionStore:
    """
    Size-capped, newest-first sequence of detection records.

    All access is serialized through a lock. Inserting beyond the cap
    evicts the oldest record.
    """

    def __init__(self, max_records: Optional[int] = None):
        if max_records is None:
            max_records = settings.HISTORY_MAX_RECORDS
        if max_records < 1:
            raise ValueError(f"max_records must be at least 1, got {max_records}")
        self._max_records = max_records
        self._records: Deque[DetectionRecord] = deque(maxlen=self._max_records)
        self._lock = threading.Lock()

    @property
    def max_records(self) -> int:
        return self._max_records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def insert(
        self,
        record_in: DetectionCreate,
        record_id: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> DetectionRecord:
        """
        Store a new record at the front of the history.

        Args:
            record_in: Ingested fields
            record_id: Identifier to use instead of a generated one
            timestamp: Creation time to use instead of now (UTC)

        Returns:
            The stored record, including its computed summary
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        elif timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        record = DetectionRecord(
            id=record_id or generate_record_id(),
            timestamp=timestamp,
            filename=record_in.filename,
            site=record_in.site,
            supervisor=record_in.supervisor,
            detections=list(record_in.detections),
            summary=calculate_summary(record_in.detections)
        )

        with self._lock:
            evicted = self._records[-1] if len(self._records) == self._max_records else None
            self._records.appendleft(record)

        if evicted is not None:
            logger.debug(f"History full, evicted oldest record {evicted.id}")
        logger.info(f"Stored detection {record.id} ({record.summary.total_detections} detections)")
        return record

    def get(self, record_id: str) -> Optional[DetectionRecord]:
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    return record
        return None

    def delete(self, record_id: str) -> bool:
        """
        Remove the record with the given id.

        Returns:
            True if a record was removed, False if none matched
        """
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    self._records.remove(record)
                    logger.info(f"Deleted detection {record_id}")
                    return True
        return False

    def list(self) -> List[DetectionRecord]:
        """Snapshot of all records, newest first."""
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


# Process-wide store
detection_store = DetectionStore()


def get_store() -> DetectionStore:
    """Dependency returning the process-wide store."""
    return detection_store
