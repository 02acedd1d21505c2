"""
Filtering, ordering and pagination over history snapshots.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from hardhat.core.config import settings
from hardhat.core.exceptions import ValidationError
from hardhat.models.schemas.common import Pagination
from hardhat.models.schemas.detection import DetectionRecord


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle.lower() in value.lower()


@dataclass
class RecordFilter:
    """Optional criteria; unset criteria match everything."""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    site: Optional[str] = None
    supervisor: Optional[str] = None

    def matches(self, record: DetectionRecord) -> bool:
        timestamp = as_utc(record.timestamp)
        if self.start_date is not None and timestamp < as_utc(self.start_date):
            return False
        if self.end_date is not None and timestamp > as_utc(self.end_date):
            return False
        if self.site and not _contains(record.site, self.site):
            return False
        if self.supervisor and not _contains(record.supervisor, self.supervisor):
            return False
        return True

    def apply(self, records: Sequence[DetectionRecord]) -> List[DetectionRecord]:
        """Return matching records, preserving their relative order."""
        return [record for record in records if self.matches(record)]


def sort_newest_first(records: Sequence[DetectionRecord]) -> List[DetectionRecord]:
    return sorted(records, key=lambda record: as_utc(record.timestamp), reverse=True)


@dataclass
class Page:
    items: List[DetectionRecord]
    pagination: Pagination


def _check_bound(name: str, value, minimum: int, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", fields=[name])
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}", fields=[name])
    if maximum is not None and value > maximum:
        raise ValidationError(f"{name} must be <= {maximum}", fields=[name])
    return value


def paginate(
    records: Sequence[DetectionRecord],
    limit: Optional[int] = None,
    offset: int = 0
) -> Page:
    """
    Slice ``records`` to ``[offset, offset + limit)``.

    Raises:
        ValidationError: limit or offset is not a non-negative integer in range
    """
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    limit = _check_bound("limit", limit, 1, settings.MAX_PAGE_SIZE)
    offset = _check_bound("offset", offset, 0)

    total = len(records)
    return Page(
        items=list(records[offset:offset + limit]),
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total
        )
    )


def query_history(
    records: Sequence[DetectionRecord],
    record_filter: Optional[RecordFilter] = None,
    limit: Optional[int] = None,
    offset: int = 0
) -> Page:
    """Filter, order newest first, then paginate."""
    filtered = (record_filter or RecordFilter()).apply(records)
    return paginate(sort_newest_first(filtered), limit=limit, offset=offset)
