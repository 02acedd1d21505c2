"""
Period statistics over detection history.

Everything is recomputed from the snapshot on each call; the history is
capped so a full scan stays cheap.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from hardhat.core.exceptions import ValidationError
from hardhat.models.schemas.common import DateRange
from hardhat.models.schemas.detection import DetectionRecord
from hardhat.models.schemas.statistics import (
    ComplianceStatistics,
    DailyTrend,
    SiteStatistics,
    StatisticsSummary,
    TopDetection,
    TopDetections,
)
from hardhat.services.query import RecordFilter, as_utc
from hardhat.utils.rounding import compliance_rate, round_half_away


PERIOD_DAYS: Dict[str, Optional[int]] = {
    "1d": 1,
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}

UNKNOWN_SITE = "Unknown"
MAX_SITES = 10
MAX_TOP_DETECTIONS = 5


def resolve_period(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Map a period selector to its start cutoff.

    Returns:
        ``now - N days``, or None for "all"

    Raises:
        ValidationError: unknown selector
    """
    if period not in PERIOD_DAYS:
        raise ValidationError(
            f"Unknown period '{period}'. Use one of: {', '.join(PERIOD_DAYS)}",
            fields=["period"]
        )
    days = PERIOD_DAYS[period]
    if days is None:
        return None
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


def summarize(records: Sequence[DetectionRecord]) -> StatisticsSummary:
    """Sum per-record counts and derive the compliance rates."""
    totals = [0, 0, 0, 0, 0]
    for record in records:
        summary = record.summary
        totals[0] += summary.total_detections
        totals[1] += summary.helmet_count
        totals[2] += summary.vest_count
        totals[3] += summary.no_helmet_count
        totals[4] += summary.no_vest_count
    detections, helmets, vests, no_helmets, no_vests = totals

    return StatisticsSummary(
        total_scans=len(records),
        total_detections=detections,
        total_helmets=helmets,
        total_vests=vests,
        total_no_helmets=no_helmets,
        total_no_vests=no_vests,
        helmet_compliance_rate=round_half_away(compliance_rate(helmets, no_helmets)),
        vest_compliance_rate=round_half_away(compliance_rate(vests, no_vests))
    )


def daily_trends(records: Sequence[DetectionRecord]) -> List[DailyTrend]:
    """Bucket records by UTC calendar day, ascending by date."""
    buckets: Dict[str, DailyTrend] = {}
    for record in records:
        day = as_utc(record.timestamp).date().isoformat()
        bucket = buckets.get(day)
        if bucket is None:
            bucket = buckets[day] = DailyTrend(date=day)
        summary = record.summary
        bucket.scans += 1
        bucket.detections += summary.total_detections
        bucket.helmets += summary.helmet_count
        bucket.vests += summary.vest_count
        bucket.no_helmets += summary.no_helmet_count
        bucket.no_vests += summary.no_vest_count

    return [buckets[day] for day in sorted(buckets)]


def site_statistics(records: Sequence[DetectionRecord], limit: int = MAX_SITES) -> List[SiteStatistics]:
    """
    Roll records up by site, busiest sites first.

    Records without a site are grouped under "Unknown". Compliance is
    computed from each group's summed counts.
    """
    groups: Dict[str, List[DetectionRecord]] = {}
    for record in records:
        groups.setdefault(record.site or UNKNOWN_SITE, []).append(record)

    rollups = []
    for site, site_records in groups.items():
        totals = summarize(site_records)
        rollups.append(SiteStatistics(
            site=site,
            scans=totals.total_scans,
            total_detections=totals.total_detections,
            helmet_compliance=totals.helmet_compliance_rate,
            vest_compliance=totals.vest_compliance_rate
        ))

    rollups.sort(key=lambda rollup: rollup.scans, reverse=True)
    return rollups[:limit]


def top_detections(records: Sequence[DetectionRecord], limit: int = MAX_TOP_DETECTIONS) -> List[TopDetection]:
    """Records with the most detections; ties keep their input order."""
    ranked = sorted(records, key=lambda record: record.summary.total_detections, reverse=True)
    return [
        TopDetection(
            id=record.id,
            filename=record.filename,
            timestamp=record.timestamp,
            detections=record.summary.total_detections,
            site=record.site
        )
        for record in ranked[:limit]
    ]


def build_statistics(
    records: Sequence[DetectionRecord],
    period: str = "7d",
    site: Optional[str] = None,
    supervisor: Optional[str] = None,
    now: Optional[datetime] = None
) -> ComplianceStatistics:
    """
    Compute the statistics payload for one period.

    Args:
        records: History snapshot
        period: One of 1d, 7d, 30d, 90d, all
        site: Case-insensitive substring filter
        supervisor: Case-insensitive substring filter
        now: Reference time, defaults to the current UTC time
    """
    now = now or datetime.now(timezone.utc)
    start = resolve_period(period, now)
    filtered = RecordFilter(start_date=start, site=site, supervisor=supervisor).apply(records)

    return ComplianceStatistics(
        period=period,
        date_range=DateRange(start=start, end=now),
        summary=summarize(filtered),
        daily_trends=daily_trends(filtered),
        site_statistics=site_statistics(filtered),
        top_detections=TopDetections(most_detections=top_detections(filtered))
    )
