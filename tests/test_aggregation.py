from datetime import datetime, timedelta, timezone

import pytest

from hardhat.core.exceptions import ValidationError
from hardhat.services.aggregation import (
    build_statistics,
    daily_trends,
    resolve_period,
    site_statistics,
    summarize,
    top_detections,
)
from hardhat.utils.rounding import compliance_rate, round_half_away


def test_resolve_period(now):
    assert resolve_period("all", now) is None
    assert resolve_period("1d", now) == now - timedelta(days=1)
    assert resolve_period("7d", now) == now - timedelta(days=7)
    assert resolve_period("30d", now) == now - timedelta(days=30)
    assert resolve_period("90d", now) == now - timedelta(days=90)


def test_unknown_period_is_rejected(now):
    with pytest.raises(ValidationError) as exc_info:
        resolve_period("2w", now)
    assert exc_info.value.fields == ["period"]


def test_compliance_rate_bounds():
    assert compliance_rate(0, 0) == 0.0
    assert compliance_rate(5, 0) == 100.0
    assert compliance_rate(0, 5) == 0.0
    assert 0.0 <= compliance_rate(3, 7) <= 100.0


def test_round_half_away_from_zero():
    assert round_half_away(0.125, 2) == 0.13
    assert round_half_away(2.5, 0) == 3.0
    assert round_half_away(-2.5, 0) == -3.0
    assert round_half_away(66.666666, 2) == 66.67


def test_summarize_totals_and_rates(add_record, store):
    add_record(["helmet", "helmet", "vest", "no-vest"])
    add_record(["no-helmet", "vest", "person"])

    summary = summarize(store.list())

    assert summary.total_scans == 2
    assert summary.total_detections == 7
    assert summary.total_helmets == 2
    assert summary.total_no_helmets == 1
    assert summary.total_vests == 2
    assert summary.total_no_vests == 1
    assert summary.helmet_compliance_rate == 66.67
    assert summary.vest_compliance_rate == 66.67


def test_summarize_empty():
    summary = summarize([])
    assert summary.total_scans == 0
    assert summary.helmet_compliance_rate == 0.0
    assert summary.vest_compliance_rate == 0.0


def test_daily_trends_bucket_by_utc_day(add_record, store):
    add_record(["helmet"], timestamp=datetime(2025, 5, 3, 23, 59, tzinfo=timezone.utc))
    add_record(["helmet", "no-helmet"], timestamp=datetime(2025, 5, 1, 8, 0, tzinfo=timezone.utc))
    add_record(["vest"], timestamp=datetime(2025, 5, 3, 0, 1, tzinfo=timezone.utc))
    # 01:30 at +03:00 is still 2025-05-01 in UTC
    add_record(["no-vest"], timestamp=datetime(2025, 5, 2, 1, 30, tzinfo=timezone(timedelta(hours=3))))

    trends = daily_trends(store.list())

    assert [t.date for t in trends] == ["2025-05-01", "2025-05-03"]
    may_first, may_third = trends
    assert may_first.scans == 2
    assert may_first.detections == 3
    assert may_first.helmets == 1
    assert may_first.no_helmets == 1
    assert may_first.no_vests == 1
    assert may_third.scans == 2
    assert may_third.helmets == 1
    assert may_third.vests == 1


def test_three_days_give_three_sorted_buckets(add_record, store, now):
    for days in (0, 2, 1):
        add_record(["helmet"] * (days + 1), age=timedelta(days=days))

    trends = daily_trends(store.list())

    assert len(trends) == 3
    assert [t.date for t in trends] == sorted(t.date for t in trends)
    assert [t.helmets for t in trends] == [3, 2, 1]


def test_site_compliance_uses_group_totals(add_record, store):
    add_record(["helmet"], site="Site A")
    add_record(["no-helmet"], site="Site A")

    [site] = site_statistics(store.list())

    assert site.site == "Site A"
    assert site.scans == 2
    assert site.helmet_compliance == 50.0
    assert site.vest_compliance == 0.0


def test_sites_sorted_by_scans_with_unknown_group(add_record, store):
    add_record(["helmet"], site="Small")
    for _ in range(3):
        add_record(["vest", "no-vest"])
    for _ in range(2):
        add_record(["helmet"], site="Mid")

    sites = site_statistics(store.list())

    assert [s.site for s in sites] == ["Unknown", "Mid", "Small"]
    assert sites[0].scans == 3
    assert sites[0].total_detections == 6
    assert sites[0].vest_compliance == 50.0


def test_site_rollup_keeps_top_ten(add_record, store):
    for index in range(12):
        for _ in range(index + 1):
            add_record(site=f"Site {index}")

    sites = site_statistics(store.list())

    assert len(sites) == 10
    assert sites[0].site == "Site 11"
    assert sites[-1].site == "Site 2"


def test_top_detections_are_stable(add_record, store):
    add_record(["helmet"] * 2, filename="two-a.jpg")
    add_record(["helmet"] * 5, filename="five.jpg")
    add_record(["helmet"] * 2, filename="two-b.jpg")
    add_record(["helmet"], filename="one.jpg")
    add_record([], filename="zero.jpg")
    add_record(["helmet"] * 3, filename="three.jpg", site="Site A")

    top = top_detections(store.list())

    assert [t.filename for t in top] == ["five.jpg", "three.jpg", "two-b.jpg", "two-a.jpg", "one.jpg"]
    assert top[1].detections == 3
    assert top[1].site == "Site A"


def test_build_statistics_applies_period_and_filters(add_record, store, now):
    add_record(["helmet"], site="North", age=timedelta(hours=2))
    add_record(["no-helmet"], site="North", supervisor="Ann", age=timedelta(hours=3))
    add_record(["helmet"], site="South", age=timedelta(hours=4))
    add_record(["helmet", "vest"], site="North", age=timedelta(days=3))

    stats = build_statistics(store.list(), period="1d", site="north", now=now)

    assert stats.period == "1d"
    assert stats.date_range.start == now - timedelta(days=1)
    assert stats.date_range.end == now
    assert stats.summary.total_scans == 2
    assert stats.summary.helmet_compliance_rate == 50.0
    assert [s.site for s in stats.site_statistics] == ["North"]
    assert len(stats.top_detections.most_detections) == 2


def test_build_statistics_all_has_open_start(add_record, store, now):
    add_record(["helmet"], age=timedelta(days=365))

    stats = build_statistics(store.list(), period="all", now=now)

    assert stats.date_range.start is None
    assert stats.summary.total_scans == 1


def test_build_statistics_supervisor_filter(add_record, store, now):
    add_record(["helmet"], supervisor="Ann Lee")
    add_record(["helmet"], supervisor="Bo")

    stats = build_statistics(store.list(), period="7d", supervisor="ann", now=now)
    assert stats.summary.total_scans == 1
