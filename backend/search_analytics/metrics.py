"""
Metrics aggregation over job records.

Every function here is pure: it takes a list of JobRecord (already filtered by
the caller) and returns plain dicts/lists ready for JSON. Rates are clamped to
[0, 1]; day averages only ever include strictly positive deltas, so a status
change stamped before creation is dropped rather than dragging the mean down.
"""
import logging
from collections import OrderedDict, defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from django.utils import timezone

from search_analytics.benchmarks import INDUSTRY_BENCHMARKS, Benchmark, benchmark_for, coerce_benchmarks
from search_analytics.records import (
    ALL_STATUSES,
    FUNNEL_STAGES,
    STATUS_APPLIED,
    STATUS_INTERVIEW,
    STATUS_OFFER,
    STATUS_PHONE_SCREEN,
    STATUS_REJECTED,
    UNKNOWN,
    JobRecord,
    local_date,
)

logger = logging.getLogger(__name__)

GROUP_INDUSTRY = "industry"
GROUP_JOB_TYPE = "job_type"
GROUP_COMPANY_SIZE = "company_size"
GROUP_ROLE_TYPE = "role_type"
GROUP_COMPANY = "company"
SUCCESS_GROUPINGS = (GROUP_INDUSTRY, GROUP_JOB_TYPE, GROUP_COMPANY_SIZE, GROUP_ROLE_TYPE)

COMPANY_SIZE_LARGE = "Large (1000+)"
COMPANY_SIZE_MEDIUM = "Medium (100-1000)"
COMPANY_SIZE_STARTUP = "Startup (<50)"

LARGE_COMPANIES = (
    "Google", "Apple", "Microsoft", "Amazon", "Meta", "Tesla", "IBM", "Oracle",
    "Salesforce", "Adobe", "Intel", "Cisco", "Bank of America", "JP Morgan",
    "Goldman Sachs", "McKinsey", "Accenture",
)
MEDIUM_COMPANY_MARKERS = ("Series", "Inc", "LLC")

# First match wins, in this order.
ROLE_KEYWORDS = (
    ("engineer", "Engineer"),
    ("manager", "Manager"),
    ("designer", "Designer"),
    ("analyst", "Analyst"),
    ("product", "Product"),
    ("sales", "Sales"),
    ("support", "Support"),
    ("data", "Data"),
)
ROLE_OTHER = "Other"

DIRECT_APPLICATION = "Direct Application"
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

APPLIED_STATUSES = (STATUS_APPLIED, STATUS_PHONE_SCREEN, STATUS_INTERVIEW, STATUS_OFFER, STATUS_REJECTED)
RESPONDED_STATUSES = (STATUS_PHONE_SCREEN, STATUS_INTERVIEW, STATUS_OFFER)
# Any employer reaction, including a rejection.
REACTION_STATUSES = (STATUS_PHONE_SCREEN, STATUS_INTERVIEW, STATUS_OFFER, STATUS_REJECTED)

DAILY_WINDOW_DAYS = 14


def clamp_rate(value: float) -> float:
    return max(0.0, min(1.0, value))


def _contains_any(value: Optional[str], needles: Sequence[str]) -> bool:
    haystack = (value or "").lower()
    return any(n.lower() in haystack for n in needles)


def filter_records(
    records: Iterable[JobRecord],
    companies: Sequence[str] = (),
    roles: Sequence[str] = (),
    industries: Sequence[str] = (),
) -> List[JobRecord]:
    """Case-insensitive substring filters; an empty filter list matches everything."""
    out = []
    for r in records:
        if companies and not _contains_any(r.company, companies):
            continue
        if roles and not _contains_any(r.title, roles):
            continue
        if industries and not _contains_any(r.industry, industries):
            continue
        out.append(r)
    return out


def infer_company_size(company_name: Optional[str]) -> str:
    """Rough size bucket from the company name when no size is tracked."""
    name = (company_name or "").lower()
    if not name:
        return UNKNOWN
    if any(big.lower() in name for big in LARGE_COMPANIES):
        return COMPANY_SIZE_LARGE
    if "startup" in name:
        return COMPANY_SIZE_STARTUP
    if any(marker.lower() in name for marker in MEDIUM_COMPANY_MARKERS):
        return COMPANY_SIZE_MEDIUM
    return UNKNOWN


def company_size_of(record: JobRecord) -> str:
    return record.company_size or infer_company_size(record.company)


def infer_role_type(title: Optional[str]) -> str:
    lowered = (title or "").lower()
    for keyword, label in ROLE_KEYWORDS:
        if keyword in lowered:
            return label
    return ROLE_OTHER


def group_key(record: JobRecord, group_by: str) -> str:
    if group_by == GROUP_INDUSTRY:
        return record.industry or UNKNOWN
    if group_by == GROUP_JOB_TYPE:
        return record.job_type or UNKNOWN
    if group_by == GROUP_COMPANY_SIZE:
        return company_size_of(record)
    if group_by == GROUP_ROLE_TYPE:
        return infer_role_type(record.title)
    if group_by == GROUP_COMPANY:
        return record.company or UNKNOWN
    raise ValueError(f"Unsupported grouping: {group_by}")


def is_offer(record: JobRecord) -> bool:
    return record.has_status(STATUS_OFFER)


def positive_day_delta(record: JobRecord) -> Optional[float]:
    """Creation-to-last-change in days, or None when missing or non-positive."""
    days = record.elapsed_days()
    if days is None:
        return None
    if days <= 0:
        logger.debug("Excluding non-positive duration (%.3f days) for job %s", days, record.id)
        return None
    return days


def funnel_counts(records: Iterable[JobRecord]) -> Dict[str, int]:
    counts = OrderedDict((status, 0) for status in ALL_STATUSES)
    for r in records:
        if r.status in counts:
            counts[r.status] += 1
    return dict(counts)


def success_rates(records: Iterable[JobRecord], group_by: str = GROUP_INDUSTRY) -> List[Dict]:
    """Offer rate per group, best first."""
    groups: Dict[str, Dict[str, int]] = {}
    for r in records:
        key = group_key(r, group_by)
        bucket = groups.setdefault(key, {"offers": 0, "total": 0})
        bucket["total"] += 1
        if is_offer(r):
            bucket["offers"] += 1

    results = [
        {
            "key": key,
            "offers": vals["offers"],
            "total": vals["total"],
            "rate": clamp_rate(vals["offers"] / max(1, vals["total"])),
        }
        for key, vals in groups.items()
    ]
    results.sort(key=lambda x: x["rate"], reverse=True)
    return results


def avg_response_days(records: Iterable[JobRecord], group_by: str = GROUP_COMPANY, top_n: int = 10) -> List[Dict]:
    """Average creation-to-change days per group, most-sampled groups first."""
    groups: Dict[str, Dict[str, float]] = {}
    for r in records:
        days = positive_day_delta(r)
        if days is None:
            continue
        bucket = groups.setdefault(group_key(r, group_by), {"total_days": 0.0, "count": 0})
        bucket["total_days"] += days
        bucket["count"] += 1

    results = [
        {
            "key": key,
            "avg_days": max(0.0, vals["total_days"] / vals["count"]) if vals["count"] else 0.0,
            "count": vals["count"],
        }
        for key, vals in groups.items()
    ]
    results.sort(key=lambda x: x["count"], reverse=True)
    return results[:top_n]


def compare_to_benchmarks(rates: Iterable[Mapping], benchmarks: Optional[Mapping] = None) -> List[Dict]:
    """User offer rate minus benchmark offer rate per group, largest lead first."""
    table: Mapping[str, Benchmark] = coerce_benchmarks(benchmarks) if benchmarks is not None else INDUSTRY_BENCHMARKS
    results = []
    for row in rates:
        bm = benchmark_for(table, row["key"])
        results.append({
            "key": row["key"],
            "user_rate": row["rate"],
            "benchmark_rate": bm.offer_rate,
            "benchmark_response_days": bm.avg_response_days,
            "delta": row["rate"] - bm.offer_rate,
            "offers": row["offers"],
            "total": row["total"],
        })
    results.sort(key=lambda x: x["delta"], reverse=True)
    return results


def response_rate(records: Iterable[JobRecord]) -> float:
    """Share of applied-or-later records that progressed past Applied."""
    applied = 0
    responded = 0
    for r in records:
        if r.has_status(*APPLIED_STATUSES):
            applied += 1
        if r.has_status(*RESPONDED_STATUSES):
            responded += 1
    if applied == 0:
        return 0.0
    return clamp_rate(responded / applied)


def stage_durations(records: Sequence[JobRecord]) -> Dict[str, float]:
    """Average days for records currently sitting in each funnel stage.

    Only two timestamps exist per job, so "time in stage" is approximated as
    creation-to-last-change for the jobs whose current status is that stage.
    A per-transition event log would be needed for true stage times.
    """
    durations: Dict[str, float] = {}
    for stage in FUNNEL_STAGES:
        deltas = [d for d in (positive_day_delta(r) for r in records if r.has_status(stage)) if d is not None]
        durations[stage] = max(0.0, sum(deltas) / len(deltas)) if deltas else 0.0
    return durations


def daily_application_counts(
    records: Iterable[JobRecord],
    today: Optional[date] = None,
    days: int = DAILY_WINDOW_DAYS,
) -> List[Dict]:
    """Applications created per local calendar day over the trailing window.

    Buckets are keyed by date objects so DST transitions never merge or skip a day.
    Every day in the window is present, oldest first.
    """
    today = today or timezone.localdate()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = OrderedDict((d, 0) for d in window)
    for r in records:
        if r.created_at is None:
            continue
        day = local_date(r.created_at)
        if day in counts:
            counts[day] += 1
    return [
        {"date": d.isoformat(), "label": f"{d.month}/{d.day}", "count": count}
        for d, count in counts.items()
    ]


def deadline_adherence(records: Iterable[JobRecord]) -> Dict:
    """Deadlines met (status changed on or before the deadline date) vs missed."""
    met = 0
    missed = 0
    for r in records:
        if r.application_deadline is None or r.status_changed_at is None:
            continue
        if local_date(r.status_changed_at) <= r.application_deadline:
            met += 1
        else:
            missed += 1
    total = met + missed
    return {
        "met": met,
        "missed": missed,
        "adherence": clamp_rate(met / total) if total else 0.0,
    }


def time_to_offer(records: Iterable[JobRecord]) -> float:
    """Mean positive creation-to-offer days across records currently at Offer."""
    deltas = [d for d in (positive_day_delta(r) for r in records if is_offer(r)) if d is not None]
    if not deltas:
        return 0.0
    return max(0.0, sum(deltas) / len(deltas))


def method_performance(records: Iterable[JobRecord]) -> List[Dict]:
    """Response and offer rates per application method."""
    groups: Dict[str, Dict[str, int]] = {}
    for r in records:
        bucket = groups.setdefault(r.application_method or DIRECT_APPLICATION, {"responses": 0, "successes": 0, "total": 0})
        bucket["total"] += 1
        if r.has_status(*REACTION_STATUSES):
            bucket["responses"] += 1
        if is_offer(r):
            bucket["successes"] += 1
    results = []
    for key, vals in groups.items():
        total = vals["total"]
        results.append({
            "key": key,
            "response_rate": clamp_rate(vals["responses"] / total) if total else 0.0,
            "success_rate": clamp_rate(vals["successes"] / total) if total else 0.0,
            "count": total,
        })
    results.sort(key=lambda x: x["count"], reverse=True)
    return results


def weekday_name(record: JobRecord) -> Optional[str]:
    if record.created_at is None:
        return None
    day = local_date(record.created_at)
    return WEEKDAY_NAMES[(day.weekday() + 1) % 7]


def timing_patterns(records: Iterable[JobRecord]) -> List[Dict]:
    """Employer reaction rate by weekday of submission, Sunday first."""
    groups = defaultdict(lambda: {"responses": 0, "total": 0})
    for r in records:
        day = weekday_name(r)
        if day is None:
            continue
        groups[day]["total"] += 1
        if r.has_status(*REACTION_STATUSES):
            groups[day]["responses"] += 1
    return [
        {
            "day_of_week": day,
            "success_rate": clamp_rate(groups[day]["responses"] / groups[day]["total"]) if groups[day]["total"] else 0.0,
            "count": groups[day]["total"],
        }
        for day in WEEKDAY_NAMES
    ]


def week_start(today: Optional[date] = None) -> date:
    """Sunday that opens the week containing ``today``."""
    today = today or timezone.localdate()
    return today - timedelta(days=(today.weekday() + 1) % 7)


def applications_this_week(records: Iterable[JobRecord], today: Optional[date] = None) -> int:
    start = week_start(today)
    return sum(1 for r in records if r.created_at is not None and local_date(r.created_at) >= start)


def overview(
    records: Sequence[JobRecord],
    benchmarks: Optional[Mapping] = None,
    today: Optional[date] = None,
) -> Dict:
    """Dashboard bundle used by the overview endpoint."""
    by_industry = success_rates(records, GROUP_INDUSTRY)
    return {
        "total": len(records),
        "funnel": funnel_counts(records),
        "response_rate": response_rate(records),
        "success_by_industry": by_industry,
        "success_by_job_type": success_rates(records, GROUP_JOB_TYPE),
        "avg_response_days_by_company": avg_response_days(records, GROUP_COMPANY),
        "avg_response_days_by_industry": avg_response_days(records, GROUP_INDUSTRY),
        "benchmark_comparison": compare_to_benchmarks(by_industry, benchmarks),
        "stage_durations": stage_durations(records),
        "daily_applications": daily_application_counts(records, today=today),
        "deadline_adherence": deadline_adherence(records),
        "time_to_offer_days": time_to_offer(records),
        "applications_this_week": applications_this_week(records, today=today),
    }
