"""Read-only accessor turning stored job/activity rows into engine records."""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from django.utils import timezone

from search_analytics.models import JobEntry, PreparationActivity
from search_analytics.records import (
    ActivityEvent,
    JobRecord,
    PreparationRecord,
    normalize_status,
)

logger = logging.getLogger(__name__)


def job_record_from_entry(entry: JobEntry) -> JobRecord:
    return JobRecord(
        id=entry.pk,
        title=entry.title or None,
        company=entry.company_name or None,
        industry=entry.industry or None,
        job_type=entry.get_job_type_display() if entry.job_type else None,
        status=normalize_status(entry.status),
        created_at=entry.created_at,
        status_changed_at=entry.status_changed_at,
        application_deadline=entry.application_deadline,
        application_method=entry.get_application_method_display() if entry.application_method else None,
        company_size=entry.get_company_size_display() if entry.company_size else None,
        cover_letter_attached=entry.cover_letter_attached,
    )


def preparation_record_from_activity(activity: PreparationActivity) -> PreparationRecord:
    return PreparationRecord(
        activity_type=activity.activity_type or "",
        description=activity.activity_description or "",
        notes=activity.notes or "",
        minutes=float(activity.time_spent_minutes or 0),
        activity_date=activity.activity_date,
        job_id=activity.job_id,
    )


def load_job_records(user, include_archived: bool = False) -> List[JobRecord]:
    """All of a user's applications as JobRecords; empty for anonymous users."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return []
    qs = JobEntry.objects.filter(candidate=user)
    if not include_archived:
        qs = qs.filter(is_archived=False)
    return [job_record_from_entry(entry) for entry in qs.order_by('created_at', 'pk')]


def load_preparation_records(user, since=None) -> List[PreparationRecord]:
    if user is None or not getattr(user, 'is_authenticated', False):
        return []
    qs = PreparationActivity.objects.filter(candidate=user)
    if since is not None:
        qs = qs.filter(activity_date__gte=since)
    return [preparation_record_from_activity(a) for a in qs]


def load_activity_events(user, since=None) -> List[ActivityEvent]:
    """Activity timeline for streaks: job creations/updates and preparation sessions.

    ``since`` bounds the job rows by creation time, matching how the streak
    window is defined; preparation sessions are bounded by their own date.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return []
    jobs = JobEntry.objects.filter(candidate=user)
    prep = PreparationActivity.objects.filter(candidate=user)
    if since is not None:
        jobs = jobs.filter(created_at__gte=since)
        prep = prep.filter(activity_date__gte=since)

    events: List[ActivityEvent] = []
    for entry in jobs:
        events.extend(_events_for_entry(entry))
    for activity in prep:
        events.append(ActivityEvent(
            occurred_at=activity.activity_date,
            kind=ActivityEvent.KIND_PREPARATION,
            job_id=activity.job_id,
        ))
    events.sort(key=lambda e: e.occurred_at)
    return events


def _events_for_entry(entry: JobEntry) -> Iterable[ActivityEvent]:
    if entry.created_at:
        yield ActivityEvent(occurred_at=entry.created_at, kind=ActivityEvent.KIND_JOB_CREATED, job_id=entry.pk)
    if entry.status_changed_at:
        yield ActivityEvent(occurred_at=entry.status_changed_at, kind=ActivityEvent.KIND_STATUS_CHANGED, job_id=entry.pk)
    if entry.updated_at:
        yield ActivityEvent(occurred_at=entry.updated_at, kind=ActivityEvent.KIND_JOB_UPDATED, job_id=entry.pk)


def recent_window_start(days: int, now: Optional[datetime] = None):
    now = now or timezone.now()
    return now - timedelta(days=days)
