"""Plain value types the analytics engine computes over.

Everything downstream of the event store works on these frozen dataclasses
rather than ORM rows, so aggregation is a pure function of its input list.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)

UNKNOWN = "(unknown)"
MS_PER_DAY = 86_400_000

STATUS_INTERESTED = "Interested"
STATUS_APPLIED = "Applied"
STATUS_PHONE_SCREEN = "Phone Screen"
STATUS_INTERVIEW = "Interview"
STATUS_OFFER = "Offer"
STATUS_REJECTED = "Rejected"
STATUS_ACCEPTED = "Accepted"
STATUS_DECLINED = "Declined"

ALL_STATUSES = (
    STATUS_INTERESTED,
    STATUS_APPLIED,
    STATUS_PHONE_SCREEN,
    STATUS_INTERVIEW,
    STATUS_OFFER,
    STATUS_REJECTED,
    STATUS_ACCEPTED,
    STATUS_DECLINED,
)

# Canonical funnel order (Interested -> Applied -> Phone Screen -> Interview -> Offer)
FUNNEL_STAGES = (
    STATUS_INTERESTED,
    STATUS_APPLIED,
    STATUS_PHONE_SCREEN,
    STATUS_INTERVIEW,
    STATUS_OFFER,
)

_STATUS_LOOKUP = {s.lower(): s for s in ALL_STATUSES}
_STATUS_LOOKUP.update({s.lower().replace(' ', '_'): s for s in ALL_STATUSES})


def normalize_status(value: Any) -> Optional[str]:
    """Map a stored status code or display label onto its canonical label.

    Unrecognised values are returned stripped but otherwise untouched so that
    case-insensitive comparisons downstream still behave.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return _STATUS_LOOKUP.get(text.lower(), text)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO string / date / datetime into an aware datetime.

    Returns None for missing or malformed input instead of raising.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        try:
            dt = parse_datetime(text)
        except ValueError:
            dt = None
        if dt is None:
            try:
                d = parse_date(text)
            except ValueError:
                d = None
            if d is None:
                logger.debug("Ignoring unparseable timestamp %r", value)
                return None
            dt = datetime(d.year, d.month, d.day)
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def parse_day(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return local_date(value)
    if isinstance(value, date):
        return value
    parsed = parse_timestamp(value)
    return local_date(parsed) if parsed else None


def local_date(dt: datetime) -> date:
    """Calendar date of ``dt`` in the configured local time zone."""
    if timezone.is_naive(dt):
        return dt.date()
    return timezone.localtime(dt).date()


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class JobRecord:
    """One tracked application as seen by the analytics engine."""
    id: Any = None
    title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    job_type: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    status_changed_at: Optional[datetime] = None
    application_deadline: Optional[date] = None
    application_method: Optional[str] = None
    company_size: Optional[str] = None
    cover_letter_attached: Optional[bool] = None

    @property
    def status_key(self) -> str:
        return (self.status or "").lower()

    def has_status(self, *statuses: str) -> bool:
        return self.status_key in {s.lower() for s in statuses}

    def elapsed_ms(self) -> Optional[float]:
        """Milliseconds from creation to the last status change, or None if unknown."""
        if self.created_at is None or self.status_changed_at is None:
            return None
        return (self.status_changed_at - self.created_at).total_seconds() * 1000

    def elapsed_days(self) -> Optional[float]:
        elapsed = self.elapsed_ms()
        if elapsed is None:
            return None
        return elapsed / MS_PER_DAY

    @classmethod
    def from_mapping(cls, data: dict) -> "JobRecord":
        """Build a record from a loosely-shaped mapping (API payloads, exports).

        Accepts both the platform's column names (``job_title``, ``company_name``,
        ``job_status``) and the short names. Absent fields become None.
        """
        def pick(*keys):
            for key in keys:
                if key in data and data[key] not in (None, ""):
                    return data[key]
            return None

        cover_letter = pick('cover_letter_attached', 'has_cover_letter')
        return cls(
            id=pick('id'),
            title=_clean_text(pick('job_title', 'title')),
            company=_clean_text(pick('company_name', 'company')),
            industry=_clean_text(pick('industry')),
            job_type=_clean_text(pick('job_type')),
            status=normalize_status(pick('job_status', 'status')),
            created_at=parse_timestamp(pick('created_at')),
            status_changed_at=parse_timestamp(pick('status_changed_at')),
            application_deadline=parse_day(pick('application_deadline')),
            application_method=_clean_text(pick('application_method')),
            company_size=_clean_text(pick('company_size')),
            cover_letter_attached=None if cover_letter is None else bool(cover_letter),
        )


@dataclass(frozen=True)
class ActivityEvent:
    """A timestamped unit of job-search effort."""
    occurred_at: datetime
    kind: str
    job_id: Any = None

    KIND_JOB_CREATED = "job_created"
    KIND_JOB_UPDATED = "job_updated"
    KIND_STATUS_CHANGED = "status_changed"
    KIND_PREPARATION = "preparation"
    KIND_GOAL_COMPLETED = "goal_completed"


@dataclass(frozen=True)
class PreparationRecord:
    """Preparation activity used to enrich prediction requests."""
    activity_type: str = ""
    description: str = ""
    notes: str = ""
    minutes: float = 0
    activity_date: Optional[datetime] = None
    job_id: Any = None

    @property
    def is_mock_interview(self) -> bool:
        kind = (self.activity_type or "").lower()
        return "mock" in kind or "interview" in kind
