"""
Activity streaks, engagement windows and the motivation widget payload.

All calendar logic works on local ``date`` objects (never millisecond offsets),
so DST transitions cannot split or merge days.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from django.conf import settings
from django.utils import timezone

from search_analytics.metrics import applications_this_week
from search_analytics.records import JobRecord, local_date

STREAK_LOOKBACK_DAYS = 30
WEEKLY_WINDOW_DAYS = 7
APPLICATION_MILESTONES = (10, 25, 50, 100, 250, 500)


@dataclass(frozen=True)
class StreakData:
    current_streak: int
    longest_streak: int
    last_activity_date: date
    streak_start_date: date
    total_active_days: int
    this_week_active_days: int
    this_month_active_days: int

    def as_dict(self) -> Dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_activity_date": self.last_activity_date.isoformat(),
            "streak_start_date": self.streak_start_date.isoformat(),
            "total_active_days": self.total_active_days,
            "this_week_active_days": self.this_week_active_days,
            "this_month_active_days": self.this_month_active_days,
        }


@dataclass(frozen=True)
class Quote:
    id: str
    text: str
    author: str
    category: str

    def as_dict(self) -> Dict:
        return {"id": self.id, "text": self.text, "author": self.author, "category": self.category}


QUOTES: Sequence[Quote] = (
    Quote("1", "Success is not final, failure is not fatal: it is the courage to continue that counts.", "Winston Churchill", "persistence"),
    Quote("2", "The only way to do great work is to love what you do. If you haven't found it yet, keep looking.", "Steve Jobs", "growth"),
    Quote("3", "Opportunities don't happen. You create them.", "Chris Grosser", "action"),
    Quote("4", "The secret of getting ahead is getting started.", "Mark Twain", "action"),
    Quote("5", "Every rejection is a redirection to something better.", "Unknown", "resilience"),
    Quote("6", "Your network is your net worth.", "Porter Gale", "success"),
    Quote("7", "The job search is not a sprint, it's a marathon. Pace yourself and stay consistent.", "Career Wisdom", "persistence"),
    Quote("8", "Every application is a step forward, even when it feels like standing still.", "Career Wisdom", "persistence"),
    Quote("9", "The best time to plant a tree was 20 years ago. The second best time is now.", "Chinese Proverb", "action"),
    Quote("10", "I have not failed. I've just found 10,000 ways that won't work.", "Thomas Edison", "resilience"),
    Quote("11", "Believe you can and you're halfway there.", "Theodore Roosevelt", "growth"),
    Quote("12", "The only limit to our realization of tomorrow is our doubts of today.", "Franklin D. Roosevelt", "growth"),
    Quote("13", "Don't watch the clock; do what it does. Keep going.", "Sam Levenson", "persistence"),
    Quote("14", "Your career is a garden, not a ladder. Cultivate it with patience and care.", "Career Wisdom", "growth"),
    Quote("15", "Every expert was once a beginner. Every pro was once an amateur.", "Robin Sharma", "growth"),
)


def daily_quote(today: Optional[date] = None) -> Quote:
    """Same calendar day, same quote: day-of-year modulo the list length."""
    today = today or timezone.localdate()
    return QUOTES[today.timetuple().tm_yday % len(QUOTES)]


def activity_dates(
    timestamps: Iterable[datetime],
    today: Optional[date] = None,
    lookback_days: Optional[int] = None,
) -> set:
    """Distinct local dates with activity, limited to the lookback window."""
    today = today or timezone.localdate()
    if lookback_days is None:
        lookback_days = getattr(settings, 'ANALYTICS_STREAK_LOOKBACK_DAYS', STREAK_LOOKBACK_DAYS)
    earliest = today - timedelta(days=lookback_days)
    dates = set()
    for ts in timestamps:
        if ts is None:
            continue
        day = local_date(ts) if isinstance(ts, datetime) else ts
        if earliest <= day <= today:
            dates.add(day)
    return dates


def current_streak(dates: set, today: date) -> int:
    yesterday = today - timedelta(days=1)
    if today not in dates and yesterday not in dates:
        return 0
    streak = 0
    cursor = today
    # A streak still alive from yesterday counts even before today's first activity.
    if cursor not in dates:
        cursor = yesterday
    while cursor in dates:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(dates: set, current: int = 0) -> int:
    if not dates:
        return current
    ordered = sorted(dates)
    longest = 0
    run = 1
    for prev, nxt in zip(ordered, ordered[1:]):
        if (nxt - prev).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run, current)


def calculate_streak(
    timestamps: Iterable[datetime],
    today: Optional[date] = None,
    lookback_days: Optional[int] = None,
) -> StreakData:
    today = today or timezone.localdate()
    dates = activity_dates(timestamps, today=today, lookback_days=lookback_days)

    current = current_streak(dates, today)
    longest = longest_streak(dates, current)
    week_floor = today - timedelta(days=WEEKLY_WINDOW_DAYS - 1)
    month_floor = today.replace(day=1)

    return StreakData(
        current_streak=current,
        longest_streak=longest,
        last_activity_date=max(dates) if dates else today,
        streak_start_date=today - timedelta(days=current - 1) if current > 0 else today,
        total_active_days=len(dates),
        this_week_active_days=sum(1 for d in dates if d >= week_floor),
        this_month_active_days=sum(1 for d in dates if d >= month_floor),
    )


def next_milestone(total_applications: int) -> Optional[int]:
    for milestone in APPLICATION_MILESTONES:
        if milestone > total_applications:
            return milestone
    return None


def motivation_summary(
    records: Sequence[JobRecord],
    timestamps: Iterable[datetime],
    today: Optional[date] = None,
    weekly_goal: Optional[int] = None,
) -> Dict:
    """Quote, streak, weekly goal progress and the next application milestone."""
    today = today or timezone.localdate()
    if weekly_goal is None:
        weekly_goal = getattr(settings, 'ANALYTICS_WEEKLY_APPLICATION_GOAL', 10)

    streak = calculate_streak(timestamps, today=today)
    this_week = applications_this_week(records, today=today)
    progress = min(100.0, this_week / weekly_goal * 100) if weekly_goal > 0 else 0.0
    total = len(records)
    milestone = next_milestone(total)

    return {
        "quote": daily_quote(today).as_dict(),
        "streak": streak.as_dict(),
        "weekly_goal": weekly_goal,
        "weekly_applications": this_week,
        "weekly_goal_progress": progress,
        "upcoming_milestone": (
            {"type": "applications", "current": total, "target": milestone}
            if milestone is not None else None
        ),
    }


def timestamps_from_events(events: Iterable) -> List[datetime]:
    return [e.occurred_at for e in events if getattr(e, 'occurred_at', None) is not None]
