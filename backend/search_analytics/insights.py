"""Free-text insight narratives for the analytics dashboard."""
from collections import Counter
from typing import List, Mapping, Sequence

from search_analytics.metrics import GROUP_INDUSTRY, group_key
from search_analytics.records import (
    STATUS_INTERVIEW,
    STATUS_OFFER,
    STATUS_PHONE_SCREEN,
    JobRecord,
)

DEFAULT_INSIGHT = (
    "✨ Your metrics look healthy! Continue monitoring trends and applying consistently. "
    "Use AI tools to maintain high-quality applications."
)


def generate_insights(
    records: Sequence[JobRecord],
    funnel: Mapping[str, int],
    response_rate: float,
    deadline_adherence: float,
    avg_time_to_offer: float,
    weekly_goal: int,
    this_week_applications: int,
) -> List[str]:
    """Threshold-driven insights in a fixed order; never empty."""
    insights: List[str] = []
    total = len(records)
    offers = funnel.get(STATUS_OFFER, 0)
    offer_rate = offers / max(1, total)

    if offer_rate < 0.05 and total > 10:
        insights.append(
            f"🎯 Low offer rate ({offer_rate * 100:.1f}%). Consider: (1) Tailoring resumes more closely to job "
            "requirements, (2) Applying to positions that better match your experience level, (3) Using "
            "AI-generated content to improve application quality."
        )
    elif offer_rate >= 0.1 and total > 5:
        insights.append(
            f"🌟 Excellent offer rate ({offer_rate * 100:.1f}%)! Your application strategy is working well. "
            "Keep applying the same tailoring approach."
        )

    if response_rate < 0.2 and total > 10:
        insights.append(
            f"📧 Low response rate ({response_rate * 100:.1f}%). Recommendations: (1) Review your resume with "
            "AI optimization, (2) Ensure your applications are submitted early in the posting cycle, "
            "(3) Follow up with hiring managers after 1 week."
        )
    elif response_rate >= 0.3:
        insights.append(
            f"✅ Strong response rate ({response_rate * 100:.1f}%)! Your applications are getting noticed. "
            "Focus on interview preparation."
        )

    if deadline_adherence < 0.8 and total > 5:
        miss_share = 1 - deadline_adherence
        missed = round(miss_share * total)
        insights.append(
            f"⏰ You've missed approximately {missed} deadlines ({miss_share * 100:.0f}% miss rate). "
            "Set reminders 2-3 days before each deadline to improve adherence."
        )

    if weekly_goal > 0:
        if this_week_applications < weekly_goal:
            behind = weekly_goal - this_week_applications
            plural = "s" if behind != 1 else ""
            insights.append(
                f"📊 You're {behind} application{plural} behind your weekly goal. Dedicate focused time "
                "today to catch up. Use AI tools to speed up resume and cover letter creation."
            )
        else:
            insights.append(
                "🎉 You've met your weekly goal! Consider reviewing applications from companies you're most "
                "interested in or raising your goal for next week."
            )

    industries = Counter(group_key(r, GROUP_INDUSTRY) for r in records)
    if industries:
        top_industry, top_count = max(industries.items(), key=lambda kv: kv[1])
        if top_count > total * 0.4:
            insights.append(
                f"🎯 You're focusing heavily on {top_industry} ({top_count} applications). Consider "
                "diversifying to related industries to increase opportunities."
            )

    if avg_time_to_offer > 30 and offers > 0:
        insights.append(
            f"⏳ Your average time to offer is {avg_time_to_offer:.0f} days. Long hiring processes are normal, "
            "but consider prioritizing companies with faster decision cycles."
        )

    phone_screens = funnel.get(STATUS_PHONE_SCREEN, 0)
    interviews = funnel.get(STATUS_INTERVIEW, 0)
    if phone_screens > 5 and interviews < phone_screens * 0.5:
        insights.append(
            "📞 You're getting phone screens but not advancing to interviews. Focus on: (1) Researching "
            "companies thoroughly before calls, (2) Practicing behavioral questions, (3) Clearly "
            "articulating your value proposition."
        )

    if interviews > 3 and offers < interviews * 0.3:
        insights.append(
            "💼 You're reaching interviews but not converting to offers. Recommendations: (1) Request "
            "feedback from interviewers, (2) Practice technical/case questions more deeply, (3) Improve "
            "your follow-up communication."
        )

    if not insights:
        insights.append(DEFAULT_INSIGHT)
    return insights
