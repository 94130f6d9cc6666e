"""Qualitative success patterns and the rule-based recommendations built on them."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from search_analytics.metrics import (
    COMPANY_SIZE_LARGE,
    GROUP_INDUSTRY,
    company_size_of,
    group_key,
    weekday_name,
)
from search_analytics.records import (
    STATUS_INTERVIEW,
    STATUS_OFFER,
    STATUS_REJECTED,
    JobRecord,
)

IMPACT_POSITIVE = "positive"
IMPACT_NEGATIVE = "negative"
IMPACT_NEUTRAL = "neutral"

SUCCESS_STATUSES = (STATUS_OFFER, STATUS_INTERVIEW)
WEEKEND_DAYS = ("Saturday", "Sunday")
WEEKEND_SHARE_THRESHOLD = 0.3
LARGE_COMPANY_SHARE_THRESHOLD = 0.5

# Coarser than metrics.infer_role_type; only these three buckets feed patterns.
_PATTERN_ROLES = (("engineer", "Engineer"), ("manager", "Manager"), ("data", "Data"))


@dataclass(frozen=True)
class SuccessPattern:
    title: str
    description: str
    impact: str

    def as_dict(self) -> Dict:
        return {"title": self.title, "description": self.description, "impact": self.impact}


@dataclass
class PatternAnalysis:
    successful: List[JobRecord] = field(default_factory=list)
    rejected: List[JobRecord] = field(default_factory=list)
    pending: List[JobRecord] = field(default_factory=list)
    overall_success_rate: float = 0.0
    patterns: List[SuccessPattern] = field(default_factory=list)

    @property
    def positive_patterns(self) -> List[SuccessPattern]:
        return [p for p in self.patterns if p.impact == IMPACT_POSITIVE]

    def as_dict(self) -> Dict:
        return {
            "successful_count": len(self.successful),
            "rejected_count": len(self.rejected),
            "pending_count": len(self.pending),
            "successful_ids": [r.id for r in self.successful],
            "rejected_ids": [r.id for r in self.rejected],
            "overall_success_rate": self.overall_success_rate,
            "patterns": [p.as_dict() for p in self.patterns],
        }


def _pattern_role(title) -> str:
    lowered = (title or "").lower()
    for keyword, label in _PATTERN_ROLES:
        if keyword in lowered:
            return label
    return "Other"


def analyze_patterns(records: Sequence[JobRecord]) -> PatternAnalysis:
    """Bucket outcomes and derive threshold-based pattern statements."""
    analysis = PatternAnalysis()
    for r in records:
        if r.has_status(*SUCCESS_STATUSES):
            analysis.successful.append(r)
        elif r.has_status(STATUS_REJECTED):
            analysis.rejected.append(r)
        else:
            analysis.pending.append(r)

    successful = analysis.successful
    rejected = analysis.rejected
    analysis.overall_success_rate = len(successful) / len(records) if records else 0.0

    industry_counts = Counter(group_key(r, GROUP_INDUSTRY) for r in successful)
    if industry_counts:
        top_industry, top_count = max(industry_counts.items(), key=lambda kv: kv[1])
        if top_count > 0:
            analysis.patterns.append(SuccessPattern(
                title=f"Strong in {top_industry}",
                description=(
                    f"Your highest success rate is in {top_industry} with "
                    f"{top_count} successful applications."
                ),
                impact=IMPACT_POSITIVE,
            ))

    if successful and "Engineer" in {_pattern_role(r.title) for r in successful}:
        analysis.patterns.append(SuccessPattern(
            title="Engineer Roles Performing Well",
            description="Engineer positions are showing strong success rates. Consider focusing on similar roles.",
            impact=IMPACT_POSITIVE,
        ))

    weekend = sum(1 for r in successful if weekday_name(r) in WEEKEND_DAYS)
    if weekend > len(successful) * WEEKEND_SHARE_THRESHOLD:
        analysis.patterns.append(SuccessPattern(
            title="Weekend Applications Effective",
            description=(
                f"{weekend} of your {len(successful)} successful applications were submitted "
                "on weekends (over 30%). Consider this timing."
            ),
            impact=IMPACT_POSITIVE,
        ))

    if len(rejected) > len(successful) and successful:
        analysis.patterns.append(SuccessPattern(
            title="High Rejection Rate",
            description=(
                f"You have {len(rejected)} rejections vs {len(successful)} successes. "
                "Focus on role fit and customization."
            ),
            impact=IMPACT_NEGATIVE,
        ))

    large = sum(1 for r in successful if company_size_of(r) == COMPANY_SIZE_LARGE)
    if large > len(successful) * LARGE_COMPANY_SHARE_THRESHOLD:
        analysis.patterns.append(SuccessPattern(
            title="Large Company Success",
            description=(
                f"{large} of your {len(successful)} successes came from large companies. "
                "They may value your experience or profile better."
            ),
            impact=IMPACT_POSITIVE,
        ))

    return analysis


def generate_recommendations(records: Sequence[JobRecord], analysis: PatternAnalysis) -> List[str]:
    """Fixed-order rule list; the same inputs always give the same output."""
    recommendations: List[str] = []
    total = len(records)
    successful = len(analysis.successful)
    rejected = len(analysis.rejected)
    success_rate = analysis.overall_success_rate

    if success_rate < 0.1 and total > 5:
        recommendations.append(
            f"📈 Your success rate is low ({success_rate * 100:.1f}%). Focus on: (1) More targeted role "
            "selection, (2) Improved resume tailoring, (3) Higher quality cover letters."
        )
    elif success_rate >= 0.2:
        recommendations.append(
            f"✅ Excellent success rate ({success_rate * 100:.1f}%)! Maintain your current strategy and "
            "consider slightly expanding your search scope."
        )

    if rejected > successful and rejected > 2:
        recommendations.append(
            f"🔍 You have more rejections ({rejected}) than successes ({successful}). Consider: (1) Higher "
            "role fit standards before applying, (2) Enhanced application customization, (3) Seeking "
            "feedback on applications."
        )

    if 0 < total < 10:
        recommendations.append(
            f"📊 Limited application volume ({total}). Increase weekly applications to 5-7 to build a "
            "larger pipeline and accelerate learning."
        )

    recommendations.append(
        "💼 Prioritize customization: highly tailored applications show 2-3x higher success rates. "
        "Allocate extra time to research companies and tailor materials."
    )
    recommendations.append(
        "⏰ Track which days/times your applications get the best response rates. Submit applications "
        "early in the week and during business hours when possible."
    )
    recommendations.append(
        "📄 Application materials matter: include a cover letter whenever possible, it can increase "
        "response rates by 15-25%. Use AI tools to generate high-quality, personalized letters quickly."
    )

    positive = analysis.positive_patterns
    if positive:
        titles = ", ".join(p.title for p in positive)
        recommendations.append(
            f"🎯 Lean into your strengths: {titles} are working well. Double down on similar "
            "opportunities and roles."
        )

    return recommendations
