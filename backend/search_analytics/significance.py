"""
Lightweight significance estimates over application outcomes.

Both tests are deliberately coarse approximations, not calibrated statistics:
  * industry vs offer: chi-square-like sum, p ~= exp(-chi2 / 2)
  * time to offer:     one-sample t-like statistic, p ~= 2 * (1 - min(1, |t| / 3))
The "significant" threshold used by the dashboard was tuned against these exact
formulas, so they must not be swapped for textbook versions without retuning.
"""
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from search_analytics.metrics import GROUP_INDUSTRY, group_key, is_offer
from search_analytics.records import JobRecord

SIGNIFICANCE_THRESHOLD = 0.05
MIN_OFFERS_FOR_TIMING_TEST = 3

INDUSTRY_TEST_NAME = "Industry Impact (χ² test)"
TIMING_TEST_NAME = "Time to Offer Distribution"
INSUFFICIENT_DATA_NAME = "Insufficient Data"


@dataclass(frozen=True)
class StatisticalTest:
    name: str
    p_value: float
    effect_size: float = 0.0

    @property
    def is_significant(self) -> bool:
        return self.p_value < SIGNIFICANCE_THRESHOLD

    def as_dict(self) -> Dict:
        return {
            "name": self.name,
            "p_value": self.p_value,
            "effect_size": self.effect_size,
        }


INSUFFICIENT_DATA = StatisticalTest(name=INSUFFICIENT_DATA_NAME, p_value=1.0, effect_size=0)


def industry_chi_square(records: Sequence[JobRecord]) -> float:
    """Sum over industries of (observed - expected)^2 / max(1, expected) for offers."""
    total = len(records)
    if total == 0:
        return 0.0
    overall_offers = sum(1 for r in records if is_offer(r))
    groups: Dict[str, List[JobRecord]] = {}
    for r in records:
        groups.setdefault(group_key(r, GROUP_INDUSTRY), []).append(r)

    chi_square = 0.0
    for members in groups.values():
        observed = sum(1 for r in members if is_offer(r))
        expected = len(members) * overall_offers / total
        chi_square += (observed - expected) ** 2 / max(1, expected)
    return chi_square


def _industry_test(records: Sequence[JobRecord]) -> StatisticalTest:
    chi_square = industry_chi_square(records)
    p_value = min(1.0, max(0.0, math.exp(-chi_square / 2)))
    return StatisticalTest(
        name=INDUSTRY_TEST_NAME,
        p_value=p_value,
        effect_size=math.sqrt(chi_square / len(records)),
    )


def _timing_test(offer_durations_ms: Sequence[float]) -> StatisticalTest:
    n = len(offer_durations_ms)
    mean = sum(offer_durations_ms) / n
    variance = sum((x - mean) ** 2 for x in offer_durations_ms) / n
    sem = math.sqrt(variance) / math.sqrt(n)
    t_stat = mean / max(1.0, sem)
    p_value = 2 * (1 - min(1.0, abs(t_stat) / 3))
    return StatisticalTest(
        name=TIMING_TEST_NAME,
        p_value=min(1.0, max(0.0, p_value)),
        effect_size=abs(t_stat),
    )


def statistical_significance(records: Sequence[JobRecord]) -> List[StatisticalTest]:
    """Run whichever tests the data supports; never returns an empty list.

    The industry test needs at least two industry groups. The timing test needs
    at least three offer records, two of them with both timestamps. Durations
    are raw millisecond deltas here, sign included, to match the tuned formula.
    When neither applies, the single "Insufficient Data" sentinel is returned.
    """
    tests: List[StatisticalTest] = []

    industries = {group_key(r, GROUP_INDUSTRY) for r in records}
    if len(industries) > 1:
        tests.append(_industry_test(records))

    offers = [r for r in records if is_offer(r)]
    if len(offers) >= MIN_OFFERS_FOR_TIMING_TEST:
        durations = [ms for ms in (r.elapsed_ms() for r in offers) if ms is not None]
        if len(durations) > 1:
            tests.append(_timing_test(durations))

    if not tests:
        tests.append(INSUFFICIENT_DATA)
    return tests
