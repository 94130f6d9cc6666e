"""Industry benchmark table used for rate comparisons."""
from dataclasses import dataclass
from typing import Dict, Mapping

from search_analytics.exceptions import BenchmarkTableError
from search_analytics.records import UNKNOWN


@dataclass(frozen=True)
class Benchmark:
    avg_response_days: float
    offer_rate: float

    def as_dict(self) -> Dict:
        return {
            "avg_response_days": self.avg_response_days,
            "offer_rate": self.offer_rate,
        }


# Static industry figures; the "(unknown)" row is the fallback for unseen keys.
INDUSTRY_BENCHMARKS: Dict[str, Benchmark] = {
    "Software": Benchmark(avg_response_days=10, offer_rate=0.08),
    "Finance": Benchmark(avg_response_days=12, offer_rate=0.06),
    "Healthcare": Benchmark(avg_response_days=9, offer_rate=0.07),
    "Education": Benchmark(avg_response_days=7, offer_rate=0.05),
    UNKNOWN: Benchmark(avg_response_days=11, offer_rate=0.06),
}


def coerce_benchmarks(table: Mapping) -> Dict[str, Benchmark]:
    """Accept Benchmark values or ``{"avgResponseDays", "offerRate"}``-style dicts.

    Raises BenchmarkTableError when the "(unknown)" fallback row is missing.
    """
    out: Dict[str, Benchmark] = {}
    for key, value in table.items():
        if isinstance(value, Benchmark):
            out[key] = value
            continue
        days = value.get("avg_response_days", value.get("avgResponseDays", 0))
        rate = value.get("offer_rate", value.get("offerRate", 0))
        out[key] = Benchmark(avg_response_days=float(days or 0), offer_rate=float(rate or 0))
    if UNKNOWN not in out:
        raise BenchmarkTableError(f'Benchmark table must include a "{UNKNOWN}" entry')
    return out


def benchmark_for(table: Mapping[str, Benchmark], key: str) -> Benchmark:
    return table.get(key) or table[UNKNOWN]
