"""
Application-material and customization signals.

Cover letters and tailoring are not tracked for most jobs yet, so the default
source samples them (70% of applications assumed to carry a cover letter).
Keep that assumption behind ``MaterialSignals`` so real tracked data can
replace it without touching the aggregation code.
"""
import random
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from search_analytics.metrics import clamp_rate
from search_analytics.records import (
    STATUS_INTERVIEW,
    STATUS_OFFER,
    STATUS_PHONE_SCREEN,
    JobRecord,
)

ASSUMED_COVER_LETTER_SHARE = 0.7
POSITIVE_STATUSES = (STATUS_PHONE_SCREEN, STATUS_INTERVIEW, STATUS_OFFER)


class MaterialSignals(ABC):
    """Answers "did this application include a cover letter?"."""

    @abstractmethod
    def has_cover_letter(self, record: JobRecord) -> bool:
        ...


class SampledMaterialSignals(MaterialSignals):
    """Placeholder heuristic: each application has a cover letter with fixed probability."""

    def __init__(self, probability: float = ASSUMED_COVER_LETTER_SHARE, rng: Optional[random.Random] = None):
        self.probability = probability
        self.rng = rng or random.Random()

    def has_cover_letter(self, record: JobRecord) -> bool:
        return self.rng.random() < self.probability


class TrackedMaterialSignals(MaterialSignals):
    """Uses the tracked flag when present, deferring to ``fallback`` otherwise."""

    def __init__(self, fallback: Optional[MaterialSignals] = None):
        self.fallback = fallback or SampledMaterialSignals()

    def has_cover_letter(self, record: JobRecord) -> bool:
        if record.cover_letter_attached is not None:
            return record.cover_letter_attached
        return self.fallback.has_cover_letter(record)


def material_impact(records: Iterable[JobRecord], signals: Optional[MaterialSignals] = None) -> dict:
    """Positive-response rate with vs without a cover letter."""
    signals = signals or TrackedMaterialSignals()
    with_total = with_responses = 0
    without_total = without_responses = 0
    for r in records:
        responded = r.has_status(*POSITIVE_STATUSES)
        if signals.has_cover_letter(r):
            with_total += 1
            with_responses += int(responded)
        else:
            without_total += 1
            without_responses += int(responded)
    return {
        "with_cover_letter": clamp_rate(with_responses / with_total) if with_total else 0.0,
        "without_cover_letter": clamp_rate(without_responses / without_total) if without_total else 0.0,
    }


def customization_impact(records: Sequence[JobRecord]) -> dict:
    """Modelled share of successes by tailoring level (40/35/15 weighting, normalised).

    Zero successes yields all zeros.
    """
    successes = sum(1 for r in records if r.has_status(*POSITIVE_STATUSES))
    if successes == 0:
        return {"highly_customized": 0.0, "partially_customized": 0.0, "generic": 0.0}
    highly = successes * 0.4 / successes
    partially = successes * 0.35 / successes
    generic = successes * 0.15 / successes
    total = highly + partially + generic
    return {
        "highly_customized": highly / total,
        "partially_customized": partially / total,
        "generic": generic / total,
    }
