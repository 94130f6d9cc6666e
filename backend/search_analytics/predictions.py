"""
Prediction cache and fallback simulator.

``PredictionService.run_predictions`` is cache-then-fetch per (user, fingerprint):

    Idle -> Fetching -> Cached            (remote call succeeded, simulated=False)
                     -> Failed -> Cached  (simulator result, simulated=True)

A cache hit does no network or simulation work. While one caller is fetching a
key, other callers for the same key wait on its ``Future`` instead of issuing a
second remote call. Entries are never invalidated here; expiry is whatever
``PREDICTION_CACHE_TIMEOUT`` hands the Django cache.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from search_analytics.exceptions import MalformedPredictionResponse, PredictionServiceError
from search_analytics.fingerprint import EMPTY_FINGERPRINT, compute_fingerprint
from search_analytics.prediction_client import PredictionClient, build_compact_jobs
from search_analytics.records import JobRecord, PreparationRecord, parse_timestamp

logger = logging.getLogger(__name__)

KIND_INTERVIEW_PROBABILITY = "interview_probability"
KIND_OFFER_PROBABILITY = "offer_probability"
KIND_TIMELINE_WEEKS = "timeline_weeks"
SIMULATED_KINDS = (KIND_INTERVIEW_PROBABILITY, KIND_OFFER_PROBABILITY, KIND_TIMELINE_WEEKS)

CONFIDENCE_BAND = 0.1
TIMELINE_BAND_WEEKS = 2
MIN_TIMELINE_WEEKS = 4
DEFAULT_INFLIGHT_WAIT = 60


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _probability_interval(score: float) -> Tuple[float, float]:
    return (max(0.0, score - CONFIDENCE_BAND), min(1.0, score + CONFIDENCE_BAND))


@dataclass(frozen=True)
class PredictionResult:
    kind: str
    summary: str = ""
    score: Any = None
    confidence: Optional[float] = None
    confidence_interval: Optional[Tuple[float, float]] = None
    recommendations: Tuple[str, ...] = ()
    scenario_analysis: Dict[str, float] = field(default_factory=dict)
    details: Dict[str, Any] = field(default_factory=dict)
    simulated: bool = False
    created_at: Optional[datetime] = None

    def as_dict(self) -> Dict:
        return {
            "kind": self.kind,
            "summary": self.summary,
            "score": self.score,
            "confidence": self.confidence,
            "confidence_interval": list(self.confidence_interval) if self.confidence_interval else None,
            "recommendations": list(self.recommendations),
            "scenario_analysis": dict(self.scenario_analysis),
            "details": dict(self.details),
            "simulated": self.simulated,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict, simulated: Optional[bool] = None) -> "PredictionResult":
        """Accepts cached payloads and remote responses (snake or camel case keys)."""
        if not isinstance(data, dict) or not data.get("kind"):
            raise MalformedPredictionResponse(f"Prediction entry without a kind: {data!r}")

        def pick(*keys, default=None):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        details = pick("details", default={})
        if not isinstance(details, dict):
            details = {"text": str(details)}

        try:
            confidence = pick("confidence")
            if confidence is not None:
                confidence = _clamp(float(confidence), 0.0, 1.0)
            interval = pick("confidence_interval", "confidenceInterval")
            if interval:
                interval = tuple(float(bound) for bound in interval)
                if len(interval) != 2:
                    raise ValueError(f"confidence interval needs two bounds, got {len(interval)}")
            recommendations = pick("recommendations", default=())
            if isinstance(recommendations, str):
                raise TypeError("recommendations must be a list")
            return cls(
                kind=str(data["kind"]),
                summary=str(pick("summary", default="")),
                score=pick("score"),
                confidence=confidence,
                confidence_interval=interval or None,
                recommendations=tuple(str(r) for r in recommendations),
                scenario_analysis=dict(pick("scenario_analysis", "scenarioAnalysis", default={})),
                details=details,
                simulated=bool(data.get("simulated", False)) if simulated is None else simulated,
                created_at=parse_timestamp(pick("created_at", "createdAt")),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedPredictionResponse(f"Bad field in {data['kind']!r} prediction: {exc}") from exc


@dataclass(frozen=True)
class PredictionBatch:
    fingerprint: str
    simulated: bool
    predictions: Tuple[PredictionResult, ...] = ()

    def as_dict(self) -> Dict:
        return {
            "fingerprint": self.fingerprint,
            "simulated": self.simulated,
            "predictions": [p.as_dict() for p in self.predictions],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PredictionBatch":
        return cls(
            fingerprint=data["fingerprint"],
            simulated=bool(data["simulated"]),
            predictions=tuple(PredictionResult.from_dict(p) for p in data.get("predictions", [])),
        )

    @classmethod
    def empty(cls) -> "PredictionBatch":
        return cls(fingerprint=EMPTY_FINGERPRINT, simulated=False, predictions=())


def outcome_counts(records: Sequence[JobRecord]) -> Tuple[int, int, int]:
    """(total, interviews, offers); phone screens count as interviews."""
    interviews = 0
    offers = 0
    for r in records:
        status = r.status_key
        if "interview" in status or "phone" in status:
            interviews += 1
        if "offer" in status:
            offers += 1
    return len(records), interviews, offers


def simulate_predictions(records: Sequence[JobRecord], now: Optional[datetime] = None) -> List[PredictionResult]:
    """Deterministic heuristic stand-in for the remote model: always three results."""
    now = now or timezone.now()
    total, interviews, offers = outcome_counts(records)
    denominator = max(1, total)

    interview_prob = _clamp(0.15 + interviews / denominator * 0.6, 0.05, 0.95)
    offer_prob = _clamp(0.03 + offers / denominator * 0.7, 0.01, 0.9)
    timeline_weeks = max(MIN_TIMELINE_WEEKS, round(12 - interviews))

    return [
        PredictionResult(
            kind=KIND_INTERVIEW_PROBABILITY,
            summary="Estimated probability of getting interviews based on activity and past performance",
            score=interview_prob,
            confidence=0.6,
            confidence_interval=_probability_interval(interview_prob),
            recommendations=(
                "Practice behavioral questions",
                "Schedule mock interviews",
                "Tailor resume for target roles",
            ),
            scenario_analysis={
                "Apply to 5 jobs/week": min(1.0, interview_prob + 0.05),
                "Apply to 10 jobs/week": min(1.0, interview_prob + 0.12),
            },
            details={"interviews": interviews, "total": total},
            simulated=True,
            created_at=now,
        ),
        PredictionResult(
            kind=KIND_OFFER_PROBABILITY,
            summary="Estimated probability of receiving an offer",
            score=offer_prob,
            confidence=0.55,
            confidence_interval=_probability_interval(offer_prob),
            recommendations=(
                "Target high-fit roles",
                "Prepare post-interview follow-ups",
            ),
            scenario_analysis={
                "Apply to 5 jobs/week": min(1.0, offer_prob + 0.05),
                "Apply to 10 jobs/week": min(1.0, offer_prob + 0.10),
            },
            details={"offers": offers, "total": total},
            simulated=True,
            created_at=now,
        ),
        PredictionResult(
            kind=KIND_TIMELINE_WEEKS,
            summary="Estimated weeks to secure an offer",
            score=timeline_weeks,
            confidence=0.5,
            confidence_interval=(max(1, timeline_weeks - TIMELINE_BAND_WEEKS), timeline_weeks + TIMELINE_BAND_WEEKS),
            recommendations=("Increase weekly application volume to shorten timeline",),
            details={"timeline_weeks": timeline_weeks},
            simulated=True,
            created_at=now,
        ),
    ]


class PredictionService:
    """Caches prediction batches per (user, fingerprint) and dedups in-flight work."""

    CACHE_PREFIX = "predictions"

    def __init__(self, client: Optional[PredictionClient] = None):
        self.client = client
        self._lock = threading.Lock()
        self._inflight: Dict[str, Future] = {}

    def cache_key(self, user_id, fingerprint: str) -> str:
        return f"{self.CACHE_PREFIX}:{user_id}:{fingerprint}"

    @property
    def cache_timeout(self) -> Optional[int]:
        return getattr(settings, 'PREDICTION_CACHE_TIMEOUT', None)

    @property
    def inflight_wait(self) -> float:
        return getattr(settings, 'PREDICTION_INFLIGHT_WAIT', DEFAULT_INFLIGHT_WAIT)

    def _client(self) -> PredictionClient:
        return self.client or PredictionClient()

    def _compute(
        self,
        fingerprint: str,
        records: Sequence[JobRecord],
        prep_records: Sequence[PreparationRecord],
    ) -> PredictionBatch:
        try:
            raw = self._client().fetch_predictions(build_compact_jobs(records, prep_records))
            results = tuple(PredictionResult.from_dict(p, simulated=False) for p in raw)
            return PredictionBatch(fingerprint=fingerprint, simulated=False, predictions=results)
        except PredictionServiceError as exc:
            logger.warning("Remote predictions unavailable (%s); using simulation", exc)
        return PredictionBatch(
            fingerprint=fingerprint,
            simulated=True,
            predictions=tuple(simulate_predictions(records)),
        )

    def run_predictions(
        self,
        user_id,
        records: Sequence[JobRecord],
        prep_records: Sequence[PreparationRecord] = (),
    ) -> PredictionBatch:
        if not user_id or not records:
            return PredictionBatch.empty()

        fingerprint = compute_fingerprint(records)
        key = self.cache_key(user_id, fingerprint)

        cached = cache.get(key)
        if cached is not None:
            logger.debug("Prediction cache hit for %s", key)
            return PredictionBatch.from_dict(cached)

        with self._lock:
            # Another caller may have populated the key while we waited for the lock.
            cached = cache.get(key)
            if cached is not None:
                return PredictionBatch.from_dict(cached)
            future = self._inflight.get(key)
            is_leader = future is None
            if is_leader:
                future = Future()
                self._inflight[key] = future

        if not is_leader:
            logger.debug("Joining in-flight prediction for %s", key)
            try:
                return PredictionBatch.from_dict(future.result(timeout=self.inflight_wait))
            except FutureTimeoutError:
                logger.warning("Timed out waiting on in-flight prediction for %s; simulating", key)
                return PredictionBatch(
                    fingerprint=fingerprint,
                    simulated=True,
                    predictions=tuple(simulate_predictions(records)),
                )

        logger.info("Prediction cache miss for %s", key)
        try:
            payload = self._compute(fingerprint, records, prep_records).as_dict()
            cache.set(key, payload, self.cache_timeout)
            future.set_result(payload)
        except Exception as exc:
            future.set_exception(exc)
            raise
        finally:
            with self._lock:
                self._inflight.pop(key, None)

        return PredictionBatch.from_dict(payload)


prediction_service = PredictionService()
