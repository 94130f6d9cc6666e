"""
Client for the remote predictive model.

Request body is ``{"jobs": [compact job, ...]}``; a usable response carries a
non-empty ``predictions`` array. Anything else raises ``PredictionServiceError``
so the caller can fall back to the local simulator.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import requests
from django.conf import settings
from django.utils import timezone

from search_analytics.records import JobRecord, PreparationRecord
from search_analytics.exceptions import MalformedPredictionResponse, PredictionServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 25
PREP_LOOKBACK_DAYS = 90


def _prep_matches(prep: PreparationRecord, record: JobRecord) -> bool:
    if prep.job_id is not None and record.id is not None and str(prep.job_id) == str(record.id):
        return True
    text = f"{prep.description} {prep.notes}".lower()
    title = (record.title or "").lower()
    if title and title in text:
        return True
    company = (record.company or "").lower()
    return bool(company) and company in text


def prep_summary(record: JobRecord, prep_records: Iterable[PreparationRecord]) -> Dict:
    minutes = 0.0
    mocks = 0
    for prep in prep_records:
        if not _prep_matches(prep, record):
            continue
        minutes += prep.minutes or 0
        if prep.is_mock_interview:
            mocks += 1
    return {"prep_minutes": round(minutes), "mock_count": mocks}


def build_compact_jobs(
    records: Sequence[JobRecord],
    prep_records: Sequence[PreparationRecord] = (),
    now: Optional[datetime] = None,
    lookback_days: Optional[int] = None,
) -> List[Dict]:
    """Compact job payloads with preparation aggregates from the lookback window."""
    now = now or timezone.now()
    if lookback_days is None:
        lookback_days = getattr(settings, 'ANALYTICS_PREP_LOOKBACK_DAYS', PREP_LOOKBACK_DAYS)
    floor = now - timedelta(days=lookback_days)
    recent = [p for p in prep_records if p.activity_date is None or p.activity_date >= floor]

    jobs = []
    for r in records:
        jobs.append({
            "id": r.id,
            "title": r.title,
            "company": r.company,
            "industry": r.industry,
            "status": r.status,
            "created_at": r.created_at.isoformat() if r.created_at else None,
            "status_changed_at": r.status_changed_at.isoformat() if r.status_changed_at else None,
            "prep_summary": prep_summary(r, recent),
        })
    return jobs


class PredictionClient:
    """Thin wrapper over ``requests.post`` to the configured prediction service."""

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else getattr(settings, 'PREDICTION_SERVICE_URL', '')
        self.api_key = api_key if api_key is not None else getattr(settings, 'PREDICTION_SERVICE_API_KEY', '')
        self.timeout = timeout if timeout is not None else getattr(settings, 'PREDICTION_SERVICE_TIMEOUT', DEFAULT_TIMEOUT)

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch_predictions(self, compact_jobs: List[Dict]) -> List[Dict]:
        if not self.is_configured:
            raise PredictionServiceError("Prediction service URL is not configured")

        logger.debug("Requesting predictions for %d jobs", len(compact_jobs))
        try:
            response = requests.post(
                self.url,
                json={"jobs": compact_jobs},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise PredictionServiceError(f"Prediction request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedPredictionResponse("Prediction response is not JSON") from exc

        predictions = data.get("predictions") if isinstance(data, dict) else None
        if not isinstance(predictions, list) or not predictions:
            raise MalformedPredictionResponse("Prediction response has no predictions")
        return predictions
