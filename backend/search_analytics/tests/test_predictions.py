import threading
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.core.cache import cache
from django.utils import timezone

from search_analytics.exceptions import MalformedPredictionResponse, PredictionServiceError
from search_analytics.fingerprint import compute_fingerprint
from search_analytics.prediction_client import PredictionClient, build_compact_jobs
from search_analytics.predictions import (
    SIMULATED_KINDS,
    PredictionBatch,
    PredictionResult,
    PredictionService,
    simulate_predictions,
)
from search_analytics.records import PreparationRecord
from search_analytics.tests.factories import job_record

REMOTE_URL = 'http://predictions.test/api/predict'


def _ok_response(payload):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


REMOTE_PAYLOAD = {
    'predictions': [
        {
            'kind': 'interview_probability',
            'summary': 'From the model',
            'score': 0.42,
            'confidence': 0.8,
            'confidenceInterval': [0.32, 0.52],
            'recommendations': ['Keep going'],
            'scenarioAnalysis': {'Apply to 5 jobs/week': 0.47},
        },
    ],
}


@pytest.fixture
def remote_configured(settings):
    settings.PREDICTION_SERVICE_URL = REMOTE_URL
    settings.PREDICTION_SERVICE_API_KEY = 'secret'
    settings.PREDICTION_CACHE_TIMEOUT = 3600
    return settings


class TestSimulator:
    def test_three_named_predictions(self):
        results = simulate_predictions([job_record(status='Applied')])
        assert tuple(r.kind for r in results) == SIMULATED_KINDS
        assert all(r.simulated for r in results)

    def test_heuristic_values(self):
        records = [job_record(status='Interview'), job_record(status='Phone Screen'),
                   job_record(status='Offer'), job_record(status='Applied')]
        interview, offer, timeline = simulate_predictions(records)

        assert interview.score == pytest.approx(0.15 + 2 / 4 * 0.6)
        assert interview.confidence_interval == (pytest.approx(0.35), pytest.approx(0.55))
        assert interview.details == {'interviews': 2, 'total': 4}
        assert interview.scenario_analysis['Apply to 10 jobs/week'] == pytest.approx(0.57)
        assert offer.score == pytest.approx(0.03 + 1 / 4 * 0.7)
        assert timeline.score == 10
        assert timeline.confidence_interval == (8, 12)

    def test_bounds(self):
        all_interviews = [job_record(status='Interview') for _ in range(20)]
        interview, offer, timeline = simulate_predictions(all_interviews)
        assert interview.score == pytest.approx(0.75)
        assert offer.score == pytest.approx(0.03)
        assert timeline.score == 4
        assert interview.confidence_interval[1] <= 1.0

        all_offers = [job_record(status='Offer') for _ in range(5)]
        _, offer, _ = simulate_predictions(all_offers)
        assert offer.score == pytest.approx(0.73)
        assert offer.confidence_interval == (pytest.approx(0.63), pytest.approx(0.83))


class TestPredictionService:
    def setup_method(self):
        self.service = PredictionService()
        self.records = [job_record(id=1, status='Applied'), job_record(id=2, status='Interview')]

    def test_neutral_result_without_user_or_jobs(self):
        assert self.service.run_predictions(None, self.records) == PredictionBatch.empty()
        assert self.service.run_predictions(7, []).predictions == ()

    def test_remote_success_is_cached(self, remote_configured):
        with patch('search_analytics.prediction_client.requests.post', return_value=_ok_response(REMOTE_PAYLOAD)) as post:
            batch = self.service.run_predictions(7, self.records)

        assert batch.simulated is False
        assert batch.fingerprint == compute_fingerprint(self.records)
        assert batch.predictions[0].kind == 'interview_probability'
        assert batch.predictions[0].confidence_interval == (0.32, 0.52)
        assert batch.predictions[0].simulated is False

        post.assert_called_once()
        kwargs = post.call_args.kwargs
        assert kwargs['headers']['Authorization'] == 'Bearer secret'
        assert [job['id'] for job in kwargs['json']['jobs']] == [1, 2]
        assert cache.get(self.service.cache_key(7, batch.fingerprint)) is not None

    def test_remote_failure_falls_back_to_simulation(self, remote_configured):
        with patch('search_analytics.prediction_client.requests.post',
                   side_effect=requests.exceptions.ConnectionError('down')):
            batch = self.service.run_predictions(7, self.records)

        assert batch.simulated is True
        assert [p.kind for p in batch.predictions] == list(SIMULATED_KINDS)
        assert all(p.simulated for p in batch.predictions)

    @pytest.mark.parametrize('payload', [{'predictions': []}, {'debug': 'no predictions'}, ['not', 'a', 'dict']])
    def test_unusable_response_falls_back(self, remote_configured, payload):
        with patch('search_analytics.prediction_client.requests.post', return_value=_ok_response(payload)):
            batch = self.service.run_predictions(7, self.records)
        assert batch.simulated is True
        assert len(batch.predictions) == 3

    @pytest.mark.parametrize('bad_fields', [
        {'confidence': 'high'},
        {'scenarioAnalysis': ['a', 'b']},
        {'confidenceInterval': 0.5},
        {'confidence_interval': [0.1, 0.2, 0.3]},
        {'recommendations': 7},
    ])
    def test_bad_prediction_fields_fall_back(self, remote_configured, bad_fields):
        entry = dict(REMOTE_PAYLOAD['predictions'][0])
        entry.pop('confidenceInterval')
        entry.pop('scenarioAnalysis')
        entry.update(bad_fields)
        with patch('search_analytics.prediction_client.requests.post',
                   return_value=_ok_response({'predictions': [entry]})):
            batch = self.service.run_predictions(7, self.records)
        assert batch.simulated is True
        assert [p.kind for p in batch.predictions] == list(SIMULATED_KINDS)
        assert cache.get(self.service.cache_key(7, batch.fingerprint))['simulated'] is True

    def test_bad_field_raises_malformed_response(self):
        with pytest.raises(MalformedPredictionResponse):
            PredictionResult.from_dict({'kind': 'offer_probability', 'confidence': 'high'})

    def test_http_error_falls_back(self, remote_configured):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('503')
        with patch('search_analytics.prediction_client.requests.post', return_value=response):
            batch = self.service.run_predictions(7, self.records)
        assert batch.simulated is True

    def test_unconfigured_service_simulates_without_network(self, settings):
        settings.PREDICTION_SERVICE_URL = ''
        with patch('search_analytics.prediction_client.requests.post') as post:
            batch = self.service.run_predictions(7, self.records)
        post.assert_not_called()
        assert batch.simulated is True

    def test_back_to_back_calls_compute_once(self, remote_configured):
        with patch('search_analytics.prediction_client.requests.post',
                   side_effect=requests.exceptions.Timeout('slow')) as post:
            first = self.service.run_predictions(7, self.records)
            second = self.service.run_predictions(7, list(reversed(self.records)))
        assert post.call_count == 1
        assert first == second

    def test_cache_is_keyed_by_user_and_fingerprint(self, remote_configured):
        with patch('search_analytics.prediction_client.requests.post',
                   return_value=_ok_response(REMOTE_PAYLOAD)) as post:
            self.service.run_predictions(7, self.records)
            self.service.run_predictions(8, self.records)
            self.service.run_predictions(7, self.records + [job_record(id=3, status='Offer')])
        assert post.call_count == 3

    def test_concurrent_requests_share_one_remote_call(self, remote_configured):
        started = threading.Event()
        release = threading.Event()

        def slow_post(*args, **kwargs):
            started.set()
            release.wait(timeout=5)
            return _ok_response(REMOTE_PAYLOAD)

        results = []

        def run():
            results.append(self.service.run_predictions(7, self.records))

        with patch('search_analytics.prediction_client.requests.post', side_effect=slow_post) as post:
            leader = threading.Thread(target=run)
            leader.start()
            assert started.wait(timeout=5)
            follower = threading.Thread(target=run)
            follower.start()
            release.set()
            leader.join(timeout=5)
            follower.join(timeout=5)

        assert post.call_count == 1
        assert len(results) == 2
        assert results[0] == results[1]
        assert results[0].simulated is False


class TestPredictionClient:
    def test_unconfigured_client_raises(self):
        with pytest.raises(PredictionServiceError):
            PredictionClient(url='').fetch_predictions([])

    def test_non_json_body_is_malformed(self):
        response = MagicMock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError('bad json')
        with patch('search_analytics.prediction_client.requests.post', return_value=response):
            with pytest.raises(MalformedPredictionResponse):
                PredictionClient(url=REMOTE_URL).fetch_predictions([])

    def test_compact_jobs_carry_prep_summaries(self):
        now = timezone.now()
        records = [
            job_record(id=1, title='Backend Engineer', company='Globex'),
            job_record(id=2, title='Data Analyst', company='Initech'),
        ]
        prep = [
            PreparationRecord(activity_type='Mock Interview', minutes=45, activity_date=now, job_id=1),
            PreparationRecord(activity_type='research', description='Read about Initech', minutes=20.4,
                              activity_date=now - timedelta(days=3)),
            PreparationRecord(activity_type='practice', notes='data analyst drills', minutes=15, activity_date=now),
            PreparationRecord(activity_type='mock interview', description='Initech panel', minutes=60,
                              activity_date=now - timedelta(days=120)),
        ]
        jobs = build_compact_jobs(records, prep, now=now, lookback_days=90)

        assert jobs[0]['prep_summary'] == {'prep_minutes': 45, 'mock_count': 1}
        assert jobs[1]['prep_summary'] == {'prep_minutes': 35, 'mock_count': 0}
        assert set(jobs[0]) >= {'id', 'title', 'company', 'industry', 'status', 'prep_summary'}
