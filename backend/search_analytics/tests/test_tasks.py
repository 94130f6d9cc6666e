from unittest.mock import patch

import pytest
from django.core.cache import cache

from search_analytics import tasks
from search_analytics.predictions import prediction_service
from search_analytics.tests.factories import JobEntryFactory, UserFactory


@pytest.mark.django_db
class TestWarmPredictionCache:
    def setup_method(self):
        self.user = UserFactory()

    def test_warms_cache_for_current_jobs(self, settings):
        settings.PREDICTION_SERVICE_URL = ''
        JobEntryFactory(candidate=self.user, status='interview')

        fingerprint = tasks.warm_prediction_cache(self.user.pk)

        assert fingerprint.startswith('v1_')
        cached = cache.get(prediction_service.cache_key(self.user.pk, fingerprint))
        assert cached['simulated'] is True
        assert len(cached['predictions']) == 3

    def test_missing_user_is_skipped(self):
        assert tasks.warm_prediction_cache(987654) is None

    def test_enqueue_uses_celery_when_available(self):
        with patch.object(tasks, 'CELERY_AVAILABLE', True), \
                patch.object(tasks.warm_prediction_cache, 'delay') as delay:
            tasks.enqueue_prediction_warmup(self.user.pk)
        delay.assert_called_once_with(self.user.pk)
