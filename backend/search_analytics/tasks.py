"""Background tasks for the analytics engine.
Provides a Celery task wrapper if Celery is configured. If Celery is not
installed, the task can be called synchronously.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model

from search_analytics.event_store import load_job_records, load_preparation_records, recent_window_start
from search_analytics.predictions import prediction_service

logger = logging.getLogger(__name__)

try:
    from celery import shared_task
    CELERY_AVAILABLE = True
except Exception:
    CELERY_AVAILABLE = False


def _warm_prediction_cache_sync(user_id):
    User = get_user_model()
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        logger.warning('Skipping prediction warm-up for missing user %s', user_id)
        return None

    records = load_job_records(user)
    prep_days = getattr(settings, 'ANALYTICS_PREP_LOOKBACK_DAYS', 90)
    prep_records = load_preparation_records(user, since=recent_window_start(prep_days))
    batch = prediction_service.run_predictions(user.pk, records, prep_records)
    logger.info('Warmed predictions for user %s (fingerprint=%s, simulated=%s)',
                user_id, batch.fingerprint, batch.simulated)
    return batch.fingerprint


if CELERY_AVAILABLE:
    @shared_task(bind=True)
    def warm_prediction_cache(self, user_id):
        return _warm_prediction_cache_sync(user_id)
else:
    def warm_prediction_cache(user_id):
        return _warm_prediction_cache_sync(user_id)


def enqueue_prediction_warmup(user_id):
    if CELERY_AVAILABLE:
        warm_prediction_cache.delay(user_id)
    else:
        warm_prediction_cache(user_id)
