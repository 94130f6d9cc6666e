import logging

from django.db.models.signals import pre_save
from django.dispatch import receiver
from django.utils import timezone

from search_analytics.models import JobEntry

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=JobEntry)
def stamp_status_change(sender, instance: JobEntry, **kwargs):
    """Record when a job last moved between statuses.

    Callers that set ``status_changed_at`` explicitly (imports, backfills) keep
    their value; otherwise a status transition stamps the current time.
    """
    if instance.pk is None:
        return
    try:
        previous = sender.objects.only('status', 'status_changed_at').get(pk=instance.pk)
    except sender.DoesNotExist:
        return
    if previous.status == instance.status:
        return
    if instance.status_changed_at and instance.status_changed_at != previous.status_changed_at:
        return
    instance.status_changed_at = timezone.now()
    logger.debug("Job %s moved %s -> %s", instance.pk, previous.status, instance.status)
