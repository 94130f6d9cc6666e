"""
Test factories for job entries and preparation activities.
Uses factory_boy for consistent test data generation.
"""
from datetime import datetime

import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model
from django.utils import timezone

from search_analytics.models import JobEntry, PreparationActivity
from search_analytics.records import JobRecord

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Factory for creating test users"""
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f'user{n}')
    email = factory.Sequence(lambda n: f'user{n}@example.com')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True


class JobEntryFactory(DjangoModelFactory):
    """Factory for tracked job applications"""
    class Meta:
        model = JobEntry

    candidate = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f'Software Engineer {n}')
    company_name = factory.Sequence(lambda n: f'Company {n}')
    industry = 'Software'
    job_type = 'ft'
    status = 'applied'
    created_at = factory.LazyFunction(timezone.now)


class PreparationActivityFactory(DjangoModelFactory):
    """Factory for preparation sessions"""
    class Meta:
        model = PreparationActivity

    candidate = factory.SubFactory(UserFactory)
    activity_type = 'research'
    activity_description = factory.Faker('sentence')
    time_spent_minutes = 30
    activity_date = factory.LazyFunction(timezone.now)


def local_dt(year, month, day, hour=12, minute=0):
    """Aware datetime in the active time zone (noon by default, clear of day edges)."""
    return timezone.make_aware(datetime(year, month, day, hour, minute))


def job_record(**kwargs):
    """Plain JobRecord for pure-function tests; keyword names match JobRecord fields."""
    defaults = {
        'title': 'Software Engineer',
        'company': 'Acme',
        'industry': 'Software',
        'status': 'Applied',
    }
    defaults.update(kwargs)
    return JobRecord(**defaults)
