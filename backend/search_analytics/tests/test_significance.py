import math
from datetime import timedelta

import pytest

from search_analytics.significance import (
    INSUFFICIENT_DATA,
    industry_chi_square,
    statistical_significance,
)
from search_analytics.tests.factories import job_record, local_dt


class TestStatisticalSignificance:
    def test_single_record_yields_sentinel(self):
        tests = statistical_significance([job_record(industry='Software', status='Applied')])
        assert [t.as_dict() for t in tests] == [{'name': 'Insufficient Data', 'p_value': 1.0, 'effect_size': 0}]
        assert tests[0] is INSUFFICIENT_DATA
        assert not tests[0].is_significant

    def test_empty_input_yields_sentinel(self):
        assert statistical_significance([]) == [INSUFFICIENT_DATA]

    def test_industry_chi_square_formula(self):
        records = [
            job_record(industry='Software', status='Offer'),
            job_record(industry='Software', status='Offer'),
            job_record(industry='Finance', status='Applied'),
            job_record(industry='Finance', status='Applied'),
        ]
        # overall rate 0.5, expected 1 offer per group: (2-1)^2/1 + (0-1)^2/1
        assert industry_chi_square(records) == pytest.approx(2.0)

        tests = statistical_significance(records)
        assert len(tests) == 1
        industry = tests[0]
        assert industry.name == 'Industry Impact (χ² test)'
        assert industry.p_value == pytest.approx(math.exp(-1.0))
        assert industry.effect_size == pytest.approx(math.sqrt(2.0 / 4))

    def test_timing_test_needs_three_offers(self):
        created = local_dt(2024, 1, 1)
        two_offers = [
            job_record(status='Offer', created_at=created, status_changed_at=created + timedelta(days=d))
            for d in (10, 20)
        ]
        assert statistical_significance(two_offers) == [INSUFFICIENT_DATA]

    def test_timing_test_on_millisecond_deltas(self):
        created = local_dt(2024, 1, 1)
        offers = [
            job_record(status='Offer', created_at=created, status_changed_at=created + timedelta(days=d))
            for d in (10, 20, 30)
        ]
        tests = statistical_significance(offers)
        assert [t.name for t in tests] == ['Time to Offer Distribution']
        timing = tests[0]
        # Large millisecond means give |t| well above 3, so p collapses to 0.
        assert timing.p_value == 0.0
        assert timing.is_significant
        assert timing.effect_size > 3

    def test_p_values_stay_in_unit_interval(self):
        created = local_dt(2024, 1, 1)
        records = [
            job_record(industry=ind, status=st, created_at=created, status_changed_at=created + timedelta(hours=h))
            for ind, st, h in [
                ('Software', 'Offer', 1), ('Finance', 'Offer', 2), ('Software', 'Offer', -5),
                ('Health', 'Rejected', 3), ('Finance', 'Applied', 4),
            ]
        ]
        for test in statistical_significance(records):
            assert 0.0 <= test.p_value <= 1.0
