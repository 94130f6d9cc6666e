import random

import pytest

from search_analytics.materials import (
    MaterialSignals,
    SampledMaterialSignals,
    TrackedMaterialSignals,
    customization_impact,
    material_impact,
)
from search_analytics.tests.factories import job_record


class AlwaysCoverLetter(MaterialSignals):
    def has_cover_letter(self, record):
        return True


class TestMaterialImpact:
    def test_signals_interface_is_abstract(self):
        with pytest.raises(TypeError):
            MaterialSignals()

        class Incomplete(MaterialSignals):
            pass

        with pytest.raises(TypeError):
            Incomplete()

    def test_injected_signals_drive_the_split(self):
        records = [job_record(status='Interview'), job_record(status='Applied')]
        impact = material_impact(records, AlwaysCoverLetter())
        assert impact == {'with_cover_letter': 0.5, 'without_cover_letter': 0.0}

    def test_tracked_flag_beats_sampling(self):
        records = [
            job_record(status='Offer', cover_letter_attached=True),
            job_record(status='Applied', cover_letter_attached=False),
            job_record(status='Phone Screen', cover_letter_attached=False),
        ]
        impact = material_impact(records, TrackedMaterialSignals())
        assert impact == {'with_cover_letter': 1.0, 'without_cover_letter': 0.5}

    def test_sampling_is_reproducible_with_seeded_rng(self):
        records = [job_record(status='Interview') for _ in range(20)]
        first = material_impact(records, SampledMaterialSignals(rng=random.Random(7)))
        second = material_impact(records, SampledMaterialSignals(rng=random.Random(7)))
        assert first == second

    def test_empty_input(self):
        assert material_impact([]) == {'with_cover_letter': 0.0, 'without_cover_letter': 0.0}


class TestCustomizationImpact:
    def test_zero_successes(self):
        assert customization_impact([job_record(status='Rejected')]) == {
            'highly_customized': 0.0, 'partially_customized': 0.0, 'generic': 0.0,
        }

    def test_shares_are_normalised(self):
        impact = customization_impact([job_record(status='Offer')])
        assert sum(impact.values()) == pytest.approx(1.0)
        assert impact['highly_customized'] == pytest.approx(0.4 / 0.9)
