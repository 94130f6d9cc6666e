from search_analytics.patterns import (
    IMPACT_NEGATIVE,
    IMPACT_POSITIVE,
    analyze_patterns,
    generate_recommendations,
)
from search_analytics.tests.factories import job_record, local_dt


class TestAnalyzePatterns:
    def test_empty_input_is_neutral(self):
        analysis = analyze_patterns([])
        assert analysis.overall_success_rate == 0.0
        assert analysis.patterns == []

    def test_buckets_phone_screen_as_pending(self):
        analysis = analyze_patterns([
            job_record(status='Offer'),
            job_record(status='Interview'),
            job_record(status='Rejected'),
            job_record(status='Phone Screen'),
        ])
        assert len(analysis.successful) == 2
        assert len(analysis.rejected) == 1
        assert len(analysis.pending) == 1
        assert analysis.overall_success_rate == 0.5

    def test_derived_patterns(self):
        saturday = local_dt(2024, 4, 6)
        tuesday = local_dt(2024, 4, 9)
        records = [
            job_record(status='Offer', title='Backend Engineer', company='Google', industry='Software', created_at=saturday),
            job_record(status='Interview', title='Data Engineer', company='Amazon', industry='Software', created_at=tuesday),
            job_record(status='Rejected', title='Analyst', created_at=tuesday),
            job_record(status='Rejected', title='Analyst', created_at=tuesday),
            job_record(status='Rejected', title='Analyst', created_at=tuesday),
        ]
        analysis = analyze_patterns(records)
        titles = {p.title: p for p in analysis.patterns}

        assert titles['Strong in Software'].impact == IMPACT_POSITIVE
        assert '2 successful applications' in titles['Strong in Software'].description
        assert 'Engineer Roles Performing Well' in titles
        assert 'Weekend Applications Effective' in titles
        assert titles['High Rejection Rate'].impact == IMPACT_NEGATIVE
        assert '3 rejections vs 2 successes' in titles['High Rejection Rate'].description
        assert 'Large Company Success' in titles

    def test_rejections_alone_do_not_flag_rejection_pattern(self):
        analysis = analyze_patterns([job_record(status='Rejected'), job_record(status='Rejected')])
        assert analysis.patterns == []


class TestRecommendations:
    def test_order_is_fixed(self):
        records = [job_record(status='Rejected') for _ in range(6)] + [job_record(status='Applied')]
        analysis = analyze_patterns(records)
        recs = generate_recommendations(records, analysis)
        assert recs[0].startswith('📈 Your success rate is low (0.0%)')
        assert recs[1].startswith('🔍 You have more rejections (6) than successes (0)')
        assert recs[2].startswith('📊 Limited application volume (7)')
        assert recs[3].startswith('💼')
        assert recs[4].startswith('⏰')
        assert recs[5].startswith('📄')
        assert len(recs) == 6
        assert recs == generate_recommendations(records, analysis)

    def test_praise_and_strengths(self):
        records = [job_record(status='Offer', industry='Software', title='Engineer')] * 3
        recs = generate_recommendations(records, analyze_patterns(records))
        assert recs[0].startswith('✅ Excellent success rate (100.0%)')
        assert recs[-1].startswith('🎯 Lean into your strengths: Strong in Software, Engineer Roles Performing Well')

    def test_always_on_guidance_for_empty_input(self):
        recs = generate_recommendations([], analyze_patterns([]))
        assert len(recs) == 3
