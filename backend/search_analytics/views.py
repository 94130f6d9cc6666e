"""
Analytics API: dashboard metrics, application success analysis, streaks and predictions.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from django.conf import settings
import logging

from search_analytics import metrics
from search_analytics.event_store import (
    load_activity_events,
    load_job_records,
    load_preparation_records,
    recent_window_start,
)
from search_analytics.insights import generate_insights
from search_analytics.materials import customization_impact, material_impact
from search_analytics.patterns import analyze_patterns, generate_recommendations
from search_analytics.predictions import prediction_service
from search_analytics.serializers import AnalyticsFilterSerializer, PredictionRequestSerializer
from search_analytics.significance import statistical_significance
from search_analytics.streaks import motivation_summary, timestamps_from_events

logger = logging.getLogger(__name__)


def _filtered_records(request):
    """Validated filters plus the user's records with those filters applied."""
    serializer = AnalyticsFilterSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    filters = serializer.validated_data
    records = load_job_records(request.user, include_archived=filters['include_archived'])
    records = metrics.filter_records(
        records,
        companies=filters['companies'],
        roles=filters['roles'],
        industries=filters['industries'],
    )
    filters_applied = {k: v for k, v in filters.items() if v}
    return records, filters_applied


def _error_response(code, message):
    return Response(
        {'error': {'code': code, 'message': message}},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_overview_view(request):
    """Funnel, rates, durations, benchmarks and insight narratives."""
    records, filters_applied = _filtered_records(request)
    try:
        bundle = metrics.overview(records)
        weekly_goal = getattr(settings, 'ANALYTICS_WEEKLY_APPLICATION_GOAL', 10)
        bundle['weekly_goal'] = weekly_goal
        bundle['insights'] = generate_insights(
            records,
            funnel=bundle['funnel'],
            response_rate=bundle['response_rate'],
            deadline_adherence=bundle['deadline_adherence']['adherence'],
            avg_time_to_offer=bundle['time_to_offer_days'],
            weekly_goal=weekly_goal,
            this_week_applications=bundle['applications_this_week'],
        )
        bundle['filters'] = filters_applied
        return Response(bundle)
    except Exception as exc:
        logger.error(f"Analytics overview error: {exc}", exc_info=True)
        return _error_response('analytics_error', 'Unable to build analytics overview')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def application_success_view(request):
    """What separates successful applications from the rest."""
    records, filters_applied = _filtered_records(request)
    try:
        analysis = analyze_patterns(records)
        tests = statistical_significance(records)
        return Response({
            'total': len(records),
            'success_by_company_size': metrics.success_rates(records, metrics.GROUP_COMPANY_SIZE),
            'success_by_role_type': metrics.success_rates(records, metrics.GROUP_ROLE_TYPE),
            'success_by_industry': metrics.success_rates(records, metrics.GROUP_INDUSTRY),
            'method_performance': metrics.method_performance(records),
            'material_impact': material_impact(records),
            'timing_patterns': metrics.timing_patterns(records),
            'customization_impact': customization_impact(records),
            'pattern_analysis': analysis.as_dict(),
            'statistical_tests': [
                dict(test.as_dict(), significant=test.is_significant) for test in tests
            ],
            'recommendations': generate_recommendations(records, analysis),
            'filters': filters_applied,
        })
    except Exception as exc:
        logger.error(f"Application success analysis error: {exc}", exc_info=True)
        return _error_response('analytics_error', 'Unable to build application success analysis')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def streak_view(request):
    """Activity streak, daily quote, weekly goal progress and next milestone."""
    try:
        lookback = getattr(settings, 'ANALYTICS_STREAK_LOOKBACK_DAYS', 30)
        # One extra day so "yesterday" at the window edge is still seen.
        events = load_activity_events(request.user, since=recent_window_start(lookback + 1))
        records = load_job_records(request.user)
        return Response(motivation_summary(records, timestamps_from_events(events)))
    except Exception as exc:
        logger.error(f"Streak calculation error: {exc}", exc_info=True)
        return _error_response('streak_error', 'Unable to calculate activity streak')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def predictions_view(request):
    """Predictions for the caller's current jobs, cached by job-set fingerprint."""
    serializer = PredictionRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        records = load_job_records(request.user, include_archived=serializer.validated_data['include_archived'])
        prep_days = getattr(settings, 'ANALYTICS_PREP_LOOKBACK_DAYS', 90)
        prep_records = load_preparation_records(request.user, since=recent_window_start(prep_days))
        batch = prediction_service.run_predictions(request.user.id, records, prep_records)
        return Response(batch.as_dict())
    except Exception as exc:
        logger.error(f"Prediction error: {exc}", exc_info=True)
        return _error_response('prediction_error', 'Unable to generate predictions')
