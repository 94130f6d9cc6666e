"""
URL configuration for analytics endpoints.
"""
from django.urls import path
from search_analytics import views

urlpatterns = [
    path('analytics/overview/', views.analytics_overview_view, name='analytics-overview'),
    path('analytics/application-success/', views.application_success_view, name='analytics-application-success'),
    path('analytics/streak/', views.streak_view, name='analytics-streak'),
    path('analytics/predictions/', views.predictions_view, name='analytics-predictions'),
]
