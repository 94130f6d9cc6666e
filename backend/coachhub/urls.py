"""
URL configuration for the coaching platform backend.
"""
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('search_analytics.urls')),
]
