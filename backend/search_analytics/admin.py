from django.contrib import admin
from .models import JobEntry, PreparationActivity


@admin.register(JobEntry)
class JobEntryAdmin(admin.ModelAdmin):
    list_display = ['title', 'company_name', 'candidate', 'status', 'status_changed_at', 'created_at']
    list_filter = ['status', 'job_type', 'industry', 'is_archived']
    search_fields = ['title', 'company_name', 'candidate__username', 'candidate__email']


@admin.register(PreparationActivity)
class PreparationActivityAdmin(admin.ModelAdmin):
    list_display = ['candidate', 'activity_type', 'job', 'time_spent_minutes', 'activity_date']
    list_filter = ['activity_type']
    search_fields = ['candidate__username', 'activity_description', 'notes']
