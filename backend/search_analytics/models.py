from django.conf import settings
from django.db import models
from django.utils import timezone


class JobEntry(models.Model):
    """User-tracked job application.

    Only the columns the analytics engine reads are modelled here. History is
    kept as two timestamps: ``created_at`` (application start) and
    ``status_changed_at`` (last status transition, stamped by a pre_save
    signal whenever ``status`` changes).
    """
    JOB_TYPES = [
        ("ft", "Full-time"),
        ("pt", "Part-time"),
        ("contract", "Contract"),
        ("intern", "Internship"),
        ("temp", "Temporary"),
    ]

    STATUS_CHOICES = [
        ("interested", "Interested"),
        ("applied", "Applied"),
        ("phone_screen", "Phone Screen"),
        ("interview", "Interview"),
        ("offer", "Offer"),
        ("rejected", "Rejected"),
        ("accepted", "Accepted"),
        ("declined", "Declined"),
    ]

    APPLICATION_METHODS = [
        ('online_form', 'Online Application Form'),
        ('email', 'Email'),
        ('referral', 'Internal Referral'),
        ('recruiter', 'Through Recruiter'),
        ('direct_contact', 'Direct Contact'),
        ('other', 'Other'),
    ]

    COMPANY_SIZES = [
        ('startup', 'Startup (<50)'),
        ('medium', 'Medium (100-1000)'),
        ('large', 'Large (1000+)'),
    ]

    candidate = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="job_entries")
    title = models.CharField(max_length=220)
    company_name = models.CharField(max_length=180)
    industry = models.CharField(max_length=120, blank=True)
    job_type = models.CharField(max_length=20, choices=JOB_TYPES, blank=True)
    application_deadline = models.DateField(null=True, blank=True)

    application_method = models.CharField(max_length=50, choices=APPLICATION_METHODS, blank=True)
    company_size = models.CharField(max_length=20, choices=COMPANY_SIZES, blank=True)
    # None means "not tracked"; analytics then fall back to sampled heuristics.
    cover_letter_attached = models.BooleanField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="interested")
    status_changed_at = models.DateTimeField(null=True, blank=True)
    is_archived = models.BooleanField(default=False, db_index=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=["candidate", "-updated_at"], name="sa_job_candidate_updated_idx"),
            models.Index(fields=["candidate", "status"], name="sa_job_candidate_status_idx"),
            models.Index(fields=["industry"], name="sa_job_industry_idx"),
        ]

    def __str__(self):
        return f"{self.title} @ {self.company_name}"


class PreparationActivity(models.Model):
    """A logged unit of job-search preparation (research, mock interview, practice)."""
    candidate = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="preparation_activities")
    job = models.ForeignKey(JobEntry, on_delete=models.SET_NULL, null=True, blank=True, related_name="preparation_activities")
    activity_type = models.CharField(max_length=60)
    activity_description = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    time_spent_minutes = models.PositiveIntegerField(default=0)
    activity_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-activity_date']
        indexes = [
            models.Index(fields=["candidate", "-activity_date"], name="sa_prep_candidate_date_idx"),
        ]

    def __str__(self):
        return f"{self.activity_type} ({self.time_spent_minutes} min)"
