from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='JobEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=220)),
                ('company_name', models.CharField(max_length=180)),
                ('industry', models.CharField(blank=True, max_length=120)),
                ('job_type', models.CharField(blank=True, choices=[('ft', 'Full-time'), ('pt', 'Part-time'), ('contract', 'Contract'), ('intern', 'Internship'), ('temp', 'Temporary')], max_length=20)),
                ('application_deadline', models.DateField(blank=True, null=True)),
                ('application_method', models.CharField(blank=True, choices=[('online_form', 'Online Application Form'), ('email', 'Email'), ('referral', 'Internal Referral'), ('recruiter', 'Through Recruiter'), ('direct_contact', 'Direct Contact'), ('other', 'Other')], max_length=50)),
                ('company_size', models.CharField(blank=True, choices=[('startup', 'Startup (<50)'), ('medium', 'Medium (100-1000)'), ('large', 'Large (1000+)')], max_length=20)),
                ('cover_letter_attached', models.BooleanField(blank=True, null=True)),
                ('status', models.CharField(choices=[('interested', 'Interested'), ('applied', 'Applied'), ('phone_screen', 'Phone Screen'), ('interview', 'Interview'), ('offer', 'Offer'), ('rejected', 'Rejected'), ('accepted', 'Accepted'), ('declined', 'Declined')], default='interested', max_length=20)),
                ('status_changed_at', models.DateTimeField(blank=True, null=True)),
                ('is_archived', models.BooleanField(db_index=True, default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('candidate', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='job_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['candidate', '-updated_at'], name='sa_job_candidate_updated_idx'),
                    models.Index(fields=['candidate', 'status'], name='sa_job_candidate_status_idx'),
                    models.Index(fields=['industry'], name='sa_job_industry_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PreparationActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('activity_type', models.CharField(max_length=60)),
                ('activity_description', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('time_spent_minutes', models.PositiveIntegerField(default=0)),
                ('activity_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('candidate', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='preparation_activities', to=settings.AUTH_USER_MODEL)),
                ('job', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='preparation_activities', to='search_analytics.jobentry')),
            ],
            options={
                'ordering': ['-activity_date'],
                'indexes': [
                    models.Index(fields=['candidate', '-activity_date'], name='sa_prep_candidate_date_idx'),
                ],
            },
        ),
    ]
