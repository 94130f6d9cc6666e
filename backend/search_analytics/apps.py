from django.apps import AppConfig


class SearchAnalyticsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'search_analytics'
    verbose_name = 'Job Search Analytics'

    def ready(self):
        # Importing here ensures receivers are connected when Django starts.
        from . import signals  # noqa: F401
