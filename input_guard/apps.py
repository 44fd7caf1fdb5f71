from django.apps import AppConfig


class InputGuardConfig(AppConfig):
    """
    Configuration for the Input Guard app.

    This app provides:
    - A pattern-based sanitizer for untrusted text
    - Middleware that sanitizes body, query and path parameters
    - An SSRF guard for user-supplied URLs
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'input_guard'
    verbose_name = 'Input Guard'

    def ready(self):
        """Register system checks."""
        from . import checks  # noqa: F401
