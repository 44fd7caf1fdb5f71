"""
Django System Checks for input_guard

Run with:
    python manage.py check --tag security
"""

from django.conf import settings
from django.core.checks import Error, Warning, register
from django.utils.module_loading import import_string

from .conf import get_setting, get_policy
from .sanitizers import TextSanitizer

MIDDLEWARE_PATHS = (
    'input_guard.middleware.RequestSanitizationMiddleware',
    'input_guard.middleware.sanitization.RequestSanitizationMiddleware',
)


@register('security')
def check_max_length(app_configs, **kwargs):
    """Check that MAX_LENGTH builds a valid SanitizationPolicy."""
    try:
        get_policy()
    except ValueError as e:
        return [
            Error(
                f"INPUT_GUARD['MAX_LENGTH'] is invalid: {e}",
                hint='Use a positive integer, e.g. 1000',
                id='input_guard.E001',
            )
        ]
    return []


@register('security')
def check_sanitizer_class(app_configs, **kwargs):
    """Check that SANITIZER_CLASS points to a TextSanitizer."""
    path = get_setting('SANITIZER_CLASS')

    try:
        sanitizer_class = import_string(path)
    except (ImportError, AttributeError):
        sanitizer_class = None

    if not isinstance(sanitizer_class, type) or not issubclass(sanitizer_class, TextSanitizer):
        return [
            Error(
                f"INPUT_GUARD['SANITIZER_CLASS'] does not name a TextSanitizer: {path!r}",
                hint='Point it at a subclass of input_guard.sanitizers.TextSanitizer',
                id='input_guard.E002',
            )
        ]
    return []


@register('security')
def check_middleware_installed(app_configs, **kwargs):
    """Warn when request sanitization is enabled but not installed."""
    if not get_setting('ENABLED'):
        return []

    middleware = getattr(settings, 'MIDDLEWARE', None) or []
    if not any(path in middleware for path in MIDDLEWARE_PATHS):
        return [
            Warning(
                'RequestSanitizationMiddleware is not installed',
                hint="Add 'input_guard.middleware.RequestSanitizationMiddleware' to MIDDLEWARE",
                id='input_guard.W001',
            )
        ]
    return []
