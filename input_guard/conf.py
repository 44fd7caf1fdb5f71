"""Configuration and settings for input_guard."""

from typing import Any, Dict

from django.utils.module_loading import import_string

DEFAULTS: Dict[str, Any] = {
    'ENABLED': True,
    'MAX_LENGTH': 1000,
    'SANITIZE_BODY': True,
    'SANITIZE_QUERY': True,
    'SANITIZE_PARAMS': True,
    'EXCLUDE_PATHS': [],
    'SANITIZER_CLASS': 'input_guard.sanitizers.PatternSanitizer',
    'SSRF': {
        'RESOLVE_TIMEOUT': 5.0,  # seconds, async resolution only
        'FETCH_TIMEOUT': 10.0,
        'MAX_REDIRECTS': 3,
    },
}


def get_setting(key: str, default: Any = None) -> Any:
    """
    Get an input_guard setting from Django settings or use default.

    Args:
        key: Dotted path to the setting (e.g., 'SSRF.MAX_REDIRECTS')
        default: Default value if setting is not found

    Returns:
        The setting value or default
    """
    from django.conf import settings

    value = _lookup(getattr(settings, 'INPUT_GUARD', {}), key)
    if value is None:
        value = _lookup(DEFAULTS, key)

    return value if value is not None else default


def _lookup(source: Dict[str, Any], key: str) -> Any:
    value: Any = source
    for k in key.split('.'):
        if not isinstance(value, dict):
            return None
        value = value.get(k)
    return value


def get_policy():
    """Build the SanitizationPolicy described by settings."""
    from .sanitizers import SanitizationPolicy

    return SanitizationPolicy(max_length=get_setting('MAX_LENGTH'))


def get_sanitizer():
    """Instantiate the configured TextSanitizer."""
    return import_string(get_setting('SANITIZER_CLASS'))()
