"""Input guard middleware."""

from .sanitization import RequestSanitizationMiddleware

__all__ = [
    'RequestSanitizationMiddleware',
]
