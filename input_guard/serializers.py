"""
Serializer fields with built-in sanitization and SSRF checks.
"""

from typing import Any, Optional

from rest_framework import serializers

from .conf import get_policy, get_sanitizer
from .sanitizers import SanitizationPolicy
from .validators import SafeURLValidator


class SanitizedCharField(serializers.CharField):
    """
    CharField that runs the configured sanitizer before validation.

    Usage:
        class CommentSerializer(serializers.Serializer):
            body = SanitizedCharField(policy=SanitizationPolicy(max_length=500))
    """

    def __init__(self, *args, policy: Optional[SanitizationPolicy] = None, **kwargs):
        self.policy = policy or get_policy()
        self.sanitizer = get_sanitizer()

        super().__init__(*args, **kwargs)

    def to_internal_value(self, data: Any) -> str:
        # Sanitize before validation
        if isinstance(data, str):
            data = self.sanitizer.sanitize(data, self.policy)

        return super().to_internal_value(data)


class SafeURLField(serializers.URLField):
    """
    URLField with SSRF prevention.
    """

    def __init__(self, *args, **kwargs):
        validators = kwargs.pop('validators', [])
        validators.append(SafeURLValidator())
        kwargs['validators'] = validators

        super().__init__(*args, **kwargs)
