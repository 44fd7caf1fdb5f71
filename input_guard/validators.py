"""
Validators backed by the SSRF guard.
"""

from typing import Any

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from .ssrf import is_safe_url


class SafeURLValidator:
    """
    Validates URLs to prevent SSRF.

    Rules:
    - Only allows http:// and https:// protocols
    - Blocks localhost and .local hostnames
    - Blocks hostnames resolving to private or loopback addresses

    The message is the same whatever rule failed.
    """

    message = _('Invalid or unsafe URL.')
    code = 'unsafe_url'

    def __call__(self, value: Any) -> None:
        if not is_safe_url(value):
            raise ValidationError(self.message, code=self.code)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, SafeURLValidator)
