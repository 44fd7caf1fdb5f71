"""
Input sanitization utilities.

This module strips content associated with injection attacks from untrusted
text:
- Script blocks, javascript: URLs and inline event handlers (XSS)
- Leftover HTML markup
- SQL keywords
- NoSQL operators ($where, $ne, ...)

The filter is pattern based and lossy on purpose: legitimate text that looks
like an attack ("select from the list") is rewritten too. It is a
defense-in-depth layer and does not replace output encoding.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

FILTERED = '[FILTERED]'

SCRIPT_BLOCK = re.compile(r'<script.*?>.*?</script>', re.IGNORECASE | re.DOTALL)
JAVASCRIPT_SCHEME = re.compile(r'javascript:', re.IGNORECASE)
EVENT_HANDLER = re.compile(r'on\w+=', re.IGNORECASE)

# Whole tags carrying a handler name or a resource/style attribute.
# DOTALL: a tag may be split over several lines
DANGEROUS_TAGS = [
    re.compile(r'<.*?on\w+.*?>', re.IGNORECASE | re.DOTALL),
    re.compile(r'<.*?style=.*?>', re.IGNORECASE | re.DOTALL),
    re.compile(r'<.*?href=.*?>', re.IGNORECASE | re.DOTALL),
    re.compile(r'<.*?src=.*?>', re.IGNORECASE | re.DOTALL),
]

ANY_TAG = re.compile(r'<.*?>', re.DOTALL)

# (?<!\$) leaves "$where" whole for the NoSQL pass
SQL_KEYWORDS = re.compile(
    r'(?<!\$)\b(SELECT|INSERT|UPDATE|DELETE|FROM|WHERE|JOIN|UNION)\b',
    re.IGNORECASE,
)
NOSQL_OPERATOR = re.compile(r'\$\w+')


@dataclass(frozen=True)
class SanitizationPolicy:
    """
    Limits applied by a sanitizer.

    Attributes:
        max_length: Input is truncated to this many characters before filtering
    """

    max_length: int = 1000

    def __post_init__(self):
        if (
            isinstance(self.max_length, bool)
            or not isinstance(self.max_length, int)
            or self.max_length <= 0
        ):
            raise ValueError(
                f'max_length must be a positive integer, got {self.max_length!r}'
            )


DEFAULT_POLICY = SanitizationPolicy()


class TextSanitizer:
    """
    Base class for sanitizers used by the request guard.

    Subclasses implement ``clean`` for string input; ``sanitize`` handles the
    non-string pass-through and the default policy.
    """

    def sanitize(self, value: Any, policy: Optional[SanitizationPolicy] = None) -> Any:
        if not isinstance(value, str):
            return value

        return self.clean(value, policy or DEFAULT_POLICY)

    def clean(self, value: str, policy: SanitizationPolicy) -> str:
        raise NotImplementedError


class PatternSanitizer(TextSanitizer):
    """
    Regular-expression sanitizer.

    Passes run in a fixed order; each one works on the output of the
    previous one.
    """

    def clean(self, value: str, policy: SanitizationPolicy) -> str:
        value = value.strip()
        value = value[:policy.max_length]

        # XSS
        value = SCRIPT_BLOCK.sub('', value)
        value = JAVASCRIPT_SCHEME.sub('', value)
        value = EVENT_HANDLER.sub('', value)
        for pattern in DANGEROUS_TAGS:
            value = pattern.sub('', value)
        value = ANY_TAG.sub('', value)

        # SQL / NoSQL
        value = SQL_KEYWORDS.sub(FILTERED, value)
        value = NOSQL_OPERATOR.sub(FILTERED, value)

        return value


_default_sanitizer = PatternSanitizer()


def sanitize(value: Any, policy: Optional[SanitizationPolicy] = None) -> Any:
    """
    Sanitize a single untrusted value.

    Args:
        value: Value to sanitize; anything that is not a string is returned as is
        policy: Limits to apply, DEFAULT_POLICY when omitted

    Returns:
        Sanitized string, or the original non-string value
    """
    return _default_sanitizer.sanitize(value, policy)
