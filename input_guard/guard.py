"""
Request field guard.

Applies a sanitizer to every top-level string value of the three inbound
request surfaces: body, query string and path parameters.

These functions rewrite containers owned by the caller (the request and the
view kwargs) in place. Nothing is copied or returned, and nested structures
are not visited.
"""

import json
import logging
from collections.abc import MutableMapping
from io import BytesIO
from typing import Any, Optional

from django.http import HttpRequest, QueryDict

from .sanitizers import PatternSanitizer, SanitizationPolicy, TextSanitizer

logger = logging.getLogger(__name__)

_default_sanitizer = PatternSanitizer()


def sanitize_fields(
    container: Any,
    policy: Optional[SanitizationPolicy] = None,
    sanitizer: Optional[TextSanitizer] = None,
) -> None:
    """
    Sanitize the string values of a key-value container in place.

    Args:
        container: Dict or QueryDict; anything else is ignored
        policy: Limits passed to the sanitizer
        sanitizer: TextSanitizer to apply, PatternSanitizer by default
    """
    if not isinstance(container, MutableMapping):
        return

    sanitizer = sanitizer or _default_sanitizer

    if isinstance(container, QueryDict):
        _sanitize_query_dict(container, policy, sanitizer)
        return

    for key in list(container.keys()):
        value = container[key]
        if isinstance(value, str):
            container[key] = sanitizer.sanitize(value, policy)


def _sanitize_query_dict(
    query_dict: QueryDict,
    policy: Optional[SanitizationPolicy],
    sanitizer: TextSanitizer,
) -> None:
    """
    Sanitize every value of every key of a QueryDict.

    Note: request.GET and request.POST are immutable; mutability is lifted
    for the rewrite and restored afterwards.
    """
    was_mutable = query_dict._mutable
    query_dict._mutable = True

    try:
        for key in list(query_dict.keys()):
            values = query_dict.getlist(key)
            query_dict.setlist(key, [
                sanitizer.sanitize(value, policy) if isinstance(value, str) else value
                for value in values
            ])
    finally:
        query_dict._mutable = was_mutable


def sanitize_body_fields(
    request: HttpRequest,
    policy: Optional[SanitizationPolicy] = None,
    sanitizer: Optional[TextSanitizer] = None,
) -> None:
    """
    Sanitize the request body.

    Form bodies are rewritten in request.POST. A JSON object body is
    sanitized, exposed as ``request.sanitized_json`` and written back to
    ``request.body`` so later parsers read the cleaned payload.
    """
    if _is_json_request(request):
        _sanitize_json_body(request, policy, sanitizer)
        return

    if request.POST:
        sanitize_fields(request.POST, policy, sanitizer)


def sanitize_query_fields(
    request: HttpRequest,
    policy: Optional[SanitizationPolicy] = None,
    sanitizer: Optional[TextSanitizer] = None,
) -> None:
    """Sanitize query string parameters (request.GET)."""
    if request.GET:
        sanitize_fields(request.GET, policy, sanitizer)


def sanitize_param_fields(
    view_kwargs: Any,
    policy: Optional[SanitizationPolicy] = None,
    sanitizer: Optional[TextSanitizer] = None,
) -> None:
    """Sanitize resolved path parameters (the kwargs passed to the view)."""
    sanitize_fields(view_kwargs, policy, sanitizer)


def _is_json_request(request: HttpRequest) -> bool:
    content_type = request.content_type or ''
    return content_type.startswith('application/json')


def _sanitize_json_body(
    request: HttpRequest,
    policy: Optional[SanitizationPolicy],
    sanitizer: Optional[TextSanitizer],
) -> None:
    if not request.body:
        return

    try:
        data = json.loads(request.body)
    except ValueError:
        # Not valid JSON, leave it to the view
        logger.debug('Skipping sanitization of undecodable JSON body on %s', request.path)
        return

    if not isinstance(data, dict):
        return

    sanitize_fields(data, policy, sanitizer)
    request.sanitized_json = data

    body = json.dumps(data).encode('utf-8')
    request._body = body
    request._stream = BytesIO(body)
    request.META['CONTENT_LENGTH'] = str(len(body))
