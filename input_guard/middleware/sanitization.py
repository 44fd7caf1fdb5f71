"""
Request sanitization middleware.

Sanitizes every inbound request surface before it reaches a view:
- Query string parameters
- Form and JSON bodies
- Path parameters captured by the URL resolver
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

from ..conf import get_policy, get_sanitizer, get_setting
from ..guard import sanitize_body_fields, sanitize_param_fields, sanitize_query_fields

logger = logging.getLogger(__name__)


class RequestSanitizationMiddleware(MiddlewareMixin):
    """
    Middleware that rewrites untrusted request fields in place.

    It never answers a request itself: both hooks always return None so the
    rest of the chain runs.

    Configuration in settings.py:
        INPUT_GUARD = {
            'ENABLED': True,
            'MAX_LENGTH': 1000,
            'SANITIZE_BODY': True,
            'SANITIZE_QUERY': True,
            'SANITIZE_PARAMS': True,
            'EXCLUDE_PATHS': ['/admin/', '/static/'],
            'SANITIZER_CLASS': 'input_guard.sanitizers.PatternSanitizer',
        }
    """

    def __init__(self, get_response: Callable):
        super().__init__(get_response)

        self.enabled = get_setting('ENABLED')
        self.sanitize_body = get_setting('SANITIZE_BODY')
        self.sanitize_query = get_setting('SANITIZE_QUERY')
        self.sanitize_params = get_setting('SANITIZE_PARAMS')
        self.exclude_paths = get_setting('EXCLUDE_PATHS', [])

        self.policy = get_policy()
        self.sanitizer = get_sanitizer()

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """Sanitize query string and body."""
        if not self.enabled or self._is_excluded_path(request.path):
            return None

        try:
            if self.sanitize_query:
                sanitize_query_fields(request, self.policy, self.sanitizer)

            if self.sanitize_body:
                sanitize_body_fields(request, self.policy, self.sanitizer)

        except Exception as e:
            logger.error(f"Error sanitizing request: {str(e)}", exc_info=True)

        return None

    def process_view(
        self,
        request: HttpRequest,
        view_func: Callable,
        view_args: Tuple[Any, ...],
        view_kwargs: Dict[str, Any],
    ) -> Optional[HttpResponse]:
        """Sanitize path parameters before the view receives them."""
        if not self.enabled or not self.sanitize_params or self._is_excluded_path(request.path):
            return None

        try:
            sanitize_param_fields(view_kwargs, self.policy, self.sanitizer)
        except Exception as e:
            logger.error(f"Error sanitizing path parameters: {str(e)}", exc_info=True)

        return None

    def _is_excluded_path(self, path: str) -> bool:
        """Check if path should be excluded from sanitization."""
        for excluded_path in self.exclude_paths:
            if path.startswith(excluded_path):
                return True
        return False
