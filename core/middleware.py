# core/middleware.py
from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from .logging_context import bind, bind_user, make_request_id, unbind


class RequestIDMiddleware(MiddlewareMixin):
    """
    Request id for log correlation.

    - request.request_id
    - response header: X-Request-ID
    - thread-local context read by core.logging_filters.RequestContextFilter

    Must sit after AuthenticationMiddleware so request.user is available.
    """

    header_name = "HTTP_X_REQUEST_ID"
    response_header = "X-Request-ID"

    def process_request(self, request):
        rid = (request.META.get(self.header_name) or "").strip()[:64] or make_request_id()
        request.request_id = rid
        bind(request_id=rid, method=request.method or "", path=request.path or "")

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            bind_user(user.pk)

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.response_header] = rid
        unbind()
        return response

    def process_exception(self, request, exception):
        unbind()
        return None
