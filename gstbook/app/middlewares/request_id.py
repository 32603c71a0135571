"""Per-request context used by log records and error envelopes."""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
business_ctx: ContextVar[str | None] = ContextVar("business_id", default=None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and the business it acts for."""

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        req_token = request_id_ctx.set(req_id)
        biz_token = business_ctx.set(request.headers.get("X-Business-ID"))
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            business_ctx.reset(biz_token)
            request_id_ctx.reset(req_token)
        response.headers["X-Request-ID"] = req_id
        return response
