"""
Request ID middleware for FastAPI / Starlette.

Uses the incoming `X-Request-ID` header when present, otherwise a new UUID4.
The id is stored in the request-id contextvar (picked up by RequestIdFilter)
for the duration of the request and echoed back in the response header.

Register it outermost so the id is set before any other middleware logs:

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestIDMiddleware)   # added last, runs first
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
