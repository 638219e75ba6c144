"""
Error-response middleware.

Wraps the whole request pipeline; any exception escaping it becomes a JSON
response:

    {"status": 404, "error": "Entity of type Widget with ID A1 not found."}

The status code and message come from `crudkit.exceptions.mapper`, so the
mapping table lives in one place. Unexpected errors are answered with a
generic message and logged with their traceback; client errors are logged at
INFO without one.

Register it on the app factory:

    app = FastAPI()
    register_error_handling(app)
"""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..exceptions.mapper import build_error_payload

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        method, path = request.method, request.url.path
        logger.info("Handling request: %s %s", method, path)

        try:
            response = await call_next(request)
        except Exception as exc:
            return self.error_response(exc)

        logger.info("Request handled successfully: %s %s", method, path)
        return response

    @staticmethod
    def error_response(exc: Exception) -> JSONResponse:
        status_code, payload = build_error_payload(exc)

        if status_code >= 500:
            logger.error(
                "Exception handled: StatusCode:%s - Message:%s",
                status_code,
                payload["error"],
                exc_info=exc,
            )
        else:
            logger.info(
                "Exception handled: StatusCode:%s - Message:%s",
                status_code,
                payload["error"],
            )

        return JSONResponse(status_code=status_code, content=payload)


def register_error_handling(app: FastAPI) -> None:
    """Install `ErrorHandlingMiddleware` on `app` (call from the app factory)."""
    app.add_middleware(ErrorHandlingMiddleware)


__all__ = ["ErrorHandlingMiddleware", "register_error_handling"]
