"""
Error Handler Middleware

FastAPI middleware that catches all unhandled exceptions
and logs them using the error logging service.
"""

from typing import Callable
from fastapi import Request, Response, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from bakebook.services.error_logging import error_logger


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and logs them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except HTTPException as http_exc:
            if http_exc.status_code >= 500:
                error_logger.log_error(
                    http_exc,
                    request=request,
                    user=getattr(request.state, 'user', None),
                    severity="error",
                    context={"status_code": http_exc.status_code, "detail": http_exc.detail}
                )

            return JSONResponse(
                status_code=http_exc.status_code,
                content={"detail": http_exc.detail}
            )

        except Exception as exc:
            error_id = error_logger.log_error(
                exc,
                request=request,
                user=getattr(request.state, 'user', None),
                severity="critical",
                context={"unhandled": True}
            )

            # Generic body; details stay in the log, matched by error_id
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "An internal error occurred.",
                    "error_id": error_id
                }
            )
