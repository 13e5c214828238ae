import time
import uuid

import structlog
from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class LogRequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # every log line emitted while handling the request carries its id
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


class LogProcessTimeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response: Response = await call_next(request)

        formatted_process_time = f"{(time.perf_counter() - start_time) * 1000:.2f}"
        logger.info(
            "Request processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=formatted_process_time,
        )

        response.headers["X-Process-Time"] = formatted_process_time
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn anything the routes did not handle into an opaque 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except Exception:
            logger.error(
                "Unhandled exception",
                exc_info=True,
                method=request.method,
                path=request.url.path,
            )

            return JSONResponse(
                status_code=500, content={"error": "Internal Server Error"}
            )
