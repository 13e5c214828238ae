from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-CSRF-Token",
}
PREFLIGHT_MAX_AGE = "86400"


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Attach fixed CORS headers to every response.

    Preflight (OPTIONS) requests are answered here and never reach the rest of
    the stack, the auth gate included.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(
                status_code=200,
                headers={**CORS_HEADERS, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE},
            )

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
