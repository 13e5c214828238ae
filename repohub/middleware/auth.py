from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from structlog import get_logger

from repohub.auth.auth_state import AuthenticationState
from repohub.auth.session import read_session_token

logger = get_logger(__name__)

PROTECTED_PATH_PREFIXES = ("/api/auth", "/dashboard", "/group", "/tasks")
SIGN_IN_PATH = "/login"


def is_protected(path: str, prefixes=PROTECTED_PATH_PREFIXES) -> bool:
    """Whole-segment prefix match: /group and /group/x are protected, /groups is not."""
    return any(path == prefix or path.startswith(prefix + "/") for prefix in prefixes)


def sign_in_url(request: Request, sign_in_path: str = SIGN_IN_PATH) -> str:
    callback = request.url.path
    if request.url.query:
        callback = f"{callback}?{request.url.query}"
    return f"{sign_in_path}?{urlencode({'callbackUrl': callback})}"


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Require a valid session for protected paths, redirecting to sign-in otherwise.

    The resolved AuthenticationState is left on `request.state.auth_state` so
    route dependencies do not introspect the token a second time.
    """

    def __init__(
        self,
        app,
        prefixes: tuple[str, ...] = PROTECTED_PATH_PREFIXES,
        sign_in_path: str = SIGN_IN_PATH,
    ):
        super().__init__(app)
        self.prefixes = prefixes
        self.sign_in_path = sign_in_path

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not is_protected(
            request.url.path, self.prefixes
        ):
            return await call_next(request)

        token = read_session_token(request)
        if token:
            try:
                # token introspection is a blocking http call
                auth_state = await run_in_threadpool(AuthenticationState, token)
            except HTTPException:
                auth_state = None

            if auth_state is not None and auth_state.is_authenticated:
                request.state.auth_state = auth_state
                return await call_next(request)

        logger.info(
            "Redirecting unauthenticated request to sign-in",
            path=request.url.path,
            has_token=token is not None,
        )
        return RedirectResponse(
            sign_in_url(request, self.sign_in_path), status_code=307
        )
