from starlette.requests import Request

SESSION_COOKIE_NAME = "repohub_session"


def read_session_token(request: Request) -> str | None:
    """The session token from the Authorization header, else from the session cookie."""
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME) or None
